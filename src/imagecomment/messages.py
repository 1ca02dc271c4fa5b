"""User-facing messages in English and Chinese."""

from imagecomment.clipboard.constants import MAX_IMAGE_SIZE

_MIB = 1024 * 1024

CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "no_workspace_folder": "No workspace folder found",
        "failed_to_save_image": "Failed to save image: {0}",
        "image_too_large": "Image is too large ({0}MB). Maximum size is {1}MB.",
        "no_image_found": "No image found in clipboard",
        "detecting_image": "Detecting image in clipboard...",
        "image_saved": "Image saved: {0}",
    },
    "zh-cn": {
        "no_workspace_folder": "未找到工作区文件夹",
        "failed_to_save_image": "保存图片失败：{0}",
        "image_too_large": "图片过大（{0}MB），最大支持 {1}MB。",
        "no_image_found": "剪贴板中没有图片",
        "detecting_image": "正在检测剪贴板中的图片...",
        "image_saved": "图片已保存：{0}",
    },
    "zh-tw": {
        "no_workspace_folder": "找不到工作區資料夾",
        "failed_to_save_image": "儲存圖片失敗：{0}",
        "image_too_large": "圖片過大（{0}MB），最大支援 {1}MB。",
        "no_image_found": "剪貼簿中沒有圖片",
        "detecting_image": "正在偵測剪貼簿中的圖片...",
        "image_saved": "圖片已儲存：{0}",
    },
}


def resolve_locale(locale: str | None) -> str:
    """Map an editor locale (``zh-CN``, ``zh_TW``, ``en-US``) to a catalog."""
    normalized = (locale or "").lower().replace("_", "-")
    if normalized.startswith("zh-cn") or normalized in ("zh", "zh-hans"):
        return "zh-cn"
    if normalized.startswith(("zh-tw", "zh-hk", "zh-hant")):
        return "zh-tw"
    return "en"


def format_mib(size: int) -> str:
    return f"{size / _MIB:.2f}"


class Messages:
    """Localised message lookup for one locale."""

    def __init__(self, locale: str | None = "en") -> None:
        self.locale = resolve_locale(locale)
        self._catalog = CATALOGS[self.locale]

    def _get(self, key: str, *args: object) -> str:
        text = self._catalog.get(key) or CATALOGS["en"][key]
        for index, arg in enumerate(args):
            text = text.replace(f"{{{index}}}", str(arg))
        return text

    def no_workspace_folder(self) -> str:
        return self._get("no_workspace_folder")

    def failed_to_save_image(self, reason: str) -> str:
        return self._get("failed_to_save_image", reason)

    def image_too_large(self, size: int, max_size: int = MAX_IMAGE_SIZE) -> str:
        """Sizes are bytes, rendered as MiB with two decimals."""
        return self._get("image_too_large", format_mib(size), format_mib(max_size))

    def no_image_found(self) -> str:
        return self._get("no_image_found")

    def detecting_image(self) -> str:
        return self._get("detecting_image")

    def image_saved(self, file_name: str) -> str:
        return self._get("image_saved", file_name)
