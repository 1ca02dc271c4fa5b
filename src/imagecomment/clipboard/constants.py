"""Limits shared by every clipboard probe."""

# 50 MiB
MAX_IMAGE_SIZE = 50 * 1024 * 1024

IMAGE_EXTENSIONS: tuple[str, ...] = (
    "png",
    "jpg",
    "jpeg",
    "gif",
    "webp",
    "bmp",
    "svg",
)

# Prefix for files a probe materialises in the system temp dir
TEMP_FILE_PREFIX = "image-comment"
