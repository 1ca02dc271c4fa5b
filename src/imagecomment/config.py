import json
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, computed_field, field_validator
from pydantic_settings import BaseSettings

from imagecomment.comment import DEFAULT_TEMPLATE

PROJECT_CONFIG_NAME = ".image-comment.json"
DEFAULT_PROBE_TIMEOUT_S = 10.0
_EDITOR_PREFIX = "imageComment."

# Editor-style keys accepted in JSON config files
_KEY_ALIASES = {
    "saveDirectory": "save_directory",
    "useRelativePath": "use_relative_path",
    "commentTemplate": "comment_template",
    "probeTimeout": "probe_timeout_s",
}

_FIELD_TYPES: dict[str, type | tuple[type, ...]] = {
    "save_directory": str,
    "use_relative_path": bool,
    "comment_template": str,
    "probe_timeout_s": (int, float),
    "locale": str,
    "state_dir": str,
    "host": str,
    "port": int,
}

# Keys a project file may set
_PROJECT_KEYS = frozenset(
    {"save_directory", "use_relative_path", "comment_template", "probe_timeout_s"}
)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "image-comment"
    app_version: str = "0.3.0"
    host: str = "127.0.0.1"
    port: int = 8765

    # Paste behaviour
    save_directory: str = Field(
        default=".image-comment",
        validation_alias=AliasChoices("save_directory", "saveDirectory"),
        description="Project-relative folder for pasted images",
    )
    use_relative_path: bool = Field(
        default=True,
        validation_alias=AliasChoices("use_relative_path", "useRelativePath"),
    )
    comment_template: str = Field(
        default=DEFAULT_TEMPLATE,
        validation_alias=AliasChoices("comment_template", "commentTemplate"),
        description="Comment text; {path} is replaced by the image path",
    )
    probe_timeout_s: float = Field(
        default=DEFAULT_PROBE_TIMEOUT_S,
        description="How long to wait for the clipboard probe",
    )
    locale: str = "en"

    # Paths
    state_dir: str = Field(
        default=str(Path.home() / ".image-comment"),
        validation_alias=AliasChoices("state_dir", "IMAGE_COMMENT_STATE"),
        description="Directory for config.json and the diagnostic log",
    )

    @field_validator("probe_timeout_s")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        """Zero or negative timeouts fall back to the default."""
        return value if value > 0 else DEFAULT_PROBE_TIMEOUT_S

    @computed_field  # type: ignore[prop-decorator]
    @property
    def log_path(self) -> Path:
        """Append-only diagnostic log."""
        return Path(self.state_dir) / "image-comment.log"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


_override: Settings | None = None


def get_settings(workspace_root: str | Path | None = None) -> Settings:
    """Return the active settings, merged with project config."""
    if _override:
        settings = _override
    else:
        settings = _load_config_file(Settings())
    if workspace_root:
        settings = _load_project_config(settings, Path(workspace_root))
    return settings


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map editor-style keys to field names and drop bad values."""
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        if key.startswith(_EDITOR_PREFIX):
            key = key[len(_EDITOR_PREFIX) :]
        key = _KEY_ALIASES.get(key, key)
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            continue
        # bool is an int subclass; keep it out of numeric fields
        if isinstance(value, bool) and expected is not bool:
            continue
        if not isinstance(value, expected):
            continue
        normalized[key] = value
    if "probe_timeout_s" in normalized and normalized["probe_timeout_s"] <= 0:
        del normalized["probe_timeout_s"]
    return normalized


def _merge_json(
    settings: Settings,
    config_path: Path,
    allowed: frozenset[str] | None = None,
) -> Settings:
    if not config_path.is_file():
        return settings
    try:
        data = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError, UnicodeDecodeError):
        return settings
    if not isinstance(data, dict):
        return settings

    update = _normalize_keys(data)
    if allowed is not None:
        update = {k: v for k, v in update.items() if k in allowed}
    if "state_dir" in update:
        update["state_dir"] = str(Path(update["state_dir"]).expanduser())
    return settings.model_copy(update=update)


def _load_config_file(settings: Settings) -> Settings:
    """Load and merge config.json from the state dir if it exists."""
    return _merge_json(settings, Path(settings.state_dir).expanduser() / "config.json")


def _load_project_config(settings: Settings, workspace_root: Path) -> Settings:
    """Merge the workspace's .image-comment.json (highest priority)."""
    return _merge_json(
        settings,
        workspace_root / PROJECT_CONFIG_NAME,
        allowed=_PROJECT_KEYS,
    )


def override_settings(s: Settings | None) -> None:
    """Swap in a custom Settings (use None to reset)."""
    global _override  # noqa: PLW0603
    _override = s
