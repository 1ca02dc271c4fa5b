"""Render the comment that references a saved image."""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

PATH_PLACEHOLDER = "{path}"
DEFAULT_TEMPLATE = "![image]({path})"


@dataclass(frozen=True)
class CommentFormat:
    """Comment delimiters of a language.

    An empty ``single`` means the language has no line comment.
    """

    single: str
    multi_start: str
    multi_end: str


_C_STYLE = CommentFormat("//", "/*", "*/")

DEFAULT_FORMAT = _C_STYLE

COMMENT_FORMATS = MappingProxyType(
    {
        "javascript": _C_STYLE,
        "typescript": _C_STYLE,
        "javascriptreact": _C_STYLE,
        "typescriptreact": _C_STYLE,
        "python": CommentFormat("#", '"""', '"""'),
        "java": _C_STYLE,
        "c": _C_STYLE,
        "cpp": _C_STYLE,
        "csharp": _C_STYLE,
        "go": _C_STYLE,
        "rust": _C_STYLE,
        "ruby": CommentFormat("#", "=begin", "=end"),
        "php": _C_STYLE,
        "swift": _C_STYLE,
        "kotlin": _C_STYLE,
        "scala": _C_STYLE,
        "html": CommentFormat("", "<!--", "-->"),
        "css": CommentFormat("", "/*", "*/"),
        "scss": _C_STYLE,
        "less": _C_STYLE,
        "sql": CommentFormat("--", "/*", "*/"),
        "shellscript": CommentFormat("#", ": <<'EOF'", "EOF"),
        "yaml": CommentFormat("#", "", ""),
        "json": CommentFormat("", "/*", "*/"),
    }
)

# File suffix -> language id, for hosts that only know the file name
LANGUAGE_BY_SUFFIX = MappingProxyType(
    {
        ".js": "javascript",
        ".mjs": "javascript",
        ".cjs": "javascript",
        ".ts": "typescript",
        ".jsx": "javascriptreact",
        ".tsx": "typescriptreact",
        ".py": "python",
        ".pyi": "python",
        ".java": "java",
        ".c": "c",
        ".h": "c",
        ".cc": "cpp",
        ".cpp": "cpp",
        ".cxx": "cpp",
        ".hpp": "cpp",
        ".cs": "csharp",
        ".go": "go",
        ".rs": "rust",
        ".rb": "ruby",
        ".php": "php",
        ".swift": "swift",
        ".kt": "kotlin",
        ".kts": "kotlin",
        ".scala": "scala",
        ".html": "html",
        ".htm": "html",
        ".css": "css",
        ".scss": "scss",
        ".less": "less",
        ".sql": "sql",
        ".sh": "shellscript",
        ".bash": "shellscript",
        ".zsh": "shellscript",
        ".yml": "yaml",
        ".yaml": "yaml",
        ".json": "json",
    }
)


def get_comment_format(language_id: str) -> CommentFormat:
    return COMMENT_FORMATS.get(language_id, DEFAULT_FORMAT)


def language_for_path(path: str | Path) -> str:
    """Guess the language id from a file name ("plaintext" if unknown)."""
    return LANGUAGE_BY_SUFFIX.get(Path(path).suffix.lower(), "plaintext")


def generate_comment(
    image_path: str,
    language_id: str,
    template: str = DEFAULT_TEMPLATE,
) -> str:
    """Render the template and wrap it in the language's comment.

    Only the first ``{path}`` is substituted. Text that spans lines,
    or a language without line comments, gets the block form.
    The path is inserted as-is.
    """
    text = template.replace(PATH_PLACEHOLDER, image_path, 1)
    fmt = get_comment_format(language_id)
    if "\n" in text or not fmt.single:
        return f"{fmt.multi_start} {text} {fmt.multi_end}"
    return f"{fmt.single} {text}"


def has_block_comment(language_id: str) -> bool:
    """False for languages like yaml, whose multi-line text stays bare."""
    return bool(get_comment_format(language_id).multi_start)


def contains_terminator(text: str, language_id: str) -> bool:
    """True if text holds the language's block-comment terminator.

    Such text would close a block comment early; callers report it
    rather than rewrite the user's template.
    """
    end = get_comment_format(language_id).multi_end
    return bool(end) and end in text

