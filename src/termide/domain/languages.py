"""Language detection from file extensions."""

import posixpath

# extension (lowercase, no dot) -> language id
LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "ts": "typescript",
    "tsx": "typescriptreact",
    "js": "javascript",
    "jsx": "javascriptreact",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "md": "markdown",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "sh": "shellscript",
    "bash": "shellscript",
    "zsh": "shellscript",
}


def detect_language(path: str) -> str | None:
    """Infer a language id from the path's extension.

    Args:
        path: File path

    Returns:
        Language id, or None when the extension is unknown or missing
    """
    name = basename(path)
    if "." not in name:
        return None
    ext = name.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(ext)


def basename(path: str) -> str:
    """Final path segment, falling back to the path itself (e.g. for "/")."""
    return posixpath.basename(path.rstrip("/")) or path
