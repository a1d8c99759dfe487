"""Load a directory of HTML files as scannable content."""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from models import ContentItem

HTML_SUFFIXES = {".html", ".htm"}
SKIPPED_DIRECTORIES = {
    "node_modules",
    "vendor",
    ".git",
    "__pycache__",
    "venv",
    ".venv",
}
DEFAULT_CONTENT_TYPE = "page"


def _content_root(root_path: str) -> Path:
    """Resolve the content directory.

    Raises:
        FileNotFoundError: If the path does not exist.
        NotADirectoryError: If the path is not a directory.
    """
    root = Path(root_path)
    if not root.exists():
        raise FileNotFoundError(f"Content path does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Content path is not a directory: {root}")
    return root.resolve()


def _relative_html_paths(root: Path) -> list[Path]:
    """Return sorted root-relative paths of HTML files outside skipped directories."""
    relative_paths: list[Path] = []
    for directory, subdirectories, file_names in os.walk(root):
        subdirectories[:] = [name for name in subdirectories if name not in SKIPPED_DIRECTORIES]
        relative_dir = Path(directory).relative_to(root)
        relative_paths.extend(
            relative_dir / name for name in file_names if Path(name).suffix.lower() in HTML_SUFFIXES
        )
    return sorted(relative_paths)


def collect_html_files(root_path: str) -> list[str]:
    """Return absolute paths of the HTML files below ``root_path`` in path order."""
    root = _content_root(root_path)
    return [str(root / relative_path) for relative_path in _relative_html_paths(root)]


def load_content_items(root_path: str) -> list[ContentItem]:
    """Load HTML files as published content items.

    The first directory below the root names the content type; files placed
    directly in the root are pages. Ids follow sorted relative path order.
    """
    root = _content_root(root_path)
    items: list[ContentItem] = []

    for content_id, relative_path in enumerate(_relative_html_paths(root), start=1):
        content_type = relative_path.parts[0] if len(relative_path.parts) > 1 else DEFAULT_CONTENT_TYPE
        try:
            html_body = (root / relative_path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning(f"Skipping unreadable file: {relative_path} ({exc})")
            continue

        items.append(
            ContentItem(
                id=content_id,
                html_body=html_body,
                content_type=content_type,
                title=relative_path.as_posix(),
            )
        )

    return items
