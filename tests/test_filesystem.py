"""Tests for recursive HTML content discovery."""

from pathlib import Path

import pytest

from a11yscan.filesystem import collect_html_files, load_content_items


def test_collect_html_files_filters_extensions_and_excluded_directories(
    tmp_path: Path,
) -> None:
    """Verify discovery includes only HTML files and skips excluded dirs."""
    include_html = tmp_path / "index.html"
    include_htm = tmp_path / "legacy.HTM"
    include_nested = tmp_path / "post" / "hello.html"

    skip_extension = tmp_path / "readme.txt"
    skip_vendor = tmp_path / "vendor" / "vendor.html"
    skip_node_modules = tmp_path / "node_modules" / "bundle.html"
    skip_git = tmp_path / ".git" / "hooks.html"
    skip_venv = tmp_path / ".venv" / "ignored.html"

    for file_path in [
        include_html,
        include_htm,
        include_nested,
        skip_extension,
        skip_vendor,
        skip_node_modules,
        skip_git,
        skip_venv,
    ]:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text("<p>content</p>\n", encoding="utf-8")

    discovered = {Path(path) for path in collect_html_files(str(tmp_path))}
    expected = {
        include_html.resolve(),
        include_htm.resolve(),
        include_nested.resolve(),
    }

    assert discovered == expected
    assert all(path.is_absolute() for path in discovered)


def test_collect_html_files_raises_when_path_does_not_exist(tmp_path: Path) -> None:
    """Verify missing path raises a clear FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        collect_html_files(str(tmp_path / "missing"))


def test_load_content_items_derives_type_ids_and_titles(tmp_path: Path) -> None:
    """Verify top-level directories name content types and ids follow path order."""
    (tmp_path / "post" / "2024").mkdir(parents=True)
    (tmp_path / "about.html").write_text("<h1>About</h1>", encoding="utf-8")
    (tmp_path / "post" / "2024" / "b.html").write_text("<p>b</p>", encoding="utf-8")
    (tmp_path / "post" / "a.html").write_text("<p>a</p>", encoding="utf-8")

    items = load_content_items(str(tmp_path))

    assert [(item.id, item.content_type, item.title) for item in items] == [
        (1, "page", "about.html"),
        (2, "post", "post/2024/b.html"),
        (3, "post", "post/a.html"),
    ]
    assert items[0].html_body == "<h1>About</h1>"
    assert all(item.status == "publish" for item in items)
