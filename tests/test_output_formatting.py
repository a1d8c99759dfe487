"""Tests for JSON, table and CSV output rendering."""

import json
import sys
from pathlib import Path

import pytest

import main as cli_main
from a11yscan.context import build_context
from a11yscan.service import run_scan


def test_json_formatting_preserves_issue_data(tmp_path: Path) -> None:
    """Verify JSON formatting keeps WCAG criterion and src in findings."""
    (tmp_path / "sample.html").write_text('<img src="https://example.com/a.png">', encoding="utf-8")
    context = build_context(tmp_path)
    run_scan(context)

    findings = cli_main.collect_findings(context)
    rendered = cli_main.format_json_output({"summary": {}, "findings": findings})
    payload = json.loads(rendered)

    assert payload["findings"][0]["issue_data"]["src"] == "https://example.com/a.png"
    assert payload["findings"][0]["issue_data"]["wcag"] == "1.1.1"


def test_collect_findings_walks_every_page(tmp_path: Path) -> None:
    """Verify paging through results returns all findings."""
    images = "".join(f'<img src="{index}.png">' for index in range(7))
    (tmp_path / "gallery.html").write_text(images, encoding="utf-8")
    context = build_context(tmp_path)
    run_scan(context)

    assert len(cli_main.collect_findings(context, per_page=3)) == 7


def test_table_output_prints_columns_and_placeholder_title() -> None:
    """Verify table output includes headers and '-' for a missing title."""
    rendered = cli_main.format_table_output(
        {
            "summary": {"scan_type": "links", "items_processed": 1, "findings_count": 1},
            "findings": [
                {
                    "content_id": 9,
                    "title": "",
                    "severity": "error",
                    "issue_code": "link_empty",
                    "issue_data": {"wcag": "2.4.4"},
                    "element_selector": '<a href="/x">\n</a>',
                }
            ],
        }
    )

    for header in ("CONTENT", "TITLE", "SEVERITY", "CODE", "WCAG", "ELEMENT"):
        assert header in rendered
    assert "Scan type: links" in rendered
    assert "| - " in rendered
    assert '<a href="/x"> </a>' in rendered


def test_csv_output_from_cli(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Verify --format csv prints the export header and one row per finding."""
    content_dir = tmp_path / "content"
    content_dir.mkdir()
    (content_dir / "index.html").write_text(
        '<a href="/">click here</a><img src="a.png" alt="">',
        encoding="utf-8",
    )
    output_file = tmp_path / "report.csv"

    monkeypatch.setattr(
        sys,
        "argv",
        ["main.py", "--path", str(content_dir), "--format", "csv", "--output", str(output_file)],
    )
    exit_code = cli_main.main()
    captured = capsys.readouterr()

    lines = captured.out.strip().splitlines()
    assert exit_code == 2
    assert lines[0] == "ID,Content ID,Title,Scan Type,Issue Code,Severity,Scanned At,Resolved At"
    assert len(lines) == 3
    assert output_file.read_text(encoding="utf-8").strip() == captured.out.strip()
