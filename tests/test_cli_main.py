"""Tests for CLI argument parsing and top-level CLI behavior."""

import json
import sys
from pathlib import Path

import pytest

import main as cli_main
from a11yscan.storage import SqlIssueStore


def _run_main(monkeypatch: pytest.MonkeyPatch, args: list[str]) -> int:
    """Run CLI entrypoint with a mocked argv."""
    monkeypatch.setattr(sys, "argv", ["main.py", *args])
    return cli_main.main()


def test_missing_required_path_argument_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify argparse exits when --path is missing."""
    with pytest.raises(SystemExit) as exc_info:
        _run_main(monkeypatch, [])

    assert exc_info.value.code == 2


def test_invalid_path_returns_graceful_error(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify invalid content path returns exit code 1 with clear stderr message."""
    invalid_path = tmp_path / "not-found"

    exit_code = _run_main(monkeypatch, ["--path", str(invalid_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "path does not exist" in captured.err


def test_json_output_from_cli_is_parseable(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify --format json prints valid JSON payload for clean content."""
    (tmp_path / "clean.html").write_text("<h1>Hi</h1><p>ok</p>\n", encoding="utf-8")

    exit_code = _run_main(monkeypatch, ["--path", str(tmp_path), "--format", "json"])
    captured = capsys.readouterr()
    payload = json.loads(captured.out)

    assert exit_code == 0
    assert payload["summary"]["items_processed"] == 1
    assert payload["summary"]["findings_count"] == 0
    assert isinstance(payload["findings"], list)


def test_findings_return_exit_code_two_and_respect_exclusions(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify findings set exit code 2 and excluded content types are skipped."""
    (tmp_path / "post").mkdir()
    (tmp_path / "product").mkdir()
    (tmp_path / "post" / "hello.html").write_text('<img src="a.png">', encoding="utf-8")
    (tmp_path / "product" / "shoe.html").write_text('<a href="/x"></a>', encoding="utf-8")

    exit_code = _run_main(
        monkeypatch,
        ["--path", str(tmp_path), "--format", "json", "--exclude", "product"],
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 2
    assert payload["summary"]["items_processed"] == 1
    assert [finding["issue_code"] for finding in payload["findings"]] == ["img_no_alt"]
    assert payload["findings"][0]["title"] == "post/hello.html"


def test_scan_type_limits_rule_families(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify --scan-type runs only the selected rule family."""
    (tmp_path / "page.html").write_text(
        '<img src="a.png"><h1>A</h1><h4>B</h4><a href="#">more</a>',
        encoding="utf-8",
    )

    _run_main(monkeypatch, ["--path", str(tmp_path), "--format", "json", "--scan-type", "headings"])
    payload = json.loads(capsys.readouterr().out)

    assert [finding["issue_code"] for finding in payload["findings"]] == ["heading_skip"]


def test_unknown_scan_type_is_rejected_by_argparse(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Verify the CLI only accepts known scan types."""
    with pytest.raises(SystemExit) as exc_info:
        _run_main(monkeypatch, ["--path", str(tmp_path), "--scan-type", "colors"])

    assert exc_info.value.code == 2


def test_settings_file_holding_a_list_returns_graceful_error(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify a non-object settings file exits with code 1 and a stderr message."""
    (tmp_path / "page.html").write_text("<p>ok</p>", encoding="utf-8")
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("[1, 2]", encoding="utf-8")

    exit_code = _run_main(monkeypatch, ["--path", str(tmp_path), "--settings", str(settings_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Settings file must hold a JSON object" in captured.err


def test_resolved_findings_from_earlier_runs_do_not_fail_a_clean_rescan(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Verify only unresolved findings drive findings_count and the exit code."""
    content_dir = tmp_path / "content"
    content_dir.mkdir()
    page = content_dir / "page.html"
    page.write_text('<img src="a.png">', encoding="utf-8")
    database_url = f"sqlite:///{tmp_path / 'issues.db'}"
    args = ["--path", str(content_dir), "--format", "json", "--database", database_url]

    assert _run_main(monkeypatch, args) == 2
    capsys.readouterr()

    store = SqlIssueStore(database_url)
    [finding] = store.all_findings()
    assert store.resolve(finding.id) is True
    page.write_text('<img src="a.png" alt="Chart">', encoding="utf-8")

    exit_code = _run_main(monkeypatch, args)
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["summary"]["findings_count"] == 0
    assert payload["findings"] == []
    assert len(store.all_findings()) == 1
