"""CLI entry point for the WCAG content scanner."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from a11yscan.context import AppContext, build_context
from a11yscan.errors import A11yScanError
from a11yscan.export import export_csv
from a11yscan.service import query_results, run_scan
from models import SCAN_TYPES


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line parser."""
    parser = argparse.ArgumentParser(description="Scan HTML content for WCAG issues")
    parser.add_argument("--path", required=True, help="Directory of HTML content to scan")
    parser.add_argument(
        "--scan-type",
        choices=SCAN_TYPES,
        default="full",
        help="Rule family to run (default: full)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="TYPE",
        help="Content type to skip; repeat for several types",
    )
    parser.add_argument(
        "--max-items",
        type=int,
        default=None,
        help="Maximum number of content items to scan (0 = unlimited)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Items per batch, clamped to 10-100 (default: from settings)",
    )
    parser.add_argument("--settings", help="Optional JSON settings file")
    parser.add_argument(
        "--database",
        default="sqlite://",
        help="SQLAlchemy database URL for findings (default: in-memory SQLite)",
    )
    parser.add_argument(
        "--format",
        choices=("json", "table", "csv"),
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--output",
        help="Optional file path to write output (overwrites existing file)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    """Configure loguru output for CLI messages."""
    logger.remove()
    logger.add(
        sys.stdout,
        level="DEBUG" if verbose else "INFO",
        format="{message}",
        filter=lambda record: record["level"].name in {"INFO", "DEBUG"},
    )
    logger.add(sys.stderr, level="WARNING", format="{message}")


def format_json_output(result: dict[str, Any]) -> str:
    """Render scan result as pretty JSON."""
    return json.dumps(result, indent=2)


def _build_aligned_table(rows: list[list[str]]) -> list[str]:
    """Return table rows with simple aligned columns."""
    if not rows:
        return []

    column_widths = [0] * len(rows[0])
    for row in rows:
        for index, value in enumerate(row):
            column_widths[index] = max(column_widths[index], len(value))

    return [
        " | ".join(value.ljust(column_widths[index]) for index, value in enumerate(row))
        for row in rows
    ]


def _shorten(value: str, width: int = 60) -> str:
    """Collapse whitespace and truncate long cells for table output."""
    value = " ".join(value.split())
    return value if len(value) <= width else f"{value[: width - 3]}..."


def format_table_output(result: dict[str, Any]) -> str:
    """Render scan result as a human-readable table."""
    summary = result.get("summary", {})
    findings = result.get("findings", [])

    table_rows: list[list[str]] = [
        ["CONTENT", "TITLE", "SEVERITY", "CODE", "WCAG", "ELEMENT"],
    ]
    for finding in findings:
        issue_data = finding.get("issue_data") or {}
        table_rows.append(
            [
                str(finding.get("content_id", "")),
                str(finding.get("title") or "-"),
                str(finding.get("severity", "")),
                str(finding.get("issue_code", "")),
                str(issue_data.get("wcag", "")),
                _shorten(str(finding.get("element_selector", ""))),
            ]
        )

    lines = [
        "=== Scan Summary ===",
        f"Scan type: {summary.get('scan_type', 'full')}",
        f"Scanned items: {summary.get('items_processed', 0)}",
        f"Findings: {summary.get('findings_count', 0)}",
        f"Errors: {summary.get('errors', 0)}",
        f"Warnings: {summary.get('warnings', 0)}",
        "",
        "=== Findings ===",
        *_build_aligned_table(table_rows),
    ]

    return "\n".join(lines)


def write_output_file(output_path: str, content: str) -> None:
    """Write rendered content to an output file, overwriting if it exists."""
    Path(output_path).write_text(f"{content}\n", encoding="utf-8")


def collect_findings(context: AppContext, per_page: int = 100) -> list[dict[str, Any]]:
    """Page through every stored finding."""
    findings: list[dict[str, Any]] = []
    page = 1
    while True:
        results = query_results(context, page=page, per_page=per_page)
        findings.extend(results["results"])
        if page >= results["total_pages"]:
            return findings
        page += 1


def _count_severity(findings: list[dict[str, Any]], severity: str) -> int:
    """Count findings with the given severity."""
    return sum(1 for finding in findings if finding["severity"] == severity)


def main() -> int:
    """Run the scanner CLI."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(verbose=args.verbose)

    target_path = Path(args.path)
    if not target_path.exists():
        logger.error(f"Error: path does not exist: {target_path}")
        return 1
    if not target_path.is_dir():
        logger.error(f"Error: path is not a directory: {target_path}")
        return 1

    if args.verbose:
        logger.debug(f"[DEBUG] Starting scan for: {target_path}")

    overrides = {"scanner": {"batch_size": args.batch_size}} if args.batch_size else None
    try:
        context = build_context(
            target_path,
            database_url=args.database,
            settings_path=args.settings,
            settings_overrides=overrides,
        )
        scan = run_scan(context, args.scan_type, args.exclude, args.max_items)
        findings = [finding for finding in collect_findings(context) if finding["resolved_at"] is None]
    except (A11yScanError, OSError, ValueError) as exc:
        logger.error(f"Error: scan failed: {exc}")
        return 1

    result = {
        "summary": {
            "scan_type": args.scan_type,
            "items_processed": scan["items_processed"],
            "findings_count": len(findings),
            "errors": _count_severity(findings, "error"),
            "warnings": _count_severity(findings, "warning"),
            "notices": _count_severity(findings, "notice"),
        },
        "findings": findings,
    }

    if args.format == "json":
        rendered_output = format_json_output(result)
    elif args.format == "csv":
        rendered_output = export_csv(context)["data"].rstrip("\n")
    else:
        rendered_output = format_table_output(result)

    logger.info(rendered_output)

    if args.output:
        try:
            write_output_file(args.output, rendered_output)
        except OSError as exc:
            logger.error(f"Error: failed to write output file '{args.output}': {exc}")
            return 1
        if args.verbose:
            logger.debug(f"[DEBUG] Wrote output to: {args.output}")

    return 2 if findings else 0


if __name__ == "__main__":
    raise SystemExit(main())
