"""Report exports for stored findings."""

from __future__ import annotations

import csv
import io
from typing import Any

from a11yscan import __version__
from a11yscan.context import AppContext
from a11yscan.errors import ExportNotImplementedError, InvalidExportFormatError
from models import Finding

EXPORT_FORMATS = ("json", "csv", "pdf")
CSV_HEADER = [
    "ID",
    "Content ID",
    "Title",
    "Scan Type",
    "Issue Code",
    "Severity",
    "Scanned At",
    "Resolved At",
]


def _timestamp(value: Any) -> str:
    """Render an optional timestamp for CSV output."""
    return value.isoformat() if value is not None else ""


def export_json(context: AppContext) -> dict[str, Any]:
    """Return all findings with a snapshot of the current settings."""
    issues = []
    for finding in context.issues.all_findings():
        payload = finding.to_dict()
        payload["title"] = context.content.title(finding.content_id) or ""
        issues.append(payload)

    return {
        "generated_at": context.clock().isoformat(),
        "version": __version__,
        "settings": context.settings.get_settings(),
        "issues": issues,
    }


def _csv_row(context: AppContext, finding: Finding) -> list[str]:
    """Flatten one finding into a CSV row."""
    return [
        str(finding.id),
        str(finding.content_id),
        context.content.title(finding.content_id) or "",
        finding.scan_type,
        finding.issue_code,
        finding.severity,
        _timestamp(finding.scanned_at),
        _timestamp(finding.resolved_at),
    ]


def export_csv(context: AppContext) -> dict[str, str]:
    """Return findings flattened into CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for finding in context.issues.all_findings():
        writer.writerow(_csv_row(context, finding))

    return {
        "content_type": "text/csv",
        "filename": f"accessibility-report-{context.clock().date().isoformat()}.csv",
        "data": buffer.getvalue(),
    }


def export_report(context: AppContext, export_format: str) -> dict[str, Any]:
    """Export findings in the requested format.

    Raises:
        InvalidExportFormatError: For formats outside json, csv and pdf.
        ExportNotImplementedError: For pdf, which is accepted but not built.
    """
    if export_format not in EXPORT_FORMATS:
        raise InvalidExportFormatError(f"Invalid export format: {export_format!r}")
    if export_format == "json":
        return export_json(context)
    if export_format == "csv":
        return export_csv(context)
    raise ExportNotImplementedError("PDF export not yet implemented.")
