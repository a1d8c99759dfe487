"""Service operations exposed to callers such as the CLI."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from loguru import logger

from a11yscan.batch import BatchCoordinator
from a11yscan.compliance import (
    compliance_level,
    compliance_score,
    enabled_modules,
    module_overview,
    scan_summary,
)
from a11yscan.content import scannable_types
from a11yscan.context import AppContext
from a11yscan.errors import FindingNotFoundError
from a11yscan.export import export_report
from models import SEVERITIES

DEFAULT_PER_PAGE = 50

__all__ = [
    "export_report",
    "process_batch",
    "query_results",
    "report_summary",
    "resolve_issue",
    "run_scan",
    "start_scan",
]


def start_scan(
    context: AppContext,
    scan_type: str | None = "full",
    excluded_types: Iterable[str] | None = None,
    max_items: int | None = None,
) -> dict[str, Any]:
    """Start a batched scan session."""
    return BatchCoordinator(context).start(scan_type, excluded_types, max_items).to_dict()


def process_batch(context: AppContext, scan_session_id: str, batch_index: int) -> dict[str, Any]:
    """Process one batch of a scan session."""
    return BatchCoordinator(context).process_batch(scan_session_id, batch_index).to_dict()


def run_scan(
    context: AppContext,
    scan_type: str | None = "full",
    excluded_types: Iterable[str] | None = None,
    max_items: int | None = None,
) -> dict[str, Any]:
    """Run a scan to completion, one batch after another."""
    coordinator = BatchCoordinator(context)
    started = coordinator.start(scan_type, excluded_types, max_items)

    batch_index = 0
    items_processed = 0
    issues_found = 0
    while True:
        result = coordinator.process_batch(started.scan_session_id, batch_index)
        if result.complete:
            break
        items_processed += result.items_processed
        issues_found += result.issues_found
        batch_index += 1

    return {
        **started.to_dict(),
        "batches_processed": batch_index,
        "items_processed": items_processed,
        "issues_found": issues_found,
    }


def query_results(
    context: AppContext,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    severity: str | None = None,
) -> dict[str, Any]:
    """Return one page of findings; unknown severities mean no filter."""
    page = page if page and page > 0 else 1
    per_page = per_page if per_page and per_page > 0 else DEFAULT_PER_PAGE
    if severity and severity not in SEVERITIES:
        logger.debug(f"Ignoring unknown severity filter {severity!r}")
        severity = None

    findings, total = context.issues.query(page, per_page, severity)
    results = []
    for finding in findings:
        payload = finding.to_dict()
        payload["title"] = context.content.title(finding.content_id) or ""
        results.append(payload)

    return {
        "results": results,
        "total": total,
        "page": page,
        "per_page": per_page,
        "total_pages": math.ceil(total / per_page),
    }


def resolve_issue(context: AppContext, finding_id: int) -> dict[str, Any]:
    """Mark a finding resolved; resolving it again is a no-op."""
    if not context.issues.resolve(finding_id):
        raise FindingNotFoundError(f"Finding not found: {finding_id}")
    return {"success": True, "finding_id": finding_id}


def report_summary(context: AppContext) -> dict[str, Any]:
    """Return the dashboard summary: compliance, last scan and quick stats."""
    settings = context.settings.get_settings()
    score = compliance_score(settings)
    content_types = scannable_types(
        context.content.public_types(),
        settings["scanner"]["excluded_types"],
    )

    return {
        "compliance_score": score,
        "compliance_level": compliance_level(score),
        "last_scan_summary": scan_summary(context.issues),
        "quick_stats": {
            "total_content": sum(context.content.count(content_type) for content_type in content_types),
            "issues": context.issues.summarize().to_dict(),
        },
        "modules_enabled": enabled_modules(settings),
        "modules": module_overview(settings),
    }
