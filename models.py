"""Data models for scan findings, sessions and history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

ScanType = Literal["images", "headings", "links"]
RequestedScanType = Literal["full", "images", "headings", "links"]
Severity = Literal["error", "warning", "notice"]

SCAN_TYPES: tuple[str, ...] = ("full", "images", "headings", "links")
SEVERITIES: tuple[str, ...] = ("error", "warning", "notice")

ISSUE_SEVERITY: dict[str, Severity] = {
    "img_no_alt": "error",
    "img_empty_alt": "warning",
    "heading_skip": "warning",
    "heading_empty": "error",
    "link_generic_text": "warning",
    "link_empty": "error",
}

ISSUE_WCAG: dict[str, str] = {
    "img_no_alt": "1.1.1",
    "img_empty_alt": "1.1.1",
    "heading_skip": "1.3.1",
    "heading_empty": "1.3.1",
    "link_generic_text": "2.4.4",
    "link_empty": "2.4.4",
}


def _isoformat(value: datetime | None) -> str | None:
    """Render an optional timestamp as ISO 8601."""
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ContentItem:
    """One stored content body as handed over by the content source."""

    id: int
    html_body: str
    content_type: str
    title: str = ""
    status: str = "publish"


@dataclass(frozen=True)
class Finding:
    """Structured accessibility finding."""

    content_id: int
    scan_type: ScanType
    issue_code: str
    severity: Severity
    element_selector: str
    issue_data: dict[str, Any]
    scanned_at: datetime | None = None
    resolved_at: datetime | None = None
    id: int | None = None

    @property
    def dedupe_key(self) -> tuple[int, str, str]:
        """Return key used for optional upsert deduplication."""
        return (self.content_id, self.issue_code, self.element_selector)

    @property
    def wcag(self) -> str:
        """Return the WCAG criterion this finding maps to."""
        return str(self.issue_data.get("wcag", ""))

    def to_dict(self) -> dict[str, Any]:
        """Serialize finding to dictionary output."""
        return {
            "id": self.id,
            "content_id": self.content_id,
            "scan_type": self.scan_type,
            "issue_code": self.issue_code,
            "severity": self.severity,
            "element_selector": self.element_selector,
            "issue_data": dict(self.issue_data),
            "scanned_at": _isoformat(self.scanned_at),
            "resolved_at": _isoformat(self.resolved_at),
        }


@dataclass(frozen=True)
class ScanSession:
    """Progress state of one batched scan."""

    scan_id: str
    scan_type: RequestedScanType
    total_batches: int
    total_items: int
    content_types: tuple[str, ...]
    started_at: datetime
    excluded_types: tuple[str, ...] = ()
    max_items: int = 0
    batch_size: int = 50
    current_batch: int = 0
    scanned_count: int = 0


@dataclass(frozen=True)
class IssueSummary:
    """Finding counts grouped by severity."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    notices: int = 0

    def to_dict(self) -> dict[str, int]:
        """Serialize counts to dictionary output."""
        return {
            "total": self.total,
            "errors": self.errors,
            "warnings": self.warnings,
            "notices": self.notices,
        }


@dataclass(frozen=True)
class ScanHistoryRecord:
    """Aggregate counts written when a scan completes."""

    scan_type: str
    total: int
    errors: int
    warnings: int
    notices: int
    items_scanned: int
    scanned_at: datetime
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize history record to dictionary output."""
        return {
            "id": self.id,
            "scan_type": self.scan_type,
            "total": self.total,
            "errors": self.errors,
            "warnings": self.warnings,
            "notices": self.notices,
            "items_scanned": self.items_scanned,
            "scanned_at": _isoformat(self.scanned_at),
        }


@dataclass(frozen=True)
class ScanStart:
    """Result of starting a scan session."""

    scan_session_id: str
    total_batches: int
    total_items: int
    content_types: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize scan start details to dictionary output."""
        return {
            "scan_session_id": self.scan_session_id,
            "total_batches": self.total_batches,
            "total_items": self.total_items,
            "content_types": list(self.content_types),
        }


@dataclass(frozen=True)
class BatchResult:
    """Result of processing one batch of a scan session."""

    batch_index: int
    items_processed: int
    issues_found: int
    complete: bool
    scanned: int = 0
    total: int = 0
    progress: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize batch progress to dictionary output."""
        return {
            "batch_index": self.batch_index,
            "items_processed": self.items_processed,
            "issues_found": self.issues_found,
            "complete": self.complete,
            "scanned": self.scanned,
            "total": self.total,
            "progress": self.progress,
        }
