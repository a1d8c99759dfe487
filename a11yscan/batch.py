"""Batch coordinator: splits a scan into fixed-size pages of content."""

from __future__ import annotations

import math
import uuid
from collections.abc import Iterable
from dataclasses import replace

from loguru import logger

from a11yscan.compliance import round_half_up
from a11yscan.content import scannable_types
from a11yscan.context import AppContext
from a11yscan.engine import normalize_scan_type, scan_items
from a11yscan.errors import ScanSessionNotFoundError, ValidationError
from a11yscan.sessions import as_utc
from a11yscan.settings import BATCH_SIZE_BOUNDS
from models import BatchResult, ScanHistoryRecord, ScanSession, ScanStart

DEFAULT_BATCH_SIZE = 50


def compute_total_batches(eligible_count: int, batch_size: int) -> int:
    """Return the number of batches for a scan, never less than one."""
    return max(1, math.ceil(eligible_count / batch_size))


def _clamp_batch_size(value: object) -> int:
    """Coerce a batch size to an int inside the allowed bounds."""
    low, high = BATCH_SIZE_BOUNDS
    try:
        batch_size = int(value)
    except (TypeError, ValueError):
        batch_size = DEFAULT_BATCH_SIZE
    return max(low, min(high, batch_size))


class BatchCoordinator:
    """Start scan sessions and advance them one batch at a time.

    Callers drive the pacing: a batch is requested only after the previous
    one returned. A batch that fetches no content completes the scan and
    writes a history record.
    """

    def __init__(self, context: AppContext) -> None:
        self._context = context

    @property
    def batch_size(self) -> int:
        """Return the configured batch size within the allowed bounds."""
        return _clamp_batch_size(
            self._context.settings.get("scanner.batch_size", DEFAULT_BATCH_SIZE)
        )

    def start(
        self,
        scan_type: str | None = "full",
        excluded_types: Iterable[str] | None = None,
        max_items: int | None = None,
    ) -> ScanStart:
        """Create a scan session and clear unresolved findings of earlier scans."""
        scan_type = normalize_scan_type(scan_type)
        if excluded_types is None:
            excluded_types = self._context.settings.get("scanner.excluded_types", [])
        if max_items is None:
            max_items = self._context.settings.get("scanner.max_pages", 0)
        excluded = tuple(sorted(set(excluded_types)))
        max_items = max(int(max_items or 0), 0)

        removed = self._context.issues.delete_unresolved()
        if removed:
            logger.debug(f"Cleared {removed} unresolved finding(s) from earlier scans")

        content = self._context.content
        content_types = tuple(scannable_types(content.public_types(), excluded))
        total_items = sum(content.count(content_type) for content_type in content_types)
        if 0 < max_items < total_items:
            total_items = max_items

        batch_size = self.batch_size
        session = ScanSession(
            scan_id=str(uuid.uuid4()),
            scan_type=scan_type,
            total_batches=compute_total_batches(total_items, batch_size),
            total_items=total_items,
            content_types=content_types,
            started_at=self._context.clock(),
            excluded_types=excluded,
            max_items=max_items,
            batch_size=batch_size,
        )
        self._context.sessions.save(session)

        logger.debug(
            f"Started {scan_type} scan {session.scan_id}: {total_items} item(s) "
            f"in {session.total_batches} batch(es) across {', '.join(content_types) or 'no types'}"
        )
        return ScanStart(
            scan_session_id=session.scan_id,
            total_batches=session.total_batches,
            total_items=total_items,
            content_types=content_types,
        )

    def process_batch(self, scan_id: str, batch_index: int) -> BatchResult:
        """Scan one page of content for a live session."""
        session = self._context.sessions.get(scan_id)
        if session is None:
            raise ScanSessionNotFoundError(f"Scan not found or expired: {scan_id}")
        if batch_index < 0:
            raise ValidationError(
                f"Batch index must not be negative: {batch_index}",
                code="invalid_batch_index",
            )

        offset = batch_index * session.batch_size
        limit = session.batch_size
        if session.max_items > 0:
            limit = min(limit, session.max_items - offset)

        items = []
        if limit > 0:
            items = self._context.content.fetch(session.content_types, offset, limit)

        if not items:
            self._finalize(session)
            return BatchResult(
                batch_index=batch_index,
                items_processed=0,
                issues_found=0,
                complete=True,
                scanned=session.scanned_count,
                total=session.total_items,
                progress=100,
            )

        scanned_at = as_utc(self._context.clock())
        findings = [
            replace(finding, scanned_at=scanned_at)
            for finding in scan_items(items, session.scan_type)
        ]
        self._context.issues.insert_many(findings)

        scanned = offset + len(items)
        if session.total_items:
            scanned = min(scanned, session.total_items)
        scanned = max(scanned, session.scanned_count)
        progress = 100
        if session.total_items:
            progress = min(100, round_half_up(scanned / session.total_items * 100))

        self._context.sessions.save(
            replace(
                session,
                current_batch=max(session.current_batch, batch_index + 1),
                scanned_count=scanned,
            )
        )

        logger.debug(
            f"Scan {scan_id} batch {batch_index}: {len(items)} item(s), "
            f"{len(findings)} finding(s), {progress}%"
        )
        return BatchResult(
            batch_index=batch_index,
            items_processed=len(items),
            issues_found=len(findings),
            complete=False,
            scanned=scanned,
            total=session.total_items,
            progress=progress,
        )

    def _finalize(self, session: ScanSession) -> ScanHistoryRecord:
        """Write the history record for a finished scan and drop its session."""
        finished_at = as_utc(self._context.clock())
        summary = self._context.issues.summarize(finished_at.date())
        record = self._context.issues.add_history(
            ScanHistoryRecord(
                scan_type=session.scan_type,
                total=summary.total,
                errors=summary.errors,
                warnings=summary.warnings,
                notices=summary.notices,
                items_scanned=session.scanned_count,
                scanned_at=finished_at,
            )
        )
        self._context.sessions.delete(session.scan_id)

        logger.debug(
            f"Scan {session.scan_id} complete: {record.total} issue(s) "
            f"({record.errors} errors, {record.warnings} warnings, {record.notices} notices)"
        )
        return record
