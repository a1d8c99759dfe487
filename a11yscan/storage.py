"""Issue store: persisted findings and scan history."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol

from loguru import logger
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    case,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from a11yscan.errors import StorageError
from a11yscan.sessions import as_utc, utc_now
from models import SEVERITIES, Finding, IssueSummary, ScanHistoryRecord

Base = declarative_base()


class IssueRow(Base):
    __tablename__ = "a11y_scan_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(Integer, nullable=False, index=True)
    scan_type = Column(String(50), nullable=False, index=True)
    issue_code = Column(String(50), nullable=False)
    issue_data = Column(JSON, nullable=True)
    severity = Column(String(10), nullable=False, default="warning", index=True)
    element_selector = Column(Text, nullable=True)
    scanned_at = Column(DateTime(timezone=True), nullable=False, index=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)


class HistoryRow(Base):
    __tablename__ = "a11y_scan_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scan_type = Column(String(50), nullable=False, index=True)
    total_issues = Column(Integer, default=0)
    errors = Column(Integer, default=0)
    warnings = Column(Integer, default=0)
    notices = Column(Integer, default=0)
    items_scanned = Column(Integer, default=0)
    scanned_at = Column(DateTime(timezone=True), nullable=False, index=True)


SEVERITY_RANK = case(
    (IssueRow.severity == "error", 3),
    (IssueRow.severity == "warning", 2),
    else_=1,
)


class IssueStore(Protocol):
    """Persistence contract the batch coordinator and services rely on."""

    def insert_many(self, findings: Iterable[Finding]) -> list[Finding]: ...

    def delete_unresolved(self) -> int: ...

    def resolve(self, finding_id: int) -> bool: ...

    def get(self, finding_id: int) -> Finding | None: ...

    def summarize(self, day: date | None = None) -> IssueSummary: ...

    def query(
        self,
        page: int,
        per_page: int,
        severity: str | None = None,
    ) -> tuple[list[Finding], int]: ...

    def all_findings(self) -> list[Finding]: ...

    def add_history(self, record: ScanHistoryRecord) -> ScanHistoryRecord: ...

    def latest_history(self) -> ScanHistoryRecord | None: ...


def _row_to_finding(row: IssueRow) -> Finding:
    """Convert an issue row to a finding."""
    return Finding(
        id=row.id,
        content_id=row.content_id,
        scan_type=row.scan_type,
        issue_code=row.issue_code,
        severity=row.severity,
        element_selector=row.element_selector or "",
        issue_data=dict(row.issue_data or {}),
        scanned_at=as_utc(row.scanned_at),
        resolved_at=as_utc(row.resolved_at),
    )


def _row_to_history(row: HistoryRow) -> ScanHistoryRecord:
    """Convert a history row to a record."""
    return ScanHistoryRecord(
        id=row.id,
        scan_type=row.scan_type,
        total=row.total_issues or 0,
        errors=row.errors or 0,
        warnings=row.warnings or 0,
        notices=row.notices or 0,
        items_scanned=row.items_scanned or 0,
        scanned_at=as_utc(row.scanned_at),
    )


def _build_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(url)


class SqlIssueStore:
    """SQLAlchemy-backed issue store.

    Inserts are append-only: repeated scans add new rows for the same
    defect. With ``deduplicate=True`` a finding is skipped when an
    unresolved row with the same content id, issue code and element
    selector already exists.
    """

    def __init__(
        self,
        database_url: str = "sqlite://",
        *,
        engine: Engine | None = None,
        clock: Callable[[], datetime] = utc_now,
        deduplicate: bool = False,
    ) -> None:
        self._engine = engine if engine is not None else _build_engine(database_url)
        self._clock = clock
        self._deduplicate = deduplicate
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to create issue tables: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Yield a session that commits on success and wraps database errors."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"Issue store operation failed: {exc}")
            raise StorageError(f"Issue store operation failed: {exc}") from exc
        finally:
            session.close()

    def _unresolved_keys(self, session: Session) -> set[tuple[int, str, str]]:
        """Return dedupe keys of every unresolved finding."""
        rows = session.execute(
            select(IssueRow.content_id, IssueRow.issue_code, IssueRow.element_selector).where(
                IssueRow.resolved_at.is_(None)
            )
        )
        return {(content_id, code, selector or "") for content_id, code, selector in rows}

    def insert_many(self, findings: Iterable[Finding]) -> list[Finding]:
        """Persist findings and return them with their assigned ids."""
        with self._session() as session:
            seen_keys = self._unresolved_keys(session) if self._deduplicate else set()
            rows: list[IssueRow] = []
            for finding in findings:
                if self._deduplicate:
                    if finding.dedupe_key in seen_keys:
                        continue
                    seen_keys.add(finding.dedupe_key)

                row = IssueRow(
                    content_id=finding.content_id,
                    scan_type=finding.scan_type,
                    issue_code=finding.issue_code,
                    issue_data=dict(finding.issue_data),
                    severity=finding.severity,
                    element_selector=finding.element_selector,
                    scanned_at=as_utc(finding.scanned_at or self._clock()),
                    resolved_at=as_utc(finding.resolved_at),
                )
                session.add(row)
                rows.append(row)

            session.flush()
            return [_row_to_finding(row) for row in rows]

    def delete_unresolved(self) -> int:
        """Delete findings that were never resolved; resolved rows survive."""
        with self._session() as session:
            result = session.execute(delete(IssueRow).where(IssueRow.resolved_at.is_(None)))
            return result.rowcount or 0

    def resolve(self, finding_id: int) -> bool:
        """Mark a finding resolved.

        Returns False only when the finding does not exist. A finding that
        is already resolved keeps its original timestamp.
        """
        with self._session() as session:
            row = session.get(IssueRow, finding_id)
            if row is None:
                return False
            if row.resolved_at is None:
                row.resolved_at = as_utc(self._clock())
            return True

    def get(self, finding_id: int) -> Finding | None:
        """Return one finding by id, or None."""
        with self._session() as session:
            row = session.get(IssueRow, finding_id)
            return _row_to_finding(row) if row is not None else None

    def summarize(self, day: date | None = None) -> IssueSummary:
        """Count findings by severity, optionally only those scanned on one UTC day."""
        statement = select(IssueRow.severity, func.count(IssueRow.id)).group_by(
            IssueRow.severity
        )
        if day is not None:
            day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            statement = statement.where(
                IssueRow.scanned_at >= day_start,
                IssueRow.scanned_at < day_start + timedelta(days=1),
            )

        with self._session() as session:
            counts = {severity: count for severity, count in session.execute(statement)}

        return IssueSummary(
            total=sum(counts.values()),
            errors=counts.get("error", 0),
            warnings=counts.get("warning", 0),
            notices=counts.get("notice", 0),
        )

    def query(
        self,
        page: int,
        per_page: int,
        severity: str | None = None,
    ) -> tuple[list[Finding], int]:
        """Return one page of findings, most severe and most recent first."""
        statement = select(IssueRow)
        count_statement = select(func.count(IssueRow.id))
        if severity in SEVERITIES:
            statement = statement.where(IssueRow.severity == severity)
            count_statement = count_statement.where(IssueRow.severity == severity)

        statement = (
            statement.order_by(
                SEVERITY_RANK.desc(),
                IssueRow.scanned_at.desc(),
                IssueRow.id.desc(),
            )
            .limit(per_page)
            .offset((page - 1) * per_page)
        )

        with self._session() as session:
            rows = session.scalars(statement).all()
            total = session.scalar(count_statement) or 0
            return [_row_to_finding(row) for row in rows], total

    def all_findings(self) -> list[Finding]:
        """Return every finding, newest first."""
        statement = select(IssueRow).order_by(IssueRow.scanned_at.desc(), IssueRow.id.desc())
        with self._session() as session:
            return [_row_to_finding(row) for row in session.scalars(statement).all()]

    def add_history(self, record: ScanHistoryRecord) -> ScanHistoryRecord:
        """Store a history record and return it with its id."""
        with self._session() as session:
            row = HistoryRow(
                scan_type=record.scan_type,
                total_issues=record.total,
                errors=record.errors,
                warnings=record.warnings,
                notices=record.notices,
                items_scanned=record.items_scanned,
                scanned_at=as_utc(record.scanned_at),
            )
            session.add(row)
            session.flush()
            return _row_to_history(row)

    def latest_history(self) -> ScanHistoryRecord | None:
        """Return the most recent history record, if any."""
        statement = (
            select(HistoryRow)
            .order_by(HistoryRow.scanned_at.desc(), HistoryRow.id.desc())
            .limit(1)
        )
        with self._session() as session:
            row = session.scalars(statement).first()
            return _row_to_history(row) if row is not None else None
