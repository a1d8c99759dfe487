"""Scan session store with lazy expiry."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from loguru import logger

from models import ScanSession

DEFAULT_SESSION_TTL = timedelta(hours=1)


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Convert a timestamp to UTC, reading naive values as UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SessionStore:
    """Keep scan sessions keyed by scan id until their expiry timestamp.

    Expiry is checked when a session is read; nothing sweeps the store in
    the background. Every save pushes the expiry out by one TTL.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[ScanSession, datetime]] = {}

    def save(self, session: ScanSession) -> None:
        """Store a session and restart its expiry window."""
        self._entries[session.scan_id] = (session, self._clock() + self._ttl)

    def get(self, scan_id: str) -> ScanSession | None:
        """Return the live session, or None when unknown or expired."""
        entry = self._entries.get(scan_id)
        if entry is None:
            return None

        session, expires_at = entry
        if self._clock() >= expires_at:
            logger.warning(f"Scan session expired: {scan_id}")
            del self._entries[scan_id]
            return None
        return session

    def delete(self, scan_id: str) -> None:
        """Forget a session; unknown ids are ignored."""
        self._entries.pop(scan_id, None)

    def __len__(self) -> int:
        return len(self._entries)
