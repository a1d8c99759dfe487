"""Tests for lazy session expiry."""

from datetime import timedelta

from a11yscan.sessions import SessionStore
from models import ScanSession


def _session(clock, scan_id: str = "scan-1") -> ScanSession:
    return ScanSession(
        scan_id=scan_id,
        scan_type="full",
        total_batches=1,
        total_items=0,
        content_types=("post",),
        started_at=clock(),
    )


def test_session_is_returned_until_expiry(clock) -> None:
    """Verify a session is live before its TTL and gone at it."""
    store = SessionStore(ttl=timedelta(minutes=10), clock=clock)
    store.save(_session(clock))

    clock.advance(minutes=9, seconds=59)
    assert store.get("scan-1") is not None

    clock.advance(seconds=1)
    assert store.get("scan-1") is None
    assert len(store) == 0


def test_expired_entries_stay_until_read(clock) -> None:
    """Verify expiry happens on access, not in the background."""
    store = SessionStore(ttl=timedelta(minutes=1), clock=clock)
    store.save(_session(clock, "a"))
    store.save(_session(clock, "b"))

    clock.advance(minutes=5)
    assert len(store) == 2

    assert store.get("a") is None
    assert len(store) == 1


def test_delete_and_unknown_ids(clock) -> None:
    """Verify deleting works and unknown ids read as missing."""
    store = SessionStore(clock=clock)
    store.save(_session(clock))

    store.delete("scan-1")
    store.delete("never-saved")

    assert store.get("scan-1") is None
