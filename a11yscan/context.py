"""Application context shared by the scanner services."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from a11yscan.content import ContentSource, InMemoryContentSource
from a11yscan.filesystem import load_content_items
from a11yscan.sessions import SessionStore, utc_now
from a11yscan.settings import SettingsStore
from a11yscan.storage import IssueStore, SqlIssueStore
from models import ContentItem


@dataclass
class AppContext:
    """Collaborators for one scanner instance, passed explicitly to services."""

    settings: SettingsStore
    content: ContentSource
    issues: IssueStore
    sessions: SessionStore
    clock: Callable[[], datetime] = field(default=utc_now)


def build_context(
    content_root: str | Path | None = None,
    *,
    items: Iterable[ContentItem] | None = None,
    database_url: str = "sqlite://",
    settings_path: str | Path | None = None,
    settings_overrides: dict[str, Any] | None = None,
    clock: Callable[[], datetime] = utc_now,
    deduplicate: bool = False,
) -> AppContext:
    """Wire a context from a content directory or an explicit item list."""
    if items is None:
        items = load_content_items(str(content_root)) if content_root is not None else []

    return AppContext(
        settings=SettingsStore(settings_path, settings_overrides),
        content=InMemoryContentSource(items),
        issues=SqlIssueStore(database_url, clock=clock, deduplicate=deduplicate),
        sessions=SessionStore(clock=clock),
        clock=clock,
    )
