"""Shared fixtures for scanner tests."""

from datetime import datetime, timedelta, timezone

import pytest

from a11yscan.context import AppContext, build_context
from models import ContentItem


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc))


def build_items(count: int, content_type: str = "post", start_id: int = 1) -> list[ContentItem]:
    """Build published items that each carry one image without alt."""
    return [
        ContentItem(
            id=content_id,
            html_body=f'<p>Item {content_id}</p><img src="img-{content_id}.png">',
            content_type=content_type,
            title=f"{content_type} {content_id}",
        )
        for content_id in range(start_id, start_id + count)
    ]


@pytest.fixture
def make_context(clock: FakeClock):
    """Return a factory building an in-memory context around given items."""

    def _make_context(items: list[ContentItem], **settings: object) -> AppContext:
        overrides = {"scanner": settings} if settings else None
        return build_context(items=items, settings_overrides=overrides, clock=clock)

    return _make_context


@pytest.fixture
def make_items():
    return build_items
