"""Content sources the scanner reads HTML bodies from."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from models import ContentItem

PUBLISHED_STATUS = "publish"
NON_SCANNABLE_TYPES = frozenset({"attachment"})


class ContentSource(Protocol):
    """Read-only access to stored content items."""

    def public_types(self) -> list[str]: ...

    def count(self, content_type: str) -> int: ...

    def fetch(
        self,
        content_types: Iterable[str],
        offset: int,
        limit: int,
    ) -> list[ContentItem]: ...

    def title(self, content_id: int) -> str | None: ...


class InMemoryContentSource:
    """Content source over a fixed list of items, ordered by id."""

    def __init__(
        self,
        items: Iterable[ContentItem] = (),
        public_types: Iterable[str] | None = None,
    ) -> None:
        self._items = sorted(items, key=lambda item: item.id)
        self._by_id = {item.id: item for item in self._items}
        if public_types is None:
            public_types = {item.content_type for item in self._items}
        self._public_types = sorted(set(public_types))

    def public_types(self) -> list[str]:
        """Return the publicly viewable content types."""
        return list(self._public_types)

    def count(self, content_type: str) -> int:
        """Count published items of one content type."""
        return sum(
            1
            for item in self._items
            if item.content_type == content_type and item.status == PUBLISHED_STATUS
        )

    def fetch(
        self,
        content_types: Iterable[str],
        offset: int,
        limit: int,
    ) -> list[ContentItem]:
        """Return one page of published items of the given types."""
        if limit <= 0:
            return []
        wanted_types = set(content_types)
        eligible = [
            item
            for item in self._items
            if item.content_type in wanted_types and item.status == PUBLISHED_STATUS
        ]
        return eligible[max(offset, 0) : max(offset, 0) + limit]

    def title(self, content_id: int) -> str | None:
        """Return the title of a content item, if it exists."""
        item = self._by_id.get(content_id)
        return item.title if item is not None else None


def scannable_types(
    public_types: Iterable[str],
    excluded_types: Iterable[str] = (),
) -> list[str]:
    """Return public content types minus exclusions and binary media types."""
    excluded = set(excluded_types) | NON_SCANNABLE_TYPES
    return [content_type for content_type in public_types if content_type not in excluded]
