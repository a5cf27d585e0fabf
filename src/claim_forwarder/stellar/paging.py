"""Cursor-following traversal of Horizon collections.

Horizon pages carry a ``next`` link. It is treated as an opaque capability:
the only thing a caller can do with it is fetch the following page.

Traversal is not consistent under concurrent mutation of the collection. A
record inserted behind the cursor is missed, and if the server does not keep
cursors stable a record may appear twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class PageLink(Generic[T]):
    """Opaque handle to the page following the one that produced it."""

    __slots__ = ("_href", "_fetch")

    def __init__(self, href: str, fetch: Callable[[str], Awaitable[Page[T]]]) -> None:
        self._href = href
        self._fetch = fetch

    async def fetch_next(self) -> Page[T]:
        return await self._fetch(self._href)

    def __repr__(self) -> str:
        return "PageLink(<opaque>)"


@dataclass(frozen=True)
class Page(Generic[T]):
    """A batch of records plus a link to the next batch."""

    records: tuple[T, ...]
    next: PageLink[T] | None = None

    @property
    def is_terminal(self) -> bool:
        return not self.records


class Paginator(Generic[T]):
    """Collects every record reachable from a first page."""

    async def iterate(self, first_page: Page[T]) -> AsyncIterator[Page[T]]:
        """Yield each non-empty page in order, stopping at the terminal page."""
        page = first_page
        count = 0
        while not page.is_terminal:
            count += 1
            log.debug("Page %d: %d records", count, len(page.records))
            yield page
            if page.next is None:
                log.debug("Page %d has no next link; stopping", count)
                return
            page = await page.next.fetch_next()
        log.debug("Terminal page reached after %d non-empty pages", count)

    async def collect(self, first_page: Page[T]) -> list[T]:
        """Return the concatenation of all pages' records in page order.

        Any failure while fetching aborts the traversal; nothing partial is
        returned.
        """
        records: list[T] = []
        async for page in self.iterate(first_page):
            records.extend(page.records)
        return records
