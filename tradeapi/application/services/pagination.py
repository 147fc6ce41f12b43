"""
Paginated, cached listing.

On a miss the page is assembled from two independent queries: one window
of rows (fetch_page) and the total row count (count). They are not run in
a shared snapshot, so a write landing between them can make the metadata
disagree with the content by a row. The assembled PageResponse (content
and metadata together) is what gets cached, so every hit replays the
exact same object until the entry expires.

Writes never evict page keys. A cached page can therefore be stale for up
to the cache's expire-after-write window.
"""

import asyncio
from typing import Any, Protocol

from tradeapi.application.api.models.pagination import PageRequest, PageResponse
from tradeapi.core.concurrency.task_executor import TaskExecutor
from tradeapi.core.config.constants import Resource
from tradeapi.infrastructure.cache.cache_manager import CacheManager


class PageSource(Protocol):
    """Anything that can serve a window of rows and a total count."""

    model: type

    def fetch_page(
        self, offset: int, limit: int, sort_by: str | None = None, descending: bool = False
    ) -> list[Any]: ...

    def count(self) -> int: ...


def build_page(source: PageSource, page_request: PageRequest) -> PageResponse:
    """Query the source and assemble one page (no caching)."""
    content = source.fetch_page(
        page_request.offset,
        page_request.size,
        sort_by=page_request.sort_by,
        descending=page_request.descending,
    )
    total = source.count()
    return PageResponse[source.model].of(content, page_request, total)


def paginate(
    cache: CacheManager,
    resource: Resource,
    source: PageSource,
    page_request: PageRequest,
) -> PageResponse:
    """Cached page, computed synchronously on the calling thread on a miss."""
    return cache.get_or_compute(
        page_request.cache_key(resource),
        PageResponse,
        lambda: build_page(source, page_request),
    )


async def paginate_async(
    cache: CacheManager,
    resource: Resource,
    source: PageSource,
    page_request: PageRequest,
    executor: TaskExecutor,
) -> PageResponse:
    """
    Cached page for async routes.

    On a miss both queries run on the worker pool concurrently; the event
    loop only awaits them.
    """

    async def load() -> PageResponse:
        content, total = await asyncio.gather(
            executor.run(
                source.fetch_page,
                page_request.offset,
                page_request.size,
                sort_by=page_request.sort_by,
                descending=page_request.descending,
            ),
            executor.run(source.count),
        )
        return PageResponse[source.model].of(content, page_request, total)

    return await cache.get_or_compute_async(page_request.cache_key(resource), PageResponse, load)
