"""Paginated listing with bounded retry on an empty first page."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing and the URL of the next one, if any."""

    items: list[T] = field(default_factory=list)
    next_url: str | None = None


async def paginate_with_retry(
    fetch_page: Callable[[str | None], Awaitable[Page[T]]],
    *,
    max_attempts: int = 20,
    delay: float = 0.05,
    label: str = "listing",
) -> AsyncIterator[T]:
    """Yield every item of a paginated listing.

    GitHub sometimes answers a listing with an empty first page while it is
    still computing results. The first page is re-requested up to
    ``max_attempts`` times, ``delay`` seconds apart; if it never fills, the
    listing is abandoned with a warning and nothing is yielded. Later pages
    are followed through ``next_url`` without retry.

    Errors raised by ``fetch_page`` propagate to the caller.
    """
    page: Page[T] | None = None
    for attempt in range(1, max_attempts + 1):
        page = await fetch_page(None)
        if page.items or page.next_url is not None:
            break
        if attempt < max_attempts:
            _LOG.debug("%s: empty first page, retrying (attempt %d/%d)", label, attempt, max_attempts)
            await asyncio.sleep(delay)
    else:
        _LOG.warning("%s: first page still empty after %d attempts, giving up", label, max_attempts)
        return

    number = 1
    while page is not None:
        _LOG.debug("%s: page %d with %d items", label, number, len(page.items))
        for item in page.items:
            yield item
        if page.next_url is None:
            break
        number += 1
        page = await fetch_page(page.next_url)
