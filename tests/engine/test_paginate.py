from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from reviewqueue.contracts.exceptions import ProviderError
from reviewqueue.engine.paginate import Page, paginate_with_retry


class _Pages:
    def __init__(self, first_pages: list[Page[int]], later: dict[str, Page[int]] | None = None) -> None:
        self._first_pages = first_pages
        self._later = later or {}
        self.requests: list[str | None] = []

    async def __call__(self, next_url: str | None) -> Page[int]:
        self.requests.append(next_url)
        if next_url is None:
            return self._first_pages.pop(0) if len(self._first_pages) > 1 else self._first_pages[0]
        return self._later[next_url]


@pytest.fixture
def sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock()
    monkeypatch.setattr("reviewqueue.engine.paginate.asyncio.sleep", mock)
    return mock


@pytest.mark.asyncio
async def test_follows_pages_in_order(sleep: AsyncMock) -> None:
    pages = _Pages([Page(items=[1, 2], next_url="p2")], {"p2": Page(items=[3], next_url="p3"), "p3": Page(items=[4])})

    items = [item async for item in paginate_with_retry(pages)]

    assert items == [1, 2, 3, 4]
    assert pages.requests == [None, "p2", "p3"]
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_retries_empty_first_page(sleep: AsyncMock) -> None:
    pages = _Pages([Page(), Page(), Page(items=[7])])

    items = [item async for item in paginate_with_retry(pages, delay=0.05)]

    assert items == [7]
    assert pages.requests == [None, None, None]
    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.05)


@pytest.mark.asyncio
async def test_first_page_with_only_a_next_link_is_not_empty(sleep: AsyncMock) -> None:
    pages = _Pages([Page(items=[], next_url="p2")], {"p2": Page(items=[5])})

    items = [item async for item in paginate_with_retry(pages)]

    assert items == [5]
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(sleep: AsyncMock) -> None:
    pages = _Pages([Page()])

    items = [item async for item in paginate_with_retry(pages, max_attempts=20)]

    assert items == []
    assert len(pages.requests) == 20
    assert sleep.await_count == 19


@pytest.mark.asyncio
async def test_empty_later_page_is_not_retried(sleep: AsyncMock) -> None:
    pages = _Pages([Page(items=[1], next_url="p2")], {"p2": Page()})

    items = [item async for item in paginate_with_retry(pages)]

    assert items == [1]
    assert pages.requests == [None, "p2"]


@pytest.mark.asyncio
async def test_fetch_errors_propagate(sleep: AsyncMock) -> None:
    async def failing(next_url: str | None) -> Page[int]:
        raise ProviderError("boom", status_code=500)

    with pytest.raises(ProviderError):
        [item async for item in paginate_with_retry(failing)]
