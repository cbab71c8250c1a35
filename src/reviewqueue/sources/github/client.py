"""Async GitHub REST client for issue listings and pull-request details."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from types import TracebackType
from typing import Any

import httpx

from reviewqueue.contracts.config import PaginationConfig
from reviewqueue.contracts.exceptions import AuthenticationError, ProviderError
from reviewqueue.contracts.issue import Author, IssueSnapshot, PullDetail
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.engine.paginate import Page, paginate_with_retry
from reviewqueue.sources._retrying_transport import RetryingTransport
from reviewqueue.sources.github.mapper import (
    author_from_payload,
    issue_from_payload,
    pull_from_payload,
    repo_from_payload,
)

_LOG = logging.getLogger(__name__)


class GitHubClient:
    """Thin async wrapper over the handful of REST endpoints a scan needs.

    Use as an async context manager; the underlying ``httpx.AsyncClient`` is
    opened on enter and closed on exit.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        pagination: PaginationConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._pagination = pagination or PaginationConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GitHubClient:
        self._open_transport()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _open_transport(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            transport=RetryingTransport(transport=self._transport),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            timeout=httpx.Timeout(30.0),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_viewer(self) -> Author:
        """Return the authenticated user.

        Raises:
            AuthenticationError: If the token is missing, invalid or expired.
        """
        response = await self._get("/user")
        return author_from_payload(self._json_object(response))

    async def list_issues_page(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        repo: RepoRef | None = None,
    ) -> Page[IssueSnapshot]:
        """Fetch one page of an issues listing.

        ``repo`` names the repository for per-repository listings; without it
        each item's own ``repository`` object is used. Items that cannot be
        mapped are skipped and logged.
        """
        response = await self._get(url, params=params)
        payload = self._json(response)
        if not isinstance(payload, list):
            raise ProviderError(f"Expected a list from {url}")

        items: list[IssueSnapshot] = []
        for raw in payload:
            if not isinstance(raw, dict):
                _LOG.error("Skipping non-object item in %s", url)
                continue
            try:
                items.append(issue_from_payload(raw, repo if repo is not None else repo_from_payload(raw)))
            except ProviderError as exc:
                _LOG.error("Skipping malformed issue in %s: %s", url, exc)

        next_link = response.links.get("next", {})
        return Page(items=items, next_url=next_link.get("url"))

    def iter_repo_issues(
        self,
        repo: RepoRef,
        *,
        creator: str | None = None,
        assignee: str | None = None,
    ) -> AsyncIterator[IssueSnapshot]:
        """Iterate open issues in ``repo`` filtered by creator or assignee."""
        params: dict[str, Any] = {"state": "open", "per_page": self._pagination.per_page}
        if creator is not None:
            params["creator"] = creator
        if assignee is not None:
            params["assignee"] = assignee
        path = f"/repos/{repo.owner}/{repo.name}/issues"

        async def fetch_page(next_url: str | None) -> Page[IssueSnapshot]:
            if next_url is None:
                return await self.list_issues_page(path, params, repo=repo)
            return await self.list_issues_page(next_url, repo=repo)

        direction = f"creator={creator}" if creator is not None else f"assignee={assignee}"
        return paginate_with_retry(
            fetch_page,
            max_attempts=self._pagination.max_attempts,
            delay=self._pagination.delay,
            label=f"{repo.full_name} issues ({direction})",
        )

    def iter_subscribed_issues(self) -> AsyncIterator[IssueSnapshot]:
        """Iterate open issues the viewer subscribes to, across all repositories."""
        params: dict[str, Any] = {"filter": "subscribed", "state": "open", "per_page": self._pagination.per_page}

        async def fetch_page(next_url: str | None) -> Page[IssueSnapshot]:
            if next_url is None:
                return await self.list_issues_page("/issues", params)
            return await self.list_issues_page(next_url)

        return paginate_with_retry(
            fetch_page,
            max_attempts=self._pagination.max_attempts,
            delay=self._pagination.delay,
            label="subscribed issues",
        )

    async def get_pull(self, repo: RepoRef, number: int) -> PullDetail:
        response = await self._get(f"/repos/{repo.owner}/{repo.name}/pulls/{number}")
        return pull_from_payload(self._json_object(response))

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        if self._client is None:
            raise ProviderError("GitHub client is not open. Use 'async with'.")
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise ProviderError(f"GitHub request to {url} failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationError("GitHub rejected the token", status_code=401)
        if response.status_code >= 400:
            raise ProviderError(
                f"GitHub returned HTTP {response.status_code} for {url}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"GitHub returned invalid JSON for {response.request.url}") from exc

    @classmethod
    def _json_object(cls, response: httpx.Response) -> dict[str, Any]:
        payload = cls._json(response)
        if not isinstance(payload, dict):
            raise ProviderError(f"Expected an object from {response.request.url}")
        return payload
