"""Where the GitHub token comes from."""

from __future__ import annotations

from abc import ABC, abstractmethod

from reviewqueue.contracts.exceptions import AuthenticationError


class TokenResolver(ABC):
    """Produces the bearer token for ``GitHubClient``.

    Resolution happens once, when the SDK is built from config; a rejected
    token only surfaces later, at scan start.
    """

    @abstractmethod
    async def resolve(self) -> str: ...

    @staticmethod
    def _require(raw: str | None, *, source: str) -> str:
        token = (raw or "").strip()
        if not token:
            raise AuthenticationError(f"{source} is not set or empty")
        return token
