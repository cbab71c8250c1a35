"""Token taken verbatim from the config file."""

from __future__ import annotations

from dataclasses import dataclass

from reviewqueue.auth.base import TokenResolver


@dataclass(frozen=True)
class StaticTokenResolver(TokenResolver):
    token: str

    async def resolve(self) -> str:
        return self._require(self.token, source="config token")
