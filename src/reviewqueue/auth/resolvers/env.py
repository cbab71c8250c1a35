"""Environment token resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass

from reviewqueue.auth.base import TokenResolver


@dataclass(frozen=True)
class EnvTokenResolver(TokenResolver):
    variable: str = "GITHUB_TOKEN"

    async def resolve(self) -> str:
        return self._require(os.getenv(self.variable), source=self.variable)
