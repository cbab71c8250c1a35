"""Repository identity."""

from __future__ import annotations

from pydantic import BaseModel


class RepoRef(BaseModel):
    """A GitHub repository, optionally linked to its bors queue page.

    Two refs are equal when owner and name match; the bors URL is carried
    along but does not take part in identity.
    """

    owner: str
    name: str
    bors_queue_url: str | None = None

    model_config = {"frozen": True}

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepoRef):
            return NotImplemented
        return (self.owner, self.name) == (other.owner, other.name)

    def __hash__(self) -> int:
        return hash((self.owner, self.name))

    def __str__(self) -> str:
        return self.full_name
