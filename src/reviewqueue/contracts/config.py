"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from reviewqueue.contracts.repo import RepoRef


class RepoConfig(BaseModel):
    owner: str
    name: str
    bors_queue_url: str | None = None

    model_config = {"frozen": True}

    def to_ref(self) -> RepoRef:
        return RepoRef(owner=self.owner, name=self.name, bors_queue_url=self.bors_queue_url)


class CachePeriods(BaseModel):
    """Refresh periods, in seconds, for the shared per-source caches."""

    bors: float = Field(default=30.0, gt=0)
    rollups: float = Field(default=60.0, gt=0)
    crater: float = Field(default=600.0, gt=0)
    fcp: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}


class PaginationConfig(BaseModel):
    """Bounded retry policy for listings whose first page comes back empty."""

    max_attempts: int = Field(default=20, ge=1)
    delay: float = Field(default=0.05, ge=0)
    per_page: int = Field(default=50, ge=1, le=100)

    model_config = {"frozen": True}


class ReviewQueueConfig(BaseModel):
    username: str
    repos: list[RepoConfig] = Field(default_factory=list)
    auth: str = "env"
    token: str | None = None
    github_api_url: str = "https://api.github.com"
    crater_url: str = "https://crater.rust-lang.org/"
    rfcbot_url: str = "https://rfcbot.rs/api/all"
    include_subscribed: bool = True
    max_concurrent: int = Field(default=100, ge=1, le=500)
    refresh_interval: float = Field(default=60.0, gt=0)
    cache_periods: CachePeriods = Field(default_factory=CachePeriods)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    ledger_path: Path | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_auth_token(self) -> ReviewQueueConfig:
        token = (self.token or "").strip()
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        if self.auth not in {"env", "token"}:
            raise ValueError("auth must be one of: env, token")
        return self

    @model_validator(mode="after")
    def validate_unique_repos(self) -> ReviewQueueConfig:
        seen: set[tuple[str, str]] = set()
        for repo in self.repos:
            key = (repo.owner.lower(), repo.name.lower())
            if key in seen:
                raise ValueError(f"duplicate repository: {repo.owner}/{repo.name}")
            seen.add(key)
        return self

    def repo_refs(self) -> list[RepoRef]:
        return [repo.to_ref() for repo in self.repos]
