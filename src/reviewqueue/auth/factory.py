"""Token resolver factory."""

from __future__ import annotations

from reviewqueue.auth.base import TokenResolver
from reviewqueue.auth.resolvers.env import EnvTokenResolver
from reviewqueue.auth.resolvers.static import StaticTokenResolver
from reviewqueue.contracts.config import ReviewQueueConfig
from reviewqueue.contracts.exceptions import ConfigError


def create_token_resolver(config: ReviewQueueConfig) -> TokenResolver:
    """Pick the resolver for ``config.auth``: ``env`` reads ``GITHUB_TOKEN``, ``token`` uses ``config.token``."""
    if config.auth == "env":
        return EnvTokenResolver()
    if config.auth == "token":
        return StaticTokenResolver(token=config.token or "")
    raise ConfigError(f"Unknown auth mode: {config.auth}")
