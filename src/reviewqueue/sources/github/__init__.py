"""GitHub source client."""

from reviewqueue.sources.github.client import GitHubClient

__all__ = ["GitHubClient"]
