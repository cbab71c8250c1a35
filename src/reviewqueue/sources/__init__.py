"""Clients for GitHub and the auxiliary queue sources."""

from .bors import fetch_bors_queue, parse_bors_queue
from .crater import fetch_crater_queue, parse_crater_queue
from .github import GitHubClient
from .hub import SourceHub
from .rfcbot import fetch_fcp_snapshot, parse_fcp_snapshot
from .rollup import find_rollups, parse_rollup_members

__all__ = [
    "GitHubClient",
    "SourceHub",
    "fetch_bors_queue",
    "fetch_crater_queue",
    "fetch_fcp_snapshot",
    "find_rollups",
    "parse_bors_queue",
    "parse_crater_queue",
    "parse_fcp_snapshot",
    "parse_rollup_members",
]
