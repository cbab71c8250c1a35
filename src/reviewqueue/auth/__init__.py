"""Auth module public exports."""

from reviewqueue.auth.base import TokenResolver
from reviewqueue.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
