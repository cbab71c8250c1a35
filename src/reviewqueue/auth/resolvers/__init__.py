"""Concrete token resolvers."""

from reviewqueue.auth.resolvers.env import EnvTokenResolver
from reviewqueue.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvTokenResolver", "StaticTokenResolver"]
