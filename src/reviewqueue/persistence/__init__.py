"""Persistence helpers shared by SDK and CLI."""

from reviewqueue.persistence.seen import SeenLedger

__all__ = ["SeenLedger"]
