"""Configuration loading."""

from reviewqueue.config.loader import load_config

__all__ = ["load_config"]
