"""Config loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError

from reviewqueue.contracts.config import ReviewQueueConfig
from reviewqueue.contracts.exceptions import ConfigError


def _resolve_path(value: Path | None, *, base_dir: Path) -> Path | None:
    if value is None:
        return None
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def _validate_urls(config: ReviewQueueConfig) -> None:
    named = {
        "github_api_url": config.github_api_url,
        "crater_url": config.crater_url,
        "rfcbot_url": config.rfcbot_url,
    }
    for repo in config.repos:
        if repo.bors_queue_url is not None:
            named[f"repos[{repo.owner}/{repo.name}].bors_queue_url"] = repo.bors_queue_url

    for field, url in named.items():
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ConfigError(f"{field} must be an absolute http(s) URL, got {url!r}")


def load_config(path: str | Path) -> ReviewQueueConfig:
    """Load and validate config from JSON, resolving relative paths against the config directory."""
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = ReviewQueueConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    if not parsed.repos:
        raise ConfigError("config must list at least one repository")
    _validate_urls(parsed)

    return parsed.model_copy(update={"ledger_path": _resolve_path(parsed.ledger_path, base_dir=config_dir)})
