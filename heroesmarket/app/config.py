"""Configuration utilities for HeroesMarket.

Settings are resolved in three layers: built-in defaults, an optional JSON
configuration file, and ``HEROESMARKET_*`` environment variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

DEFAULT_API_BASE_URL = "https://www.heroesandmore.com/api/v1"
DEFAULT_RENEWAL_PATH = "/auth/token/refresh/"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_RESOURCE_TIMEOUT = 60.0
DEFAULT_PAGE_SIZE = 20
DEFAULT_CREDENTIALS_PATH = Path("~/.heroesmarket/credentials.json")

# Credential store keys
ACCESS_TOKEN_KEY = "com.heroesandmore.accessToken"
REFRESH_TOKEN_KEY = "com.heroesandmore.refreshToken"
USER_ID_KEY = "com.heroesandmore.userId"


def load_config(path: str | Path | None) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Returns an empty dictionary when no path is given or the file is absent.
    """
    if path is None:
        return {}
    config_path = Path(path).expanduser()
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _as_float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if result > 0 else default


def _as_int(value: Any, default: int) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        return default
    return result if result > 0 else default


@dataclass(frozen=True)
class MarketSettings:
    """Resolved client settings."""

    api_base_url: str = DEFAULT_API_BASE_URL
    renewal_path: str = DEFAULT_RENEWAL_PATH
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT
    resource_timeout_seconds: float = DEFAULT_RESOURCE_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    credentials_path: Path = field(default=DEFAULT_CREDENTIALS_PATH)

    @property
    def resolved_credentials_path(self) -> Path:
        return Path(self.credentials_path).expanduser()


def load_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> MarketSettings:
    """Build :class:`MarketSettings` from defaults, a config file and the environment."""

    cfg = load_config(config_path)
    env = os.environ if environ is None else environ

    api_base_url = env.get("HEROESMARKET_API_URL") or cfg.get(
        "api_base_url", DEFAULT_API_BASE_URL
    )
    credentials_path = env.get("HEROESMARKET_CREDENTIALS") or cfg.get(
        "credentials_path", DEFAULT_CREDENTIALS_PATH
    )
    request_timeout = _as_float(
        env.get("HEROESMARKET_TIMEOUT", cfg.get("request_timeout_seconds")),
        DEFAULT_REQUEST_TIMEOUT,
    )
    resource_timeout = _as_float(
        cfg.get("resource_timeout_seconds"), DEFAULT_RESOURCE_TIMEOUT
    )

    return MarketSettings(
        api_base_url=str(api_base_url).rstrip("/"),
        renewal_path=str(cfg.get("renewal_path", DEFAULT_RENEWAL_PATH)),
        request_timeout_seconds=request_timeout,
        resource_timeout_seconds=max(resource_timeout, request_timeout),
        page_size=_as_int(cfg.get("page_size"), DEFAULT_PAGE_SIZE),
        credentials_path=Path(credentials_path),
    )


__all__ = [
    "ACCESS_TOKEN_KEY",
    "DEFAULT_API_BASE_URL",
    "MarketSettings",
    "REFRESH_TOKEN_KEY",
    "USER_ID_KEY",
    "load_config",
    "load_settings",
]
