from __future__ import annotations

import json
from pathlib import Path

from heroesmarket.app.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    MarketSettings,
    load_config,
    load_settings,
)


def test_load_config_missing_file(tmp_path: Path) -> None:
    assert load_config(None) == {}
    assert load_config(tmp_path / "absent.json") == {}


def test_defaults_without_file_or_env() -> None:
    settings = load_settings(environ={})
    assert settings == MarketSettings()
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.resolved_credentials_path.name == "credentials.json"


def test_file_then_environment_override(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps(
            {
                "api_base_url": "https://staging.example.com/api/v1/",
                "request_timeout_seconds": 10,
                "resource_timeout_seconds": 5,
                "page_size": 50,
            }
        )
    )

    from_file = load_settings(config_file, environ={})
    assert from_file.api_base_url == "https://staging.example.com/api/v1"
    assert from_file.request_timeout_seconds == 10
    # The overall budget never drops below a single request's timeout.
    assert from_file.resource_timeout_seconds == 10
    assert from_file.page_size == 50

    from_env = load_settings(
        config_file,
        environ={
            "HEROESMARKET_API_URL": "http://localhost:8000/api/v1",
            "HEROESMARKET_CREDENTIALS": str(tmp_path / "creds.json"),
            "HEROESMARKET_TIMEOUT": "12.5",
        },
    )
    assert from_env.api_base_url == "http://localhost:8000/api/v1"
    assert from_env.credentials_path == tmp_path / "creds.json"
    assert from_env.request_timeout_seconds == 12.5


def test_invalid_numbers_fall_back_to_defaults() -> None:
    settings = load_settings(environ={"HEROESMARKET_TIMEOUT": "soon"})
    assert settings.request_timeout_seconds == DEFAULT_REQUEST_TIMEOUT
