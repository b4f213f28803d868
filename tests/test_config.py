"""Unit tests for core/config.py -- Settings validation.

Settings is constructed directly with _env_file=None so a developer's .env
cannot leak into the assertions.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings

_KEY = "k" * 32


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("DEBUG", "SECRET_KEY", "BASE_API_URL", "ACCESS_TOKEN_EXPIRE_SECONDS"):
        monkeypatch.delenv(name, raising=False)


def test_production_requires_secret_key() -> None:
    with pytest.raises(PydanticValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_debug_generates_secret_key() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.secret_key) >= 32


def test_short_secret_key_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="at least 32 characters"):
        Settings(_env_file=None, secret_key="short")


def test_env_vars_are_read(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", _KEY)
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_SECONDS", "60")
    settings = Settings(_env_file=None)
    assert settings.secret_key == _KEY
    assert settings.access_token_expire_seconds == 60


def test_token_lifetimes_default_short_access_long_refresh() -> None:
    settings = Settings(_env_file=None, secret_key=_KEY)
    assert settings.access_token_expire_seconds < settings.refresh_token_expire_seconds


@pytest.mark.parametrize(("raw", "expected"), [("/api", "/api"), ("api/", "/api"), ("/v2/api/", "/v2/api")])
def test_base_api_url_normalized(raw: str, expected: str) -> None:
    assert Settings(_env_file=None, secret_key=_KEY, base_api_url=raw).base_api_url == expected
