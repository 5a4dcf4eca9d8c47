"""Settings validation for cache configuration."""

import pytest
from pydantic import ValidationError

from cached_api.core.config import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.cache_default_ttl == 300
    assert settings.cache_route_ttls == {"/api/v1/payments": 60}
    assert settings.cache_force_param == "forceCache"


def test_route_ttls_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_ROUTE_TTLS", '{"/api/v1/blogs": 30}')
    assert Settings().cache_route_ttls == {"/api/v1/blogs": 30}


@pytest.mark.parametrize(
    "overrides",
    [
        {"cache_default_ttl": 0},
        {"cache_route_ttls": {"/api/v1/payments": -1}},
        {"cache_force_param": "  "},
    ],
)
def test_invalid_cache_settings_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_negative_reconnect_interval_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(redis_reconnect_interval=-1)


def test_non_positive_body_limit_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(cache_max_body_bytes=0)
