"""Configuration for the NYC Open Data (Socrata) catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import env_float, optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

OPEN_DATA_BASE_URL: Final[str] = "https://data.cityofnewyork.us"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 20.0
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 300.0


def _is_row_list(payload: object) -> bool:
    # Socrata reports query errors as an object; only row arrays are worth caching.
    return isinstance(payload, list)


def default_open_data_resilience(
    *,
    base_url: str = OPEN_DATA_BASE_URL,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    app_token: str | None = None,
) -> ResilienceConfig:
    headers = {"Accept": "application/json"}
    if app_token:
        headers["X-App-Token"] = app_token
    return ResilienceConfig(
        name="nyc-open-data",
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
        cache=CacheConfig(
            backend="memory",
            ttl_seconds=DEFAULT_CACHE_TTL_SECONDS,
            should_cache=_is_row_list,
        ),
        default_headers=headers,
    )


@dataclass(frozen=True, slots=True)
class OpenDataConfig:
    base_url: str = OPEN_DATA_BASE_URL
    app_token: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    page_size: int = 100
    resilience: ResilienceConfig = field(default_factory=default_open_data_resilience)

    @classmethod
    def from_environment(cls) -> OpenDataConfig:
        base_url = optional_env_var("NYC_OPEN_DATA_BASE_URL") or OPEN_DATA_BASE_URL
        app_token = optional_env_var("NYC_OPEN_DATA_APP_TOKEN")
        timeout = env_float("NYC_OPEN_DATA_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        return cls(
            base_url=base_url,
            app_token=app_token,
            timeout_seconds=timeout,
            resilience=default_open_data_resilience(
                base_url=base_url,
                timeout_seconds=timeout,
                app_token=app_token,
            ),
        )


def get_open_data_config() -> OpenDataConfig:
    return OpenDataConfig.from_environment()
