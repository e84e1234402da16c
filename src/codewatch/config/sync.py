"""Synchronization defaults for the violation sync engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_PACING_SECONDS = 0.5
DEFAULT_MAX_CONCURRENCY = 1
DEFAULT_ACTIVITY_VIOLATION_LIMIT = 5
DEFAULT_JURISDICTION = "NYC"

# Days an open record may age before it is treated as administratively stale.
DEFAULT_SUPPRESSION_THRESHOLDS: Mapping[str, int] = MappingProxyType(
    {
        "ECB": 730,
        "DOB": 1095,
        "HPD": 1095,
    }
)
QUICK_SYNC_AUTHORITIES: tuple[str, ...] = ("DOB",)


@dataclass(frozen=True, slots=True)
class SyncConfig:
    pacing_seconds: float = DEFAULT_PACING_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    activity_violation_limit: int = DEFAULT_ACTIVITY_VIOLATION_LIMIT
    jurisdiction: str = DEFAULT_JURISDICTION
    quick_authorities: tuple[str, ...] = QUICK_SYNC_AUTHORITIES
    suppression_thresholds: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_SUPPRESSION_THRESHOLDS
    )

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        if self.pacing_seconds < 0:
            raise ConfigurationError("pacing_seconds must be non-negative")


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        pacing_seconds=env_float("CODEWATCH_SYNC_PACING_SECONDS", DEFAULT_PACING_SECONDS),
        max_concurrency=env_int("CODEWATCH_SYNC_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY),
    )
