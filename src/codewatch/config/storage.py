"""Where codewatch keeps its database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "codewatch"
DEFAULT_DB_FILENAME: Final[str] = "codewatch.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
ASYNC_SQLITE_SCHEME: Final[str] = "sqlite+aiosqlite://"
# Sync sqlite URIs are accepted and routed through the async driver.
_SYNC_SQLITE_SCHEMES: Final[tuple[str, ...]] = ("sqlite+pysqlite://", "sqlite://")


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """A data directory holding the sqlite database and the HTTP response cache.

    Paths are created on first use.
    """

    data_dir: Path

    @classmethod
    def from_environment(cls) -> StorageConfig:
        configured = optional_env_var("CODEWATCH_DATA_DIR")
        return cls(data_dir=Path(configured) if configured else _platform_data_dir())

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file(self, name: str) -> Path:
        directory = self.resolve_data_dir()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / name

    def database_uri(self) -> str:
        return f"{ASYNC_SQLITE_SCHEME}/{self.file(DEFAULT_DB_FILENAME)}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _platform_data_dir() -> Path:
    if os.name == "nt":
        root = optional_env_var("LOCALAPPDATA")
        base = Path(root) if root else Path.home() / "AppData" / "Local"
    else:
        root = optional_env_var("XDG_DATA_HOME")
        base = Path(root) if root else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def to_async_uri(uri: str) -> str:
    for scheme in _SYNC_SQLITE_SCHEMES:
        if uri.startswith(scheme):
            return ASYNC_SQLITE_SCHEME + uri.removeprefix(scheme)
    return uri


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_environment()


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = (optional_env_var("CODEWATCH_SQL_ECHO") or "").lower() in {"1", "true", "yes"}
    override = optional_env_var("DATABASE_URI")
    if override:
        return DatabaseConfig(uri=to_async_uri(override), echo=echo)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri(), echo=echo)


def get_http_cache_path() -> Path:
    return get_storage_config().file(HTTP_CACHE_FILENAME)
