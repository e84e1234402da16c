"""Utilities for managing Alembic migrations within the SQLAlchemy adapter."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from sqlalchemy.ext.asyncio import create_async_engine

from codewatch.config import get_database_config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine


def _build_config() -> Config:
    """Return an Alembic Config pointing at the bundled migration scripts."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    return config


def _upgrade(connection: Connection, config: Config) -> None:
    config.attributes["connection"] = connection
    command.upgrade(config, "head")


async def upgrade_head(
    *, engine: AsyncEngine | None = None, database_uri: str | None = None
) -> None:
    """Upgrade the database schema to the latest revision."""

    config = _build_config()
    owned = engine is None
    resolved = engine or create_async_engine(database_uri or get_database_config().uri)
    try:
        async with resolved.begin() as connection:
            await connection.run_sync(_upgrade, config)
    finally:
        if owned:
            await resolved.dispose()
