"""Logging setup for the command line and scheduled runs."""

from __future__ import annotations

import logging

# Libraries that log every request or statement at INFO/DEBUG.
CHATTY_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
    "hishel",
    "aiosqlite",
    "sqlalchemy.engine",
    "alembic.runtime.migration",
)


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for a sync run.

    Third-party request and SQL chatter is held at WARNING unless ``level`` is DEBUG,
    so a nightly run over many properties logs one line per property rather than
    one per HTTP call.
    """

    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        force=force,
    )
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
