from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from codewatch.app import SyncPropertyRequest, run_scheduled_sync, sync_property
from codewatch.config import ConfigurationError, configure_logging
from codewatch.domain.model import Authority, ScheduleType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync NYC building violations and permits")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Run a scheduled sync over the property registry")
    sync.add_argument(
        "--schedule",
        type=str,
        choices=[schedule.value for schedule in ScheduleType],
        default=ScheduleType.NIGHTLY.value,
        help="Which scheduled run to perform (default: %(default)s)",
    )

    single = subparsers.add_parser("sync-property", help="Sync a single registered property")
    single.add_argument(
        "--property-id",
        type=str,
        required=True,
        help="Registry id of the property to sync",
    )
    single.add_argument(
        "--authority",
        dest="authorities",
        action="append",
        choices=[authority.value for authority in Authority],
        help="Restrict the sync to an authority (repeatable; defaults to the property's list)",
    )
    single.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not send an SMS alert for new violations",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _build_request(args: argparse.Namespace) -> SyncPropertyRequest:
    authorities = (
        tuple(Authority(value) for value in args.authorities) if args.authorities else None
    )
    return SyncPropertyRequest(
        property_id=_parse_uuid(args.property_id),
        applicable_authorities=authorities,
        notify_on_new_critical=not args.no_notify,
    )


def _emit(payload: dict[str, object]) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


async def _run(args: argparse.Namespace) -> int:
    if args.command == "sync":
        summary = await run_scheduled_sync(ScheduleType(args.schedule))
        _emit(summary.as_dict())
        return 0
    if args.command == "sync-property":
        response = await sync_property(_build_request(args))
        _emit(response.to_dict())
        return 0 if response.success else 1
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "sync-property":
            _build_request(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = asyncio.run(_run(parsed_args))
    except (ConfigurationError, ValueError):
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
