from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cfpsync.app import (
    configure_conference,
    create_person,
    import_conference_hall,
    reset_conference_hall_import,
)
from cfpsync.config import ConfigurationError, SyncConfig, configure_logging
from cfpsync.domain.errors import ImportConfigMissingError
from cfpsync.domain.model import SessionType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise Conference Hall submissions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import", help="Import Conference Hall submissions into a conference"
    )
    import_parser.add_argument("conference_id", help="Local conference id")
    import_parser.add_argument(
        "--requester",
        type=str,
        default="",
        help="Email of the organizer running the import",
    )
    import_parser.add_argument(
        "--batch-limit",
        type=int,
        default=None,
        help="Maximum writes per committed chunk (defaults to config)",
    )

    reset = subparsers.add_parser("reset", help="Delete what importing a conference created")
    reset.add_argument("conference_id", help="Local conference id")

    conference = subparsers.add_parser("conference", help="Create or update a conference")
    conference.add_argument("conference_id", help="Local conference id")
    conference.add_argument("--name", type=str, required=True, help="Display name")
    conference.add_argument(
        "--conference-hall-name",
        type=str,
        required=True,
        help="Event name on Conference Hall",
    )
    conference.add_argument("--token", type=str, help="Conference Hall API key")
    conference.add_argument(
        "--language",
        action="append",
        default=[],
        help="Conference language, primary first (repeatable)",
    )
    conference.add_argument(
        "--session-type",
        type=_session_type_arg,
        action="append",
        default=[],
        metavar="ID=NAME[:DURATION]",
        help="Session type, duration in minutes (repeatable; replaces the existing types)",
    )
    conference.add_argument(
        "--format-mapping",
        type=_format_mapping_arg,
        action="append",
        default=None,
        metavar="ID=LABEL",
        help="Conference Hall format label of a session type (repeatable; replaces the mapping)",
    )

    person = subparsers.add_parser("person", help="Person management commands")
    person_sub = person.add_subparsers(dest="person_command", required=True)
    person_create = person_sub.add_parser("create", help="Create a person")
    person_create.add_argument("--email", type=str, required=True, help="Email address")
    person_create.add_argument("--first-name", type=str, default="", help="First name")
    person_create.add_argument("--last-name", type=str, default="", help="Last name")

    return parser.parse_args(list(argv))


def _session_type_arg(value: str) -> SessionType:
    type_id, separator, rest = value.partition("=")
    if not separator or not type_id.strip() or not rest.strip():
        raise argparse.ArgumentTypeError(f"expected ID=NAME[:DURATION], got {value!r}")
    name, colon, duration = rest.rpartition(":")
    if not colon or not duration.strip().isdigit():
        name, duration = rest, "0"
    return SessionType(id=type_id.strip(), name=name.strip(), duration=int(duration))


def _format_mapping_arg(value: str) -> tuple[str, str]:
    type_id, separator, label = value.partition("=")
    if not separator or not type_id.strip() or not label.strip():
        raise argparse.ArgumentTypeError(f"expected ID=LABEL, got {value!r}")
    return type_id.strip(), label.strip()


def _validate(args: argparse.Namespace) -> None:
    if getattr(args, "batch_limit", None) is not None:
        SyncConfig(batch_limit=args.batch_limit)


def _print_json(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            report = import_conference_hall(
                parsed_args.conference_id,
                requester_email=parsed_args.requester,
                batch_limit=parsed_args.batch_limit,
            )
            _print_json(report.as_dict())
        elif parsed_args.command == "reset":
            reset_report = reset_conference_hall_import(parsed_args.conference_id)
            _print_json(reset_report.as_dict())
        elif parsed_args.command == "conference":
            configure_conference(
                parsed_args.conference_id,
                name=parsed_args.name,
                conference_hall_name=parsed_args.conference_hall_name,
                token=parsed_args.token,
                languages=tuple(parsed_args.language),
                session_types=tuple(parsed_args.session_type),
                format_mapping=(
                    dict(parsed_args.format_mapping)
                    if parsed_args.format_mapping is not None
                    else None
                ),
            )
        elif parsed_args.command == "person" and parsed_args.person_command == "create":
            person = create_person(
                email=parsed_args.email,
                first_name=parsed_args.first_name,
                last_name=parsed_args.last_name,
            )
            log.info("Created person %s", person.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except (ConfigurationError, ImportConfigMissingError):
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


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
