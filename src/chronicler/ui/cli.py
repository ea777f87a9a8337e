from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from chronicler.app import Services, build_services, check_life_periods, upgrade_database
from chronicler.config import ConfigurationError, configure_logging, get_log_level
from chronicler.domain.errors import ChroniclerError
from chronicler.domain.model import Actor, ReviewAction, UserRole

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_review_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--action",
        type=ReviewAction,
        choices=list(ReviewAction),
        required=True,
        help="Review outcome",
    )
    parser.add_argument(
        "--reviewer-id",
        type=int,
        required=True,
        help="User id recorded as the reviewer",
    )
    parser.add_argument(
        "--role",
        type=UserRole,
        choices=[UserRole.MODERATOR, UserRole.ADMIN],
        default=UserRole.MODERATOR,
        help="Role the reviewer acts under (default: moderator)",
    )
    parser.add_argument("--comment", type=str, help="Optional review comment")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Operate the Chronicler content store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    db = subparsers.add_parser("db", help="Database maintenance")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    db_sub.add_parser("upgrade", help="Run schema migrations up to head")

    subparsers.add_parser("queue", help="List persons and edits waiting for review")

    review_person = subparsers.add_parser("review-person", help="Approve or reject a person")
    review_person.add_argument("person_id", type=str, help="Person identifier (slug)")
    _add_review_arguments(review_person)

    review_edit = subparsers.add_parser("review-edit", help="Approve or reject a proposed edit")
    review_edit.add_argument("edit_id", type=_parse_uuid, help="Edit identifier (UUID)")
    _add_review_arguments(review_edit)

    check = subparsers.add_parser(
        "check-periods", help="Validate a person's stored life periods against its lifespan"
    )
    check.add_argument("person_id", type=str, help="Person identifier (slug)")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid UUID: {value}") from exc


def _reviewer(args: argparse.Namespace) -> Actor:
    return Actor(id=args.reviewer_id, role=args.role)


def _write(line: str) -> None:
    sys.stdout.write(f"{line}\n")


def _print_queue(services: Services) -> None:
    persons = services.content.moderation_queue()
    edits = services.edits.pending_edits()
    _write(f"Pending persons: {len(persons)}")
    for person in persons:
        submitted = person.submitted_at.isoformat() if person.submitted_at else "-"
        _write(f"  {person.id}\t{person.name}\tby {person.created_by}\tsubmitted {submitted}")
    _write(f"Pending edits: {len(edits)}")
    for edit in edits:
        fields = ", ".join(edit.payload.supplied())
        _write(f"  {edit.id}\t{edit.person_id}\tby {edit.proposer_user_id}\t[{fields}]")


def _run(args: argparse.Namespace, services_factory: Callable[[], Services]) -> None:
    if args.command == "db":
        uri = upgrade_database()
        _write(f"Database at {uri} is up to date")
        return

    services = services_factory()
    if args.command == "queue":
        _print_queue(services)
    elif args.command == "review-person":
        person = services.content.review(
            args.person_id, args.action, _reviewer(args), comment=args.comment
        )
        _write(f"{person.id}: {person.status}")
    elif args.command == "review-edit":
        edit = services.edits.review_edit(
            args.edit_id, args.action, _reviewer(args), comment=args.comment
        )
        _write(f"{edit.id}: {edit.status}")
    elif args.command == "check-periods":
        intervals = check_life_periods(args.person_id, services=services)
        for interval in intervals:
            _write(f"  country {interval.country_id}: {interval.start_year}-{interval.end_year}")
        _write(f"{args.person_id}: life periods OK")
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    services_factory: Callable[[], Services] = build_services,
) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging(level=get_log_level())
    except ConfigurationError:
        configure_logging()
        log.exception("Invalid logging configuration")
        sys.exit(EXIT_USAGE)

    parsed_args = _parse_args(args_list)

    try:
        _run(parsed_args, services_factory)
    except ChroniclerError as exc:
        log.error("%s: %s", exc.code, exc.message)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FAILURE)
    sys.exit(EXIT_OK)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
