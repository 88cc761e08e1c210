from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from courtdesk.app import reconcile_files, review_case
from courtdesk.config import configure_logging, get_review_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from courtdesk.domain.model import ReviewField
    from courtdesk.domain.reconciliation import ReconciliationResult
    from courtdesk.domain.workflow import ReviewSession

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Review OCR-extracted ticket data")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Reconcile local OCR JSON payload files offline",
    )
    reconcile.add_argument(
        "files",
        nargs="+",
        type=str,
        help="OCR payload files, in ingestion order",
    )

    review = subparsers.add_parser("review", help="Load a case from the backend and review it")
    review.add_argument("case_id", type=str, help="Identifier of the case to review")
    review.add_argument(
        "--manual-processing",
        action="store_true",
        default=None,
        help="Offer manual processing when the case has no extracted documents",
    )

    return parser.parse_args(list(argv))


def _validate_files(files: Sequence[str]) -> list[Path]:
    paths = [Path(name) for name in files]
    missing = [str(path) for path in paths if not path.is_file()]
    if missing:
        raise ValueError(f"File(s) not found: {', '.join(missing)}")
    return paths


def _log_fields(fields: Sequence[ReviewField]) -> None:
    for review_field in fields:
        log.info(
            "%s = %r (extracted %r, accurate=%s)",
            review_field.label,
            review_field.current_value,
            review_field.extracted_value,
            review_field.is_accurate,
        )


def _report_reconciliation(result: ReconciliationResult) -> None:
    log.info("Reconciliation %s: %d fields", result.status, len(result.fields))
    _log_fields(result.fields)
    for warning in result.warnings:
        log.warning(warning.message)
    if result.message:
        log.warning(result.message)


def _report_session(session: ReviewSession) -> None:
    log.info("Case %s is in state %s", session.case_id, session.state)
    if session.error_message:
        log.error(session.error_message)
    for feed, message in session.feed_messages.items():
        log.warning("Feed %s unavailable: %s", feed, message)
    for notice in session.notices:
        log.warning(notice)
    _log_fields(session.fields.fields)
    court = session.resolver.state.preselected
    if court is not None:
        log.info("Preselected court: %s (%s)", court.name, court.id)
    elif session.resolver.state.message:
        log.warning(session.resolver.state.message)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    paths: list[Path] = []
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "reconcile":
            paths = _validate_files(parsed_args.files)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reconcile":
            _report_reconciliation(reconcile_files(paths))
        elif parsed_args.command == "review":
            config = get_review_config(enable_manual_processing=parsed_args.manual_processing)
            _report_session(review_case(parsed_args.case_id, config=config))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during review")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
