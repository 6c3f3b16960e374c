"""
pdf-batch CLI - thin entrypoint over a BatchSession.

Commands:
- check: validate local PDFs as one batch and print the intake report
- submit: validate local PDFs and submit them as one job
- serve: run the HTTP service

Exit Codes:
===========
- 0: Success
- 1: Rejection or validation error (some files rejected, empty batch,
     blank job name)
- 2: Submission failed (job API error)
- 4: System error (file not found, unreadable, bad configuration)
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from pydantic import ValidationError

from ..batch.errors import CompositionInvalid
from ..batch.models import FileCandidate, IntakeResult
from ..batch.notifications import RecordingNotifier
from ..batch.remote import RemoteJobCreator
from ..batch.session import BatchSession
from ..batch.settings import BatchSettings
from .errors import CLIError, InputFileError

logger = logging.getLogger(__name__)


def load_candidates(paths: Sequence[str]) -> List[FileCandidate]:
    """
    Read local files into candidates, in command-line order.

    Raises:
        InputFileError: If a path does not exist or is not a file
    """
    candidates = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise InputFileError(raw, "file not found")
        if not path.is_file():
            raise InputFileError(raw, "not a file")
        try:
            candidates.append(FileCandidate.from_path(path))
        except OSError as e:
            raise InputFileError(raw, str(e))
    return candidates


def _build_session(args: argparse.Namespace, notifier: RecordingNotifier) -> BatchSession:
    try:
        settings = BatchSettings.from_env()
        if args.max_files is not None:
            settings = BatchSettings(max_files=args.max_files)
    except (ValueError, ValidationError) as e:
        raise CLIError(f"Invalid configuration: {e}")

    creator = RemoteJobCreator.from_env()
    if getattr(args, "api_url", None):
        creator.url = args.api_url
    return BatchSession(job_creator=creator, settings=settings, notifier=notifier)


def _print_intake(result: IntakeResult, session: BatchSession) -> None:
    for entry in result.appended:
        print(f"✓ {entry.name}  {entry.size_bytes} bytes  ~{entry.estimated_pages} page(s)")
    for rejection in result.rejections:
        print(f"✗ {rejection.message}", file=sys.stderr)
    totals = session.totals()
    print(f"  Files: {totals.count}")
    print(f"  Size: {totals.human_size}")
    print(f"  Estimated pages: {totals.estimated_pages}")


def cmd_check(args: argparse.Namespace) -> int:
    """
    Validate files as one batch without submitting.

    Exit codes:
        0: Every file accepted
        1: At least one file rejected
    """
    notifier = RecordingNotifier()
    session = _build_session(args, notifier)
    result = session.intake(load_candidates(args.files))
    _print_intake(result, session)
    return 1 if result.rejections else 0


def cmd_submit(args: argparse.Namespace) -> int:
    """
    Validate files and submit the accepted ones as one job.

    Rejected files are reported and left out; the job is submitted with
    whatever was accepted unless --strict is given.

    Exit codes:
        0: Job created
        1: Rejections under --strict, or nothing to submit / blank name
        2: Job API failure
    """
    notifier = RecordingNotifier()
    session = _build_session(args, notifier)
    result = session.intake(load_candidates(args.files))
    _print_intake(result, session)

    if result.rejections and args.strict:
        print("✗ Not submitted: some files were rejected (--strict)", file=sys.stderr)
        return 1

    try:
        session.update_options(
            name=args.name,
            description=args.description or "",
            priority=args.priority,
            merge_output=args.merge is not None,
            merge_format=args.merge or "txt",
        )
    except ValidationError as e:
        print(f"✗ Invalid job options: {e}", file=sys.stderr)
        return 1

    try:
        outcome = asyncio.run(session.submit())
    except CompositionInvalid as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if not outcome.success:
        print(f"✗ {outcome.message}", file=sys.stderr)
        return 2

    print(json.dumps({"job": outcome.result, "request": outcome.request.to_payload()}, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP service until interrupted."""
    import uvicorn

    uvicorn.run("app.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-batch",
        description="Batch PDF intake and job submission",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to execute")

    parser_check = subparsers.add_parser("check", help="Validate PDFs as one batch")
    parser_check.add_argument("files", nargs="+", help="PDF files, in batch order")
    parser_check.add_argument("--max-files", type=int, default=None, help="Batch quota")
    parser_check.set_defaults(func=cmd_check)

    parser_submit = subparsers.add_parser("submit", help="Submit PDFs as one job")
    parser_submit.add_argument("files", nargs="+", help="PDF files, in batch order")
    parser_submit.add_argument("--name", required=True, help="Job name")
    parser_submit.add_argument("--description", default=None, help="Job description")
    parser_submit.add_argument("--priority", type=int, default=5, help="Priority 1-10 (default: 5)")
    parser_submit.add_argument(
        "--merge", choices=["txt", "md", "docx"], default=None,
        help="Merge all outputs into one file of this format",
    )
    parser_submit.add_argument("--strict", action="store_true", help="Do not submit if any file is rejected")
    parser_submit.add_argument("--max-files", type=int, default=None, help="Batch quota")
    parser_submit.add_argument("--api-url", default=None, help="Create-job endpoint (default: $BATCH_API_URL)")
    parser_submit.set_defaults(func=cmd_submit)

    parser_serve = subparsers.add_parser("serve", help="Run the HTTP service")
    parser_serve.add_argument("--host", default="127.0.0.1")
    parser_serve.add_argument("--port", type=int, default=8085)
    parser_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments and dispatches to subcommands.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        sys.exit(args.func(args))
    except CLIError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(e.exit_code)
