"""Command line entry point: reposync DEST_BUCKET DEST_PREFIX [...]."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import Callable, Optional, Sequence, TextIO

from reposync.config import SyncSettings
from reposync.config.settings import DEFAULT_MAX_WORKERS
from reposync.errors import (
    ConsistencyMismatch,
    FetchError,
    InvalidArgumentError,
    ParseError,
    RepoSyncError,
)
from reposync.manager import RepoSyncManager
from reposync.models import ExecutionReport
from reposync.plan import SyncPlan
from reposync.util.log import LOGGER_NAME, setup_logger
from reposync.util.names import INDEX_NAME

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_YES_RE = re.compile(r"^[yY](es)*")
_NO_RE = re.compile(r"^[nN]o*")

ManagerFactory = Callable[[SyncSettings], RepoSyncManager]
InputFunc = Callable[[str], str]

_DESCRIPTION = """\
Sync package manifests and their artifacts from a source repository to a
destination repository, then regenerate the destination's packages.json.
"""

_EPILOG = """\
positional arguments, in order:
  DEST_BUCKET    destination S3 bucket name
  DEST_PREFIX    destination prefix, e.g. '' or 'dist-stable/'
  DEST_REGION    destination bucket region, e.g. 's3.us-west-1'; default: $S3_REGION or 's3'
  SOURCE_BUCKET  source S3 bucket name; default: $S3_BUCKET
  SOURCE_PREFIX  source prefix; default: $S3_PREFIX
  SOURCE_REGION  source bucket region; default: DEST_REGION

With four arguments, the last two are SOURCE_BUCKET and SOURCE_PREFIX.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reposync",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "locations",
        nargs="+",
        metavar="ARG",
        help="DEST_BUCKET DEST_PREFIX [DEST_REGION [SOURCE_BUCKET SOURCE_PREFIX [SOURCE_REGION]]]",
    )
    parser.add_argument(
        "--no-remove",
        dest="remove",
        action="store_false",
        help="do not remove destination packages that are not in the source",
    )
    parser.add_argument(
        "-y",
        "--yes",
        dest="assume_yes",
        action="store_true",
        help="answer 'yes' to every prompt (a stale source index then aborts)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f"parallel manifest downloads (default: {DEFAULT_MAX_WORKERS})",
    )
    parser.add_argument("--profile", default=None, help="AWS profile name")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    parser.add_argument("--log-file", default=None, help="also log to this file")
    return parser


def settings_from_args(args: argparse.Namespace) -> SyncSettings:
    """
    Map positional arguments onto locations.

    Raises:
        InvalidArgumentError: for a wrong argument count or missing defaults.
    """
    values = list(args.locations)
    if not 2 <= len(values) <= 6:
        raise InvalidArgumentError(f"expected 2 to 6 positional arguments, got {len(values)}")

    dest_bucket, dest_prefix = values[0], values[1]
    rest = values[2:]
    dest_region: Optional[str] = None
    if len(rest) in (1, 3, 4):
        dest_region = rest.pop(0)

    src_bucket = rest[0] if len(rest) > 0 else None
    src_prefix = rest[1] if len(rest) > 1 else None
    src_region = rest[2] if len(rest) > 2 else None

    return SyncSettings.from_args(
        dest_bucket,
        dest_prefix,
        dest_region,
        src_bucket,
        src_prefix,
        src_region,
        remove=args.remove,
        assume_yes=args.assume_yes,
        max_workers=args.workers,
        log_level=args.log_level,
        log_file=args.log_file,
    )


def confirm(
    question: str,
    *,
    default: bool,
    assume_yes: bool,
    input_func: InputFunc = input,
) -> bool:
    """Ask a yes/no question. No answer (or EOF) means default."""
    if assume_yes:
        return True
    try:
        answer = input_func(question).strip()
    except EOFError:
        return default
    if not answer:
        return default
    if default:
        return not _NO_RE.match(answer)
    return bool(_YES_RE.match(answer))


def format_plan(plan: SyncPlan) -> str:
    """Render the plan the way the operator reviews it."""
    src = plan.source_location.describe()
    dst = plan.destination_location.describe()

    def _items(names: Sequence[str]) -> str:
        if not names:
            return "  - (none)"
        return "\n".join(f"  - {name}" for name in names)

    ignored = [f"{op.package} ({op.reason})" for op in plan.ignores]

    if plan.removals_suppressed:
        remove_head = (
            f"The following packages will NOT be REMOVED\n from {dst}\n"
            " because '--no-remove' was given:"
        )
    else:
        remove_head = f"The following packages will be REMOVED\n from {dst}:"

    lines = [
        "",
        "WARNING: POTENTIALLY DESTRUCTIVE ACTION!",
        "",
        "The following packages will be IGNORED:",
        _items(ignored),
        "",
        f"The following packages will be ADDED\n from {src}\n   to {dst}:",
        _items(plan.adds),
        "",
        "The following packages will be UPDATED (source manifest is newer)\n"
        f" from {src}\n   to {dst}:",
        _items(plan.updates),
        "",
        remove_head,
        _items(plan.removes),
        "",
    ]
    if plan.warnings:
        lines += ["Warnings:", _items(list(plan.warnings)), ""]
    return "\n".join(lines)


def format_report(report: ExecutionReport) -> str:
    lines = []
    if report.index_url:
        lines.append(f"Public URL of the repository is: {report.index_url}")
    if report.removal_failures:
        lines.append("The following files could not be removed from the destination:")
        lines += [f"  - {key}: {error}" for key, error in sorted(report.removal_failures.items())]
    if report.status == "failed":
        lines.append(f"Sync FAILED: {report.error_message}")
    else:
        lines.append("Sync complete.")
    return "\n".join(lines) + "\n"


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    manager_factory: Optional[ManagerFactory] = None,
    input_func: InputFunc = input,
    out: Optional[TextIO] = None,
) -> int:
    out = out or sys.stderr
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
        setup_logger(LOGGER_NAME, level=settings.log_level, log_file=settings.log_file)
    except (InvalidArgumentError, ValueError) as exc:
        parser.print_usage(out)
        out.write(f"{parser.prog}: error: {exc}\n")
        return EXIT_USAGE

    if settings.regions_differ:
        logger.warning("CAUTION: Source and destination regions differ. Sync may run into rate limits.")

    try:
        if manager_factory is not None:
            manager = manager_factory(settings)
        else:
            manager = RepoSyncManager.from_settings(settings, profile_name=args.profile)
    except RepoSyncError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE

    try:
        source = manager.fetch_source()
        try:
            manager.check_source_consistency(source)
        except ConsistencyMismatch as exc:
            logger.warning("WARNING: %s!", exc)
            logger.warning(
                " You should regenerate %s, or ask the bucket maintainers to do so.", INDEX_NAME
            )
            # yes is the default, so piping 'yes' into this never proceeds
            if confirm(
                "Would you like to abort this operation? [Yn] ",
                default=True,
                assume_yes=settings.assume_yes,
                input_func=input_func,
            ):
                return EXIT_FAILURE
        destination = manager.fetch_destination()
    except (FetchError, ParseError) as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE

    try:
        plan = manager.build_plan(source, destination)
    except RepoSyncError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    if not settings.remove:
        plan = plan.without_removals()

    out.write(format_plan(plan) + "\n")

    if not plan.has_changes:
        out.write("Nothing to do. Aborting.\n")
        return EXIT_OK

    if not confirm(
        f"Are you sure you want to sync to destination & regenerate {INDEX_NAME}? [yN] ",
        default=False,
        assume_yes=settings.assume_yes,
        input_func=input_func,
    ):
        return EXIT_OK

    try:
        report = manager.apply_plan(plan)
    except RepoSyncError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE

    out.write(format_report(report))
    return EXIT_OK if report.status == "success" else EXIT_FAILURE


def run() -> None:
    sys.exit(main())
