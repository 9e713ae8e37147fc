"""couch2dynamo command line entry point.

Exit codes: 0 on success, 1 when the migration fails, 2 on bad options.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from couch2dynamo import __version__
from couch2dynamo.config import DropErrorPolicy, MigrationSettings, load_settings
from couch2dynamo.core.errors import ConfigurationError, MigrationError
from couch2dynamo.models.report import MigrationReport
from couch2dynamo.services.migration.orchestrator import migrate

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MIGRATION_FAILED = 1
EXIT_BAD_OPTIONS = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="couch2dynamo",
        description="CouchDB |> DynamoDB\n\nMigrates data from CouchDB to DynamoDB.",
        epilog=(
            "Every option can also be set through COUCH2DYNAMO_<NAME> environment "
            "variables or a .env file (e.g. COUCH2DYNAMO_COUCH)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--couch", help="(required) Url to access the Couch database")
    parser.add_argument("-d", "--dynamo", help="(required) Url to access the Dynamo database")
    parser.add_argument("--region", dest="aws_region", help="AWS region for DynamoDB")
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Max simultaneous requests per fan-out",
    )
    parser.add_argument(
        "--drop-errors",
        choices=[policy.value for policy in DropErrorPolicy],
        help="Drop-table failures to ignore: 'all' (default) or only 'not-found'",
    )
    parser.add_argument(
        "--skip-design-docs",
        action="store_true",
        default=None,
        help="Do not copy _design/ documents",
    )
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def settings_from_args(args: argparse.Namespace) -> MigrationSettings:
    """Merge parsed flags over the environment. Raises ConfigurationError."""
    return load_settings(
        couch=args.couch,
        dynamo=args.dynamo,
        aws_region=args.aws_region,
        max_concurrency=args.max_concurrency,
        drop_errors=args.drop_errors,
        skip_design_docs=args.skip_design_docs,
        log_level=args.log_level,
    )


def _report_failure(error: MigrationError) -> None:
    logger.error(f"Migration failed: {error.message}")
    report: Optional[MigrationReport] = error.report
    if report is None:
        return
    for result in report.databases:
        if result.success:
            logger.info(f"  {result.database}: {result.inserted}/{result.documents} inserted")
        else:
            logger.error(
                f"  {result.database}: FAILED after {result.inserted}/{result.documents} "
                f"inserted: {result.error}"
            )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Settings may not validate yet, so start from the raw flag.
    level_name = (args.log_level or "INFO").upper()
    if not isinstance(logging.getLevelName(level_name), int):
        level_name = "INFO"
    logging.basicConfig(
        level=level_name,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        logger.error(e.message)
        parser.print_help(sys.stderr)
        return EXIT_BAD_OPTIONS

    logging.getLogger().setLevel(settings.log_level)

    try:
        report = asyncio.run(migrate(settings))
    except MigrationError as e:
        _report_failure(e)
        return EXIT_MIGRATION_FAILED
    except Exception:
        logger.exception("Migration failed with an unexpected error")
        return EXIT_MIGRATION_FAILED

    logger.debug(f"Report: {report.to_dict()}")
    logger.info("Migrated!")
    return EXIT_OK
