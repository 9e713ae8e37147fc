"""
Migration pipeline orchestrator.

Pipeline: enumerate databases → extract full snapshot → load every database.

Enumeration and extraction are all-or-nothing: nothing is written to
DynamoDB unless the whole snapshot was read. The load phase runs every
database concurrently; each database's outcome lands in the report, and the
run fails if any of them failed.
"""

import logging

from couch2dynamo.config import MigrationSettings
from couch2dynamo.core.errors import LoadError, MigrationError
from couch2dynamo.core.fanout import gather_all
from couch2dynamo.models.document import SourceSnapshot
from couch2dynamo.models.report import DatabaseLoadResult, MigrationReport, utcnow
from couch2dynamo.services.couchdb.client import CouchDBClient
from couch2dynamo.services.couchdb.discovery import list_databases
from couch2dynamo.services.couchdb.extraction import extract_snapshot
from couch2dynamo.services.dynamodb.client import DynamoDBClient
from couch2dynamo.services.migration.loader import load_database

logger = logging.getLogger(__name__)


async def load_snapshot(
    settings: MigrationSettings,
    destination: DynamoDBClient,
    snapshot: SourceSnapshot,
) -> MigrationReport:
    """Load every database of ``snapshot`` concurrently and report each outcome."""
    report = MigrationReport()

    outcome = await gather_all(
        (
            (
                db_name,
                load_database(
                    destination,
                    db_name,
                    documents,
                    max_concurrency=settings.max_concurrency,
                    drop_errors=settings.drop_errors,
                    read_capacity=settings.read_capacity,
                    write_capacity=settings.write_capacity,
                ),
            )
            for db_name, documents in snapshot.items()
        ),
        label="load",
    )

    for db_name, documents in snapshot.items():
        if db_name in outcome.results:
            report.databases.append(outcome.results[db_name])
            continue
        exc = outcome.failures[db_name]
        report.databases.append(
            DatabaseLoadResult(
                database=db_name,
                documents=len(documents),
                inserted=exc.inserted if isinstance(exc, LoadError) else 0,
                error=str(exc),
            )
        )

    report.completed_at = utcnow()
    return report


async def run_migration(
    settings: MigrationSettings,
    source: CouchDBClient,
    destination: DynamoDBClient,
) -> MigrationReport:
    """
    Copy every CouchDB database into a freshly created DynamoDB table.

    Raises:
        EnumerationError: The database list could not be read.
        ExtractionError: Any database could not be fetched.
        MigrationError: One or more databases failed to load; ``report``
            holds the per-database outcomes.
    """
    started_at = utcnow()

    db_names = await list_databases(source)
    snapshot = await extract_snapshot(
        source,
        db_names,
        max_concurrency=settings.max_concurrency,
        skip_design_docs=settings.skip_design_docs,
    )

    report = await load_snapshot(settings, destination, snapshot)
    report.started_at = started_at

    if not report.success:
        failed = ", ".join(result.database for result in report.failed)
        raise MigrationError(
            f"Failed to load {len(report.failed)} of {len(report.databases)} databases: {failed}",
            report=report,
        )

    logger.info(
        f"Migrated {report.total_inserted} documents across {len(report.databases)} databases"
    )
    return report


async def migrate(settings: MigrationSettings) -> MigrationReport:
    """Open both store clients from ``settings`` and run the migration."""
    destination = DynamoDBClient.from_settings(settings)
    async with CouchDBClient(settings.couch, timeout=settings.request_timeout) as source:
        return await run_migration(settings, source, destination)
