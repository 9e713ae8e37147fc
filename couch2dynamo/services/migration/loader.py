"""
Per-database load: provision the table, then insert every document.

Insertions within one database run concurrently (bounded by a Semaphore).
A failed insertion fails the database; items already written stay written.
"""

import logging
from typing import Optional

from couch2dynamo.config import (
    DEFAULT_READ_CAPACITY,
    DEFAULT_WRITE_CAPACITY,
    DropErrorPolicy,
)
from couch2dynamo.core.errors import LoadError
from couch2dynamo.core.fanout import gather_all
from couch2dynamo.models.document import CouchDocument
from couch2dynamo.models.report import DatabaseLoadResult, utcnow
from couch2dynamo.services.dynamodb.client import DynamoDBClient
from couch2dynamo.services.dynamodb.provisioning import provision_table
from couch2dynamo.services.migration.sanitizer import sanitize_document

logger = logging.getLogger(__name__)


async def insert_document(
    client: DynamoDBClient, table_name: str, document: CouchDocument
) -> None:
    item = sanitize_document(document)
    logger.debug(f"Inserting into {table_name}: {item}")
    await client.put_item(table_name, item)


async def load_database(
    client: DynamoDBClient,
    db_name: str,
    documents: list[CouchDocument],
    *,
    max_concurrency: Optional[int] = None,
    drop_errors: DropErrorPolicy = DropErrorPolicy.IGNORE_ALL,
    read_capacity: int = DEFAULT_READ_CAPACITY,
    write_capacity: int = DEFAULT_WRITE_CAPACITY,
) -> DatabaseLoadResult:
    """
    Recreate table ``db_name`` and insert ``documents`` into it.

    Args:
        client: Async DynamoDB client.
        db_name: Source database name, used as the table name.
        documents: Documents to insert, one item each.
        max_concurrency: Limit on simultaneous put_item calls.
        drop_errors: Which drop failures to tolerate while provisioning.
        read_capacity: Provisioned read capacity for the new table.
        write_capacity: Provisioned write capacity for the new table.

    Returns:
        DatabaseLoadResult for the database.

    Raises:
        ProvisioningError: The table could not be recreated.
        LoadError: One or more insertions failed, raised after all of them
            have finished.
    """
    result = DatabaseLoadResult(database=db_name, documents=len(documents))
    result.started_at = utcnow()

    await provision_table(
        client,
        db_name,
        drop_errors=drop_errors,
        read_capacity=read_capacity,
        write_capacity=write_capacity,
    )

    outcome = await gather_all(
        ((doc.id, insert_document(client, db_name, doc)) for doc in documents),
        max_concurrency=max_concurrency,
        label=f"insert {db_name}",
    )
    result.inserted = len(outcome.results)
    result.completed_at = utcnow()

    if not outcome.ok:
        first_id, first_exc = outcome.first_failure()
        raise LoadError(
            f"Failed to insert {len(outcome.failures)} of {len(documents)} documents "
            f"into {db_name} (first: {first_id}: {first_exc})",
            table_name=db_name,
            failures=outcome.failures,
            inserted=result.inserted,
        )

    logger.info(f"Loaded {db_name}: {result.inserted}/{result.documents} documents")
    return result
