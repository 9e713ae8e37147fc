"""
Concurrent snapshot extraction.

One _all_docs request per database, all started at once. The snapshot is
all-or-nothing: if any database fails, no snapshot is returned.
"""

import logging
from typing import Optional

from couch2dynamo.core.errors import ExtractionError
from couch2dynamo.core.fanout import gather_all
from couch2dynamo.models.document import SourceSnapshot
from couch2dynamo.services.couchdb.client import CouchDBClient

logger = logging.getLogger(__name__)


async def extract_snapshot(
    client: CouchDBClient,
    db_names: list[str],
    max_concurrency: Optional[int] = None,
    skip_design_docs: bool = False,
) -> SourceSnapshot:
    """
    Fetch every document of every database.

    Args:
        client: Async CouchDB client.
        db_names: Databases to fetch, as returned by list_databases().
        max_concurrency: Limit on simultaneous _all_docs requests.
        skip_design_docs: Leave out ``_design/`` documents.

    Returns:
        dict of {db_name: [CouchDocument, ...]} in the order of ``db_names``.

    Raises:
        ExtractionError: At least one database could not be fetched. Raised
            only after every other fetch has finished.
    """
    logger.info(f"Extracting {len(db_names)} databases...")

    outcome = await gather_all(
        ((name, client.all_docs(name, skip_design_docs=skip_design_docs)) for name in db_names),
        max_concurrency=max_concurrency,
        label="fetch",
    )

    if not outcome.ok:
        failed = ", ".join(outcome.failures)
        raise ExtractionError(
            f"Failed to extract {len(outcome.failures)} of {len(db_names)} databases: {failed}",
            failures=outcome.failures,
        )

    snapshot: SourceSnapshot = {name: outcome.results[name] for name in db_names}
    total = sum(len(docs) for docs in snapshot.values())
    logger.info(f"Extracted {total} documents from {len(snapshot)} databases")
    return snapshot
