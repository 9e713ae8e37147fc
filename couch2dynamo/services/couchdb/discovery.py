"""Source database enumeration."""

import logging
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from couch2dynamo.core.errors import EnumerationError
from couch2dynamo.services.couchdb.client import (
    CouchDBClient,
    CouchDBError,
    CouchDBFatalError,
)

logger = logging.getLogger(__name__)

# CouchDB system databases, never migrated.
EXCLUDED_DATABASES = frozenset({"_replicator", "_users"})

_DB_NAMES = TypeAdapter(list[str])


def filter_databases(
    names: Iterable[str], excluded: Iterable[str] = EXCLUDED_DATABASES
) -> list[str]:
    """Drop excluded names (exact match), keeping source order."""
    skip = set(excluded)
    return [name for name in names if name not in skip]


async def list_databases(
    client: CouchDBClient, excluded: Iterable[str] = EXCLUDED_DATABASES
) -> list[str]:
    """
    List every migratable database on the CouchDB server.

    Raises:
        EnumerationError: The listing failed or was not a list of strings.
            Table names depend on the full listing, so this is fatal.
    """
    try:
        raw = await client.all_dbs()
    except (CouchDBError, CouchDBFatalError) as e:
        raise EnumerationError(f"Could not list CouchDB databases: {e}") from e

    try:
        names = _DB_NAMES.validate_python(raw)
    except ValidationError as e:
        raise EnumerationError(
            f"Malformed _all_dbs response (expected a list of strings): {str(raw)[:200]}"
        ) from e

    databases = filter_databases(names, excluded)
    logger.info(
        f"Found {len(names)} databases, {len(databases)} to migrate "
        f"({len(names) - len(databases)} system databases skipped)"
    )
    return databases
