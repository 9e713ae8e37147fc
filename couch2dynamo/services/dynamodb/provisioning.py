"""
Destination table provisioning: drop, then create fresh.

Drop failures are tolerated according to DropErrorPolicy. "Table not found"
is always tolerated. Create failures always propagate.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from couch2dynamo.config import (
    DEFAULT_READ_CAPACITY,
    DEFAULT_WRITE_CAPACITY,
    DropErrorPolicy,
)
from couch2dynamo.core.errors import ProvisioningError
from couch2dynamo.services.dynamodb.client import DynamoDBClient, is_not_found

logger = logging.getLogger(__name__)


async def drop_table(
    client: DynamoDBClient,
    table_name: str,
    drop_errors: DropErrorPolicy = DropErrorPolicy.IGNORE_ALL,
) -> bool:
    """
    Drop ``table_name`` and wait until it is gone.

    Returns:
        True if a table was dropped, False if the failure was tolerated.

    Raises:
        ProvisioningError: Drop failed for a reason other than "not found"
            and the policy is IGNORE_NOT_FOUND.
    """
    try:
        await client.delete_table(table_name)
    except Exception as e:
        if is_not_found(e):
            logger.debug(f"Table {table_name} did not exist")
            return False
        if drop_errors == DropErrorPolicy.IGNORE_ALL:
            # Also hides connectivity and permission failures; create surfaces those.
            logger.warning(f"Ignoring drop failure for table {table_name}: {e}")
            return False
        raise ProvisioningError(
            f"Failed to drop table {table_name}: {e}", table_name, cause=e
        ) from e

    try:
        await client.wait_until_deleted(table_name)
    except (ClientError, BotoCoreError) as e:
        raise ProvisioningError(
            f"Table {table_name} was not deleted in time: {e}", table_name, cause=e
        ) from e

    logger.info(f"Dropped table {table_name}")
    return True


async def provision_table(
    client: DynamoDBClient,
    table_name: str,
    drop_errors: DropErrorPolicy = DropErrorPolicy.IGNORE_ALL,
    read_capacity: int = DEFAULT_READ_CAPACITY,
    write_capacity: int = DEFAULT_WRITE_CAPACITY,
) -> None:
    """
    (Re)create ``table_name`` empty, hash-keyed on ``_id`` (string).

    Raises:
        ProvisioningError: Create failed, or drop failed under IGNORE_NOT_FOUND.
    """
    await drop_table(client, table_name, drop_errors)

    try:
        await client.create_table(table_name, read_capacity, write_capacity)
        await client.wait_until_active(table_name)
    except (ClientError, BotoCoreError) as e:
        raise ProvisioningError(
            f"Failed to create table {table_name}: {e}", table_name, cause=e
        ) from e

    logger.info(f"Created table {table_name}")
