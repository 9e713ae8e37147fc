"""DynamoDB client - async wrapper around boto3.

Uses the low-level (thread-safe) client so blocking calls can be pushed to
worker threads while the event loop keeps fanning out.
"""

import asyncio
import logging
from decimal import Decimal
from functools import partial
from typing import Any, Optional

import boto3
from boto3.dynamodb.types import TypeSerializer
from botocore.config import Config
from botocore.exceptions import ClientError

from couch2dynamo.config import MigrationSettings

logger = logging.getLogger(__name__)

HASH_KEY = "_id"
NOT_FOUND_CODE = "ResourceNotFoundException"

WAITER_CONFIG = {"Delay": 1, "MaxAttempts": 60}

_serializer = TypeSerializer()


def is_not_found(exc: BaseException) -> bool:
    """True for a ClientError meaning "table does not exist"."""
    return (
        isinstance(exc, ClientError)
        and exc.response.get("Error", {}).get("Code") == NOT_FOUND_CODE
    )


def to_dynamo_value(value: Any) -> Any:
    """Convert a JSON value into something TypeSerializer accepts (floats → Decimal)."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamo_value(v) for v in value]
    return value


def serialize_item(item: dict[str, Any]) -> dict[str, dict]:
    """Render a plain item as DynamoDB attribute values."""
    return {key: _serializer.serialize(to_dynamo_value(value)) for key, value in item.items()}


class DynamoDBClient:
    """Thin async wrapper over a boto3 DynamoDB client."""

    def __init__(
        self,
        endpoint_url: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        max_pool_connections: int = 10,
    ):
        self.endpoint_url = endpoint_url
        session = boto3.session.Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )
        self.client = session.client(
            "dynamodb",
            endpoint_url=endpoint_url,
            config=Config(max_pool_connections=max_pool_connections),
        )
        logger.info(f"DynamoDBClient initialized for {endpoint_url} ({region})")

    @classmethod
    def from_settings(cls, settings: MigrationSettings) -> "DynamoDBClient":
        return cls(
            endpoint_url=settings.dynamo,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            max_pool_connections=max(10, settings.max_concurrency),
        )

    # ── helpers ──────────────────────────────────────────────────────

    async def _run(self, fn, *args, **kwargs):
        """Run a blocking boto3 call in a thread."""
        return await asyncio.to_thread(partial(fn, *args, **kwargs))

    # ── tables ───────────────────────────────────────────────────────

    async def delete_table(self, table_name: str) -> None:
        await self._run(self.client.delete_table, TableName=table_name)

    async def wait_until_deleted(self, table_name: str) -> None:
        waiter = self.client.get_waiter("table_not_exists")
        await self._run(waiter.wait, TableName=table_name, WaiterConfig=WAITER_CONFIG)

    async def create_table(
        self, table_name: str, read_capacity: int, write_capacity: int
    ) -> None:
        await self._run(
            self.client.create_table,
            TableName=table_name,
            KeySchema=[{"AttributeName": HASH_KEY, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": HASH_KEY, "AttributeType": "S"}],
            ProvisionedThroughput={
                "ReadCapacityUnits": read_capacity,
                "WriteCapacityUnits": write_capacity,
            },
        )

    async def wait_until_active(self, table_name: str) -> None:
        waiter = self.client.get_waiter("table_exists")
        await self._run(waiter.wait, TableName=table_name, WaiterConfig=WAITER_CONFIG)

    # ── items ────────────────────────────────────────────────────────

    async def put_item(self, table_name: str, item: dict[str, Any]) -> None:
        await self._run(self.client.put_item, TableName=table_name, Item=serialize_item(item))
