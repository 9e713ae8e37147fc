"""Test configuration and fixtures."""
import asyncio
import os
from typing import Optional

import pytest
from botocore.exceptions import ClientError

from couch2dynamo.config import MigrationSettings
from couch2dynamo.models.document import CouchDocument

# ---------------------------------------------------------------------------
# Constants (shared with tests)
# ---------------------------------------------------------------------------
COUCH_URL = "http://localhost:5984/"
DYNAMO_URL = "http://localhost:8000/"


def make_docs(*pairs: tuple[str, dict]) -> list[CouchDocument]:
    return [CouchDocument(id=doc_id, body=body) for doc_id, body in pairs]


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


# ---------------------------------------------------------------------------
# In-memory store fakes
# ---------------------------------------------------------------------------


_UNSET = object()


class FakeCouch:
    """Stands in for CouchDBClient."""

    def __init__(
        self,
        databases: dict[str, list[CouchDocument]],
        all_dbs: object = _UNSET,
        failing: Optional[dict[str, Exception]] = None,
        delays: Optional[dict[str, float]] = None,
    ):
        self.databases = databases
        self._all_dbs = list(databases) if all_dbs is _UNSET else all_dbs
        self.failing = failing or {}
        self.delays = delays or {}
        self.fetched: list[str] = []

    async def all_dbs(self):
        if isinstance(self._all_dbs, Exception):
            raise self._all_dbs
        return self._all_dbs

    async def all_docs(self, db_name: str, skip_design_docs: bool = False):
        await asyncio.sleep(self.delays.get(db_name, 0))
        if db_name in self.failing:
            raise self.failing[db_name]
        self.fetched.append(db_name)
        docs = self.databases[db_name]
        if skip_design_docs:
            docs = [d for d in docs if not d.is_design_doc]
        return list(docs)


class FakeDynamo:
    """Stands in for DynamoDBClient. Records every call in order."""

    def __init__(self):
        self.tables: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.delete_errors: dict[str, Exception] = {}
        self.create_errors: dict[str, Exception] = {}
        self.put_errors: dict[tuple[str, str], Exception] = {}
        self.created_with: dict[str, tuple[int, int]] = {}

    async def delete_table(self, table_name: str) -> None:
        self.calls.append(("delete", table_name))
        if table_name in self.delete_errors:
            raise self.delete_errors[table_name]
        if table_name not in self.tables:
            raise client_error("ResourceNotFoundException", "DeleteTable")
        del self.tables[table_name]

    async def wait_until_deleted(self, table_name: str) -> None:
        self.calls.append(("wait_deleted", table_name))

    async def create_table(self, table_name: str, read_capacity: int, write_capacity: int) -> None:
        self.calls.append(("create", table_name))
        if table_name in self.create_errors:
            raise self.create_errors[table_name]
        if table_name in self.tables:
            raise client_error("ResourceInUseException", "CreateTable")
        self.tables[table_name] = {}
        self.created_with[table_name] = (read_capacity, write_capacity)

    async def wait_until_active(self, table_name: str) -> None:
        self.calls.append(("wait_active", table_name))

    async def put_item(self, table_name: str, item: dict) -> None:
        self.calls.append(("put", table_name))
        await asyncio.sleep(0)
        key = (table_name, item["_id"])
        if key in self.put_errors:
            raise self.put_errors[key]
        self.tables[table_name][item["_id"]] = item


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep COUCH2DYNAMO_* variables and any local .env out of the tests."""
    for key in list(os.environ):
        if key.startswith("COUCH2DYNAMO_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings():
    return MigrationSettings(couch=COUCH_URL, dynamo=DYNAMO_URL, max_concurrency=4)


@pytest.fixture
def dynamo():
    return FakeDynamo()
