"""End-to-end pipeline tests against in-memory stores."""

import pytest

from couch2dynamo.core.errors import EnumerationError, ExtractionError, MigrationError
from couch2dynamo.services.couchdb.client import CouchDBFatalError
from couch2dynamo.services.migration.orchestrator import run_migration
from tests.conftest import FakeCouch, client_error, make_docs


@pytest.fixture
def couch():
    return FakeCouch(
        {
            "orders": make_docs(("1", {"x": 1}), ("2", {"x": 2})),
            "users.archive": make_docs(("u1", {"e.mail": "a@b.c"})),
            "_users": make_docs(("org.couchdb.user:bob", {"name": "bob"})),
            "_replicator": [],
        }
    )


class TestRunMigration:
    async def test_migrates_every_non_system_database(self, settings, couch, dynamo):
        report = await run_migration(settings, couch, dynamo)

        assert report.success
        assert set(dynamo.tables) == {"orders", "users.archive"}
        assert dynamo.tables["users.archive"] == {"u1": {"_id": "u1", "email": "a@b.c"}}
        assert [r.database for r in report.databases] == ["orders", "users.archive"]
        assert report.total_inserted == 3
        assert report.completed_at is not None

    async def test_system_databases_never_fetched(self, settings, couch, dynamo):
        await run_migration(settings, couch, dynamo)
        assert "_users" not in couch.fetched
        assert "_replicator" not in couch.fetched

    async def test_enumeration_failure_aborts(self, settings, dynamo):
        couch = FakeCouch({}, all_dbs={"not": "a list"})
        with pytest.raises(EnumerationError):
            await run_migration(settings, couch, dynamo)
        assert dynamo.calls == []

    async def test_extraction_failure_writes_nothing(self, settings, couch, dynamo):
        couch.failing["orders"] = CouchDBFatalError("HTTP 404", 404)
        with pytest.raises(ExtractionError):
            await run_migration(settings, couch, dynamo)
        assert dynamo.calls == []

    async def test_one_failed_database_does_not_stop_others(self, settings, couch, dynamo):
        dynamo.put_errors[("orders", "2")] = client_error("ValidationException", "PutItem")

        with pytest.raises(MigrationError, match="orders") as exc_info:
            await run_migration(settings, couch, dynamo)

        report = exc_info.value.report
        assert not report.success
        assert [r.database for r in report.failed] == ["orders"]
        failed = report.failed[0]
        assert (failed.documents, failed.inserted) == (2, 1)
        assert dynamo.tables["users.archive"] == {"u1": {"_id": "u1", "email": "a@b.c"}}

    async def test_report_to_dict(self, settings, couch, dynamo):
        report = await run_migration(settings, couch, dynamo)
        data = report.to_dict()
        assert data["success"] is True
        assert data["failed"] == []
        assert data["databases"] == 2
        assert data["results"][0]["database"] == "orders"
