from couch2dynamo.models.document import CouchDocument, JSONValue, SourceSnapshot
from couch2dynamo.models.report import DatabaseLoadResult, MigrationReport

__all__ = [
    "CouchDocument",
    "JSONValue",
    "SourceSnapshot",
    "DatabaseLoadResult",
    "MigrationReport",
]
