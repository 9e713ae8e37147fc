"""Error taxonomy for a migration run.

Two families reach the command line:
  - ConfigurationError - bad or missing settings, raised before any I/O.
  - MigrationError     - anything that fails once the pipeline is running.

The CLI reports them differently (usage guide vs. failure summary).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from couch2dynamo.models.report import MigrationReport


class Couch2DynamoError(Exception):
    """Base class for all errors raised by couch2dynamo."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(Couch2DynamoError):
    """Missing or invalid configuration value."""


class MigrationError(Couch2DynamoError):
    """Runtime failure while migrating data."""

    def __init__(
        self,
        message: str,
        report: Optional["MigrationReport"] = None,
    ):
        super().__init__(message)
        self.report = report


class EnumerationError(MigrationError):
    """The source store did not return a usable database list."""


class ExtractionError(MigrationError):
    """One or more per-database fetches failed."""

    def __init__(self, message: str, failures: Optional[dict[str, BaseException]] = None):
        super().__init__(message)
        self.failures: dict[str, BaseException] = failures or {}


class ProvisioningError(MigrationError):
    """A destination table could not be (re)created."""

    def __init__(self, message: str, table_name: str, cause: Any = None):
        super().__init__(message)
        self.table_name = table_name
        self.cause = cause


class LoadError(MigrationError):
    """One or more item insertions into a table failed."""

    def __init__(
        self,
        message: str,
        table_name: str,
        failures: Optional[dict[str, BaseException]] = None,
        inserted: int = 0,
    ):
        super().__init__(message)
        self.table_name = table_name
        self.failures: dict[str, BaseException] = failures or {}
        self.inserted = inserted
