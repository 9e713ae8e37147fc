"""Run outcome types for the load phase."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DatabaseLoadResult:
    """Outcome of loading one database into its table."""
    database: str
    documents: int = 0
    inserted: int = 0
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "database": self.database,
            "documents": self.documents,
            "inserted": self.inserted,
            "success": self.success,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class MigrationReport:
    """Summary of a whole migration run."""
    databases: list[DatabaseLoadResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return all(result.success for result in self.databases)

    @property
    def failed(self) -> list[DatabaseLoadResult]:
        return [result for result in self.databases if not result.success]

    @property
    def total_inserted(self) -> int:
        return sum(result.inserted for result in self.databases)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "databases": len(self.databases),
            "failed": [result.database for result in self.failed],
            "total_inserted": self.total_inserted,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": [result.to_dict() for result in self.databases],
        }
