"""Source-side document types."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Generic tagged value for untyped document bodies.
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]

DESIGN_DOC_PREFIX = "_design/"


class CouchDocument(BaseModel):
    """One live CouchDB document: its ``_id`` and current body."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    body: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_design_doc(self) -> bool:
        return self.id.startswith(DESIGN_DOC_PREFIX)

    @classmethod
    def from_row(cls, row: dict) -> Optional["CouchDocument"]:
        """Build from an ``_all_docs?include_docs=true`` row.

        Returns None for rows that carry no document body.
        """
        doc = row.get("doc")
        if not isinstance(doc, dict):
            return None
        return cls(id=row.get("id") or doc.get("_id"), body=doc)


# Database name → documents in source order. Built once per run.
SourceSnapshot = dict[str, list[CouchDocument]]
