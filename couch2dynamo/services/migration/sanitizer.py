"""Document sanitization for DynamoDB.

DynamoDB treats ``.`` as a document-path separator, so keys containing it
are rewritten. Empty-string values are stored as NULL.
"""

from typing import Any

from couch2dynamo.models.document import CouchDocument, JSONValue

RESERVED_KEY_CHAR = "."
KEY_REPLACEMENT = ""


def sanitize(
    value: JSONValue,
    reserved: str = RESERVED_KEY_CHAR,
    replacement: str = KEY_REPLACEMENT,
) -> JSONValue:
    """Return a sanitized copy of ``value``; the input is left untouched.

    - every mapping key, at any depth, has each ``reserved`` replaced by
      ``replacement``
    - every empty-string value, at any depth, becomes None
    """
    if isinstance(value, dict):
        return {
            str(key).replace(reserved, replacement): sanitize(item, reserved, replacement)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize(item, reserved, replacement) for item in value]
    if value == "":
        return None
    return value


def sanitize_document(
    document: CouchDocument,
    reserved: str = RESERVED_KEY_CHAR,
    replacement: str = KEY_REPLACEMENT,
) -> dict[str, Any]:
    """Item to store for ``document``: sanitized body keyed by the verbatim ``_id``."""
    item = sanitize(document.body, reserved, replacement)
    item["_id"] = document.id
    return item
