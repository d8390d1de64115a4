"""
Collection documents - JSON shapes shared by the file and Redis stores.

Users are kept as a JSON array matched by ``id``; pending registrations
as a JSON object keyed by email. Both stores persist one document per
collection, so switching backends never changes the data format.
"""

import json

from src.domain.exceptions import InfrastructureError
from src.domain.ports import Collection


def empty_document(collection: Collection) -> list | dict:
    return [] if collection is Collection.USERS else {}


def decode(collection: Collection, raw: str | bytes | None) -> list | dict:
    """
    Parse a stored document, validating its shape.

    Raises:
        InfrastructureError: If the document is not valid JSON of the expected shape
    """
    if raw is None or (isinstance(raw, str | bytes) and not raw.strip()):
        return empty_document(collection)
    try:
        document = json.loads(raw)
    except ValueError as e:
        raise InfrastructureError(f"Corrupt {collection.value} document") from e

    expected = list if collection is Collection.USERS else dict
    if not isinstance(document, expected):
        raise InfrastructureError(
            f"Unexpected {collection.value} document type: {type(document).__name__}"
        )
    return document


def encode(document: list | dict) -> str:
    return json.dumps(document, indent=2)


def records(collection: Collection, document: list | dict) -> list[dict]:
    if collection is Collection.USERS:
        return list(document)
    return list(document.values())


def find(collection: Collection, document: list | dict, key: str) -> dict | None:
    if collection is Collection.USERS:
        return next((r for r in document if r.get("id") == key), None)
    return document.get(key)


def upsert(collection: Collection, document: list | dict, key: str, record: dict) -> None:
    """Insert or replace the record stored under key, in place."""
    if collection is Collection.USERS:
        for index, existing in enumerate(document):
            if existing.get("id") == key:
                document[index] = record
                return
        document.append(record)
    else:
        document[key] = record


def remove(collection: Collection, document: list | dict, key: str) -> bool:
    """Remove the record stored under key, in place. Returns whether one was removed."""
    if collection is Collection.USERS:
        kept = [r for r in document if r.get("id") != key]
        removed = len(kept) != len(document)
        document[:] = kept
        return removed
    return document.pop(key, None) is not None
