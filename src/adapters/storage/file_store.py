"""
JSON file store - Implements Store protocol on the local filesystem.

Each collection lives in its own document under ``data_dir``:
``users.json`` and ``pending-registrations.json``. Writes go to a
temporary file in the same directory and replace the document with
os.replace(), so readers never observe a half-written file.

The lock only serializes read-modify-write cycles inside this process;
separate processes sharing the directory still race (last write wins).
"""

import logging
import os
import tempfile
import threading
from pathlib import Path

from src.domain.exceptions import InfrastructureError
from src.domain.ports import Collection

from . import documents

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Implements Store protocol with one JSON document per collection.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, data_dir: str | Path) -> None:
        """
        Initialize store rooted at a data directory.

        Args:
            data_dir: Directory holding the collection documents (created on first write)
        """
        self._data_dir = Path(data_dir)
        self._lock = threading.RLock()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, collection: Collection) -> Path:
        return self._data_dir / f"{collection.value}.json"

    def ping(self) -> bool:
        for collection in Collection:
            self._read(collection)
        return True

    def list_records(self, collection: Collection) -> list[dict]:
        return documents.records(collection, self._read(collection))

    def get(self, collection: Collection, key: str) -> dict | None:
        return documents.find(collection, self._read(collection), key)

    def put(self, collection: Collection, key: str, record: dict) -> None:
        with self._lock:
            document = self._read(collection)
            documents.upsert(collection, document, key, record)
            self._write(collection, document)

    def delete(self, collection: Collection, key: str) -> None:
        with self._lock:
            document = self._read(collection)
            if documents.remove(collection, document, key):
                self._write(collection, document)

    def clear(self, collection: Collection) -> None:
        with self._lock:
            self._write(collection, documents.empty_document(collection))

    def _read(self, collection: Collection) -> list | dict:
        path = self.path_for(collection)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return documents.empty_document(collection)
        except OSError as e:
            logger.error("Error reading %s: %s", path, e)
            raise InfrastructureError(f"Failed to read {collection.value}") from e
        return documents.decode(collection, raw)

    def _write(self, collection: Collection, document: list | dict) -> None:
        path = self.path_for(collection)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{collection.value}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(documents.encode(document))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Error writing %s: %s", path, e)
            raise InfrastructureError(f"Failed to write {collection.value}") from e
