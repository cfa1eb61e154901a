"""
Minimal document store used for the catalog, orders and subscribers.

Two backends share one interface:
    - InMemoryCollection: documents live in a list (tests, throwaway runs)
    - JsonFileCollection: documents live in a JSON array on disk

Thread Safety:
    Flask handles requests on separate threads. Every collection owns a
    threading.Lock and holds it for the whole read-modify-write of an insert,
    so unique-field checks and id assignment cannot race.

Documents handed out are deep copies; mutating them never changes the store.
"""

from __future__ import annotations

import json
import threading
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from logging_config import get_logger


logger = get_logger(__name__)


class DocumentStoreError(Exception):
    """Reading or writing the underlying storage failed."""


class DuplicateKeyError(DocumentStoreError):
    """An insert would repeat the value of a unique field."""

    def __init__(self, collection: str, field: str, value: Any):
        super().__init__(f"Duplicate value for {collection}.{field}: {value!r}")
        self.collection = collection
        self.field = field
        self.value = value


class DocumentCollection(ABC):
    """
    A named collection of JSON-compatible documents.

    Subclasses only implement raw load/save; querying, id assignment and
    uniqueness live here so both backends behave identically.

    Args:
        name: Collection name (used in logs and errors)
        unique_fields: Fields whose values must not repeat across documents
    """

    def __init__(self, name: str, unique_fields: Sequence[str] = ()):
        self.name = name
        self.unique_fields = tuple(unique_fields)
        self._lock = threading.Lock()

    # --- Storage hooks --------------------------------------------------------

    @abstractmethod
    def _load(self) -> List[Dict[str, Any]]:
        """Return every stored document."""

    @abstractmethod
    def _save(self, documents: List[Dict[str, Any]]) -> None:
        """Replace the stored documents."""

    # --- Queries --------------------------------------------------------------

    def find_by_field(self, field: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
        """Return documents whose ``field`` equals any of ``values``."""
        wanted = list(values)
        with self._lock:
            documents = self._load()
        return [deepcopy(d) for d in documents if d.get(field) in wanted]

    def find_one(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Return the first document whose ``field`` equals ``value``, or None."""
        with self._lock:
            documents = self._load()
        for document in documents:
            if document.get(field) == value:
                return deepcopy(document)
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._load())

    # --- Writes ---------------------------------------------------------------

    def insert_one(self, document: Dict[str, Any]) -> str:
        """
        Append a document and return its generated ``_id``.

        Raises:
            DuplicateKeyError: If a unique field value already exists
            DocumentStoreError: If the storage cannot be read or written
        """
        stored = deepcopy(document)
        stored["_id"] = uuid.uuid4().hex

        with self._lock:
            documents = self._load()
            for field in self.unique_fields:
                value = stored.get(field)
                if any(d.get(field) == value for d in documents):
                    raise DuplicateKeyError(self.name, field, value)
            documents.append(stored)
            self._save(documents)

        logger.debug(f"Inserted document {stored['_id'][:8]} into {self.name}")
        return stored["_id"]

    def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[str]:
        """Insert documents one by one; used for seeding the catalog."""
        return [self.insert_one(d) for d in documents]


class InMemoryCollection(DocumentCollection):
    """Collection kept in a Python list for the lifetime of the process."""

    def __init__(self, name: str, unique_fields: Sequence[str] = ()):
        super().__init__(name, unique_fields)
        self._documents: List[Dict[str, Any]] = []

    def _load(self) -> List[Dict[str, Any]]:
        return list(self._documents)

    def _save(self, documents: List[Dict[str, Any]]) -> None:
        self._documents = documents


class JsonFileCollection(DocumentCollection):
    """
    Collection persisted as a JSON array in ``<data_dir>/<name>.json``.

    The file is re-read on every operation so edits made outside the
    process (e.g. a catalog update) are picked up without a restart.
    """

    def __init__(self, name: str, data_dir: Path, unique_fields: Sequence[str] = ()):
        super().__init__(name, unique_fields)
        self.file_path = Path(data_dir) / f"{name}.json"
        self._ensure_file()

    def _load(self) -> List[Dict[str, Any]]:
        try:
            data = json.loads(self.file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise DocumentStoreError(f"Cannot read {self.file_path}: {e}") from e
        if not isinstance(data, list):
            raise DocumentStoreError(f"{self.file_path} does not hold a JSON array")
        return data

    def _save(self, documents: List[Dict[str, Any]]) -> None:
        try:
            self.file_path.write_text(
                json.dumps(documents, indent=2) + "\n", encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as e:
            raise DocumentStoreError(f"Cannot write {self.file_path}: {e}") from e

    def _ensure_file(self) -> None:
        if not self.file_path.exists():
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self.file_path.write_text("[]", encoding="utf-8")
            logger.info(f"Created empty collection file {self.file_path}")
