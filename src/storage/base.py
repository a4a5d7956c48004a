# src/storage/base.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

DATASETS = "datasets"
EXPERIMENTS = "experiments"

# Fields the store owns; callers cannot overwrite them through update()
PROTECTED_FIELDS = ("_id", "user", "createdAt")


class BaseStore(ABC):
    """Document store used for datasets and experiments.

    Every read and write is scoped to the owning user, so a document that
    exists but belongs to someone else behaves exactly like a missing one.
    Documents go in and come out as plain dicts with a string ``_id`` and
    ``createdAt``/``updatedAt`` timestamps maintained by the store.
    """

    name = "base"

    @abstractmethod
    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new document and return it with its id and timestamps"""

    @abstractmethod
    def find_one(self, collection: str, document_id: str, user: str) -> Optional[Dict[str, Any]]:
        """Return a single document owned by user, or None"""

    @abstractmethod
    def find(self, collection: str, user: str,
             exclude_fields: Iterable[str] = ()) -> List[Dict[str, Any]]:
        """Return all documents owned by user, newest first"""

    @abstractmethod
    def update(self, collection: str, document_id: str, user: str,
               fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set fields on a document and return the updated document, or None"""

    @abstractmethod
    def delete(self, collection: str, document_id: str, user: str) -> bool:
        """Delete a document; returns False when nothing matched"""

    @abstractmethod
    def ping(self) -> bool:
        """Check that the backend is reachable"""

    def close(self):
        pass

    @staticmethod
    def _updatable(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in fields.items() if key not in PROTECTED_FIELDS}
