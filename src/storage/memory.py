# src/storage/memory.py
import copy
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from src.storage.base import BaseStore


class MemoryStore(BaseStore):
    """Process-local store for development and tests. Nothing survives a restart."""

    name = "memory"

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.Lock()

    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        stored = copy.deepcopy(document)
        stored["_id"] = uuid.uuid4().hex
        stored["createdAt"] = now
        stored["updatedAt"] = now

        with self._lock:
            self._collections[collection][stored["_id"]] = stored
            return copy.deepcopy(stored)

    def find_one(self, collection: str, document_id: str, user: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._owned(collection, document_id, user)
            return copy.deepcopy(document) if document is not None else None

    def find(self, collection: str, user: str,
             exclude_fields: Iterable[str] = ()) -> List[Dict[str, Any]]:
        excluded = set(exclude_fields)
        with self._lock:
            # dicts keep insertion order, so reversing gives newest first
            documents = [
                doc for doc in reversed(list(self._collections[collection].values()))
                if doc.get("user") == user
            ]
            return [
                {key: copy.deepcopy(value) for key, value in doc.items() if key not in excluded}
                for doc in documents
            ]

    def update(self, collection: str, document_id: str, user: str,
               fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._owned(collection, document_id, user)
            if document is None:
                return None
            document.update(copy.deepcopy(self._updatable(fields)))
            document["updatedAt"] = datetime.now(timezone.utc)
            return copy.deepcopy(document)

    def delete(self, collection: str, document_id: str, user: str) -> bool:
        with self._lock:
            if self._owned(collection, document_id, user) is None:
                return False
            del self._collections[collection][document_id]
            return True

    def ping(self) -> bool:
        return True

    def _owned(self, collection: str, document_id: str, user: str) -> Optional[Dict[str, Any]]:
        document = self._collections[collection].get(document_id)
        if document is None or document.get("user") != user:
            return None
        return document
