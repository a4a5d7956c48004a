# src/storage/mongo.py
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from src.services.errors import StorageError
from src.storage.base import BaseStore

logger = logging.getLogger(__name__)


def _storage_errors(func):
    """Re-raise driver errors as StorageError"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"MongoDB {func.__name__} failed: {str(e)}")
            raise StorageError(f"Storage service error: {str(e)}") from e

    return wrapper


class MongoStore(BaseStore):
    """MongoDB-backed store. Document ids are exposed as ObjectId hex strings."""

    name = "mongo"

    def __init__(self, uri: str, database_name: str,
                 server_selection_timeout_ms: int = 10000,
                 client: Optional[MongoClient] = None):
        self._client = client or MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self._db = self._client[database_name]

    @_storage_errors
    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        stored = dict(document)
        stored.pop("_id", None)
        stored["createdAt"] = now
        stored["updatedAt"] = now

        result = self._db[collection].insert_one(stored)
        stored["_id"] = result.inserted_id
        return self._serialize(stored)

    @_storage_errors
    def find_one(self, collection: str, document_id: str, user: str) -> Optional[Dict[str, Any]]:
        object_id = self._object_id(document_id)
        if object_id is None:
            return None
        return self._serialize(self._db[collection].find_one({"_id": object_id, "user": user}))

    @_storage_errors
    def find(self, collection: str, user: str,
             exclude_fields: Iterable[str] = ()) -> List[Dict[str, Any]]:
        projection = {field: 0 for field in exclude_fields} or None
        cursor = self._db[collection].find({"user": user}, projection).sort("createdAt", DESCENDING)
        return [self._serialize(document) for document in cursor]

    @_storage_errors
    def update(self, collection: str, document_id: str, user: str,
               fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        object_id = self._object_id(document_id)
        if object_id is None:
            return None

        changes = self._updatable(fields)
        changes["updatedAt"] = datetime.now(timezone.utc)

        document = self._db[collection].find_one_and_update(
            {"_id": object_id, "user": user},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._serialize(document)

    @_storage_errors
    def delete(self, collection: str, document_id: str, user: str) -> bool:
        object_id = self._object_id(document_id)
        if object_id is None:
            return False
        result = self._db[collection].delete_one({"_id": object_id, "user": user})
        return result.deleted_count == 1

    @_storage_errors
    def ping(self) -> bool:
        self._client.admin.command("ping")
        return True

    def close(self):
        self._client.close()

    @staticmethod
    def _object_id(document_id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(document_id)
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if document is None:
            return None
        document = dict(document)
        if isinstance(document.get("_id"), ObjectId):
            document["_id"] = str(document["_id"])
        return document
