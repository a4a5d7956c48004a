# src/storage/factory.py
import logging

from src.config import Config
from src.storage.base import BaseStore
from src.storage.memory import MemoryStore
from src.storage.mongo import MongoStore

logger = logging.getLogger(__name__)


def create_store(config: Config) -> BaseStore:
    """Build the store selected by configuration. Called once at startup."""
    backend = config.database.BACKEND

    if backend == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        return MemoryStore()

    if backend == "mongo":
        logger.info(f"Using MongoDB storage (database: {config.database.DATABASE_NAME})")
        return MongoStore(
            uri=config.database.MONGODB_URI,
            database_name=config.database.DATABASE_NAME,
            server_selection_timeout_ms=config.database.SERVER_SELECTION_TIMEOUT_MS,
        )

    raise ValueError(f"Unknown storage backend: {backend}")
