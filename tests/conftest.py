# tests/conftest.py
from typing import Any, Dict, List, Optional

import pytest

from src.config import Config
from src.storage.base import DATASETS
from src.storage.memory import MemoryStore


class FakeMLClient:
    """Stands in for MLServiceClient; records every call it receives"""

    def __init__(self):
        self.calls: List[tuple] = []
        self.responses: Dict[str, Any] = {}
        self.train_results: Dict[str, Any] = {}

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.calls if name == method]

    async def _respond(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((method, payload))
        outcome = self.responses.get(method, {})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get_algorithms(self):
        return await self._respond("get_algorithms")

    async def preprocess(self, payload):
        return await self._respond("preprocess", payload)

    async def evaluate(self, payload):
        return await self._respond("evaluate", payload)

    async def tune(self, payload):
        return await self._respond("tune", payload)

    async def compare_models(self, payload):
        return await self._respond("compare_models", payload)

    async def train(self, payload):
        algorithm = payload.get("algorithm")
        if algorithm not in self.train_results:
            return await self._respond("train", payload)

        self.calls.append(("train", payload))
        outcome = self.train_results[algorithm]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def config():
    config = Config()
    config.database.BACKEND = "memory"
    config.auth.JWT_SECRET = "test-secret"
    config.training.PARALLEL_REQUESTS = False
    config.mlflow.ENABLED = False
    config.log_to_file = False
    return config


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ml_client():
    return FakeMLClient()


@pytest.fixture
def make_dataset(store):
    """Insert a dataset document the way an upload would store it"""

    def _make(user: str = "user-1", rows: Optional[List[Dict[str, Any]]] = None,
              columns: Optional[List[str]] = None, target_column: str = "label",
              problem_type: str = "classification", name: str = "iris.csv") -> Dict[str, Any]:
        if rows is None:
            rows = [
                {"f1": str(i), "f2": str(i * 2), "label": str(i % 2)}
                for i in range(10)
            ]
        if columns is None:
            columns = list(rows[0].keys()) if rows else []

        return store.insert(DATASETS, {
            "user": user,
            "name": name,
            "description": "",
            "fileName": name,
            "fileSize": 0,
            "columns": [
                {"name": column, "type": "string", "uniqueValues": 0, "missingValues": 0}
                for column in columns
            ],
            "numberOfRows": len(rows),
            "numberOfColumns": len(columns),
            "targetColumn": target_column,
            "problemType": problem_type,
            "preprocessingApplied": False,
            "preprocessingSteps": [],
            "data": rows,
            "status": "ready",
        })

    return _make
