# src/services/ml_client.py
import logging
from typing import Any, Dict, Optional

import httpx

from src.services.errors import MLServiceError

logger = logging.getLogger(__name__)


class MLServiceClient:
    """Async HTTP client for the remote ML microservice"""

    def __init__(self, base_url: str, timeout: float = 600.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport

    async def get_algorithms(self) -> Any:
        return await self._request("GET", "/ml/algorithms")

    async def preprocess(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/ml/preprocess", json=payload)

    async def train(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/ml/train", json=payload)

    async def evaluate(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/ml/evaluate", json=payload)

    async def tune(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/ml/tune", json=payload)

    async def compare_models(self, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", "/ml/compare-models", json=payload)

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.request(method, url, json=json)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                message = self._error_message(e.response)
                logger.warning(f"ML service {method} {path} returned {e.response.status_code}: {message}")
                raise MLServiceError(message, status_code=e.response.status_code) from e
            except httpx.HTTPError as e:
                logger.error(f"ML service {method} {path} failed: {str(e) or type(e).__name__}")
                raise MLServiceError(
                    f"ML service request failed: {str(e) or type(e).__name__}"
                ) from e

        content_type = response.headers.get("content-type", "").lower()
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"ML service {method} {path} returned malformed JSON: {str(e)}")
                raise MLServiceError("Invalid JSON from ML service", status_code=502) from e
        return response.text

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pick the human-readable message out of an error response"""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            for key in ("error", "detail", "message"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
                if isinstance(value, dict) and value.get("message"):
                    return str(value["message"])

        text = response.text.strip()
        if text and body is None:
            return text

        return f"ML service error (status {response.status_code})"
