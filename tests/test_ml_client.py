# tests/test_ml_client.py
import httpx
import pytest

from src.services.errors import MLServiceError
from src.services.ml_client import MLServiceClient


def _client(handler):
    return MLServiceClient("http://ml.test/", timeout=5, transport=httpx.MockTransport(handler))


class TestMLServiceClient:

    @pytest.mark.asyncio
    async def test_train_posts_json(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["method"] = request.method
            seen["body"] = request.content
            return httpx.Response(200, json={"training_metrics": {"accuracy": 0.9}})

        result = await _client(handler).train({"algorithm": "kmeans"})

        assert seen["url"] == "http://ml.test/ml/train"
        assert seen["method"] == "POST"
        assert b'"algorithm"' in seen["body"]
        assert result == {"training_metrics": {"accuracy": 0.9}}

    @pytest.mark.asyncio
    async def test_get_algorithms(self):
        def handler(request):
            assert request.url.path == "/ml/algorithms"
            return httpx.Response(200, json={"classification": ["svm_classifier"]})

        assert await _client(handler).get_algorithms() == {"classification": ["svm_classifier"]}

    @pytest.mark.asyncio
    async def test_remote_error_keeps_status_and_message(self):
        def handler(request):
            return httpx.Response(422, json={"error": "y_train is empty"})

        with pytest.raises(MLServiceError) as excinfo:
            await _client(handler).train({})

        assert excinfo.value.status_code == 422
        assert excinfo.value.message == "y_train is empty"

    @pytest.mark.asyncio
    async def test_detail_field_is_used(self):
        def handler(request):
            return httpx.Response(400, json={"detail": "Unknown algorithm"})

        with pytest.raises(MLServiceError, match="Unknown algorithm"):
            await _client(handler).tune({})

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self):
        def handler(request):
            return httpx.Response(503, text="service unavailable")

        with pytest.raises(MLServiceError) as excinfo:
            await _client(handler).evaluate({})

        assert excinfo.value.status_code == 503
        assert excinfo.value.message == "service unavailable"

    @pytest.mark.asyncio
    async def test_network_failure_is_a_500(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MLServiceError) as excinfo:
            await _client(handler).preprocess({})

        assert excinfo.value.status_code == 500
        assert "connection refused" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_non_json_success_returns_text(self):
        def handler(request):
            return httpx.Response(200, text="ok")

        assert await _client(handler).compare_models({}) == "ok"

    @pytest.mark.asyncio
    async def test_malformed_json_body_is_a_502(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops", headers={"content-type": "application/json"})

        with pytest.raises(MLServiceError) as excinfo:
            await _client(handler).train({"algorithm": "svm_classifier"})

        assert excinfo.value.status_code == 502
        assert excinfo.value.message == "Invalid JSON from ML service"
