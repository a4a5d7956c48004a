# tests/test_experiments.py
import httpx
import pytest

from src.services.errors import MLServiceError, NotFoundError, ValidationError
from src.services.experiments import ExperimentService
from src.services.ml_client import MLServiceClient


class TestExperimentService:

    @pytest.fixture
    def service(self, store, ml_client, config):
        return ExperimentService(store, ml_client, config)

    @pytest.fixture
    def experiment(self, service, make_dataset):
        dataset = make_dataset()
        return service.create(
            user="user-1",
            name="rf baseline",
            dataset_id=dataset["_id"],
            algorithm="random_forest_classifier",
            problem_type="classification",
            hyperparameters={"n_estimators": 50},
        )

    def test_create(self, experiment):
        assert experiment["status"] == "created"
        assert experiment["tuningApplied"] is False
        assert experiment["hyperparameters"] == {"n_estimators": 50}

    def test_create_requires_fields(self, service, make_dataset):
        dataset = make_dataset()
        with pytest.raises(ValidationError):
            service.create("user-1", None, dataset["_id"], "kmeans", "clustering")

    def test_create_requires_owned_dataset(self, service, make_dataset):
        dataset = make_dataset(user="someone-else")
        with pytest.raises(NotFoundError):
            service.create("user-1", "x", dataset["_id"], "kmeans", "clustering")

    def test_list_and_delete(self, service, experiment):
        assert [item["_id"] for item in service.list("user-1")] == [experiment["_id"]]
        service.delete("user-1", experiment["_id"])
        assert service.list("user-1") == []

    @pytest.mark.asyncio
    async def test_train_completes(self, service, ml_client, experiment):
        ml_client.responses["train"] = {
            "training_metrics": {"accuracy": 0.97},
            "test_metrics": {"accuracy": 0.91},
        }

        updated = await service.train("user-1", experiment["_id"])

        payload = ml_client.calls_to("train")[0]
        assert payload["X_train"][3] == [3.0, 6.0]
        assert payload["y_train"][3] == 1.0
        assert payload["hyperparameters"] == {"n_estimators": 50}
        assert updated["status"] == "completed"
        assert updated["trainingMetrics"] == {"accuracy": 0.97}
        assert updated["testMetrics"] == {"accuracy": 0.91}
        assert updated["trainingTime"] >= 0

    @pytest.mark.asyncio
    async def test_train_falls_back_to_metrics_map(self, service, ml_client, experiment):
        ml_client.responses["train"] = {"metrics": {"silhouette_score": 0.5}}

        updated = await service.train("user-1", experiment["_id"])

        assert updated["trainingMetrics"] == {"silhouette_score": 0.5}
        assert updated["testMetrics"] == {"silhouette_score": 0.5}

    @pytest.mark.asyncio
    async def test_train_failure_marks_experiment_failed(self, service, ml_client, experiment):
        ml_client.responses["train"] = MLServiceError("diverged", status_code=502)

        with pytest.raises(MLServiceError):
            await service.train("user-1", experiment["_id"])

        stored = service.get("user-1", experiment["_id"])
        assert stored["status"] == "failed"
        assert stored["errorMessage"] == "diverged"

    @pytest.mark.asyncio
    async def test_malformed_training_reply_marks_experiment_failed(self, store, config, experiment):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops", headers={"content-type": "application/json"})

        client = MLServiceClient("http://ml.test", transport=httpx.MockTransport(handler))
        service = ExperimentService(store, client, config)

        with pytest.raises(MLServiceError):
            await service.train("user-1", experiment["_id"])

        stored = service.get("user-1", experiment["_id"])
        assert stored["status"] == "failed"
        assert stored["errorMessage"] == "Invalid JSON from ML service"

    @pytest.mark.asyncio
    async def test_train_requires_target_column(self, service, ml_client, make_dataset):
        dataset = make_dataset(target_column="")
        experiment = service.create("user-1", "x", dataset["_id"], "kmeans", "clustering")

        with pytest.raises(ValidationError, match="Target column"):
            await service.train("user-1", experiment["_id"])

        assert ml_client.calls == []

    @pytest.mark.asyncio
    async def test_tune_defaults(self, service, ml_client, config, experiment):
        ml_client.responses["tune"] = {"best_params": {"n_estimators": 200}}

        result = await service.tune("user-1", experiment["_id"])

        payload = ml_client.calls_to("tune")[0]
        assert payload["param_grid"] == {"n_estimators": 50}
        assert payload["cv"] == config.training.TUNING_CV_FOLDS
        assert result["experiment"]["status"] == "completed"
        assert result["experiment"]["tuningApplied"] is True
        assert result["tuning_results"] == {"best_params": {"n_estimators": 200}}

    @pytest.mark.asyncio
    async def test_tune_with_explicit_grid(self, service, ml_client, experiment):
        await service.tune("user-1", experiment["_id"], param_grid={"max_depth": [3, 5]}, cv=3)

        payload = ml_client.calls_to("tune")[0]
        assert payload["param_grid"] == {"max_depth": [3, 5]}
        assert payload["cv"] == 3

    @pytest.mark.asyncio
    async def test_tune_failure_marks_experiment_failed(self, service, ml_client, experiment):
        ml_client.responses["tune"] = MLServiceError("bad grid", status_code=400)

        with pytest.raises(MLServiceError) as excinfo:
            await service.tune("user-1", experiment["_id"], param_grid={"max_depth": "deep"})

        assert excinfo.value.status_code == 400
        stored = service.get("user-1", experiment["_id"])
        assert stored["status"] == "failed"
        assert stored["errorMessage"] == "bad grid"
        assert stored["tuningApplied"] is False
