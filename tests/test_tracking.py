# tests/test_tracking.py
from unittest import mock

import pytest

from src.services.tracking import ExperimentTracker


class TestExperimentTracker:

    @pytest.fixture
    def results(self):
        return {
            "a": {"test_metrics": {"accuracy": 0.9, "label": "n/a"}, "training_metrics": {"accuracy": 0.95}},
            "b": {"error": "failed", "training_metrics": None},
        }

    def test_logs_successful_runs_only(self, results):
        tracker = ExperimentTracker("sqlite:///unused.db", "exp")
        with mock.patch("src.services.tracking.mlflow") as mlflow:
            tracker.log_training_runs(
                "e1", "classification", 0.2, results,
                {"a": {"n_estimators": 100}}, {"algorithm": "a"},
            )

        mlflow.set_experiment.assert_called_once_with("exp")
        mlflow.start_run.assert_called_once_with(run_name="a_e1")
        mlflow.log_param.assert_any_call("hp_n_estimators", 100)
        mlflow.log_metric.assert_any_call("test_accuracy", 0.9)
        mlflow.log_metric.assert_any_call("train_accuracy", 0.95)
        assert mlflow.log_metric.call_count == 2
        mlflow.set_tag.assert_any_call("is_best", "true")

    def test_tracking_errors_are_swallowed(self, results):
        tracker = ExperimentTracker("sqlite:///unused.db", "exp")
        with mock.patch("src.services.tracking.mlflow") as mlflow:
            mlflow.set_experiment.side_effect = RuntimeError("tracking server down")
            tracker.log_training_runs("e1", "classification", 0.2, results, {}, None)
