# src/services/tracking.py
import logging
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import mlflow

logger = logging.getLogger(__name__)


def _numeric_metrics(result: Mapping[str, Any]) -> Iterator[Tuple[str, float]]:
    for section, prefix in (('test_metrics', 'test'), ('training_metrics', 'train')):
        metrics = result.get(section)
        if not isinstance(metrics, Mapping):
            continue
        for name, value in metrics.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                yield f"{prefix}_{name}", float(value)


class ExperimentTracker:
    """Mirrors multi-algorithm training runs to MLflow"""

    def __init__(self, tracking_uri: str, experiment_name: str):
        self.tracking_uri = tracking_uri
        self.experiment_name = experiment_name

    def log_training_runs(self, experiment_id: str, problem_type: str, test_size: float,
                          results: Dict[str, Dict[str, Any]],
                          hyperparameters: Dict[str, Dict[str, Any]],
                          best_model: Optional[Dict[str, Any]]) -> None:
        """One MLflow run per successful algorithm. Tracking errors never reach the caller."""
        best_algorithm = best_model['algorithm'] if best_model else None

        try:
            mlflow.set_tracking_uri(self.tracking_uri)
            mlflow.set_experiment(self.experiment_name)

            for algorithm, result in results.items():
                if result.get('error'):
                    continue

                with mlflow.start_run(run_name=f"{algorithm}_{experiment_id}"):
                    mlflow.log_param('algorithm', algorithm)
                    mlflow.log_param('problem_type', problem_type)
                    mlflow.log_param('test_size', test_size)
                    for name, value in hyperparameters.get(algorithm, {}).items():
                        mlflow.log_param(f"hp_{name}", value)

                    for name, value in _numeric_metrics(result):
                        mlflow.log_metric(name, value)

                    mlflow.set_tag('experiment_id', experiment_id)
                    mlflow.set_tag('is_best', str(algorithm == best_algorithm).lower())

            logger.info(f"Logged experiment {experiment_id} to MLflow ({self.experiment_name})")

        except Exception as e:
            logger.warning(f"MLflow tracking failed for experiment {experiment_id}: {str(e)}")
