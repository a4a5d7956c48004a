# src/services/experiments.py
import logging
import time
from typing import Any, Dict, List, Optional

from src.config import Config
from src.services.datasets import prepare_training_arrays, validate_problem_type
from src.services.errors import MLServiceError, NotFoundError, ValidationError
from src.services.ml_client import MLServiceClient
from src.storage.base import DATASETS, EXPERIMENTS, BaseStore
from src.utils.logging_config import log_async_execution_time

logger = logging.getLogger(__name__)


class ExperimentService:
    """Single-algorithm experiment lifecycle: created -> training -> completed | failed"""

    def __init__(self, store: BaseStore, ml_client: MLServiceClient, config: Config):
        self.store = store
        self.ml_client = ml_client
        self.config = config

    def create(self, user: str, name: Optional[str], dataset_id: Optional[str],
               algorithm: Optional[str], problem_type: Optional[str],
               hyperparameters: Optional[Dict[str, Any]] = None,
               description: Optional[str] = None) -> Dict[str, Any]:
        if not name or not dataset_id or not algorithm:
            raise ValidationError("Name, dataset ID and algorithm are required")

        validate_problem_type(problem_type)

        if self.store.find_one(DATASETS, dataset_id, user) is None:
            raise NotFoundError("Dataset not found")

        experiment = self.store.insert(EXPERIMENTS, {
            'user': user,
            'name': name,
            'description': description or '',
            'dataset': dataset_id,
            'algorithm': algorithm,
            'problemType': problem_type,
            'hyperparameters': hyperparameters or {},
            'tuningApplied': False,
            'status': 'created',
        })

        logger.info(f"Experiment {experiment['_id']} created ({algorithm})")
        return experiment

    def list(self, user: str) -> List[Dict[str, Any]]:
        return self.store.find(EXPERIMENTS, user)

    def get(self, user: str, experiment_id: str) -> Dict[str, Any]:
        experiment = self.store.find_one(EXPERIMENTS, experiment_id, user)
        if experiment is None:
            raise NotFoundError("Experiment not found")
        return experiment

    def delete(self, user: str, experiment_id: str) -> None:
        if not self.store.delete(EXPERIMENTS, experiment_id, user):
            raise NotFoundError("Experiment not found")

    @log_async_execution_time
    async def train(self, user: str, experiment_id: str) -> Dict[str, Any]:
        experiment = self.get(user, experiment_id)
        X, y = self._training_arrays(user, experiment)

        self.store.update(EXPERIMENTS, experiment_id, user, {'status': 'training'})

        payload = {
            'algorithm': experiment.get('algorithm'),
            'problem_type': experiment.get('problemType'),
            'X_train': X,
            'y_train': y,
            'hyperparameters': experiment.get('hyperparameters') or {},
        }

        start_time = time.time()
        try:
            result = await self.ml_client.train(payload)
        except MLServiceError as e:
            self.store.update(EXPERIMENTS, experiment_id, user, {
                'status': 'failed',
                'errorMessage': e.message,
            })
            raise

        training_time = time.time() - start_time
        result = result if isinstance(result, dict) else {}

        updated = self.store.update(EXPERIMENTS, experiment_id, user, {
            'status': 'completed',
            'trainingMetrics': result.get('training_metrics') or result.get('metrics') or {},
            'testMetrics': result.get('test_metrics') or result.get('metrics') or {},
            'trainingTime': training_time,
        })

        logger.info(f"Experiment {experiment_id} trained in {training_time:.2f} seconds")
        return updated

    @log_async_execution_time
    async def tune(self, user: str, experiment_id: str,
                   param_grid: Optional[Dict[str, Any]] = None,
                   cv: Optional[int] = None) -> Dict[str, Any]:
        experiment = self.get(user, experiment_id)
        X, y = self._training_arrays(user, experiment)

        payload = {
            'algorithm': experiment.get('algorithm'),
            'problem_type': experiment.get('problemType'),
            'X_train': X,
            'y_train': y,
            'param_grid': param_grid or experiment.get('hyperparameters') or {},
            'cv': cv or self.config.training.TUNING_CV_FOLDS,
        }

        try:
            tuning_results = await self.ml_client.tune(payload)
        except MLServiceError as e:
            logger.error(f"Tuning experiment {experiment_id} failed: {e.message}")
            self.store.update(EXPERIMENTS, experiment_id, user, {
                'status': 'failed',
                'errorMessage': e.message,
            })
            raise

        updated = self.store.update(EXPERIMENTS, experiment_id, user, {
            'status': 'completed',
            'tuningApplied': True,
            'tuningResults': tuning_results,
        })

        return {'experiment': updated, 'tuning_results': tuning_results}

    def _training_arrays(self, user: str, experiment: Dict[str, Any]):
        dataset = self.store.find_one(DATASETS, experiment.get('dataset'), user)
        if dataset is None or not dataset.get('data'):
            raise ValidationError("Dataset data not available")

        X, y, _, _ = prepare_training_arrays(dataset)
        return X, y
