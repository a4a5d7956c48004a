# src/services/comparison.py
import asyncio
import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool

from src.config import Config
from src.services.datasets import build_arrays, column_names, positional_split, validate_problem_type
from src.services.errors import MLServiceError, NotFoundError, ValidationError
from src.services.hyperparameters import defaults_for
from src.services.metrics import extract_comparison_score, select_best
from src.services.ml_client import MLServiceClient
from src.services.recommendations import get_algorithm_recommendations
from src.services.tracking import ExperimentTracker
from src.storage.base import DATASETS, EXPERIMENTS, BaseStore
from src.utils.logging_config import OperationLogger, log_async_execution_time

logger = logging.getLogger(__name__)


def _validate_fraction(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value < 1:
        raise ValidationError(f"{field} must be a number between 0 and 1")
    return float(value)


class ModelComparisonService:
    """
    Trains several algorithms against one dataset and picks the best.

    Two flows:
    - train_multiple: one remote /ml/train call per algorithm, failures
      recorded per algorithm, ranked with the comparison-score rules.
    - compare_models: a single /ml/compare-models call, ranked with the
      primary-metric rules.
    """

    def __init__(self, store: BaseStore, ml_client: MLServiceClient, config: Config,
                 tracker: Optional[ExperimentTracker] = None):
        self.store = store
        self.ml_client = ml_client
        self.config = config
        self.tracker = tracker

    @log_async_execution_time
    async def train_multiple(self, user: str, dataset_id: Optional[str],
                             algorithms: Optional[Sequence[str]],
                             problem_type: Optional[str] = None,
                             test_size: Optional[float] = None) -> Dict[str, Any]:
        if not dataset_id or not algorithms:
            raise ValidationError("Dataset ID and algorithms array are required")

        if test_size is None:
            test_size = self.config.training.DEFAULT_TEST_SIZE
        test_size = _validate_fraction(test_size, "testSize")

        dataset = self.store.find_one(DATASETS, dataset_id, user)
        if dataset is None:
            raise NotFoundError("Dataset not found")

        problem_type = validate_problem_type(problem_type or dataset.get('problemType'))

        columns = column_names(dataset)
        if not columns:
            raise ValidationError("Dataset has no columns")

        # X spans every column, the target included
        target_column = dataset.get('targetColumn') or columns[-1]
        X, y = build_arrays(dataset.get('data') or [], columns, target_column)
        split = positional_split(X, y, test_size)

        requested = list(algorithms)

        with OperationLogger(f"train-multiple on {dataset_id}", logger) as op:
            op.log_progress(
                f"{len(requested)} algorithms, {len(split['X_train'])} train rows, "
                f"{len(split['X_test'])} test rows"
            )
            results = await self._train_all(requested, problem_type, split)

            successful = [
                dict(result, algorithm=algorithm)
                for algorithm, result in results.items()
                if not result.get('error')
            ]
            best = select_best(successful, problem_type, metric=extract_comparison_score)
            best_model = self._best_model_summary(best)

            op.log_metric("successful_models", len(successful))
            op.log_metric("best_algorithm", best_model['algorithm'] if best_model else None)
            training_time = op.elapsed_seconds

        experiment = self.store.insert(EXPERIMENTS, {
            'user': user,
            'dataset': dataset_id,
            'name': f"Multi-Model Training - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            'description': f"Trained {len(requested)} algorithms on {dataset.get('name')}",
            'problemType': problem_type,
            'algorithms': requested,
            'testSize': test_size,
            'results': results,
            'bestModel': best_model,
            'status': 'completed',
            'summary': {
                'successfulModels': len(successful),
                'failedModels': len(results) - len(successful),
                'trainRows': len(split['X_train']),
                'testRows': len(split['X_test']),
                'trainingTime': training_time,
            },
        })

        if self.tracker is not None:
            await run_in_threadpool(
                self.tracker.log_training_runs,
                experiment_id=experiment['_id'],
                problem_type=problem_type,
                test_size=test_size,
                results=results,
                hyperparameters={algorithm: defaults_for(algorithm) for algorithm in requested},
                best_model=best_model,
            )

        return {
            'experimentId': experiment['_id'],
            'results': results,
            'bestModel': best_model,
            'summary': {
                'algorithmsTraining': len(requested),
                'successfulModels': len(successful),
                'testSize': test_size,
                'trainingSize': round(1 - test_size, 10),
                'datasetName': dataset.get('name'),
                'problemType': problem_type,
                'trainRows': len(split['X_train']),
                'testRows': len(split['X_test']),
            },
        }

    async def _train_all(self, algorithms: List[str], problem_type: str,
                         split: Dict[str, List[Any]]) -> Dict[str, Dict[str, Any]]:
        if self.config.training.PARALLEL_REQUESTS:
            outcomes = await asyncio.gather(
                *(self._train_one(algorithm, problem_type, split) for algorithm in algorithms)
            )
        else:
            outcomes = []
            for algorithm in algorithms:
                outcomes.append(await self._train_one(algorithm, problem_type, split))

        return dict(zip(algorithms, outcomes))

    async def _train_one(self, algorithm: str, problem_type: str,
                         split: Dict[str, List[Any]]) -> Dict[str, Any]:
        payload = {
            'algorithm': algorithm,
            'problem_type': problem_type,
            'X_train': split['X_train'],
            'y_train': split['y_train'],
            'X_test': split['X_test'],
            'y_test': split['y_test'],
            'hyperparameters': defaults_for(algorithm),
        }

        try:
            result = await self.ml_client.train(payload)
        except MLServiceError as e:
            logger.error(f"Training {algorithm} failed: {e.message}")
            return {'error': e.message, 'training_metrics': None}

        if not isinstance(result, dict):
            logger.error(f"Training {algorithm} returned an unexpected response")
            return {'error': "Unexpected response from ML service", 'training_metrics': None}

        logger.info(f"Trained {algorithm}")
        return result

    @staticmethod
    def _best_model_summary(best: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if best is None:
            return None

        metrics = best.get('test_metrics')
        if metrics is None:
            metrics = best.get('training_metrics')

        return {
            'algorithm': best['algorithm'],
            'score': best['primaryMetric'],
            'metrics': metrics,
        }

    @log_async_execution_time
    async def compare_models(self, user: str, dataset_id: Optional[str],
                             problem_type: Optional[str] = None,
                             train_test_split: Optional[float] = None,
                             algorithms: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        if not dataset_id:
            raise ValidationError("Dataset ID is required")

        if train_test_split is None:
            train_test_split = self.config.training.DEFAULT_TRAIN_TEST_SPLIT
        train_test_split = _validate_fraction(train_test_split, "trainTestSplit")

        dataset = self.store.find_one(DATASETS, dataset_id, user)
        if dataset is None:
            raise NotFoundError("Dataset not found")

        problem_type = validate_problem_type(problem_type or dataset.get('problemType'))

        data = dataset.get('data') or []
        total_rows = dataset.get('numberOfRows') or len(data)
        test_rows = math.ceil(total_rows * train_test_split)
        train_rows = total_rows - test_rows

        response = await self.ml_client.compare_models({
            'dataset_id': dataset_id,
            'problem_type': problem_type,
            'train_size': train_rows,
            'test_size': test_rows,
            'train_test_split': train_test_split,
            'algorithms': list(algorithms or []),
            'data': data,
            'columns': column_names(dataset),
            'target_column': dataset.get('targetColumn'),
        })
        if not isinstance(response, dict):
            raise MLServiceError("Unexpected response from ML service")

        models = response.get('models') or []
        best = select_best(models, problem_type)

        experiment = self.store.insert(EXPERIMENTS, {
            'user': user,
            'dataset': dataset_id,
            'name': f"Model Comparison - {datetime.now().strftime('%Y-%m-%d')}",
            'description': f"Compared {len(models)} models on {dataset.get('name')}",
            'problemType': problem_type,
            'status': 'completed',
            'models': models,
            'bestModel': best,
            'trainTestSplit': train_test_split,
            'metrics': {
                'totalModels': len(models),
                'bestModelScore': best['primaryMetric'] if best else None,
                'evaluationTime': response.get('evaluationTime'),
            },
        })

        logger.info(f"Compared {len(models)} models for dataset {dataset_id}")

        return {
            'experiment': experiment,
            'models': models,
            'bestModel': best,
            'recommendations': get_algorithm_recommendations(problem_type),
        }
