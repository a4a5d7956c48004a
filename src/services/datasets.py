# src/services/datasets.py
import io
import json
import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from src.config import Config
from src.services.errors import MLServiceError, NotFoundError, ValidationError
from src.services.metrics import ProblemType
from src.services.ml_client import MLServiceClient
from src.storage.base import DATASETS, BaseStore
from src.utils.logging_config import log_async_execution_time

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'description', 'targetColumn', 'problemType')


def coerce_value(value: Any) -> Any:
    """Numeric parse of a single cell; anything that is not a finite number stays as it was."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return value
        try:
            number = float(text)
        except ValueError:
            return value
        return number if math.isfinite(number) else value
    return value


def validate_problem_type(problem_type: Optional[str]) -> str:
    if problem_type not in ProblemType.values():
        raise ValidationError(
            f"problemType must be one of: {', '.join(ProblemType.values())}"
        )
    return problem_type


def column_names(dataset: Dict[str, Any]) -> List[str]:
    return [column['name'] for column in dataset.get('columns') or []]


def build_arrays(rows: Sequence[Dict[str, Any]], feature_columns: Sequence[str],
                 target_column: str) -> Tuple[List[List[Any]], List[Any]]:
    """Turn stored row objects into coerced (X, y) arrays"""
    X = [[coerce_value(row.get(column)) for column in feature_columns] for row in rows]
    y = [coerce_value(row.get(target_column)) for row in rows]
    return X, y


def prepare_training_arrays(dataset: Dict[str, Any]) -> Tuple[List[List[Any]], List[Any], List[str], str]:
    """X over every column except the target, y over the target column"""
    target_column = dataset.get('targetColumn')
    if not target_column:
        raise ValidationError("Target column is required before training")

    feature_columns = [column for column in column_names(dataset) if column != target_column]
    X, y = build_arrays(dataset.get('data') or [], feature_columns, target_column)
    return X, y, feature_columns, target_column


def positional_split(X: Sequence[Any], y: Sequence[Any], test_fraction: float) -> Dict[str, List[Any]]:
    """Deterministic split: the first floor(n * (1 - test_fraction)) rows train, the rest test."""
    train_size = math.floor(len(X) * (1 - test_fraction))
    return {
        'X_train': list(X[:train_size]),
        'y_train': list(y[:train_size]),
        'X_test': list(X[train_size:]),
        'y_test': list(y[train_size:]),
    }


def parse_csv(content: bytes) -> Tuple[List[str], List[Dict[str, str]]]:
    """Parse CSV bytes into (header, rows) keeping every cell as its raw string"""
    try:
        frame = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            encoding='utf-8-sig',
        )
    except pd.errors.EmptyDataError:
        return [], []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not parse CSV file: {str(e)}") from e

    columns = [str(column) for column in frame.columns]
    frame.columns = columns
    return columns, frame.to_dict('records')


def analyze_columns(columns: Sequence[str], rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    column_info = []
    for column in columns:
        values = [row.get(column) for row in rows]
        column_info.append({
            'name': str(column or '').strip(),
            'type': 'string',
            'uniqueValues': len({value for value in values if value}),
            'missingValues': sum(1 for value in values if not value),
        })
    return column_info


def cap_rows(rows: List[Dict[str, Any]], max_bytes: int, min_rows: int) -> List[Dict[str, Any]]:
    """Trim rows so the serialized payload stays under the document size cap.

    Keeps at least min_rows rows even if that overshoots max_bytes.
    """
    if not rows:
        return rows

    json_size = len(json.dumps(rows, separators=(',', ':'), ensure_ascii=False).encode('utf-8'))
    if json_size <= max_bytes:
        return rows

    approx_row_size = max(1, json_size // len(rows))
    max_rows = max(min_rows, max_bytes // approx_row_size)
    logger.info(f"Dataset payload is {json_size} bytes; keeping first {max_rows} of {len(rows)} rows")
    return rows[:max_rows]


class DatasetService:
    """Dataset upload, CRUD and preprocessing"""

    def __init__(self, store: BaseStore, ml_client: MLServiceClient, config: Config):
        self.store = store
        self.ml_client = ml_client
        self.config = config

    def upload(self, user: str, filename: Optional[str], content: bytes,
               content_type: Optional[str] = None, name: Optional[str] = None,
               description: Optional[str] = None, target_column: Optional[str] = None,
               problem_type: Optional[str] = None) -> Dict[str, Any]:
        if not filename:
            raise ValidationError("Please upload a file")

        self._validate_file(filename, content, content_type)
        validate_problem_type(problem_type)

        columns, rows = parse_csv(content)
        if not rows:
            raise ValidationError("CSV file is empty")

        if target_column and target_column not in columns:
            raise ValidationError(f"Target column '{target_column}' not found in CSV header")

        data = cap_rows(
            rows,
            max_bytes=self.config.upload.MAX_DOCUMENT_BYTES,
            min_rows=self.config.upload.MIN_PERSISTED_ROWS,
        )

        dataset = self.store.insert(DATASETS, {
            'user': user,
            'name': str(name or filename),
            'description': str(description or ''),
            'fileName': str(filename),
            'fileSize': len(content),
            'columns': analyze_columns(columns, rows),
            'numberOfRows': len(rows),
            'numberOfColumns': len(columns),
            'targetColumn': str(target_column or ''),
            'problemType': problem_type,
            'preprocessingApplied': False,
            'preprocessingSteps': [],
            'data': data,
            'status': 'ready',
        })

        logger.info(f"Dataset {dataset['_id']} uploaded: {len(rows)} rows, {len(columns)} columns")
        return dataset

    def list(self, user: str) -> List[Dict[str, Any]]:
        return self.store.find(DATASETS, user, exclude_fields=('data',))

    def get(self, user: str, dataset_id: str) -> Dict[str, Any]:
        dataset = self.store.find_one(DATASETS, dataset_id, user)
        if dataset is None:
            raise NotFoundError("Dataset not found")
        return dataset

    def update(self, user: str, dataset_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        dataset = self.get(user, dataset_id)

        changes = {key: value for key, value in fields.items()
                   if key in UPDATABLE_FIELDS and value is not None}

        if 'problemType' in changes:
            validate_problem_type(changes['problemType'])

        if changes.get('targetColumn') and changes['targetColumn'] not in column_names(dataset):
            raise ValidationError(f"Target column '{changes['targetColumn']}' not found in dataset")

        if not changes:
            return dataset

        updated = self.store.update(DATASETS, dataset_id, user, changes)
        if updated is None:
            raise NotFoundError("Dataset not found")
        return updated

    def delete(self, user: str, dataset_id: str) -> None:
        if not self.store.delete(DATASETS, dataset_id, user):
            raise NotFoundError("Dataset not found")

    @log_async_execution_time
    async def preprocess(self, user: str, dataset_id: str,
                         options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        dataset = self.get(user, dataset_id)
        self.store.update(DATASETS, dataset_id, user, {'status': 'preprocessing'})

        columns = column_names(dataset)
        payload = {
            'data': [[row.get(column) for column in columns] for row in dataset.get('data') or []],
            'columns': columns,
            'target_column': dataset.get('targetColumn'),
            'problem_type': dataset.get('problemType'),
            'preprocessing_options': options or {},
        }

        try:
            response = await self.ml_client.preprocess(payload)
        except MLServiceError:
            self.store.update(DATASETS, dataset_id, user, {'status': 'error'})
            raise

        steps = response.get('preprocessing_steps', []) if isinstance(response, dict) else []
        updated = self.store.update(DATASETS, dataset_id, user, {
            'preprocessingApplied': True,
            'preprocessingSteps': steps,
            'status': 'ready',
        })

        return {'dataset': updated, 'preprocessing_results': response}

    def _validate_file(self, filename: str, content: bytes, content_type: Optional[str]):
        extension = '.' + filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
        if extension not in self.config.upload.ALLOWED_EXTENSIONS and content_type != 'text/csv':
            raise ValidationError("Only CSV files are allowed")

        file_size_mb = len(content) / (1024 * 1024)
        if file_size_mb > self.config.upload.MAX_FILE_SIZE_MB:
            raise ValidationError(
                f"File too large: {file_size_mb:.1f}MB > {self.config.upload.MAX_FILE_SIZE_MB}MB"
            )
