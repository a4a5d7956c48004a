# src/api/schemas.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DatasetUpdateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    target_column: Optional[str] = Field(default=None, alias="targetColumn")
    problem_type: Optional[str] = Field(default=None, alias="problemType")


class PreprocessRequest(CamelModel):
    preprocessing_options: Dict[str, Any] = Field(default_factory=dict, alias="preprocessingOptions")


class ExperimentCreateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    dataset_id: Optional[str] = Field(default=None, alias="datasetId")
    algorithm: Optional[str] = None
    problem_type: Optional[str] = Field(default=None, alias="problemType")
    hyperparameters: Dict[str, Any] = Field(default_factory=dict)


class TrainMultipleRequest(CamelModel):
    dataset_id: Optional[str] = Field(default=None, alias="datasetId")
    algorithms: Optional[List[str]] = None
    problem_type: Optional[str] = Field(default=None, alias="problemType")
    test_size: Optional[float] = Field(default=None, alias="testSize")


class TuneRequest(CamelModel):
    param_grid: Optional[Dict[str, Any]] = Field(default=None, alias="paramGrid")
    cv: Optional[int] = None


class CompareModelsRequest(CamelModel):
    dataset_id: Optional[str] = Field(default=None, alias="datasetId")
    problem_type: Optional[str] = Field(default=None, alias="problemType")
    train_test_split: Optional[float] = Field(default=None, alias="trainTestSplit")
    algorithms: Optional[List[str]] = None
