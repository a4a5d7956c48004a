# src/api/routers/experiments.py
from typing import Optional

from fastapi import APIRouter, Depends, status

from src.api.auth import CurrentUser, get_current_user
from src.api.dependencies import get_comparison_service, get_experiment_service
from src.api.schemas import ExperimentCreateRequest, TrainMultipleRequest, TuneRequest
from src.services.comparison import ModelComparisonService
from src.services.experiments import ExperimentService

router = APIRouter(prefix="/api/experiments", tags=["experiments"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_experiment(
    request: ExperimentCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    experiment = service.create(
        user=user.id,
        name=request.name,
        dataset_id=request.dataset_id,
        algorithm=request.algorithm,
        problem_type=request.problem_type,
        hyperparameters=request.hyperparameters,
        description=request.description,
    )
    return {"success": True, "data": experiment}


@router.post("/train-multiple")
async def train_multiple(
    request: TrainMultipleRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ModelComparisonService = Depends(get_comparison_service),
):
    """Train every requested algorithm on one dataset and pick the best"""
    result = await service.train_multiple(
        user=user.id,
        dataset_id=request.dataset_id,
        algorithms=request.algorithms,
        problem_type=request.problem_type,
        test_size=request.test_size,
    )
    return {"success": True, "data": result}


@router.get("")
@router.get("/", include_in_schema=False)
def list_experiments(
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    experiments = service.list(user.id)
    return {"success": True, "count": len(experiments), "data": experiments}


@router.get("/{experiment_id}")
def get_experiment(
    experiment_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    return {"success": True, "data": service.get(user.id, experiment_id)}


@router.delete("/{experiment_id}")
def delete_experiment(
    experiment_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    service.delete(user.id, experiment_id)
    return {"success": True, "data": {}}


@router.post("/{experiment_id}/train")
async def train_experiment(
    experiment_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    return {"success": True, "data": await service.train(user.id, experiment_id)}


@router.post("/{experiment_id}/tune")
async def tune_experiment(
    experiment_id: str,
    request: Optional[TuneRequest] = None,
    user: CurrentUser = Depends(get_current_user),
    service: ExperimentService = Depends(get_experiment_service),
):
    request = request or TuneRequest()
    result = await service.tune(user.id, experiment_id, param_grid=request.param_grid, cv=request.cv)
    return {"success": True, "data": result}
