# src/api/routers/model_comparison.py
from fastapi import APIRouter, Depends

from src.api.auth import CurrentUser, get_current_user
from src.api.dependencies import get_comparison_service
from src.api.schemas import CompareModelsRequest
from src.services.comparison import ModelComparisonService
from src.services.errors import NotFoundError
from src.services.hyperparameters import get_hyperparameter_reference
from src.services.recommendations import get_metrics_reference

router = APIRouter(prefix="/api/model-comparison", tags=["model-comparison"])


@router.post("/compare-models")
async def compare_models(
    request: CompareModelsRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ModelComparisonService = Depends(get_comparison_service),
):
    result = await service.compare_models(
        user=user.id,
        dataset_id=request.dataset_id,
        problem_type=request.problem_type,
        train_test_split=request.train_test_split,
        algorithms=request.algorithms,
    )
    return {"success": True, "data": result}


@router.get("/metrics-reference")
def metrics_reference():
    return {"success": True, "data": get_metrics_reference()}


@router.get("/hyperparameters/{algorithm}")
def hyperparameter_reference(algorithm: str):
    reference = get_hyperparameter_reference(algorithm)
    if reference is None:
        raise NotFoundError("Algorithm not found")
    return {"success": True, "data": reference}
