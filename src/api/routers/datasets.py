# src/api/routers/datasets.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from src.api.auth import CurrentUser, get_current_user
from src.api.dependencies import get_dataset_service
from src.api.schemas import DatasetUpdateRequest, PreprocessRequest
from src.services.datasets import DatasetService

router = APIRouter(prefix="/api/datasets", tags=["datasets"])


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_dataset(
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    target_column: Optional[str] = Form(None, alias="targetColumn"),
    problem_type: Optional[str] = Form(None, alias="problemType"),
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    """Upload a CSV file and store it as a dataset"""
    dataset = service.upload(
        user=user.id,
        filename=file.filename if file is not None else None,
        content=file.file.read() if file is not None else b"",
        content_type=file.content_type if file is not None else None,
        name=name,
        description=description,
        target_column=target_column,
        problem_type=problem_type,
    )
    return {"success": True, "data": dataset}


@router.get("")
@router.get("/", include_in_schema=False)
def list_datasets(
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    datasets = service.list(user.id)
    return {"success": True, "count": len(datasets), "data": datasets}


@router.get("/{dataset_id}")
def get_dataset(
    dataset_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    return {"success": True, "data": service.get(user.id, dataset_id)}


@router.put("/{dataset_id}")
def update_dataset(
    dataset_id: str,
    request: DatasetUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    fields = request.model_dump(by_alias=True, exclude_none=True)
    return {"success": True, "data": service.update(user.id, dataset_id, fields)}


@router.delete("/{dataset_id}")
def delete_dataset(
    dataset_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    service.delete(user.id, dataset_id)
    return {"success": True, "data": {}}


@router.post("/{dataset_id}/preprocess")
async def preprocess_dataset(
    dataset_id: str,
    request: Optional[PreprocessRequest] = None,
    user: CurrentUser = Depends(get_current_user),
    service: DatasetService = Depends(get_dataset_service),
):
    """Run the ML service preprocessing step over a stored dataset"""
    options = request.preprocessing_options if request is not None else {}
    result = await service.preprocess(user.id, dataset_id, options)
    return {"success": True, "data": result}
