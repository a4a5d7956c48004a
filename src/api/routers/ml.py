# src/api/routers/ml.py
"""Pass-through routes to the ML service. Bodies are forwarded untouched."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from src.api.dependencies import get_ml_client
from src.services.ml_client import MLServiceClient

router = APIRouter(prefix="/api/ml", tags=["ml"])


@router.get("/algorithms")
async def get_algorithms(ml_client: MLServiceClient = Depends(get_ml_client)):
    return {"success": True, "data": await ml_client.get_algorithms()}


@router.post("/preprocess")
async def preprocess(payload: Dict[str, Any] = Body(...),
                     ml_client: MLServiceClient = Depends(get_ml_client)):
    return {"success": True, "data": await ml_client.preprocess(payload)}


@router.post("/train")
async def train(payload: Dict[str, Any] = Body(...),
                ml_client: MLServiceClient = Depends(get_ml_client)):
    return {"success": True, "data": await ml_client.train(payload)}


@router.post("/evaluate")
async def evaluate(payload: Dict[str, Any] = Body(...),
                   ml_client: MLServiceClient = Depends(get_ml_client)):
    return {"success": True, "data": await ml_client.evaluate(payload)}


@router.post("/tune")
async def tune(payload: Dict[str, Any] = Body(...),
               ml_client: MLServiceClient = Depends(get_ml_client)):
    return {"success": True, "data": await ml_client.tune(payload)}
