# src/api/dependencies.py
from fastapi import Request

from src.config import Config
from src.services.comparison import ModelComparisonService
from src.services.datasets import DatasetService
from src.services.experiments import ExperimentService
from src.services.ml_client import MLServiceClient
from src.storage.base import BaseStore


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_store(request: Request) -> BaseStore:
    return request.app.state.store


def get_ml_client(request: Request) -> MLServiceClient:
    return request.app.state.ml_client


def get_dataset_service(request: Request) -> DatasetService:
    state = request.app.state
    return DatasetService(state.store, state.ml_client, state.config)


def get_experiment_service(request: Request) -> ExperimentService:
    state = request.app.state
    return ExperimentService(state.store, state.ml_client, state.config)


def get_comparison_service(request: Request) -> ModelComparisonService:
    state = request.app.state
    return ModelComparisonService(state.store, state.ml_client, state.config, tracker=state.tracker)
