# src/api/main.py
import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.routers import datasets, experiments, ml, model_comparison
from src.config import Config, get_config
from src.services.errors import PlatformError, StorageError
from src.services.ml_client import MLServiceClient
from src.services.tracking import ExperimentTracker
from src.storage.factory import create_store
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "ml-platform-backend"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the API application.

    Anything already placed on ``app.state`` (store, ml_client, tracker)
    before startup is kept, which is how tests inject in-memory backends.
    """
    config = config or get_config()

    app = FastAPI(
        title="ML Platform API",
        description="Dataset and experiment management backed by a remote ML service",
        version="1.0.0",
        docs_url="/docs" if config.server.ENABLE_DOCS else None,
        redoc_url="/redoc" if config.server.ENABLE_DOCS else None,
    )

    app.state.config = config
    app.state.store = None
    app.state.ml_client = MLServiceClient(config.ml_service.URL, timeout=config.ml_service.TIMEOUT)
    app.state.tracker = None
    if config.mlflow.ENABLED:
        app.state.tracker = ExperimentTracker(config.mlflow.TRACKING_URI, config.mlflow.EXPERIMENT_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = (time.time() - start_time) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {duration:.1f}ms")
        return response

    @app.exception_handler(PlatformError)
    async def platform_error_handler(request: Request, exc: PlatformError):
        if isinstance(exc, StorageError):
            return _error_response(exc.status_code, "Storage service error")
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, _validation_message(exc))

    @app.on_event("startup")
    async def startup_event():
        """Configure logging and connect the store"""
        setup_logging(
            log_level=config.logging_level,
            log_dir=config.log_dir,
            log_to_file=config.log_to_file,
        )

        for issue in config.validate_config():
            logger.warning(f"Configuration issue: {issue}")

        try:
            if app.state.store is None:
                app.state.store = create_store(config)
            app.state.store.ping()
            logger.info(f"Storage initialized ({app.state.store.name})")
        except Exception as e:
            logger.error(f"Failed to initialize storage: {str(e)}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        if app.state.store is not None:
            app.state.store.close()

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        store = request.app.state.store
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "timestamp": datetime.now().isoformat(),
            "storage": store.name if store is not None else None,
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "ML Platform API",
            "version": "1.0.0",
            "endpoints": {
                "health": "/health",
                "datasets": "/api/datasets",
                "experiments": "/api/experiments",
                "modelComparison": "/api/model-comparison",
                "ml": "/api/ml",
            },
        }

    app.include_router(datasets.router)
    app.include_router(experiments.router)
    app.include_router(model_comparison.router)
    app.include_router(ml.router)

    return app
