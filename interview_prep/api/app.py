"""FastAPI application factory for the Interview Prep platform."""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..container import build_services
from ..services.configuration_manager import ConfigurationManager
from ..services.scoring import ScoreProvider
from ..services.storage_manager import StorageManager
from ..utils.exceptions import GENERIC_ERROR_MESSAGE, InternalError, InterviewPrepError
from ..utils.logging import get_logger, set_correlation_id, setup_logging
from .dependencies import require_feature
from .routes import interview, report, resume, users

logger = get_logger(__name__)


def _error_response(status_code: int, message: str, error_code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "error_code": error_code})


def create_app(
    config_manager: Optional[ConfigurationManager] = None,
    storage: Optional[StorageManager] = None,
    score_provider: Optional[ScoreProvider] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create the API application.

    Args:
        config_manager: Initialized configuration; loaded from ``config/`` when omitted
        storage: Storage manager to use instead of the configured one
        score_provider: Score source for feedback and resume analysis
        configure_logging: Apply the logging section of the configuration

    Returns:
        The FastAPI app; storage is opened and closed by its lifespan
    """
    if config_manager is None:
        config_manager = ConfigurationManager()
        config_manager.initialize()
    config = config_manager.get_config()
    if configure_logging:
        setup_logging(**config_manager.get_logging_config())

    if storage is None:
        storage = StorageManager(**config_manager.get_storage_config())
    services = build_services(config, storage=storage, score_provider=score_provider)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.start()
        try:
            yield
        finally:
            await services.close()

    app = FastAPI(
        title=f"{config.app_name} API",
        description="Mock interviews, feedback, resume scoring and progress tracking",
        version=config.version,
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.config_manager = config_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        set_correlation_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(InterviewPrepError)
    async def handle_interview_prep_error(request: Request, exc: InterviewPrepError):
        if isinstance(exc, InternalError):
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        return _error_response(exc.status_code, exc.public_message, exc.error_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Missing required fields"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"Invalid value for {location}: {errors[0].get('msg', 'invalid')}" if location else message
        return _error_response(400, message, "VALIDATION_ERROR")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return _error_response(500, GENERIC_ERROR_MESSAGE, "INTERNAL_ERROR")

    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(interview.router, prefix="/api/interview", tags=["Interview"])
    app.include_router(
        resume.router,
        prefix="/api/resume",
        tags=["Resume"],
        dependencies=[Depends(require_feature("resume_analysis"))],
    )
    app.include_router(
        report.router,
        prefix="/api/report",
        tags=["Report"],
        dependencies=[Depends(require_feature("reports"))],
    )

    @app.get("/health")
    async def health():
        return {
            "status": "healthy" if services.storage.is_open else "starting",
            "storage": services.storage.storage_type,
            "agents": [
                services.orchestrator.health_status,
                services.resume_analyzer.health_status,
            ],
        }

    return app
