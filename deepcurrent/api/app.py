"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, route registration and the analysis queue lifespan.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from pydantic import ValidationError

from deepcurrent import __version__
from deepcurrent.api.dependencies import get_analysis_queue, get_settings, reset_dependencies
from deepcurrent.api.exceptions import DeepCurrentAPIError
from deepcurrent.api.middleware.context import RequestContextMiddleware
from deepcurrent.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from deepcurrent.api.routes import register_routes
from deepcurrent.db.errors import StoreError
from deepcurrent.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the analysis workers on startup; drain them and close stores on shutdown."""
    queue = await get_analysis_queue()
    await queue.start()
    logger.info("app_started")
    try:
        yield
    finally:
        await reset_dependencies()
        logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - CORS middleware
    - Request context middleware
    - Global exception handlers
    - OpenTelemetry instrumentation (when tracing is enabled)
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    app = FastAPI(
        title="DeepCurrent API",
        description="Research episodes with a self-evolving strategy feedback loop",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)
    register_routes(app, settings.observability.metrics)

    if settings.observability.tracing.enabled:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        storage_backend=settings.storage.backend,
        cors_origins=settings.api.cors_origins,
    )
    return app


def _error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    response = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", exclude_none=True),
    )


def _validation_details(errors: list) -> list[ErrorDetail]:
    return [
        ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
        for error in errors
    ]


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(DeepCurrentAPIError)
    async def api_error_handler(request: Request, exc: DeepCurrentAPIError) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        return _error_response(
            400,
            ErrorCode.INVALID_REQUEST,
            "Request validation failed",
            _validation_details(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning("pydantic_validation_error", errors=exc.errors(), path=request.url.path)
        return _error_response(
            400,
            ErrorCode.INVALID_REQUEST,
            "Data validation failed",
            _validation_details(exc.errors()),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(
            "store_error",
            error=exc.message,
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(503, ErrorCode.STORAGE_UNAVAILABLE, "Storage is unavailable")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")

    logger.debug("exception_handlers_registered")
