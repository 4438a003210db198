"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from calamari_backend.calamari.errors import CalamariError
from calamari_backend.core.config import get_settings
from calamari_backend.core.exceptions import CalamariAPIException
from calamari_backend.core.logging import setup_logging
from calamari_backend.models.cluster import APIResponse
from calamari_backend.routers import cluster, osd, pool
from calamari_backend.services.backend import backend

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup and shutdown tasks."""
    logger.info("Starting Calamari backend API")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Calamari endpoint: port {settings.calamari_api_port}, prefix /{settings.calamari_api_prefix}")
    yield
    logger.info("Shutting down Calamari backend API")
    await backend.close()


app = FastAPI(
    title="Calamari Backend API",
    description="REST API for managing Ceph pools and OSDs through Calamari",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Union[Dict, None],
) -> JSONResponse:
    response = APIResponse(
        status="error",
        code=code,
        message=message,
        details=details,
    )
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", exclude_none=True),
    )


# Exception handlers
@app.exception_handler(CalamariAPIException)
async def api_exception_handler(
    request: Request,
    exc: CalamariAPIException,
) -> JSONResponse:
    """Handle REST-layer exceptions and return structured error response."""
    logger.error(
        f"CalamariAPIException: {exc.code} - {exc.message}",
        extra={"details": exc.details},
    )
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(CalamariError)
async def calamari_error_handler(
    request: Request,
    exc: CalamariError,
) -> JSONResponse:
    """Handle adapter errors and return structured error response."""
    logger.error(
        f"CalamariError: {exc.error_code} - {exc.message}",
        extra={"details": exc.details},
    )
    return _error_response(exc.status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors."""
    logger.warning(f"Validation error: {exc.errors()}")

    # ctx can hold raw exception objects
    sanitized = []
    for err in exc.errors():
        clean = {k: v for k, v in err.items() if k != "ctx"}
        if "ctx" in err:
            clean["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        sanitized.append(clean)

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        {"errors": sanitized},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        {"error": str(exc)} if settings.debug else {},
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(pool.router, prefix=settings.api_v1_prefix, tags=["Pools"])
app.include_router(osd.router, prefix=settings.api_v1_prefix, tags=["OSD"])
app.include_router(cluster.router, prefix=settings.api_v1_prefix, tags=["Cluster"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "calamari_backend.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
