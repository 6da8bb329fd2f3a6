"""
SmartHome BOQ API - FastAPI Main Application
BOQ pricing and proforma quotation issuing
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from api.config import config
from api.dependencies import get_store
from api.routers import boq, quotations
from smarthome_boq_core import __version__
from smarthome_boq_core.engine.errors import (
    BOQEngineError,
    DocumentNotFoundError,
    ProjectNotFoundError,
    StateConflictError,
    UniquenessRetryExhausted,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.APP_LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "SmartHome BOQ API"
APP_VERSION = __version__
APP_DESCRIPTION = "Bill of quantities pricing and proforma quotation engine"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    code: str
    message: str
    hint: Optional[str] = None
    traceId: str
    meta: Dict[str, Any]


class AppContext:
    """Application context manager"""
    def __init__(self):
        self.start_time = time.time()
        self.ready = False

    async def startup(self):
        logger.info(f"Starting {APP_NAME} ({config.APP_ENV}, store={config.STORE_BACKEND})...")
        get_store()
        self.ready = True

    async def shutdown(self):
        logger.info(f"Shutting down {APP_NAME}...")
        self.ready = False


# Initialize application context
app_context = AppContext()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await app_context.startup()
    yield
    await app_context.shutdown()


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Configure CORS with whitelist
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Trace-Id"],
    expose_headers=["X-Trace-Id", "X-Process-Time"]
)

# Configure rate limiting
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT],
)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", str(uuid.uuid4()))


def _error(request: Request, status_code: int, code: str, message: str, hint: str = None, **meta) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(
            code=code,
            message=message,
            hint=hint,
            traceId=_trace_id(request),
            meta={"path": request.url.path, **meta}
        ))
    )


# Rate limit exceeded handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded"""
    return _error(
        request, status.HTTP_429_TOO_MANY_REQUESTS, "RATE_LIMIT_EXCEEDED",
        "Too many requests", hint="Please wait before making more requests"
    )


# Middleware for trace ID injection
@app.middleware("http")
async def inject_trace_id(request: Request, call_next):
    """Inject trace ID into all requests and responses"""
    trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))

    # Add trace ID to logger context
    logger_adapter = logging.LoggerAdapter(logger, {"trace_id": trace_id})
    request.state.logger = logger_adapter
    request.state.trace_id = trace_id

    # Process request
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    # Add headers to response
    response.headers["X-Trace-Id"] = trace_id
    response.headers["X-Process-Time"] = str(process_time)

    logger_adapter.info(
        f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s"
    )
    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle request schema errors"""
    errors = exc.errors()
    return _error(
        request, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR",
        "Invalid request parameters",
        hint=str(errors[0]["msg"]) if errors else None,
    )


@app.exception_handler(ValidationError)
async def engine_validation_handler(request: Request, exc: ValidationError):
    return _error(
        request, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(exc), field=exc.field
    )


@app.exception_handler(DocumentNotFoundError)
async def document_not_found_handler(request: Request, exc: DocumentNotFoundError):
    return _error(request, status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc), documentId=exc.document_id)


@app.exception_handler(ProjectNotFoundError)
async def project_not_found_handler(request: Request, exc: ProjectNotFoundError):
    return _error(request, status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc), projectId=exc.project_id)


@app.exception_handler(StateConflictError)
async def state_conflict_handler(request: Request, exc: StateConflictError):
    return _error(
        request, status.HTTP_409_CONFLICT, "STATE_CONFLICT", str(exc),
        hint="Allowed: send from draft; accept or reject from sent",
        status=exc.status, action=exc.action,
    )


@app.exception_handler(UniquenessRetryExhausted)
async def retry_exhausted_handler(request: Request, exc: UniquenessRetryExhausted):
    logger.error(f"Number allocation failed: {exc}")
    return _error(
        request, status.HTTP_503_SERVICE_UNAVAILABLE, "NUMBER_ALLOCATION_FAILED", str(exc),
        hint="Retry the request", attempts=exc.attempts,
    )


@app.exception_handler(BOQEngineError)
async def engine_error_handler(request: Request, exc: BOQEngineError):
    logger.error(f"Unhandled engine error: {exc}", exc_info=True)
    return _error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    return _error(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR",
        "An internal error occurred", hint="Please contact support with the trace ID"
    )


# Health check endpoint
@app.get("/healthz")
async def health_check(store=Depends(get_store)):
    """Liveness plus a store round trip"""
    store_ok = await store.ping()
    return JSONResponse(
        status_code=status.HTTP_200_OK if store_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if store_ok else "degraded",
            "store": config.STORE_BACKEND,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.time() - app_context.start_time
        }
    )


app.include_router(boq.router)
app.include_router(quotations.router)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=config.is_development(),
        log_level=config.APP_LOG_LEVEL.lower()
    )
