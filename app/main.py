"""
FastAPI Application - Inkwell API
Comment back-end for the Inkwell blog
"""

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.exceptions import AppError, StoreError
from app.core.logging import bind_request, clear_request, configure_logging, get_logger
from app.core.redis import close_redis_pool
from app.schemas.common import ApiResponse, ErrorDetail
from app.tasks.queue import close_queue

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events"""
    logger.info(
        "app_starting",
        environment=settings.ENVIRONMENT,
        database=settings.DATABASE_URL.split("@")[1] if "@" in settings.DATABASE_URL else "configured",
    )
    yield
    await close_queue()
    await close_redis_pool()
    logger.info("app_stopping")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Comment threads and moderation for the Inkwell blog",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line of a request with its request ID and log the outcome."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    bind_request(request_id, request.method, request.url.path)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response
    finally:
        clear_request()


def _envelope(status_code: int, error: str, details: list[ErrorDetail] | None = None) -> JSONResponse:
    body = ApiResponse[None](success=False, error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Domain errors carry their own status code and a caller-safe message."""
    if isinstance(exc, StoreError):
        logger.error("store_error", error=exc.message)
    else:
        logger.info(
            "request_rejected",
            error_type=type(exc).__name__,
            error=exc.message,
            status_code=exc.status_code,
        )
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input: 400 with one entry per offending field."""
    details = [
        ErrorDetail(
            field=".".join(str(part) for part in err["loc"] if part not in ("body", "query", "path")),
            message=err["msg"],
        )
        for err in exc.errors()
    ]
    logger.info("validation_error", errors=len(details))
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid input", details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _envelope(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures are logged in full and reported generically."""
    logger.exception("database_error", error_type=type(exc).__name__)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Never expose internal details; the log has the traceback."""
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - API information"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint"""
    return {"status": "healthy"}


# Import and include routers
from app.api.v1 import router as api_v1_router  # noqa: E402

app.include_router(api_v1_router, prefix=settings.API_V1_STR)
