"""FastAPI application entry point."""
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import health, prompts, share, tags, upload
from core.config import get_settings
from core.logging import configure_logging
from db.session import engine
from services.exceptions import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INTERNAL: 500,
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    configure_logging(get_settings().log_level)
    logger.info("Prompt Manager API starting")

    yield

    await engine.dispose()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency of every request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Time the request and log it once the response is ready."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s - %d - %.2fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response


app_settings = get_settings()

app = FastAPI(
    title="Prompt Manager API",
    description="Multi-tenant storage for user-owned prompts with public sharing.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Map service failures to HTTP status codes by kind."""
    status_code = STATUS_BY_KIND[exc.kind]
    if exc.kind is ErrorKind.INTERNAL:
        logger.error("Service failure: %s", exc.message)
        return JSONResponse(status_code=status_code, content={"detail": INTERNAL_ERROR_MESSAGE})

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed request bodies and query parameters as 400."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Hide database diagnostics from callers."""
    logger.error("Database error", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_MESSAGE})


app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(prompts.router)
app.include_router(share.router)
app.include_router(tags.router)
app.include_router(upload.router)

# Uploaded files are served read-only; public URLs point here
app.mount(
    "/assets",
    StaticFiles(directory=app_settings.storage_root, check_dir=False),
    name="assets",
)
