"""Main FastAPI application for the OpenAI compatibility shim."""

import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .errors import MalformedRequestError, openai_error_body
from .routes import chat, completions, models
from .services.native import HttpNativeHandler


def setup_logging():
    """Configure logging with console and optional file output."""
    log_level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    # File handler (if enabled)
    if settings.LOG_TO_FILE:
        if os.path.isabs(settings.LOG_DIR):
            log_dir = Path(settings.LOG_DIR)
        else:
            # Relative to the project root (parent of the package)
            project_root = Path(__file__).parent.parent
            log_dir = project_root / settings.LOG_DIR

        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / settings.LOG_FILE

        # Rotating file handler: 10MB max, keep 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)

        return str(log_file)

    return None


# Configure logging
log_file_path = setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting OpenAI compatibility shim...")

    native_handler = HttpNativeHandler()
    app.state.native_handler = native_handler

    logger.info(f"Server ready on port {settings.PORT}")
    logger.info(f"Native service: {native_handler.base_url}")
    if log_file_path:
        logger.info(f"Log file: {log_file_path}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await native_handler.aclose()


app = FastAPI(
    title="OpenAI Compatibility Shim",
    description="OpenAI REST schema in front of a native model-serving API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat.router, prefix="/v1")
app.include_router(completions.router, prefix="/v1")
app.include_router(models.router, prefix="/v1")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "OpenAI Compatibility Shim",
        "version": "1.0.0",
        "description": "OpenAI-compatible API for a native model-serving backend",
        "endpoints": {
            "chat": "/v1/chat/completions",
            "completions": "/v1/completions",
            "models": "/v1/models",
            "health": "/health",
        },
        "documentation": "/docs",
    }


def _describe_validation_error(exc: RequestValidationError) -> str:
    """First validation problem as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    # Body-level errors (e.g. undecodable JSON) carry a bare position, not a field
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part != "body" and not isinstance(part, int)
    )
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors and never reach the native service."""
    message = _describe_validation_error(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content=openai_error_body(message, "invalid_request_error"),
    )


@app.exception_handler(MalformedRequestError)
async def malformed_request_handler(request: Request, exc: MalformedRequestError):
    """Requests that validate but cannot be translated (e.g. bad image data)."""
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_openai())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework-level rejections (unparseable body, unknown route) in the public error shape."""
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.status_code} {exc.detail}")
    error_type = "invalid_request_error" if exc.status_code < 500 else "api_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=openai_error_body(str(exc.detail), error_type),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(httpx.TransportError)
async def native_unreachable_handler(request: Request, exc: httpx.TransportError):
    """The native service could not be reached before any output was written."""
    logger.error(f"Native service unreachable for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content=openai_error_body(f"native service unavailable: {exc}", "api_error"),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content=openai_error_body(str(exc), "api_error"),
    )


def main():
    """Run the server."""
    import uvicorn

    uvicorn.run(
        "openai_compat.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG_MODE,
    )


if __name__ == "__main__":
    main()
