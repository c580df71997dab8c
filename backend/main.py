"""Main FastAPI application."""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from backend.config import settings
from backend.api.routes import schema, diagrams
from backend.api.websocket import viewport_websocket_endpoint
from backend.dependencies import get_dump_client
from dumplens.render import initialize_renderer, reset_renderer
from dumplens.utils.error_handling import (
    ErrorContext,
    OperationError,
    RendererConfigError,
    create_error_response,
    log_error_with_context,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ],
    force=True  # Force reconfiguration
)

# Disable uvicorn access logs (we use our own)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # Startup: the renderer is configured exactly once per process
    config = initialize_renderer()
    logger.info(f"BACKEND STARTUP: renderer engine '{config.engine}', dump service {settings.dump_service_url}")
    yield
    # Shutdown
    await get_dump_client().close()
    reset_renderer()
    logger.info("BACKEND: Shutting down")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan
)


# Request logging middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(f"INCOMING REQUEST: {request.method} {request.url.path}")
        if request.query_params:
            logger.debug(f"  Query params: {dict(request.query_params)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"RESPONSE: {request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
        return response


# Add request logging middleware (before CORS so we see all requests)
app.add_middleware(RequestLoggingMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Export-Method"],
)

# Domain errors that escape a route
@app.exception_handler(OperationError)
async def operation_error_handler(request: Request, exc: OperationError):
    context = exc.context or ErrorContext(operation=f"{request.method} {request.url.path}")
    log_error_with_context(exc, context)
    status_code = 503 if isinstance(exc, RendererConfigError) else 500
    return JSONResponse(status_code=status_code, content=create_error_response(exc, context))


# Routes
app.include_router(schema.router)
app.include_router(diagrams.router)

# WebSocket
app.websocket("/ws/viewport/{session_id}")(viewport_websocket_endpoint)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        workers=1,
        access_log=False  # We use our own request logging
    )
