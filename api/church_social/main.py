"""
Church Social API.

FastAPI application serving the REST API, with the Socket.IO server for
real-time delivery mounted on the same ASGI app (``asgi_app``).
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

import socketio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from church_social.config import settings, validate_security_settings
from church_social.database import init_db
from church_social.logging_config import configure_logging
from church_social.middleware.rate_limit import limiter
from church_social.realtime import Gateway, create_socket_server, register_socket_handlers
from church_social.routers.comments import router as comments_router
from church_social.routers.events import router as events_router
from church_social.routers.groups import router as groups_router
from church_social.routers.messages import router as messages_router
from church_social.routers.notifications import router as notifications_router
from church_social.routers.posts import router as posts_router
from church_social.routers.sermons import router as sermons_router
from church_social.routers.users import router as users_router

# Import models to register them with Base.metadata
import church_social.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Application lifespan handler for startup/shutdown."""
    configure_logging(settings.log_level)
    validate_security_settings()
    await init_db()
    logger.info("Church Social API started (%s)", settings.environment)
    yield


app = FastAPI(
    title="Church Social API",
    description="Church community platform: feed, events, groups and messaging",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter state
app.state.limiter = limiter

# Rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(events_router)
app.include_router(groups_router)
app.include_router(sermons_router)
app.include_router(messages_router)
app.include_router(notifications_router)


# --- Real-time ---

sio = create_socket_server(settings.cors_origins_list)
app.state.gateway = Gateway(sio)
register_socket_handlers(sio, app.state.gateway)

asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path=settings.socketio_path)


# --- Middleware ---


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add a unique request ID to each request."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# --- Exception Handlers ---


def _sanitize_error_detail(error: dict[str, Any]) -> dict[str, Any]:
    """Sanitize Pydantic error detail to be JSON-serializable."""
    sanitized = {}
    for key, value in error.items():
        if key == "ctx":
            # Context may hold exception instances
            sanitized[key] = {k: str(v) for k, v in value.items()} if isinstance(value, dict) else str(value)
        elif key == "loc":
            sanitized[key] = [str(loc) for loc in value]
        elif key == "input":
            continue
        else:
            sanitized[key] = value
    return sanitized


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with consistent error format."""
    request_id = getattr(request.state, "request_id", None)

    errors = [_sanitize_error_detail(e) for e in exc.errors()]
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        message = f"{field}: {msg}" if field else msg
    else:
        message = "Validation error"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": message,
                "request_id": request_id,
                "details": errors,
            }
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent error format."""
    request_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled error in %s %s (request %s)", request.method, request.url.path, request_id)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "request_id": request_id,
            }
        },
    )


# --- Health Check ---


@app.get("/api/v1/health", tags=["System"])
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns 200 OK if the API is running, with the number of live sockets.
    """
    gateway: Gateway = app.state.gateway
    return {"status": "healthy", "connections": gateway.connection_count}
