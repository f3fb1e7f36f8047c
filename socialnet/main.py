import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialnet.api.api import api_router, tags_metadata
from socialnet.config import settings
from socialnet.context import AppContext
from socialnet.core.exceptions import AppException

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.

    This handles:
    1. Building the application context when none was injected
    2. Database connectivity check
    3. Redis connection for real-time push
    4. Orderly shutdown of both
    """
    # Startup
    logger.info(f"Starting {settings.app_name} (Environment: {settings.environment})")

    if getattr(app.state, "context", None) is None:
        app.state.context = AppContext.from_settings(settings)

    context: AppContext = app.state.context
    await context.startup()
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await context.shutdown()
    logger.info("Application shutdown complete")


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the process as `{"message": ...}`."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(
            f"Unhandled error (request {getattr(request.state, 'request_id', None)}): {exc}"
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Application factory pattern.

    Args:
        context: Collaborators to use; built from settings at startup when omitted

    Benefits:
    1. Easy testing with an injected context
    2. Multiple app instances possible
    3. Clear initialization flow
    """
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="REST backend for a social network",
        docs_url="/docs" if settings.debug else None,  # Hide docs in production
        redoc_url="/redoc" if settings.debug else None,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.context = context

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware for tracing
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        return response

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "timestamp": time.time(),
        }

    # Include API routers
    app.include_router(api_router, prefix="/api")

    return app


# Create the application instance
app = create_app()
