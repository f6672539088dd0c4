import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.deps import Backend, Settings, build_backend, get_settings
from src.api.routes import analytics, tracking
from src.app_shell.config import configure_logging, validate_ops_rules
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler for startup/shutdown.

    Rules and stores not injected by `create_app` are loaded here, so that
    importing this module touches neither the rules file nor the database.
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)

    # Fail fast on a broken environment
    try:
        if app.state.rules is None:
            app.state.rules = load_rules(settings.rules_path)
        validate_ops_rules(app.state.rules, settings.data_dir)
        if app.state.backend is None:
            app.state.backend = build_backend(settings)
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    logger.info("Rules loaded from %s; store=%s", settings.rules_path, settings.store)
    yield


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are caller errors: 400 with the first problem."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(loc) for loc in first["loc"][1:]) or "request"
        message = f"Invalid {field}: {first['msg']}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred"},
    )


def create_app(
    settings: Settings | None = None,
    rules: Rules | None = None,
    backend: Backend | None = None,
) -> FastAPI:
    """
    Build an application instance with its own stores.

    Tests pass rules and a memory backend with a fixed clock. Anything
    left out is loaded at startup by the lifespan handler.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="AdPulse API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.rules = rules
    app.state.backend = backend

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(tracking.router, prefix="/api/tracking", tags=["Tracking"])
    app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])

    # CORS (Allow dashboard frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api", "store": settings.store}

    return app


app = create_app()
