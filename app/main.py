"""
Application factory and process entry point.

`create_app` only builds the ASGI application, so tests and ASGI runners can
embed it (``uvicorn --factory app.main:create_app``). `run_server` builds it
and binds the configured port.
"""
from contextlib import asynccontextmanager
from typing import Optional, Sequence
import logging

import uvicorn
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.api import api_router
from app.api.endpoints import status
from app.core.config import PROJECT_NAME, VERSION, Settings, load_settings
from app.core.logging_config import SERVER_LOGGER, configure_logging
from app.db.seed import SEED_USERS
from app.middleware.access_log import AccessLogMiddleware
from app.middleware.body_parser import BodyParserMiddleware
from app.middleware.cors import CORS_METHODS, OptionsCORSMiddleware
from app.middleware.error_handlers import JSONErrorMiddleware, http_exception_handler
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.schemas.user import User

logger = logging.getLogger(__name__)
server_logger = logging.getLogger(SERVER_LOGGER)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", app.title, app.state.settings.ENVIRONMENT)
    yield
    logger.info("Shutting down %s", app.title)


def create_app(
    settings: Optional[Settings] = None,
    seed_users: Sequence[User] = SEED_USERS,
) -> FastAPI:
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title=PROJECT_NAME,
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.seed_users = tuple(seed_users)

    # El último middleware añadido es el más externo:
    # security headers -> CORS -> access log -> errores -> body parser -> rutas
    app.add_middleware(BodyParserMiddleware, limit=settings.BODY_LIMIT)
    app.add_middleware(JSONErrorMiddleware, expose_errors=settings.is_development)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        OptionsCORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(status.router, tags=["status"])
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


def run_server(settings: Optional[Settings] = None) -> None:
    """Build the application and serve it until the process is stopped."""
    if settings is None:
        settings = load_settings()
    configure_logging(settings)

    app = create_app(settings)

    server_logger.info("🚀 Server running on port %s", settings.PORT)
    server_logger.info("📊 Environment: %s", settings.ENVIRONMENT)
    server_logger.info("🔗 Health check: http://localhost:%s/health", settings.PORT)

    uvicorn.run(
        app,
        host=settings.LISTEN_HOST,
        port=settings.PORT,
        log_config=None,
        access_log=False,
    )
