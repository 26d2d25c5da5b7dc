"""
Application factory for the Coursehub API.

create_app builds one Settings value and hands it to the database, the
services and the security helpers; nothing reads settings from a global.
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursehub.core.config import Settings
from coursehub.core.database import Database
from coursehub.core.errors import CoursehubError, ErrorKind
from coursehub.core.logging_config import configure_logging
from coursehub.routers import api_router
from coursehub.services import Services, build_services


logger = logging.getLogger(__name__)


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TRANSIENT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
}


async def coursehub_error_handler(request: Request, exc: CoursehubError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    if exc.kind is ErrorKind.TRANSIENT:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": f"Validation Error: {', '.join(messages)}",
            "kind": ErrorKind.VALIDATION_FAILED.value,
        },
    )


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        services: Prebuilt services; built around a new Database at startup when omitted
    """
    settings = settings or Settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database: Optional[Database] = None
        if getattr(app.state, "services", None) is None:
            database = Database(settings)
            if settings.AUTO_CREATE_TABLES:
                await database.create_all()
            app.state.services = build_services(database, settings)
        logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")

        yield

        if database is not None:
            await database.dispose()
        logger.info(f"{settings.PROJECT_NAME} shut down")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(CoursehubError, coursehub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["health"])
    async def health() -> Dict[str, str]:
        database_ok = await app.state.services.database.check_connection()
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
        }

    return app
