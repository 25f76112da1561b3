"""FastAPI application for the storefront API."""

import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.storefront.api.http.app_data import ApplicationDependencies
from src.storefront.api.http.envelope import (
    correlation_id_for,
    register_exception_handlers,
    unhandled_exception_handler,
)
from src.storefront.api.http.middleware.limiter import (
    close_rate_limiter,
    configure_rate_limiter,
    default_rate_limit,
)
from src.storefront.api.http.routers.analytics import router as analytics_router
from src.storefront.api.http.routers.auth import router as auth_router
from src.storefront.api.http.routers.categories import router as categories_router
from src.storefront.api.http.routers.health import router as health_router
from src.storefront.api.http.routers.products import router as products_router
from src.storefront.api.utils.app_startup import configure_logging
from src.storefront.core.security import CORRELATION_ID_HEADER, sanitize_headers
from src.storefront.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    TokenBlacklistService,
)
from src.storefront.runtime.context import get_config

configure_logging()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}
HSTS_HEADER = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if get_config().app.environment == "production":
            response.headers.setdefault("Strict-Transport-Security", HSTS_HEADER)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


def create_app() -> FastAPI:
    config = get_config()
    is_production = config.app.environment == "production"
    cors = config.app.cors

    if is_production and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: wildcard origins cannot be combined with "
            "credentials in production"
        )

    application = FastAPI(
        title="Storefront API",
        description="Products, categories, search and analytics for the storefront",
        version=config.app.version,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    register_exception_handlers(application)

    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
        expose_headers=[CORRELATION_ID_HEADER],
    )

    application.include_router(health_router)
    for router in (auth_router, products_router, categories_router, analytics_router):
        application.include_router(router, dependencies=[Depends(default_rate_limit)])

    return application


app = create_app()


def client_ip_of(request: Request) -> str:
    """First hop of X-Forwarded-For when present, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def log_requests(request: Request, call_next):
    correlation_id = correlation_id_for(request)
    started = time.perf_counter()

    with logger.contextualize(
        correlation_id=correlation_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_ip_of(request),
    ):
        logger.bind(
            user_agent=request.headers.get("user-agent", "unknown"),
            headers=sanitize_headers(dict(request.headers)),
        ).info("request.start")

        try:
            response = await call_next(request)
        except Exception as exc:
            response = await unhandled_exception_handler(request, exc)

        logger.bind(
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        ).info("request.end")

    response.headers[CORRELATION_ID_HEADER] = correlation_id
    return response


async def startup() -> None:
    config = get_config()
    logger.info(
        "Starting {} {} ({})",
        config.app.name,
        config.app.version,
        config.app.environment,
    )

    database_service = DbSessionService()
    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    app.state.app_dependencies = ApplicationDependencies(
        jwt_verify_service=JwtVerificationService(),
        jwt_generation_service=JwtGeneratorService(),
        database_service=database_service,
    )
    configure_rate_limiter()


async def shutdown() -> None:
    logger.info("Shutting down storefront API")
    await close_rate_limiter()

    deps: ApplicationDependencies = app.state.app_dependencies
    try:
        with deps.database_service.session_scope() as session:
            TokenBlacklistService(session).purge_expired()
    except Exception as exc:
        logger.warning("Could not purge expired blacklisted tokens: {}", exc)


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.app.host, port=config.app.port, access_log=False)
