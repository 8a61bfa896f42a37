"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse

from src.user_api import __version__
from src.user_api.api.http.app_data import ApplicationDependencies
from src.user_api.api.http.routers.health import router as health_router
from src.user_api.api.http.routers.service.user import router as user_router
from src.user_api.api.utils.app_startup import configure_logging
from src.user_api.core.errors import ResourceError, ValidationFailedError
from src.user_api.core.services import DbManageService, DbSessionService
from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.context import get_config

REQUEST_ID_HEADER = "X-Request-ID"

# expose the factory and lifecycle hooks for tests
__all__ = ["app", "create_app", "startup", "shutdown"]


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "-"


def _error_response(
    request: Request, status_code: int, content: dict
) -> JSONResponse:
    request_id = _request_id(request)
    return JSONResponse(
        status_code=status_code,
        content={**content, "request_id": request_id},
        headers={REQUEST_ID_HEADER: request_id},
    )


# --- Exception handlers ---
async def resource_error_handler(request: Request, exc: ResourceError) -> JSONResponse:
    content: dict = {"detail": exc.detail}
    if isinstance(exc, ValidationFailedError):
        content["errors"] = exc.errors
    logger.bind(status_code=exc.status_code, error_type=type(exc).__name__).info(
        "request.rejected: {}", exc.detail
    )
    return _error_response(request, exc.status_code, content)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    # A body that is not JSON at all is a bad request, not a constraint violation
    if any(error.get("type") == "json_invalid" for error in errors):
        return _error_response(request, 400, {"detail": "Malformed JSON body"})
    return _error_response(
        request,
        422,
        {"detail": ValidationFailedError.default_detail, "errors": _group(errors)},
    )


def _group(errors) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for error in errors:
        key = ".".join(str(part) for part in error.get("loc", ())) or "request"
        grouped.setdefault(key, []).append(error.get("msg", ""))
    return grouped


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={REQUEST_ID_HEADER: request_id},
            )


# --- Lifecycle hooks ---
def startup(app: FastAPI, config: ConfigData) -> None:
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService(config)
    if config.database.create_tables:
        DbManageService(engine=database_service.engine).create_all()

    app.state.app_dependencies = ApplicationDependencies(
        config=config,
        database_service=database_service,
    )


def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


# --- FastAPI app setup ---
def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the application around ``config`` (the current config by default)."""
    app_config = config or get_config()
    configure_logging(app_config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup(app, app_config)
        try:
            yield
        finally:
            shutdown(app)

    is_production = app_config.app.environment == "production"
    app = FastAPI(
        title=app_config.app.title,
        version=__version__,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    app.add_exception_handler(ResourceError, resource_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.middleware("http")(log_requests)

    app.include_router(health_router)
    app.include_router(user_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
