from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.response import error_response
from app.api.routes import auth, health, join_requests, notifications, projects, skills, users
from app.core.config import get_settings
from app.core.errors import ErrorCode, create_error_detail
from app.logging import RequestIdMiddleware, configure_logging, get_logger
from app.observability.metrics import MetricsMiddleware

load_dotenv()
configure_logging()
logger = get_logger()

_STATUS_CODES = {
    401: ErrorCode.NOT_AUTHENTICATED,
    403: ErrorCode.NO_PERMISSION,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
}


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="CollabHub API",
        version=settings.app_version,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings

    app.add_middleware(RequestIdMiddleware)
    if settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)
    cors_allow_origins = settings.cors_origins or []
    cors_allow_credentials = True
    if cors_allow_origins == ["*"]:
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins,
        allow_credentials=cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api")
    app.include_router(health.liveness_router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(skills.router, prefix="/api/v1")
    app.include_router(projects.router, prefix="/api/v1")
    app.include_router(join_requests.router, prefix="/api/v1")
    app.include_router(notifications.router, prefix="/api/v1")
    if settings.metrics_enabled:
        app.include_router(health.metrics_router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = create_error_detail(ErrorCode.VALIDATION_ERROR, "Validation error", _validation_errors(exc))
        return JSONResponse(status_code=422, content=error_response(detail))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and {"code", "message"}.issubset(detail.keys()):
            content = error_response(detail)
        else:
            message = detail if isinstance(detail, str) else "An unexpected error occurred"
            code = _STATUS_CODES.get(exc.status_code, ErrorCode.BAD_REQUEST)
            content = error_response(create_error_detail(code, message))
        if exc.status_code >= 500:
            logger.error("request_failed", status_code=exc.status_code, code=content["code"])
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("application_started", environment=settings.app_env)
        logger.info("cors_origins_configured", origins=settings.cors_origins)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("application_stopped", environment=settings.app_env)

    return app


app = create_app()
