"""
FastAPI application entry point.
Application factory with middleware, exception handlers and route configuration.
"""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging
import uuid

from club_api.config import Settings, get_settings
from club_api.database import AppContext, Database
from club_api.errors import AppError
from club_api.routes import health, images, resources

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    413: "FILE_TOO_LARGE",
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def add_cors_headers(response: JSONResponse, request: Request) -> JSONResponse:
    """
    Add CORS headers to error responses.
    Responses produced by exception handlers may bypass CORSMiddleware.
    Only origins listed in CORS_ORIGINS are echoed back.
    """
    allowed_origins = request.app.state.context.settings.CORS_ORIGINS
    origin = request.headers.get("origin")
    if "*" in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Vary"] = "Origin"
    else:
        return response
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "*"
    return response


def error_response(request: Request, status_code: int, error: str, code: str, details=None) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content={"error": error, "details": jsonable_encoder(details), "code": code},
    )
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return add_cors_headers(response, request)


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Render taxonomy errors as {error, details, code}."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{type(exc).__name__} on {request.method} {request.url.path}: "
            f"{exc.message} (code: {exc.code})"
        )
        return error_response(request, exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions raised by the framework (unknown route, wrong method, ...)."""
        logger.warning(
            f"HTTPException on {request.method} {request.url.path}: "
            f"status {exc.status_code}, detail {exc.detail}"
        )
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = "Not found"
            details = "The requested resource does not exist"
        else:
            message = str(exc.detail)
            details = None
        code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return error_response(request, exc.status_code, message, code, details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            "BAD_REQUEST",
            exc.errors(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}:\n"
            f"  Error: {str(exc)}\n"
            f"  Error type: {type(exc).__name__}",
            exc_info=True
        )
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "INTERNAL_SERVER_ERROR",
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The AppContext (settings + database pool) is created here, once, and
    stored on app.state for the request dependencies.
    """
    settings = settings or get_settings()
    context = AppContext(settings=settings, database=Database(settings))

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,  # Must be False when using wildcard origin
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Tag each request with an id and log its outcome."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        method = request.method
        path = request.url.path

        logger.debug(f"[{request_id}] Incoming {method} request to {path}")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"[{request_id}] Error processing {method} {path}: {str(e)}\n"
                f"  Error type: {type(e).__name__}",
                exc_info=True
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(f"[{request_id}] Response status: {response.status_code} for {method} {path}")
        return response

    register_exception_handlers(app)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(images.router, prefix="/api", tags=["images"])
    app.include_router(resources.events_router, prefix="/api", tags=["events"])
    app.include_router(resources.gallery_router, prefix="/api", tags=["gallery"])
    app.include_router(resources.team_router, prefix="/api", tags=["team"])

    @app.get("/")
    async def root():
        """Root endpoint - service banner."""
        return {
            "message": settings.API_TITLE,
            "status": "healthy",
            "version": settings.API_VERSION
        }

    @app.on_event("startup")
    async def startup_event():
        """
        Verify the database on startup.
        Non-blocking: the app starts even if the database is unreachable.
        """
        database = context.database
        logger.info(f"Starting {settings.API_TITLE} {settings.API_VERSION}")
        logger.info(f"Database URL: {database.masked_url}")
        logger.info(f"Max file size: {settings.MAX_FILE_SIZE:,} bytes")

        try:
            await database.connect()
            if settings.DB_CREATE_TABLES:
                await database.create_all()
        except Exception as e:
            logger.error(
                f"Failed to initialize database on startup: {str(e)}\n"
                f"The application will continue to run, but database-dependent endpoints will fail.\n"
                f"Please check your DATABASE_URL configuration and network connectivity."
            )

    @app.on_event("shutdown")
    async def shutdown_event():
        """Close database connections on application shutdown."""
        try:
            await context.database.dispose()
        except Exception as e:
            logger.warning(f"Error during database shutdown: {str(e)}")

    return app


configure_logging(get_settings())

app = create_app()
