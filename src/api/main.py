import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.metrics import EXTRACTION_ERRORS_TOTAL, REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL
from api.routers import auth, ops, tasks
from api.state import AppServices, build_services
from todo_ai.config import Settings
from todo_ai.errors import ErrorKind, ExtractionError, TodoError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.EXTRACTION_TRANSPORT: 502,
    ErrorKind.EXTRACTION_PARSE: 502,
    ErrorKind.PERSISTENCE: 500,
    ErrorKind.NOT_FOUND_OR_UNAUTHORIZED: 404,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.USER_ALREADY_EXISTS: 409,
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    if isinstance(exc, ExtractionError):
        EXTRACTION_ERRORS_TOTAL.labels(kind=exc.kind.value).inc()
        logger.error(f"Extraction failed ({exc.kind.value}): {exc}")
    return _error(ERROR_STATUS[exc.kind], exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        message = "invalid request"
    return _error(400, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, "internal server error")


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[AppServices] = None,
) -> FastAPI:
    """Build the application.

    When ``services`` is given it is used as-is (and not closed on shutdown);
    otherwise the services, including the database pool, are built at startup.
    """
    settings = settings or (services.settings if services else Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            app.state.services = services
            yield
            return

        app.state.services = await build_services(settings)
        try:
            yield
        finally:
            logger.info("Shutting down, closing services")
            await app.state.services.close()

    app = FastAPI(title="todo-ai-backend", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length", "X-Dropped-Candidates"],
        allow_credentials=False,
        max_age=12 * 3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        # unhandled errors escape call_next; they still leave as a 500
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed = time.time() - start
            route = request.scope.get("route")
            endpoint = getattr(route, "path", "unmatched")
            REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(status_code)).inc()
            REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(elapsed)
            logger.info(
                f"{request.method} {request.url.path} -> {status_code} ({elapsed * 1000:.1f} ms)"
            )

    app.add_exception_handler(TodoError, todo_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(ops.router)
    app.include_router(auth.router)
    app.include_router(tasks.router)
    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(f"Server starting on port {settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
