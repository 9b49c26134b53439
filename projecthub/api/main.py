import os
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from projecthub.api.exceptions import ProjectHubException, ProjectNotFoundError
from projecthub.api.limiter import limiter
from projecthub.api.logging_config import logger, setup_logging
from projecthub.api.routes import projects
from projecthub.api.services.storage import NetworkSimulation, ProjectStorage
from projecthub.config import config

DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5000,http://localhost:8000"


def problem_details(request: Request, status_code: int, title: str, detail, code: str, type_: str):
    return JSONResponse(
        status_code=status_code,
        content={
            "type": f"https://projecthub.local/errors/{type_}",
            "title": title,
            "status": status_code,
            "detail": detail,
            "message": detail,
            "instance": str(request.url),
            "code": code,
            "extensions": {
                "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
            },
        },
    )


def format_validation_errors(errors) -> str:
    """Render pydantic errors as one readable line, e.g. 'Validation error: Field required at "name"'."""
    parts = []
    for error in errors:
        # Drop the request location ("body", "path", ...) from the field path
        loc = [str(part) for part in error.get("loc", ())[1:]]
        message = error.get("msg", "Invalid value")
        parts.append(f'{message} at "{".".join(loc)}"' if loc else message)
    return "Validation error: " + "; ".join(parts)


def allowed_origins() -> List[str]:
    """CORS origins from the comma-separated ALLOWED_ORIGINS variable."""
    raw = os.getenv("ALLOWED_ORIGINS", DEFAULT_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_storage() -> ProjectStorage:
    simulation = NetworkSimulation.from_config(config)
    storage = ProjectStorage(simulation)
    if config.get("storage", "seed_sample_data", True):
        storage.seed_sample_data()
    if simulation.enabled:
        logger.info(
            f"Network simulation on: {simulation.min_delay_ms}-{simulation.max_delay_ms}ms, "
            f"failure rate {simulation.failure_rate}"
        )
    return storage


def create_app(storage: Optional[ProjectStorage] = None) -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="ProjectHub API",
        description="ProjectHub - project tracking with favorites",
        version="0.1.0",
    )
    app.state.storage = storage if storage is not None else create_storage()

    # Gzip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Prometheus metrics (skipped in tests)
    if os.getenv("APP_ENV") != "test":
        Instrumentator().instrument(app).expose(app)
        logger.info("Prometheus Instrumentator initialized")

    @app.exception_handler(ProjectHubException)
    async def projecthub_exception_handler(request: Request, exc: ProjectHubException):
        name = exc.__class__.__name__
        error_code = name.replace("Error", "").upper()
        if error_code == "PROJECTHUBEXCEPTION":
            error_code = "INTERNAL_ERROR"
        return problem_details(request, exc.status_code, name, exc.detail, error_code, name.lower())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        # An id that is not an integer cannot name a project
        if errors and all(error.get("loc", ("",))[0] == "path" for error in errors):
            return await projecthub_exception_handler(request, ProjectNotFoundError())
        return problem_details(
            request,
            400,
            "Validation Error",
            format_validation_errors(errors),
            "VALIDATION",
            "validation-error",
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return problem_details(
            request,
            exc.status_code,
            "HTTP Exception",
            exc.detail,
            f"HTTP_{exc.status_code}",
            "http-exception",
        )

    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        )
        return response

    @app.get("/")
    def read_root():
        return {"message": "ProjectHub API is running"}

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
