import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.core.dependencies import (
    create_connection,
    create_favourite_storage,
    create_recipe_search,
)
from app.errors import MealPlannerError, StorageError
from app.routes import api, pages
from app.services import prometheus_metrics

logger = logging.getLogger(__name__)

# App configuration
APP_NAME = "Meal Planner"
VERSION = "1.0.0"

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB and build the shared services. Startup fails if the store is unreachable."""
    settings: Settings = app.state.settings
    connection = create_connection(settings)
    try:
        connection.ping()
        storage = create_favourite_storage(connection)
        storage.ensure_indexes()
    except StorageError:
        logger.critical("MongoDB unavailable, refusing to start")
        connection.close()
        raise

    app.state.connection = connection
    app.state.favourite_storage = storage
    app.state.recipe_search = create_recipe_search(settings)
    logger.info("%s backend running on http://localhost:%s", APP_NAME, settings.PORT)

    yield

    connection.close()


async def _app_error_handler(request: Request, exc: MealPlannerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    """Every error reaches the client as {"error": message}; internals stay in the logs."""
    app.add_exception_handler(MealPlannerError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title=APP_NAME, version=VERSION, lifespan=lifespan)
    app.state.settings = settings

    # Any origin during development, only the known frontends in production
    if settings.is_production:
        allow_origins = settings.CORS_ORIGINS
    else:
        allow_origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Mount static files
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Include routers
    app.include_router(api.router)
    app.include_router(pages.router)

    register_exception_handlers(app)

    # Basic health check
    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        body, content_type = prometheus_metrics.render_latest()
        return Response(content=body, media_type=content_type)

    return app


# A missing required variable raises ConfigurationError here and aborts startup
settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app(settings)
