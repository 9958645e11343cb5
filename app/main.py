from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import CustomSettings, settings, setup_logging
from app.dependencies import build_services
from app.utils.logging_helpers import log_section_end, log_section_start

from app.routers import api_router, main_router


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    log_section_start(logger, "TV Guide Service startup")
    app_settings: CustomSettings = app.state.settings

    try:
        if getattr(app.state, "services", None) is None:
            if not app_settings.is_configured:
                raise RuntimeError("Set FS42_API_URL and TMDB_KEY in the environment or .env")
            logger.info("Creating HTTP clients and metadata cache...")
            app.state.services = build_services(app_settings)
        else:
            logger.info("Using pre-built service container")
        log_section_end(logger, "TV Guide Service startup")
    except Exception as e:
        logger.error(f"Failed to start TV Guide Service: {e}", exc_info=True)
        raise

    yield

    log_section_start(logger, "TV Guide Service shutdown")
    try:
        await app.state.services.aclose()
    except Exception as e:
        logger.error(f"Error while closing HTTP clients: {e}", exc_info=True)
    app.state.services = None
    log_section_end(logger, "TV Guide Service shutdown")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with details"""
    logger.error(f"Validation error for {request.method} {request.url.path}")
    logger.error(f"Validation details: {exc.errors()}")

    # Create a properly serializable error response
    errors = []
    for error in exc.errors():
        error_dict = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        errors.append(error_dict)

    return JSONResponse(
        status_code=422,
        content={
            "detail": errors
        }
    )


def create_app(app_settings: CustomSettings | None = None) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        app_settings: Settings to use (defaults to the environment-loaded settings)
    """
    application = FastAPI(
        title="TV Guide Service",
        version="0.1.0",
        lifespan=lifespan
    )
    application.state.settings = app_settings or settings
    application.state.services = None

    application.include_router(main_router)
    application.include_router(api_router)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    return application


app = create_app()
