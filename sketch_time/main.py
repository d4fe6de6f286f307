import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from sketch_time.api import health, sessions, telegram, timers
from sketch_time.api.dependencies import Services, build_services
from sketch_time.core.config import settings, validate_config
from sketch_time.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from sketch_time.core.logging import LOGGER_NAME, configure_logging
from sketch_time.core.middleware.request_id import RequestIdMiddleware
from sketch_time.core.validation import validate_env


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the API. The timer registry lives exactly as long as the app."""
    configure_logging(settings.ENV)
    validate_env()
    validate_config(strict=getattr(settings, "CONFIG_STRICT", False))

    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger(LOGGER_NAME)
        logger.info("Starting Sketch-Time backend...")
        try:
            yield
        finally:
            await app.state.services.timers.shutdown()
            logger.info("Stopping Sketch-Time backend...")

    app = FastAPI(title="Sketch-Time", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Mini-App is served from APP_URL
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.APP_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(timers.router, tags=["timers"])
    app.include_router(sessions.router, tags=["sessions"])
    app.include_router(telegram.router)
    app.include_router(health.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sketch_time.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
