"""FastAPI application wiring for the sanitizer pipeline."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI

from mongo_sanitize.config.loader import MongoSanitizeSettings, build_options, get_settings
from mongo_sanitize.health import router as health_router
from mongo_sanitize.logging_config import setup_logging
from mongo_sanitize.middleware.asgi import PipelineMiddleware
from mongo_sanitize.middleware.mongo_sanitizer import MongoSanitizer, create
from mongo_sanitize.middleware.param_sanitizer import path_params_dependency
from mongo_sanitize.middleware.pipeline import MiddlewarePipeline

logger = structlog.get_logger()


def _build_pipeline(sanitizer: MongoSanitizer) -> MiddlewarePipeline:
    pipeline = MiddlewarePipeline()
    pipeline.add(sanitizer)
    return pipeline


def create_app(settings: MongoSanitizeSettings | None = None) -> FastAPI:
    """Build the app; invalid sanitizer options raise here, before serving.

    Path parameters are matched after the ASGI pipeline runs, so the
    ``params`` section is sanitized by an app-wide dependency instead.
    """
    settings = settings or get_settings()
    sanitizer = create(build_options(settings))
    options = sanitizer.options
    pipeline = _build_pipeline(sanitizer)

    dependencies = []
    if "params" in options.sanitize_objects:
        dependencies.append(Depends(path_params_dependency(options)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            log_level=settings.log_level,
            json_format=settings.log_json,
            diagnostics_level=options.debug.level if options.debug.enabled else None,
        )
        logger.info("app_started", options_file=settings.options_file)
        yield
        logger.info("app_stopped")

    app = FastAPI(title="Mongo Sanitize", lifespan=lifespan, dependencies=dependencies)
    app.state.pipeline = pipeline
    app.include_router(health_router)
    app.add_middleware(PipelineMiddleware, pipeline=pipeline)
    return app
