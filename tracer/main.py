from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from tracer.config import Settings, settings as default_settings
from tracer.logging_config import setup_logging
from tracer.middleware.tracing import TraceMiddleware, Tracer
from tracer.routers import health

logger = structlog.get_logger()


def create_app(settings: Settings | None = None, tracer: Tracer | None = None) -> FastAPI:
    settings = settings or default_settings
    tracer = tracer or Tracer(header_name=settings.header_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, json_output=settings.json_logs)
        logger.info("tracer_starting", environment=settings.environment, header=settings.header_name)
        yield
        logger.info("tracer_shutting_down")

    app = FastAPI(
        title="HTTP Tracer",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.tracer = tracer
    app.add_middleware(TraceMiddleware, tracer=tracer)
    app.include_router(health.router)
    return app
