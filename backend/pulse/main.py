import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pulse.config import settings
from pulse.dependencies import get_policy, get_stage_config_table
from pulse.lifecycle.router import router as lifecycle_router
from pulse.middleware.error_handler import ErrorHandlerMiddleware
from pulse.middleware.logging import RequestLoggingMiddleware
from pulse.signals.router import router as signals_router

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    ),
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Policy and stage table are read-only for the life of the process; fail fast if invalid
    policy = get_policy()
    table = get_stage_config_table()
    logger.info(
        "triage_engine_ready",
        auto_approval_threshold=policy.auto_approval_threshold,
        high_risk_amount_threshold=policy.high_risk_amount_threshold,
        signal_types=sorted(table.types),
    )
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Pulse Triage Engine",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
    )

    cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(signals_router, prefix="/api/v1")
    app.include_router(lifecycle_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
