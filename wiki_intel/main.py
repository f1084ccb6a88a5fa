from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from .api.manifest import router as manifest_router
from .api.routes import router as entrypoint_router
from .core.audit import REQUEST_ID_HEADER, AuditLoggingMiddleware
from .core.config import get_settings
from .core.logging import configure_logging, get_logger
from .core.payments import PAYMENT_RESPONSE_HEADER
from .entrypoints.registry import bootstrap_entrypoint_registry, entrypoint_registry

settings = get_settings()
configure_logging(
    settings.observability.log_level,
    json_logs=settings.observability.json_logs,
    service=settings.service.name,
)
logger = get_logger(name=__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    bootstrap_entrypoint_registry()
    logger.info(
        "service_started",
        service=settings.service.name,
        version=settings.service.version,
        entrypoints=entrypoint_registry.list(),
        payments_enabled=settings.payments.enabled,
    )
    yield
    logger.info("service_stopped", service=settings.service.name)


app = FastAPI(title="wiki-intel", version=settings.service.version, lifespan=app_lifespan)
app.add_middleware(AuditLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[PAYMENT_RESPONSE_HEADER, REQUEST_ID_HEADER],
)
app.include_router(entrypoint_router)
app.include_router(manifest_router)


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    return {"message": f"{settings.service.name} running"}


@app.get("/metrics", tags=["observability"])
async def metrics() -> Response:
    if not settings.observability.prometheus_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
