"""Observability utilities."""

from .audit import AuditLogRecord, AuditMiddleware
from .metrics import (
    AUTHORIZATION_DENIAL_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    VERSION_BUMP_COUNTER,
    PrometheusMiddleware,
    metrics_router,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
)

__all__ = [
    "AUTHORIZATION_DENIAL_COUNTER",
    "AuditLogRecord",
    "AuditMiddleware",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "VERSION_BUMP_COUNTER",
    "metrics_router",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
]
