"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_gateway.api.v1 import (
    billing_periods,
    dashboard,
    installments,
    payment_sessions,
    spending,
    transactions,
    user_settings,
)
from finance_gateway.domain.exceptions import (
    CategoryNotFoundError,
    DomainException,
    SessionNotFoundError,
    SessionStateError,
    TransactionNotFoundError,
    ValidationError,
)
from finance_gateway.infrastructure.database.session import init_db
from finance_gateway.infrastructure.observability.logging import setup_logging
from finance_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)

_STATUS_BY_EXCEPTION = [
    (ValidationError, 422),
    (SessionStateError, 409),
    (SessionNotFoundError, 404),
    (TransactionNotFoundError, 404),
    (CategoryNotFoundError, 404),
]


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Map domain errors raised by endpoints to HTTP status codes"""
    status_code = next((code for cls, code in _STATUS_BY_EXCEPTION if isinstance(exc, cls)), 400)
    logging.warning(
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": getattr(request.state, "request_id", "unknown"), "status": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        lifespan=lifespan,
        title="Finance Gateway",
        description="Billing periods, installment plans and guided bill payment sessions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(user_settings.router, prefix="/v1", tags=["settings"])
    app.include_router(billing_periods.router, prefix="/v1", tags=["billing-periods"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(payment_sessions.router, prefix="/v1", tags=["payment-sessions"])
    app.include_router(spending.router, prefix="/v1", tags=["spending"])

    return app


app = create_app()
