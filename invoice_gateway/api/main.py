"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from invoice_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from invoice_gateway.api.v1 import allocation, orphans, validation, invoices
from invoice_gateway.infrastructure.observability.logging import setup_logging
from invoice_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)

INVOICE_ADMIN_PREFIX = "/v1/credit-card-invoices"


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Invoice Gateway",
        description="Credit card invoice allocation and reconciliation service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(allocation.router, prefix=INVOICE_ADMIN_PREFIX, tags=["allocation"])
    app.include_router(orphans.router, prefix=INVOICE_ADMIN_PREFIX, tags=["orphans"])
    app.include_router(validation.router, prefix=INVOICE_ADMIN_PREFIX, tags=["validation"])
    app.include_router(invoices.router, prefix=INVOICE_ADMIN_PREFIX, tags=["invoices"])

    return app


app = create_app()
