"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from dealdesk.api.middleware import MetricsMiddleware, RequestIDMiddleware
from dealdesk.api.v1 import desk, eligibility, vin
from dealdesk.config import settings
from dealdesk.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Dealdesk Gateway",
        description="Deal pricing and lender eligibility service",
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

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(desk.router, prefix="/v1", tags=["desk"])
    app.include_router(eligibility.router, prefix="/v1", tags=["eligibility"])
    app.include_router(vin.router, prefix="/v1", tags=["vin"])

    return app


app = create_app()
