"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cresus_dossier.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cresus_dossier.api.v1 import advisor, auth, dossiers, drafts
from cresus_dossier.infrastructure.database.session import init_db
from cresus_dossier.infrastructure.observability.logging import setup_logging
from cresus_dossier.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="CRÉSUS Dossier Service",
        description="Beneficiary budget intake and advisor dashboard",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
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

    # Register API routers
    app.include_router(drafts.router, prefix="/v1", tags=["drafts"])
    app.include_router(dossiers.router, prefix="/v1", tags=["dossiers"])
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(advisor.router, prefix="/v1", tags=["advisor"])

    return app


app = create_app()
