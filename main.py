"""
Main FastAPI application entry point
"""
import time

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from account_management.api import router as admin_router
from api.errors import register_exception_handlers
from api.health import router as health_router
from core.config import settings
from core.logging import get_logger
from core.metrics import get_metrics_response, metrics
from database.base import Base
from database.session import SessionLocal, engine
from storefront.api import catalog_router, router as checkout_router, webhook_router
from storefront.bootstrap import bootstrap_database

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [settings.base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Signed cookie sessions for the admin back office
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret.get_secret_value(),
    https_only=settings.is_production,
    same_site="lax",
)


# Request tracking middleware
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Track all HTTP requests for metrics"""
    start_time = time.time()

    # Skip metrics endpoint to avoid recursion
    if request.url.path == "/metrics":
        return await call_next(request)

    response = await call_next(request)

    duration = time.time() - start_time
    metrics.track_request(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
        duration=duration,
    )

    return response


register_exception_handlers(app)


# Custom metrics endpoint
@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    """Expose metrics for Prometheus scraping"""
    if not settings.prometheus_enabled:
        return JSONResponse(status_code=404, content={"error": "Metrics not enabled"})

    metrics_data, content_type = get_metrics_response()
    return Response(content=metrics_data, media_type=content_type)


# Startup event
@app.on_event("startup")
def startup_event():
    """Create tables and seed first-run data"""
    Base.metadata.create_all(bind=engine)

    try:
        with SessionLocal() as db:
            report = bootstrap_database(db, settings)
    except SQLAlchemyError as e:
        logger.error(f"Startup seeding failed, continuing without it: {str(e)}")
    else:
        if report.admin.generated_password:
            logger.warning(
                f"Admin user '{report.admin.username}' created with generated password: "
                f"{report.admin.generated_password} (shown once, change it after first login)"
            )

    mode = "production" if settings.is_production else "development"
    logger.info(f"Starting {settings.app_name} version={settings.app_version} port={settings.port} mode={mode}")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {settings.app_name}")


# Register routers; each defines its own prefix
app.include_router(health_router, tags=["health"])
app.include_router(webhook_router)
app.include_router(catalog_router)
app.include_router(checkout_router)
app.include_router(admin_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
