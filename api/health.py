"""
Health check endpoint for external monitoring
"""

import time
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.logging import get_logger
from database.session import get_db
from storefront.config_store import EmailConfigCache, get_email_config_cache

logger = get_logger(__name__)
router = APIRouter()


def check_database_health(db: Session) -> dict[str, Any]:
    """
    Check database connectivity.

    Args:
        db: Database session dependency

    Returns:
        Dict containing database health status
    """
    try:
        start_time = time.time()
        db.execute(text("SELECT 1")).fetchone()
        latency_ms = (time.time() - start_time) * 1000
        return {"status": "connected", "latency_ms": round(latency_ms, 2)}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return {"status": "error", "error": str(e)}


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    email_config_cache: EmailConfigCache = Depends(get_email_config_cache),
) -> JSONResponse:
    """
    Health check for load balancers and uptime monitors.

    Returns 200 when the database answers, 503 otherwise. Webhook
    configuration is reported but does not affect the status.
    """
    db_result = check_database_health(db)
    is_healthy = db_result.get("status") == "connected"

    health_data = {
        "status": "ok" if is_healthy else "unhealthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {
            "database": db_result,
            "webhook_secret_configured": settings.webhook_secret_value is not None,
            "email_config_loaded": email_config_cache.is_loaded,
        },
    }

    return JSONResponse(status_code=200 if is_healthy else 503, content=health_data)
