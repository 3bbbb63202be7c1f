"""
Application-wide exception handlers
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.exceptions import StorefrontError
from core.logging import get_logger
from core.metrics import metrics

logger = get_logger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Handle custom storefront errors"""
    logger.error(f"Storefront error - error_code: {exc.error_code}, details: {exc.details}, path: {request.url.path}")
    metrics.track_error(exc.error_code, request.url.path.strip("/").split("/")[0] or "root")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error - path: {request.url.path}", exc_info=exc)
    metrics.track_error("INTERNAL_ERROR", request.url.path.strip("/").split("/")[0] or "root")
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
