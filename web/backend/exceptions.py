#!/usr/bin/env python3
"""
Error handlers for the web application.

Every failure is answered with the same envelope:
``{"success": false, "error": ..., "type": ..., "details"?: ...}``.
"""

import logging
from typing import Any, Dict, Optional
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import ServiceException

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "type": error_type,
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    The status code comes from the exception class, so new component errors
    only need to subclass the right category.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    if exc.status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc.message}", exc_info=True)
    else:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")

    return error_response(exc.status_code, exc.message, exc.__class__.__name__, exc.details)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are answered with 400."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return error_response(400, "Invalid request", "ValidationError", {"errors": errors})


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.

    Args:
        request: The FastAPI request.
        exc: The HTTP exception.

    Returns:
        JSONResponse with error details.
    """
    return error_response(exc.status_code, str(exc.detail), "HTTPException")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: The FastAPI request.
        exc: The exception.

    Returns:
        JSONResponse with error details.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return error_response(500, "Internal server error", "InternalError")
