"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain error codes
(also used as result error kinds) and framework exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from permit_workflow.core.config import get_settings
from permit_workflow.domain.exceptions import PermitWorkflowException

logger = logging.getLogger(__name__)

# Map domain error_code / result error_kind to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "APPLICATION_NOT_FOUND": 404,
    "OFFICER_NOT_FOUND": 404,
    "VALIDATION_ERROR": 422,
    "MISSING_REASON": 422,
    "WRONG_STAGE": 409,
    "NOT_ASSIGNEE": 403,
    "PAYMENT_NOT_COMPLETED": 402,
    "SIGNATURE_NOT_COMPLETED": 409,
    "ILLEGAL_TRANSITION": 409,
    "INVALID_STAGE_FOR_PROGRESSION": 409,
    "NO_ELIGIBLE_OFFICER": 503,
    "NO_OFFICER_AVAILABLE": 503,
    "DATABASE_NOT_CONFIGURED": 503,
}


def status_for_error(error_code: str | None) -> int:
    """Return the HTTP status for an error code (400 when unmapped)."""
    return _ERROR_CODE_STATUS.get(error_code or "", 400)


def _domain_exception_handler(
    request: Request, exc: PermitWorkflowException
) -> JSONResponse:
    """Return JSON from PermitWorkflowException.to_dict() with appropriate status code."""
    return JSONResponse(
        status_code=status_for_error(exc.error_code),
        content=exc.to_dict(),
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""
    app.add_exception_handler(PermitWorkflowException, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
