"""HTTP helpers for the unified response envelope."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def api_success(
    data: Any = None,
    *,
    message: str = "Operation successful",
    pagination: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build a success envelope."""
    payload: dict[str, Any] = {"success": True, "message": message, "data": data}
    if pagination is not None:
        payload["pagination"] = pagination
    return payload


def api_error(
    *,
    code: str,
    message: str,
    errors: list[dict[str, str]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build an error envelope."""
    payload: dict[str, Any] = {"success": False, "message": message, "error": code}
    if errors:
        payload["errors"] = errors
    payload.update(extra)
    return payload


async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors as the {success,message,error} envelope."""
    if isinstance(exc.detail, dict) and {"success", "message", "error"} <= set(exc.detail):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=api_error(code="HTTP_ERROR", message=str(exc.detail)),
        headers=exc.headers,
    )


async def handle_validation_exception(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Map request-body validation failures to 400 with per-field messages."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": str(error.get("msg", "invalid value")),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=api_error(code="VALIDATION_ERROR", message="Validation failed", errors=errors),
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=api_error(code="INTERNAL_ERROR", message="Internal server error"),
    )
