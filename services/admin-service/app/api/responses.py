"""Envelope helpers so every admin endpoint answers with ``{success, message, data}``."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from schemas import ApiEnvelope, FieldErrorItem

from ..domain.errors import (
    AdminServiceError,
    DeliveryError,
    StoreError,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong."


def envelope(status_code: int, success: bool, message: str, data: Any = None) -> JSONResponse:
    body = ApiEnvelope(success=success, message=message, data=data)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def success_response(message: str, data: Any = None) -> JSONResponse:
    return envelope(status.HTTP_200_OK, True, message, data)


def validation_error_response(errors: list[FieldErrorItem]) -> JSONResponse:
    return envelope(
        status.HTTP_400_BAD_REQUEST,
        False,
        "Validation Error.",
        [item.model_dump() for item in errors],
    )


def unauthorized_response(message: str) -> JSONResponse:
    return envelope(status.HTTP_401_UNAUTHORIZED, False, message)


def throttled_response() -> JSONResponse:
    return envelope(status.HTTP_429_TOO_MANY_REQUESTS, False, "Too many requests.")


def error_response() -> JSONResponse:
    return envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, False, GENERIC_ERROR)


def response_from_error(exc: AdminServiceError) -> JSONResponse:
    """Map a domain error onto its envelope and status code."""
    if isinstance(exc, ValidationFailed):
        return validation_error_response(
            [FieldErrorItem(field=error.field, message=error.message) for error in exc.errors]
        )
    if isinstance(exc, Unauthorized):
        return unauthorized_response(exc.message)
    if isinstance(exc, (StoreError, DeliveryError)):
        logger.error("infrastructure failure: %s", exc, exc_info=exc)
    else:
        logger.error("unhandled admin service error: %s", exc, exc_info=exc)
    return error_response()


async def _handle_service_error(request: Request, exc: AdminServiceError) -> JSONResponse:
    return response_from_error(exc)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    items = [
        FieldErrorItem(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body",
            message=error.get("msg", "Invalid value."),
        )
        for error in exc.errors()
    ]
    return validation_error_response(items)


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain errors and malformed bodies as envelopes instead of FastAPI's defaults."""
    app.add_exception_handler(AdminServiceError, _handle_service_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
