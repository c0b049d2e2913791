"""
Error handling for the HTTP surface

- CarrierError kinds map to fixed HTTP status codes
- Carrier details (raw bodies, carrier error lists) are returned only in DEBUG
- Anything unhandled is logged with traceback and returned as a generic 500
"""
import logging
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from carrier_rates.core.exceptions import CarrierError, CarrierErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    CarrierErrorKind.VALIDATION_ERROR: 400,
    CarrierErrorKind.CARRIER_NOT_FOUND: 404,
    CarrierErrorKind.RATE_LIMIT: 429,
    CarrierErrorKind.TIMEOUT: 504,
    CarrierErrorKind.AUTH_FAILED: 502,
    CarrierErrorKind.CARRIER_API_ERROR: 502,
    CarrierErrorKind.NETWORK_ERROR: 502,
    CarrierErrorKind.MALFORMED_RESPONSE: 502,
    CarrierErrorKind.UNKNOWN: 500,
}


def status_for(error: CarrierError) -> int:
    return STATUS_BY_KIND.get(error.kind, 500)


def carrier_error_content(error: CarrierError, debug: bool = False) -> Dict[str, Any]:
    """Response body for a CarrierError."""
    content = error.to_dict(include_details=debug)
    content["error"] = error.kind.value.lower()
    content["retryable"] = error.retryable
    return content


def register_error_handlers(app: FastAPI, debug: bool = False) -> None:
    """Install CarrierError and catch-all handlers on the app."""

    async def handle_carrier_error(request: Request, exc: CarrierError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        return JSONResponse(status_code=status_code, content=carrier_error_content(exc, debug))

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {exc}\n"
            f"Path: {request.url.path}\n"
            f"Method: {request.method}\n"
            f"Traceback:\n{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
        )
        content = {
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        }
        if debug:
            content["message"] = str(exc)
            content["type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    app.add_exception_handler(CarrierError, handle_carrier_error)
    app.add_exception_handler(Exception, handle_unexpected)
