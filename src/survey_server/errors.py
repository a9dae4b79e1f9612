"""Exception handlers: SDK errors to HTTP responses.

The response service signals every business-rule failure with a
``ValueError`` whose message names the problem ("Survey not found: ...",
"Survey is not active: ...", "Response is already completed: ...").  The
handlers here pick the status code from those phrases and answer with a
fixed, client-safe detail; the original message only goes to the log,
since it can carry response ids and answer values.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# (phrase, status, client detail); first phrase found in the message wins
_VALUE_ERROR_RULES: list[tuple[str, int, str]] = [
    ("not found", 404, "Resource not found"),
    ("not active", 403, "Survey is not accepting responses"),
    ("already completed", 409, "Response is already completed"),
]

_DEFAULT_STATUS = 400
_DEFAULT_DETAIL = "Invalid request"


def status_for_message(message: str) -> tuple[int, str]:
    """Return ``(status_code, client_detail)`` for a ``ValueError`` message."""
    lowered = message.lower()
    for phrase, status, detail in _VALUE_ERROR_RULES:
        if phrase in lowered:
            return status, detail
    return _DEFAULT_STATUS, _DEFAULT_DETAIL


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    status, detail = status_for_message(str(exc))
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content={"detail": detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    logger.warning("%s %s -> 404: missing key %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected: full traceback in the log, bare 500 to the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
