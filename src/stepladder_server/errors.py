"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK's error classes map directly to a status code.  Plain
``ValueError`` (e.g. "Assignment not found" raised by a route) is mapped by
inspecting the message.  This keeps route handlers focused on the happy
path.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from stepladder_worksheets.errors import (
    ReadOnlyFormError,
    StatusTransitionError,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
    ("unknown assignment status", 400),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (assignment ids, client ids) stay in the server log.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Conflicting assignment state",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map a ``ValueError`` to 404 or 400 based on its message.

    The raw exception message is logged server-side but never sent to the
    client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def template_not_found_handler(
    request: Request, exc: TemplateNotFoundError
) -> JSONResponse:
    """An assignment referenced a worksheet outside the catalog → 400."""
    logger.warning("Unknown worksheet at %s: %s", request.url, exc.worksheet_id)
    return JSONResponse(status_code=400, content={"detail": "Unknown worksheet"})


async def transition_error_handler(
    request: Request, exc: StatusTransitionError
) -> JSONResponse:
    """Backward status move → 409."""
    logger.warning("Rejected status change at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=409,
        content={"detail": f"Cannot move from {exc.current} to {exc.requested}"},
    )


async def read_only_error_handler(
    request: Request, exc: ReadOnlyFormError
) -> JSONResponse:
    """Submit on a completed assignment → 409."""
    logger.warning("Read-only submit at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=409, content={"detail": "Worksheet is already completed"}
    )


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown field id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
