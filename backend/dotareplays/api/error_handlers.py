"""Error Handlers — map every failure to the {"error": {...}} envelope.

Invariants:
    - ReplayApiError → its own http_status and to_response() body
    - 5xx ReplayApiErrors (PersistenceError, HashingError) are logged with traceback;
      the client sees only the opaque public message
    - Every 401 carries WWW-Authenticate: Bearer
    - RequestValidationError (malformed JSON, wrong types, unknown fields) → 400
    - Anything else, including MissingCredentialHash → opaque 500

Design Decisions:
    - 400 vs 422: the body could not be read at all vs. it was read and broke a rule
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dotareplays.core.errors import (
    OPAQUE_MESSAGE, ErrorCategory, ErrorSeverity, ReplayApiError,
)

logger = logging.getLogger(__name__)


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    details=None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}


async def handle_replay_api_error(request: Request, exc: ReplayApiError) -> JSONResponse:
    extra = {"error_code": exc.code, "path": request.url.path, "method": request.method}
    if exc.http_status >= 500:
        logger.error(exc.message, extra=extra, exc_info=exc)
    else:
        logger.info(exc.message, extra=extra)

    headers = None
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


async def handle_bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.info(
        f"Unreadable request body on {request.url.path}",
        extra={"error_code": "BAD_REQUEST", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "BAD_REQUEST", "the request body could not be parsed",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details,
        ),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}",
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", OPAQUE_MESSAGE,
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReplayApiError, handle_replay_api_error)
    app.add_exception_handler(RequestValidationError, handle_bad_request)
    app.add_exception_handler(Exception, handle_unexpected)
