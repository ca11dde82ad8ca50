"""Error Handlers — the one place where failures become HTTP responses.

Invariants:
    - Every failure answers the same envelope: {"error": {code, message, category,
      severity, timestamp, context}} (LibraryError.to_response)
    - Status comes from the error, except where the HTTP method overrides it:
      DELETE of a missing record answers 500, not 404
    - Binding failures (non-integer id, malformed body) answer 400 MALFORMED_REQUEST
      with per-field details
    - Unclassified exceptions answer 500 INTERNAL_ERROR and never leak internals
    - Every handled failure is logged once, with error_code/path/method extras

Design Decisions:
    - Method overrides live here, not in routes: routes stay free of try/except
      and every error still passes through the same handler and log line
    - Validation and catch-all responses are built from LibraryError instances
      so the envelope cannot drift between handlers
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from library_api.core.errors import (
    ErrorCategory, ErrorSeverity, LibraryError, MalformedRequestError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

# (HTTP method, error type) -> status answered instead of the error's default
METHOD_STATUS_OVERRIDES: dict[tuple[str, type[LibraryError]], int] = {
    ("DELETE", RecordNotFoundError): status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain, binding and catch-all handlers on `app`."""
    app.add_exception_handler(LibraryError, library_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


def resolve_status(method: str, exc: LibraryError) -> int:
    for (override_method, error_type), code in METHOD_STATUS_OVERRIDES.items():
        if method == override_method and isinstance(exc, error_type):
            return code
    return exc.http_status


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    status_code = resolve_status(request.method, exc)
    log = logger.warning if status_code < 500 else logger.error
    log(
        f"{request.method} {request.url.path} -> {status_code}: {exc.message}",
        extra=_log_extra(request, exc),
    )
    return JSONResponse(status_code=status_code, content=exc.to_response())


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    error = MalformedRequestError(
        "Invalid request data", details[0]["field"] if details else "",
    )
    logger.warning(
        f"{request.method} {request.url.path} -> 400: {details}",
        extra=_log_extra(request, error),
    )
    body = error.to_response()
    body["error"]["details"] = details
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = LibraryError(
        "An unexpected error occurred", "INTERNAL_ERROR",
        ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
    )
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra=_log_extra(request, error),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.to_response(),
    )


def _log_extra(request: Request, exc: LibraryError) -> dict:
    return {
        "error_code": exc.code,
        "path": request.url.path,
        "method": request.method,
        "entity_kind": exc.context.entity_kind,
        "entity_id": exc.context.entity_id,
    }
