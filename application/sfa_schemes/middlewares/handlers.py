"""
Exception handlers mapping scheme engine errors onto HTTP responses.

Contract errors keep their structured body so the order UI can re-prompt;
everything else is reduced to a generic message when DEBUG=false.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
import os
from sfa_schemes.config.sentry import capture_exception, add_breadcrumb
from sfa_schemes.core.constants import SchemeErrorCode
from sfa_schemes.core.exceptions import SessionNotFoundError, ValidationError
from sfa_schemes.logging.utils import get_app_logger
from sfa_schemes.middlewares.request_context import request_context

logger = get_app_logger("sfa_schemes.middlewares.handlers")

# Debug mode detection (DEBUG=false means production)
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

GENERIC_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Resource not found",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "Invalid request data",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Something went wrong",
}


def _public_message(status_code: int, detail) -> dict:
    if DEBUG:
        return {"message": detail}
    return {"message": GENERIC_MESSAGES.get(status_code, "Invalid request" if status_code < 500 else "Something went wrong")}


def _report_server_error(request: Request, exc: Exception, status_code: int):
    logger.error(f"server_error | method={request.method} path={request.url.path} status_code={status_code} exception_type={type(exc).__name__} error={exc}", exc_info=True)
    add_breadcrumb(
        message=f"HTTP {status_code} on {request.method} {request.url.path}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__, "session_id": request_context.session_id or ""},
    )
    capture_exception(exc)


async def _scheme_validation_handler(request: Request, exc: ValidationError):
    """400 for override contract violations, 409 once the session is submitted."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"scheme_validation_error | method={request.method} path={request.url.path} status_code={exc.status_code} error_code={exc.error_code} field={exc.field}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _session_not_found_handler(request: Request, exc: SessionNotFoundError):
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"session_not_found | method={request.method} path={request.url.path} session_id={exc.session_id}")
    payload = {"error_code": SchemeErrorCode.SESSION_NOT_FOUND, "field": "session_id", "message": str(exc)}
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=payload)


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    request_context.module_name = 'middleware_handlers'
    errors = [f"{' -> '.join(str(loc) for loc in err.get('loc', []))}: {err.get('msg', 'Invalid input')}" for err in exc.errors()]
    logger.warning(f"request_validation_error | method={request.method} path={request.url.path} errors={errors}")

    payload = _public_message(status.HTTP_422_UNPROCESSABLE_ENTITY, errors[0] if len(errors) == 1 else "Validation errors")
    if DEBUG and len(errors) > 1:
        payload["errors"] = errors
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)


async def _http_exception_handler(request: Request, exc: HTTPException):
    request_context.module_name = 'middleware_handlers'
    if exc.status_code >= 500:
        _report_server_error(request, exc, exc.status_code)
    else:
        logger.warning(f"http_exception | method={request.method} path={request.url.path} status_code={exc.status_code} detail={exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=_public_message(exc.status_code, exc.detail))


async def _general_exception_handler(request: Request, exc: Exception):
    request_context.module_name = 'middleware_handlers'
    _report_server_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_public_message(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Internal server error: {exc}"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(ValidationError, _scheme_validation_handler)
    app.add_exception_handler(SessionNotFoundError, _session_not_found_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
