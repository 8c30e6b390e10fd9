# todosync/api/error_handling.py
"""
Exception handlers giving every error response the same body:
    {"error": "<human-readable message>"}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from todosync.core.errors import Internal, ServiceError

logger = logging.getLogger("uvicorn.error")


def _error_response(status_code: int, message: str, extra: dict | None = None) -> JSONResponse:
    content = {"error": message}
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for service errors, HTTP errors, validation errors and crashes."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("[error] %s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        else:
            logger.debug("[error] %s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return _error_response(exc.status_code, exc.message, exc.detail)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error_response(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid request")
        else:
            message = "invalid request"
        return _error_response(400, message)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("[error] unhandled error on %s %s", request.method, request.url.path)
        internal = Internal("internal server error")
        return _error_response(internal.status_code, internal.message)
