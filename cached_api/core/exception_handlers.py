"""Exception-to-response mapping, installed by register_exception_handlers(app).

Every error body has the same shape, {"error", "message", "details"?}.
None of these responses is 2xx, so the response cache never stores one.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cached_api.core.config import get_settings
from cached_api.domain.exceptions import CachedApiException

logger = logging.getLogger(__name__)

# error_code -> HTTP status; unknown domain codes are client errors.
_STATUS_BY_CODE: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "INVALID_STATE_TRANSITION": 409,
}


def _error(status: int, code: str, message: object, details: object = None) -> JSONResponse:
    content: dict[str, object] = {"error": code, "message": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


async def handle_domain_error(request: Request, exc: CachedApiException) -> JSONResponse:
    status = _STATUS_BY_CODE.get(exc.error_code, 400)
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, status, exc.error_code)
    return JSONResponse(status_code=status, content=exc.to_dict())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _error(
        422, "VALIDATION_ERROR", "Request validation failed", jsonable_encoder(exc.errors())
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, "HTTP_ERROR", exc.detail)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    """500 for anything unhandled; the exception text is only exposed in debug."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _error(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers above; call once per app."""
    app.add_exception_handler(CachedApiException, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected)
