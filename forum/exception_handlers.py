"""
Exception handlers

Every failure leaves the API as a flat JSON object: a ``message`` plus
whatever fields the exception carries, for example

    429  {"message": "Too many login attempts. ...", "retryAfter": 212}
    403  {"message": "forbidden", "requiredRoles": ["Admin"]}
    403  {"message": "...", "requiresConsent": true, "cookieType": "analytics"}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from forum.exceptions import ForumException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the ``{"message": ..., **details}`` error body."""
    return JSONResponse(status_code=status_code, content={"message": message, **(details or {})}, headers=headers)


async def forum_exception_handler(request: Request, exc: ForumException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"{request.method} {request.url.path} rejected with {exc.status_code}: {exc.message}")
    return create_error_response(exc.status_code, exc.message, exc.details, exc.headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors such as unknown routes or wrong methods."""
    return create_error_response(exc.status_code, str(exc.detail), headers=exc.headers)


def _describe_errors(errors: list[dict]) -> list[dict]:
    described = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        described.append({"field": ".".join(location), "message": error["msg"], "type": error["type"]})
    return described


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    errors = _describe_errors(exc.errors())
    logger.info(f"Invalid request body for {request.url.path}", extra={"errors": errors})
    return create_error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", {"errors": errors})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}")
    return create_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ForumException, forum_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
