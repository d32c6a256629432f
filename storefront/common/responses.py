"""Response envelope and the exception handlers that render errors into it."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import DependencyError, ServiceError

DataT = TypeVar("DataT")

_LOGGER = logging.getLogger(__name__)


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every API payload."""

    data: DataT | None = None
    message: str = ""
    success: bool = True


def create_response(data: Any, message: str) -> ApiResponse[Any]:
    return ApiResponse[Any](data=data, message=message, success=True)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"data": None, "message": message, "success": False},
        headers=headers,
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        _LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, _describe_validation_errors(exc))


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _handle_dependency_failure(request: Request, exc: Exception) -> JSONResponse:
    _LOGGER.exception("%s %s failed in a dependency", request.method, request.url.path, exc_info=exc)
    return error_response(DependencyError.status_code, DependencyError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every handled failure as ``{data: null, message, success: false}``."""

    app.add_exception_handler(ServiceError, _handle_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_dependency_failure)
    app.add_exception_handler(RedisError, _handle_dependency_failure)
