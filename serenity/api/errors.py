"""JSON error envelope shared by every API endpoint: ``{"error": "<message>"}``."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from serenity.services.gateway_client import GatewayError

logger = logging.getLogger(__name__)


@dataclass
class ApiError(Exception):
    status_code: int
    message: str


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning("gateway request mapped to error response", extra={"status_code": exc.status_code, "path": request.url.path})
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "invalid request body")
    message = f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"
    return error_response(400, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled request error", extra={"path": request.url.path})
    return error_response(500, "Unknown error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
