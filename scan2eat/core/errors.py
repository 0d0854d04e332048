from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class Scan2EatError(Exception):
    """Base for errors that terminate the current request."""

    status_code = 500
    default_detail = "Server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(Scan2EatError):
    status_code = 400
    default_detail = "Invalid input"


class InvalidTransitionError(ValidationError):
    status_code = 409
    default_detail = "Invalid status transition"


class UnauthorizedError(Scan2EatError):
    status_code = 401
    default_detail = "Unauthorized"


class NotFoundError(Scan2EatError):
    status_code = 404
    default_detail = "Not found"


class StoreError(Scan2EatError):
    status_code = 500
    default_detail = "Server error"


async def _handle_domain_error(request: Request, exc: Scan2EatError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error(
            "store failure on %s %s",
            request.method,
            request.url.path,
            exc_info=exc.__cause__ or exc,
        )
        # database details never reach the caller
        return JSONResponse(status_code=exc.status_code, content={"detail": StoreError.default_detail})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Scan2EatError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
