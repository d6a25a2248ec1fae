import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.errors import (
    IncompleteSubmissionError,
    InvalidTransitionError,
    LendingError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger("lending.api")

STATUS_FOR_ERROR: dict[type[LendingError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    InvalidTransitionError: 409,
    IncompleteSubmissionError: 422,
}


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _respond(request: Request, status_code: int, payload: dict) -> JSONResponse:
    request_id = _get_request_id(request)
    if request_id:
        payload["requestId"] = request_id
    response = JSONResponse(status_code=status_code, content=payload)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def status_for(exc: LendingError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_FOR_ERROR:
            return STATUS_FOR_ERROR[cls]
    return 400


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LendingError)
    async def lending_error_handler(request: Request, exc: LendingError):
        status_code = status_for(exc)
        logger.warning(
            "request refused request_id=%s status=%s error=%s detail=%s",
            _get_request_id(request),
            status_code,
            type(exc).__name__,
            exc.message,
        )
        return _respond(request, status_code, exc.to_payload())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _respond(request, exc.status_code, {"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _respond(request, 422, {"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception request_id=%s", _get_request_id(request), exc_info=exc)
        return _respond(request, 500, {"detail": "Internal Server Error"})
