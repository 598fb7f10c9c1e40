"""
Exception handlers.

Every failure leaves the API in the same envelope:
``{"error": {"code", "message", "correlationId", ...}}``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from shared.exceptions import AppError, OperationTimeoutError, ServiceUnavailableError
from shared.logging import logger


def _correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # Drop the "body"/"query"/... prefix so keys match the field names clients sent
        loc = [str(part) for part in error.get("loc", ())[1:]] or ["request"]
        errors.setdefault(".".join(loc), []).append(error.get("msg", "Invalid value"))
    return errors


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the handlers that render ``AppError`` and unexpected failures."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Application error",
            error_code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(_correlation_id(request)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _field_errors(exc)
        logger.warning("Request validation failed", errors=errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "BAD_REQUEST",
                    "message": "Request validation failed",
                    "correlationId": _correlation_id(request),
                    "validationErrors": errors,
                }
            },
        )

    @app.exception_handler(OperationalError)
    async def storage_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
        logger.warning("Storage unavailable", error=str(exc.orig))
        error = ServiceUnavailableError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict(_correlation_id(request)))

    @app.exception_handler(PoolTimeoutError)
    async def storage_timeout_handler(request: Request, exc: PoolTimeoutError) -> JSONResponse:
        logger.warning("Storage timed out", error=str(exc))
        error = OperationTimeoutError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict(_correlation_id(request)))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "correlationId": _correlation_id(request),
                }
            },
        )
