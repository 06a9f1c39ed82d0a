"""
Exception handlers producing the uniform `{status: false, message}` envelope.

Every failure is converted here, once:
- AppError subclasses keep their own status code and message
- Starlette/FastAPI HTTPExceptions (unknown routes, wrong methods)
- Request body/query validation failures -> 402 with the field errors
- SQLAlchemy errors and anything unexpected -> 500, message passed through
"""

from typing import Any

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.errors import AppError, InternalError
from app.core.logging import get_logger

logger = get_logger(__name__)

VALIDATION_STATUS_CODE = 402


def _envelope(message: str, **extra: Any) -> dict:
    return {"status": False, "message": message, **extra}


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_error", kind=exc.kind, message=exc.message)
        else:
            logger.info("request_rejected", kind=exc.kind, status_code=exc.status_code, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(message),
            headers=dict(exc.headers or {}),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=VALIDATION_STATUS_CODE,
            content=jsonable_encoder(_envelope("Validation failed", validationErrors=errors)),
        )

    @app.exception_handler(SQLAlchemyError)
    async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        # orig is the driver error alone, without the statement or its parameters
        detail = str(getattr(exc, "orig", None) or type(exc).__name__)
        logger.error("database_error", error_type=type(exc).__name__, error=detail)
        error = InternalError(detail)
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        error = InternalError(str(exc) or "Internal Server Error")
        return JSONResponse(status_code=error.status_code, content=error.to_envelope())
