import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.exceptions import AppError

logger = logging.getLogger(__name__)


def _error_envelope(
    message: str,
    status_code: int,
    exc: Exception | None = None,
) -> dict:
    """
    Body used for infrastructure failures:

        {"error": {"message", "status", "timestamp"}}

    The stack trace is only attached in development.
    """
    body = {
        "message": message,
        "status": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if exc is not None and get_settings().is_development:
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return {"error": body}


def _integrity_message(exc: IntegrityError) -> str:
    raw = str(exc.orig).upper()
    if "UNIQUE" in raw or "DUPLICATE" in raw:
        return "A record with this value already exists"
    if "FOREIGN KEY" in raw:
        return "Referenced record does not exist"
    return "Database constraint violation"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, **exc.details},
    )


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": details}),
    )


async def http_error_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_envelope(_integrity_message(exc), status.HTTP_400_BAD_REQUEST),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_envelope(
            "Internal Server Error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            exc,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
