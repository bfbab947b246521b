"""Error handling and response models."""
from typing import Any, Optional, Union
from pydantic import BaseModel
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError

from domain.errors import ItemNotFound, ValidationError as DomainValidationError
from infrastructure.db import RecordNotFound
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


logger = get_logger()


class ErrorResponse(BaseModel):
    """Standard error response body produced by the handlers below."""
    detail: Union[str, list[Any]]
    error_type: Optional[str] = None


async def validation_error_handler(request: Request, exc: DomainValidationError) -> JSONResponse:
    """Handle domain validation errors with 400 status."""
    metrics.increment("validation_errors_total")
    logger.warning(
        f"Validation error: {exc}",
        path=request.url.path,
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error_type": type(exc).__name__}
    )


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unknown order items and missing rows with 404 status."""
    error_type = type(exc).__name__
    if isinstance(exc, ItemNotFound):
        metrics.increment("validation_errors_total")
    logger.warning(f"Not found: {exc}", path=request.url.path, error_type=error_type)

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "error_type": error_type}
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Duplicate ids and dangling references surface as 409."""
    logger.warning("Integrity error", path=request.url.path, error=str(exc.orig))

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicting or dangling reference", "error_type": "IntegrityError"}
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with 500 status without exposing internals."""
    logger.error(
        f"Internal server error: {type(exc).__name__}",
        path=request.url.path,
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_type": "InternalServerError"
        }
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request validation errors with detailed messages."""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        errors=errors
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": errors, "error_type": "RequestValidationError"}
    )
