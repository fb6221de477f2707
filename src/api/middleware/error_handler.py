"""
Error handling middleware for API

FastAPI calls the handler registered for an exception type and returns its
formatted JSON response. Handlers here cover:
- Validation errors (bad request format)
- Domain errors (unknown part, model not loaded, bad state value)
- Generic errors (unexpected problems)
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from datetime import datetime, timezone
import uuid
from typing import Optional

from api.schemas.error import ErrorResponse, ErrorDetail, ValidationErrorResponse
from utils.logger import get_logger
from models.enums import LogCategory
import json

log = get_logger().for_category(LogCategory.API)


class DomainError(Exception):
    """Base class for domain-specific errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class PartNotFoundError(DomainError):
    """Part identifier is malformed or the loaded model has no such part"""
    def __init__(self, part: str, valid_parts: Optional[list] = None):
        super().__init__(
            code="PART_NOT_FOUND",
            message=f"Part '{part}' not found",
            details={"part": part, "valid_parts": valid_parts or []},
            status_code=404
        )


class ModelNotLoadedError(DomainError):
    """No book model is loaded yet"""
    def __init__(self, message: str = "No book model loaded"):
        super().__init__(
            code="MODEL_NOT_LOADED",
            message=message,
            status_code=503
        )


class InvalidPartStateError(DomainError):
    """Requested state is not OPEN or CLOSED"""
    def __init__(self, state: str, valid_states: list):
        super().__init__(
            code="INVALID_PART_STATE",
            message=f"State '{state}' is not supported",
            details={
                "state": state,
                "valid_states": valid_states
            },
            status_code=422
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors (bad JSON structure)"""
        request_id = str(uuid.uuid4())
        errors = exc.errors()

        log.warn(f"Validation error ({request_id}): {len(errors)} errors", path=request.url.path)

        validation_errors = []
        for error in errors:
            field = ".".join(str(x) for x in error["loc"][1:])  # Skip "body"
            validation_errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"]
            })

        response = ValidationErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"error_count": len(errors)},
                timestamp=_now()
            ),
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=json.loads(response.model_dump_json())
        )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """Handle domain-specific business logic errors"""
        request_id = str(uuid.uuid4())

        log.warn(f"Domain error ({request_id}): {exc.code} - {exc.message}", path=request.url.path)

        response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                timestamp=_now()
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=json.loads(response.model_dump_json())
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {str(exc)}",
            path=request.url.path,
            exception_type=type(exc).__name__
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again.",
                details={"request_id": request_id},
                timestamp=_now()
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=json.loads(response.model_dump_json())
        )
