"""
Exception Taxonomy and FastAPI Error Handlers

Every error raised by the intake tracker, the stores and the search
summary pipeline derives from HirewiseError and carries the HTTP status
it maps to at the boundary:

    ValidationError        400  malformed or missing caller input
    Unauthorized           401  no valid session indicator / bearer token
    NotFoundError          404  job or candidate id does not resolve
    ConflictError          409  forbidden state transition
    ExtractionError        422  field extraction failed (worker-internal)
    StorageError           500  database/backend failure, caller may retry
    GenerationUnavailable  503  no text generator configured (absorbed by
                                the summary pipeline, never rendered)
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class HirewiseError(Exception):
    """Base exception for the application"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[dict] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(HirewiseError):
    """Raised when caller input is missing or malformed"""

    status_code = 400


class Unauthorized(HirewiseError):
    """Raised when the caller presents no valid credentials"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(HirewiseError):
    """Raised when a job or candidate cannot be found"""

    status_code = 404


class ConflictError(HirewiseError):
    """Raised when a write conflicts with the current stored state"""

    status_code = 409


class InvalidTransitionError(ConflictError):
    """Raised when a parsing job status change is not a forward transition"""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(
            f"Cannot move parsing job {job_id} from {current} to {requested}",
            details={"job_id": job_id, "current": current, "requested": requested},
        )


class ExtractionError(HirewiseError):
    """Raised when structured fields cannot be extracted from a resume"""

    status_code = 422


class StorageError(HirewiseError):
    """Raised on transient database/backend failures"""

    status_code = 500


class GenerationUnavailable(HirewiseError):
    """Raised when no text generation provider is configured"""

    status_code = 503

    def __init__(self, message: str = "Text generation provider not configured"):
        super().__init__(message)


# ==================== Handlers ====================

def _error_body(message: str, error_type: str, details: Optional[dict] = None) -> dict:
    return {"error": message, "error_type": error_type, "details": details or {}}


async def hirewise_exception_handler(request: Request, exc: HirewiseError):
    """Render application exceptions with their mapped status"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.__class__.__name__, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are caller errors (400)"""
    logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            "Invalid request",
            "ValidationError",
            {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]},
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors such as 404 and 405 keep their status"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "HTTPException"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected exception on {request.url.path}: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "InternalServerError"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HirewiseError, hirewise_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
