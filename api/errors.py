"""Exception hierarchy and FastAPI exception handlers for Thought Sort.

Services raise these instead of HTTPException so the same code can be
used outside a request. Each subclass carries the HTTP status it maps to.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

GENERIC_ERROR_DETAIL = "Internal server error"


class ThoughtSortError(Exception):
    """Base exception for all Thought Sort errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize error.

        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def public_detail(self) -> str:
        """Detail string that is safe to return to the caller."""
        return self.message


class AuthenticationError(ThoughtSortError):
    """No valid identity on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(ThoughtSortError):
    """Missing or invalid payload fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ThoughtSortError):
    """Record absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND


class GenerationError(ThoughtSortError):
    """Upstream language model failure or timeout."""

    @property
    def public_detail(self) -> str:
        return GENERIC_ERROR_DETAIL


class PersistenceError(ThoughtSortError):
    """Storage layer failure."""

    @property
    def public_detail(self) -> str:
        return GENERIC_ERROR_DETAIL


async def thoughtsort_error_handler(request: Request, exc: ThoughtSortError) -> JSONResponse:
    """Render a ThoughtSortError as a JSON error response."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=exc.message,
        **exc.context,
    )

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_detail},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report payload shape errors as 400 with the first failing field."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg")

    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
        error=message,
    )

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(ThoughtSortError, thoughtsort_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
