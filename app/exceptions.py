# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Pipeline stages raise PipelineError subclasses; each carries a `kind`
# discriminant that error stages match on.
# =============================================================================

from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class AcquisitionsException(Exception):
    """
    Base exception for the Acquisitions API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "ACQUISITIONS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Pipeline Exceptions
# =============================================================================

class PipelineError(AcquisitionsException):
    """
    Error raised by a pipeline stage.

    `kind` identifies the failure so error stages can match on it
    without inspecting messages.
    """

    kind = "pipeline.error"

    def __init__(self, message: str, status: int = 500, **kwargs):
        super().__init__(message, status_code=status, **kwargs)

    @property
    def status(self) -> int:
        return self.status_code


class BodyParseError(PipelineError):
    """Raised when a request body cannot be parsed."""

    kind = "entity.parse.failed"

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(
            message,
            status=400,
            code="BODY_PARSE_ERROR",
            suggestion="Check that the request body matches its Content-Type",
        )
        self.body = body


class PayloadTooLargeError(PipelineError):
    """Raised when a request body exceeds the configured limit."""

    kind = "entity.too.large"

    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Request entity too large: {length} bytes (max: {limit})",
            status=413,
            code="PAYLOAD_TOO_LARGE",
            suggestion=f"Send a body smaller than {limit} bytes",
            details={"length": length, "limit": limit},
        )


class ParameterLimitError(PipelineError):
    """Raised when a urlencoded body carries too many parameters."""

    kind = "parameters.too.many"

    def __init__(self, limit: int):
        super().__init__(
            "Too many parameters",
            status=413,
            code="TOO_MANY_PARAMETERS",
            suggestion=f"Send at most {limit} form parameters",
            details={"limit": limit},
        )


class UnsupportedCharsetError(PipelineError):
    """Raised when a body declares a charset the parser cannot decode."""

    kind = "charset.unsupported"

    def __init__(self, charset: str):
        super().__init__(
            f'Unsupported charset "{charset.upper()}"',
            status=415,
            code="UNSUPPORTED_CHARSET",
            suggestion="Encode the request body as UTF-8",
            details={"charset": charset},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def error_response(exc: AcquisitionsException) -> JSONResponse:
    """
    Render an AcquisitionsException as a JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def acquisitions_exception_handler(
    request: Request,
    exc: AcquisitionsException
) -> JSONResponse:
    """Convert AcquisitionsException to JSON response."""
    return error_response(exc)


def internal_error_response() -> JSONResponse:
    """Generic 500 for exceptions that are not AcquisitionsException."""
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )
