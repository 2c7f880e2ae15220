"""
Error Handlers - Global exception handling

Renders framework-level failures in the same JSON shape the code endpoint
uses: ``{"error": <message>, "details"?: <extra>}``.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Uniform error body"""

    def __init__(
        self,
        message: str,
        status_code: int,
        details: Optional[Any] = None,
    ):
        """
        Initialize error response

        Args:
            message: User-facing error message
            status_code: HTTP status code
            details: Optional extra information
        """
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        response: Dict[str, Any] = {"error": self.message}
        if self.details:
            response["details"] = self.details
        return response

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle HTTPException

    Args:
        request: FastAPI request
        exc: Exception instance

    Returns:
        JSONResponse: Error body with the exception's status code
    """
    status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = getattr(exc, "detail", str(exc))

    if status_code >= 500:
        logger.error(
            f"HTTP {status_code} error: {detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
            },
        )
    else:
        logger.warning(
            f"HTTP {status_code} error: {detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    return ErrorResponse(message=str(detail), status_code=status_code).to_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle any exception that escaped a route

    Internal details are logged but never returned to the caller.
    """
    exc_traceback = "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )

    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": exc_traceback,
        },
    )

    return ErrorResponse(
        message="Server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ).to_response()


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors"""
    errors = []
    if hasattr(exc, "errors"):
        for error in exc.errors():
            errors.append(
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

    logger.warning(
        f"Validation error: {errors}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return ErrorResponse(
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=errors,
    ).to_response()
