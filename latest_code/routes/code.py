"""
Code Routes - Latest one-time code endpoint

GET /api/v1/code/latest returns the first six-digit code found in the most
recent inbox message. Callers authenticate with the ``x-api-key`` header when
MY_API_KEY is set.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from latest_code.core.handler import handle_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/code", tags=["code"])


class CodeResponse(BaseModel):
    """Successful code lookup"""

    code: str = Field(..., pattern=r"^\d{6}$", description="Six-digit one-time code")


class CodeErrorResponse(BaseModel):
    """Failed code lookup"""

    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Failure detail for server errors")


@router.get(
    "/latest",
    response_model=CodeResponse,
    responses={
        403: {"model": CodeErrorResponse},
        404: {"model": CodeErrorResponse},
        500: {"model": CodeErrorResponse},
    },
)
async def get_latest_code(x_api_key: Optional[str] = Header(default=None)) -> JSONResponse:
    """
    Get the latest six-digit code

    Opens a fresh mailbox session for this request only; the blocking IMAP
    work runs in a worker thread.

    Returns:
        JSONResponse: ``{"code": ...}`` on success, ``{"error": ...}`` otherwise
    """
    payload = await asyncio.to_thread(handle_request, x_api_key)
    return JSONResponse(status_code=payload.status_code, content=payload.to_dict())
