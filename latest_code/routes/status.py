"""
Status Routes - Deployment health

Reports whether the mailbox and API key are configured. Never opens a mail
session.
"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from latest_code.config import API_VERSION, Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/status", tags=["status"])


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status (healthy/unconfigured)")
    version: str = Field(..., description="API version")
    mailbox_configured: bool = Field(..., description="IMAP host, user and password are set")
    auth_enabled: bool = Field(..., description="Requests must send x-api-key")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint

    Status determination:
    - healthy: IMAP credentials present
    - unconfigured: any required IMAP setting missing
    """
    settings = Settings()
    configured = settings.mailbox_configured

    return HealthResponse(
        status="healthy" if configured else "unconfigured",
        version=API_VERSION,
        mailbox_configured=configured,
        auth_enabled=settings.auth_enabled,
    )
