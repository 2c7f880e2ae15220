"""
Latest Code API - Main Application Entry

Returns the one-time code from the newest message in a configured IMAP
inbox, so clients never hold mail credentials.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from latest_code.config import API_VERSION, Settings
from latest_code.core.error_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from latest_code.routes import code, status

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# App metadata
app = FastAPI(
    title="Latest Code API",
    description="Fetch the latest six-digit code from an IMAP inbox",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Register exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# CORS middleware; the browser page calling this lives on another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["x-api-key"],
)

# Include routers
app.include_router(code.router)
app.include_router(status.router)


@app.on_event("startup")
async def startup_event():
    """Report configuration state; settings are re-read on every request"""
    settings = Settings()
    logger.info("🚀 Starting Latest Code API...")
    if not settings.mailbox_configured:
        logger.warning("⚠️ IMAP_HOST, IMAP_USER or IMAP_PASS not set; requests will fail until configured")
    if not settings.auth_enabled:
        logger.warning("⚠️ MY_API_KEY not set; the code endpoint is unauthenticated")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Latest Code API",
        "version": API_VERSION,
        "status": "active",
        "docs": "/docs",
        "endpoints": {
            "latest_code": "/api/v1/code/latest",
            "health": "/api/v1/status/health",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "latest_code.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
