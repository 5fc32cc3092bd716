"""
API routes for the spam scanner.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel, Field, SecretStr, StrictInt
from starlette.concurrency import run_in_threadpool

from spamtrace.application.use_cases.scan_spam import ScanSpamUseCase
from spamtrace.domain.models import ScanRequest
from spamtrace.infrastructure import get_settings
from spamtrace.infrastructure.email.providers.gmail_imap.client import (
    GmailImapConfig,
    GmailImapSpamSource,
)
from spamtrace.infrastructure.geo import ip_api_resolver_factory

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class AnalyzeRequest(BaseModel):
    """Request body for the analyze endpoint."""

    email: str = Field("", description="Mailbox login")
    app_password: SecretStr = Field(SecretStr(""), description="App password (never logged)")
    max_emails: Optional[StrictInt] = Field(None, description="Newest N unread spam emails to scan")


class IpInfo(BaseModel):
    outcome: str
    country: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None
    region_name: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    isp: Optional[str] = None
    org: Optional[str] = None
    autonomous_system: Optional[str] = None
    query: Optional[str] = None
    failure_reason: Optional[str] = None


class EmailEntry(BaseModel):
    uid: int
    subject: str
    sender: str
    date: str
    sender_ip: Optional[str] = None
    ip_info: Optional[IpInfo] = None


class AnalyzeResponse(BaseModel):
    """Response from the analyze endpoint."""

    message: str
    emails: list[EmailEntry]


# ============================================================================
# Dependencies
# ============================================================================


def get_scan_use_case() -> ScanSpamUseCase:
    """Fresh IMAP source per request; nothing is shared between scans."""
    settings = get_settings()
    source = GmailImapSpamSource(
        GmailImapConfig(
            host=settings.imap_host,
            port=settings.imap_port,
            timeout=settings.imap_timeout_seconds,
        )
    )
    return ScanSpamUseCase(
        source=source,
        resolver_factory=ip_api_resolver_factory(settings),
        folder=settings.spam_folder,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/api/health", tags=["health"])
async def health_check() -> dict[str, bool]:
    """Basic health check endpoint."""
    return {"ok": True}


@router.post("/api/analyze", response_model=AnalyzeResponse, tags=["scan"])
async def analyze(
    request: AnalyzeRequest,
    use_case: ScanSpamUseCase = Depends(get_scan_use_case),
) -> dict[str, Any]:
    """
    Scan unread spam, trace and geolocate sender IPs, then mark them read.

    Blocks until the whole run finished; there are no partial results.
    """
    limit = request.max_emails if request.max_emails is not None else get_settings().default_max_emails
    scan_request = ScanRequest(
        account=request.email.strip(),
        credential=request.app_password.get_secret_value().strip(),
        limit=limit,
    )

    result = await run_in_threadpool(use_case.run, scan_request)
    logger.info(f"Analyze finished for {scan_request.account}: {result.summary}")

    return {
        "message": result.summary,
        "emails": [record.to_dict() for record in result.records],
    }
