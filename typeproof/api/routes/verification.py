"""Verification API routes."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from typeproof.errors import CertificateError
from typeproof.models import Certificate, VerificationResult
from typeproof.services.crypto_service import HASH_ALGORITHM
from typeproof.services.report_service import render_verification_guide, render_verified_document
from typeproof.services.verification_service import (
    load_certificate,
    upgrade_legacy_certificate,
    verification_engine,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verify", tags=["verification"])


async def _read_certificate(request: Request) -> dict[str, Any]:
    body = await request.body()
    try:
        return load_certificate(body)
    except CertificateError as exc:
        logger.warning("Unreadable certificate upload: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.user_message,
        )


def _verify(certificate: dict[str, Any]) -> VerificationResult:
    try:
        return verification_engine.verify(certificate)
    except CertificateError as exc:
        logger.warning("Malformed certificate upload: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.user_message,
        )


@router.post("", response_model=VerificationResult)
async def verify_certificate(request: Request) -> VerificationResult:
    """
    Verify an uploaded certificate.

    The request body is the certificate file itself.
    """
    return _verify(await _read_certificate(request))


@router.post("/report", response_class=PlainTextResponse)
async def verification_report(request: Request) -> str:
    """Verified document text with its authenticity metrics."""
    data = await _read_certificate(request)
    result = _verify(data)
    try:
        certificate = Certificate.model_validate(upgrade_legacy_certificate(data))
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=CertificateError.user_message,
        )
    return render_verified_document(certificate, result)


@router.get("/guide", response_class=PlainTextResponse)
async def verification_guide() -> str:
    """How to verify a certificate."""
    return render_verification_guide()


@router.get("/health")
async def verification_health() -> dict[str, Any]:
    """Check if verification system is ready."""
    return {
        "status": "ready",
        "algorithm": HASH_ALGORITHM,
    }
