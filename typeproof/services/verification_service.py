"""Certificate verification and trust classification."""

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from typeproof.errors import MalformedCertificate, ParseFailure
from typeproof.models import (
    Certificate,
    KeyEvent,
    PasteEvent,
    TypingStats,
    VerificationMetrics,
    VerificationResult,
    VerificationStatus,
    VersionSnapshot,
)
from typeproof.services.crypto_service import HASH_ALGORITHM, CryptoService, crypto_service
from typeproof.services.feature_extractor import FeatureExtractor, feature_extractor
from typeproof.services.paste_service import summarize_pastes

logger = logging.getLogger(__name__)

# Verdict thresholds are fixed so every verifier reaches the same verdict
MAX_REASONABLE_WPM = 200

MESSAGE_INVALID = "Certificate signature is invalid - content may have been tampered with"
MESSAGE_UNJUSTIFIED = (
    "Document verified, but {count} paste event(s) are not justified - review paste annotations"
)
MESSAGE_COPY_PASTE = (
    "Document verified, but copy/paste was detected - content may not be entirely original"
)
MESSAGE_UNUSUAL = "Document verified, but typing patterns are unusual"
MESSAGE_VALID = "Document is authentic and verified"

_KEY_EVENTS = TypeAdapter(list[KeyEvent])
_VERSIONS = TypeAdapter(list[VersionSnapshot])
_PASTE_EVENTS = TypeAdapter(list[PasteEvent])


def load_certificate(data: Union[str, bytes]) -> dict[str, Any]:
    """Parse certificate file contents into a JSON object."""
    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseFailure(f"Certificate is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ParseFailure("Certificate must be a JSON object")
    return parsed


def stored_signature(certificate: Mapping) -> Optional[str]:
    """
    Locate the signature a certificate carries.

    Compatibility shim: current certificates keep it under
    ``verification.signature``; older ones used a top-level ``signature``.
    The current location is tried first.
    """
    verification = certificate.get("verification")
    if isinstance(verification, Mapping) and verification.get("signature"):
        return verification["signature"]
    return certificate.get("signature") or None


def upgrade_legacy_certificate(certificate: Mapping) -> dict[str, Any]:
    """
    Copy of ``certificate`` with a ``verification`` block.

    Older certificates only carry a top-level signature; the block is
    rebuilt from it so the certificate fits the current model. The signature
    itself is not checked here.
    """
    upgraded = dict(certificate)
    verification = upgraded.get("verification")
    if isinstance(verification, Mapping) and verification.get("signature"):
        return upgraded

    document = upgraded.get("document")
    content = document.get("content", "") if isinstance(document, Mapping) else ""
    upgraded["verification"] = {
        "contentHash": crypto_service.hash_content(content) if isinstance(content, str) else "",
        "signature": stored_signature(certificate) or "",
        "algorithm": HASH_ALGORITHM,
    }
    return upgraded


class VerificationEngine:
    """Re-derives a certificate's signature and classifies the result."""

    def __init__(
        self,
        crypto: CryptoService = crypto_service,
        extractor: FeatureExtractor = feature_extractor,
    ):
        self._crypto = crypto
        self._extractor = extractor

    def verify(self, certificate: Union[Mapping, Certificate]) -> VerificationResult:
        """
        Verify a certificate.

        Raises MalformedCertificate when required fields are missing or the
        embedded records do not match the data model. The signature is
        recomputed over the stored values exactly as they appear, so the
        result depends on the certificate alone.
        """
        if isinstance(certificate, Certificate):
            certificate = certificate.to_dict()
        if not isinstance(certificate, Mapping):
            raise MalformedCertificate("Certificate must be a JSON object")

        document = certificate.get("document")
        if not isinstance(document, Mapping):
            raise MalformedCertificate("Certificate has no document")
        if document.get("typingStats") is None:
            raise MalformedCertificate("Certificate document has no typingStats")

        signature = stored_signature(certificate)
        if signature is None:
            raise MalformedCertificate("Certificate has no signature")

        if not isinstance(document.get("content", ""), str):
            raise MalformedCertificate("Certificate content must be a string")

        timestamp = certificate.get("timestamp")
        if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
            raise MalformedCertificate("Certificate timestamp must be an integer")

        try:
            typing_stats = TypingStats.model_validate(document["typingStats"])
            keystrokes = _KEY_EVENTS.validate_python(document.get("keystrokes") or [])
            versions = _VERSIONS.validate_python(document.get("versions") or [])
            paste_events = _PASTE_EVENTS.validate_python(document.get("pasteEvents") or [])
        except ValidationError as exc:
            logger.warning("Rejected malformed certificate: %s", exc.errors()[:3])
            raise MalformedCertificate(f"Certificate records are malformed: {exc}") from exc

        # hash the stored values, not the validated copies
        expected = self._crypto.sign_payload(self._crypto.wire_payload(certificate))
        is_signature_valid = self._crypto.signatures_match(expected, signature)

        paste_stats = summarize_pastes(paste_events)
        wpm = typing_stats.average_typing_speed
        has_reasonable_typing_speed = 0 < wpm < MAX_REASONABLE_WPM
        has_reasonable_keystrokes = typing_stats.total_keystrokes > 0

        metrics = VerificationMetrics(
            signature_valid=is_signature_valid,
            copy_paste_detected=typing_stats.copy_paste_detected,
            typing_speed=wpm,
            total_keystrokes=typing_stats.total_keystrokes,
            time_spent=typing_stats.total_time_spent_sec,
            version_count=len(versions),
            total_pastes=paste_stats.total,
            justified_pastes=paste_stats.justified,
            unjustified_pastes=paste_stats.unjustified,
            paste_by_type=paste_stats.by_type,
            has_reasonable_typing_speed=has_reasonable_typing_speed,
            has_reasonable_keystrokes=has_reasonable_keystrokes,
            rhythm=self._extractor.extract_rhythm(keystrokes),
        )

        status, message = self._classify(metrics)
        logger.info(
            "Verified certificate %s: %s", certificate.get("certificateId", "<no id>"), status.value
        )

        return VerificationResult(
            status=status,
            message=message,
            is_signature_valid=is_signature_valid,
            metrics=metrics,
            paste_events=sorted(paste_events, key=lambda e: e.timestamp_ms),
        )

    @staticmethod
    def _classify(metrics: VerificationMetrics) -> tuple[VerificationStatus, str]:
        """First matching rule wins; a bad signature outranks everything."""
        if not metrics.signature_valid:
            return VerificationStatus.INVALID, MESSAGE_INVALID
        if metrics.unjustified_pastes > 0:
            return VerificationStatus.WARNING, MESSAGE_UNJUSTIFIED.format(
                count=metrics.unjustified_pastes
            )
        if metrics.copy_paste_detected:
            return VerificationStatus.WARNING, MESSAGE_COPY_PASTE
        if not metrics.has_reasonable_typing_speed or not metrics.has_reasonable_keystrokes:
            return VerificationStatus.WARNING, MESSAGE_UNUSUAL
        return VerificationStatus.VALID, MESSAGE_VALID


# Singleton instance
verification_engine = VerificationEngine()


def verify_certificate_text(data: Union[str, bytes]) -> VerificationResult:
    """Parse and verify certificate file contents."""
    return verification_engine.verify(load_certificate(data))
