"""Certificate construction."""

import copy
import json
import logging
import platform
from typing import Any, Callable, Optional, Sequence

from typeproof.models import (
    Certificate,
    CertificateDocument,
    CertificateVerification,
    KeyEvent,
    PasteEvent,
    TypingStats,
    VersionSnapshot,
)
from typeproof.services.crypto_service import HASH_ALGORITHM, CryptoService, crypto_service
from typeproof.utils import count_words, generate_id, iso_from_ms, now_ms

logger = logging.getLogger(__name__)

CERTIFICATE_VERSION = "1.0"
DEFAULT_TITLE = "Verified Document"

VERIFICATION_INSTRUCTIONS = {
    "howToVerify": [
        "1. Open the TypeProof verifier (web app or `typeproof verify`)",
        "2. Choose \"Verify Document\"",
        "3. Upload this certificate file",
        "4. The system will verify the signature and authenticity",
    ],
    "note": "This certificate is self-contained. We don't store your data.",
}


def default_metadata(editor_version: str = "1.0") -> dict[str, Any]:
    """Environment details recorded for information only."""
    return {
        "editorVersion": editor_version,
        "platform": platform.system(),
        "pythonVersion": platform.python_version(),
    }


class CertificateBuilder:
    """Turns a session's telemetry and content into a certificate."""

    def __init__(
        self,
        crypto: CryptoService = crypto_service,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[int], str] = lambda ts: generate_id("cert", ts),
    ):
        self._crypto = crypto
        self._clock = clock
        self._id_factory = id_factory

    def build(
        self,
        content: str,
        typing_stats: TypingStats,
        key_events: Sequence[KeyEvent],
        versions: Sequence[VersionSnapshot],
        paste_events: Sequence[PasteEvent],
        *,
        title: str = DEFAULT_TITLE,
        word_count: Optional[int] = None,
        char_count: Optional[int] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Certificate:
        """
        Build a self-contained certificate.

        The signature covers content, key events, versions, typing stats,
        paste events and the certificate timestamp, in that order.
        """
        timestamp = self._clock()
        certificate_id = self._id_factory(timestamp)

        key_events = list(key_events)
        versions = list(versions)
        paste_events = list(paste_events)

        content_hash = self._crypto.hash_content(content)
        signature = self._crypto.sign_document(
            content, key_events, versions, typing_stats, paste_events, timestamp
        )

        certificate = Certificate(
            version=CERTIFICATE_VERSION,
            certificate_id=certificate_id,
            timestamp_ms=timestamp,
            created_at=iso_from_ms(timestamp),
            document=CertificateDocument(
                title=title,
                content=content,
                word_count=count_words(content) if word_count is None else word_count,
                char_count=len(content) if char_count is None else char_count,
                keystrokes=key_events,
                versions=versions,
                typing_stats=typing_stats,
                paste_events=paste_events,
            ),
            verification=CertificateVerification(
                content_hash=content_hash,
                signature=signature,
                algorithm=HASH_ALGORITHM,
            ),
            metadata=default_metadata() if metadata is None else metadata,
            instructions=copy.deepcopy(VERIFICATION_INSTRUCTIONS),
        )

        logger.info(
            "Built certificate %s: %d keystrokes, %d versions, %d pastes",
            certificate_id,
            typing_stats.total_keystrokes,
            len(versions),
            len(paste_events),
        )
        return certificate


def certificate_to_json(certificate: Certificate, indent: Optional[int] = 2) -> str:
    """Serialize a certificate for download."""
    return json.dumps(certificate.to_dict(), indent=indent, ensure_ascii=False)
