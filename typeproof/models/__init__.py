"""Data models."""

from typeproof.models.certificate import (
    Certificate,
    CertificateDocument,
    CertificateVerification,
    VerificationMetrics,
    VerificationResult,
    VerificationStatus,
)
from typeproof.models.draft import Draft
from typeproof.models.keystroke import (
    KeyEvent,
    KeyPhase,
    KeystrokeBatchRequest,
    KeystrokeBatchResponse,
    KeystrokeEvent,
    Modifier,
    TypingRhythm,
    TypingStats,
)
from typeproof.models.paste import (
    PasteAnnotationRequest,
    PasteEvent,
    PasteRequest,
    PasteStats,
    PasteType,
)
from typeproof.models.version import ContentChangedRequest, VersionSnapshot

__all__ = [
    "Certificate",
    "CertificateDocument",
    "CertificateVerification",
    "ContentChangedRequest",
    "Draft",
    "KeyEvent",
    "KeyPhase",
    "KeystrokeBatchRequest",
    "KeystrokeBatchResponse",
    "KeystrokeEvent",
    "Modifier",
    "PasteAnnotationRequest",
    "PasteEvent",
    "PasteRequest",
    "PasteStats",
    "PasteType",
    "TypingRhythm",
    "TypingStats",
    "VerificationMetrics",
    "VerificationResult",
    "VerificationStatus",
    "VersionSnapshot",
]
