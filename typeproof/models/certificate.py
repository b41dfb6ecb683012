"""Pydantic models for authenticity certificates and verification results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from typeproof.models.keystroke import KeyEvent, TypingRhythm, TypingStats
from typeproof.models.paste import PasteEvent
from typeproof.models.version import VersionSnapshot


class CertificateDocument(BaseModel):
    """Document content plus the full writing telemetry."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    content: str
    word_count: int = Field(..., alias="wordCount")
    char_count: int = Field(..., alias="charCount")
    keystrokes: list[KeyEvent]
    versions: list[VersionSnapshot]
    typing_stats: TypingStats = Field(..., alias="typingStats")
    paste_events: list[PasteEvent] = Field(..., alias="pasteEvents")


class CertificateVerification(BaseModel):
    """Hashes that bind the certificate contents."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    content_hash: str = Field(..., alias="contentHash")
    signature: str
    algorithm: str


class Certificate(BaseModel):
    """Self-contained exported certificate.

    Field order here is the order of the exported JSON.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: str
    certificate_id: str = Field(..., alias="certificateId")
    timestamp_ms: int = Field(..., alias="timestamp")
    created_at: str = Field(..., alias="createdAt")
    document: CertificateDocument
    verification: CertificateVerification
    metadata: dict[str, Any] = Field(default_factory=dict)
    instructions: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the certificate."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class VerificationStatus(str, Enum):
    """Trust verdict for a certificate."""

    VALID = "valid"
    WARNING = "warning"
    INVALID = "invalid"


class VerificationMetrics(BaseModel):
    """Supporting metrics shown next to the verdict."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    signature_valid: bool = Field(..., alias="signatureValid")
    copy_paste_detected: bool = Field(..., alias="copyPasteDetected")
    typing_speed: int = Field(..., alias="typingSpeed")
    total_keystrokes: int = Field(..., alias="totalKeystrokes")
    time_spent: int = Field(..., alias="timeSpent")
    version_count: int = Field(..., alias="versionCount")
    total_pastes: int = Field(..., alias="totalPastes")
    justified_pastes: int = Field(..., alias="justifiedPastes")
    unjustified_pastes: int = Field(..., alias="unjustifiedPastes")
    paste_by_type: dict[str, int] = Field(..., alias="pasteByType")
    has_reasonable_typing_speed: bool = Field(..., alias="hasReasonableTypingSpeed")
    has_reasonable_keystrokes: bool = Field(..., alias="hasReasonableKeystrokes")
    rhythm: TypingRhythm


class VerificationResult(BaseModel):
    """Verdict derived from a certificate. Never persisted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: VerificationStatus
    message: str
    is_signature_valid: bool = Field(..., alias="isSignatureValid")
    metrics: VerificationMetrics
    paste_events: list[PasteEvent] = Field(..., alias="pasteEvents")
