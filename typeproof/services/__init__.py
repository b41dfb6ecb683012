"""Services for the authenticity-evidence pipeline."""

from typeproof.services.certificate_service import CertificateBuilder, certificate_to_json
from typeproof.services.crypto_service import crypto_service
from typeproof.services.draft_store import JsonFileDraftStore, create_new_draft
from typeproof.services.feature_extractor import feature_extractor
from typeproof.services.keystroke_service import TelemetryRecorder, compute_typing_stats
from typeproof.services.paste_service import PasteTracker, summarize_pastes
from typeproof.services.session_service import SessionRegistry, WritingSession
from typeproof.services.verification_service import (
    VerificationEngine,
    load_certificate,
    verification_engine,
    verify_certificate_text,
)
from typeproof.services.version_service import AsyncioScheduler, ThreadingScheduler, VersionSampler

__all__ = [
    "AsyncioScheduler",
    "CertificateBuilder",
    "JsonFileDraftStore",
    "PasteTracker",
    "SessionRegistry",
    "TelemetryRecorder",
    "ThreadingScheduler",
    "VerificationEngine",
    "VersionSampler",
    "WritingSession",
    "certificate_to_json",
    "compute_typing_stats",
    "create_new_draft",
    "crypto_service",
    "feature_extractor",
    "load_certificate",
    "summarize_pastes",
    "verification_engine",
    "verify_certificate_text",
]
