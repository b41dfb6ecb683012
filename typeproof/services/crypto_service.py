"""Canonicalization and hashing for authenticity certificates.

The "signature" is an unkeyed SHA-256 over a payload that the certificate
itself contains. It detects accidental corruption only: anyone can recompute
it for altered content.
"""

import hashlib
import hmac
import json
from collections.abc import Mapping
from typing import Any, Iterable

from pydantic import BaseModel

from typeproof.models import KeyEvent, PasteEvent, TypingStats, VersionSnapshot

HASH_ALGORITHM = "SHA256"


def _dump(record: BaseModel) -> dict[str, Any]:
    return record.model_dump(by_alias=True, exclude_none=True, mode="json")


class CryptoService:
    """Hashing operations shared by the certificate builder and verifier."""

    def hash_content(self, content: str) -> str:
        """Create SHA-256 hash of content."""
        return self._sha256(content)

    def canonical_payload(
        self,
        content: str,
        keystrokes: Iterable[KeyEvent],
        versions: Iterable[VersionSnapshot],
        typing_stats: TypingStats,
        paste_events: Iterable[PasteEvent],
        timestamp_ms: int | None,
    ) -> dict[str, Any]:
        """
        Build the signed payload.

        Key order is fixed here and nested records follow their model field
        order, so the serialized text never depends on how the inputs were
        assembled.
        """
        return {
            "content": content,
            "keystrokes": [_dump(k) for k in keystrokes],
            "versions": [_dump(v) for v in versions],
            "typingStats": _dump(typing_stats),
            "pasteEvents": [_dump(p) for p in paste_events],
            "timestamp": timestamp_ms,
        }

    def canonicalize(self, payload: dict[str, Any]) -> str:
        """Compact JSON: no whitespace, non-ASCII kept as UTF-8."""
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    def wire_payload(self, certificate: Mapping) -> dict[str, Any]:
        """
        Signed payload taken verbatim from a parsed certificate.

        Values are not normalized, so any changed value, type or extra
        field alters the hash. Absent fields are left out of the payload,
        as a JSON encoder drops undefined values; a missing
        ``pasteEvents`` list counts as empty.
        """
        document = certificate.get("document") or {}
        payload: dict[str, Any] = {}
        for key in ("content", "keystrokes", "versions", "typingStats"):
            if key in document:
                payload[key] = document[key]
        payload["pasteEvents"] = document.get("pasteEvents") or []
        if "timestamp" in certificate:
            payload["timestamp"] = certificate["timestamp"]
        return payload

    def sign_payload(self, payload: dict[str, Any]) -> str:
        """Hash of a canonicalized payload."""
        return self._sha256(self.canonicalize(payload))

    def sign_document(
        self,
        content: str,
        keystrokes: Iterable[KeyEvent],
        versions: Iterable[VersionSnapshot],
        typing_stats: TypingStats,
        paste_events: Iterable[PasteEvent],
        timestamp_ms: int | None,
    ) -> str:
        """Hash of the canonical payload."""
        return self.sign_payload(
            self.canonical_payload(
                content, keystrokes, versions, typing_stats, paste_events, timestamp_ms
            )
        )

    def signatures_match(self, expected: str, stored: Any) -> bool:
        if not isinstance(stored, str):
            return False
        return hmac.compare_digest(expected.encode("utf-8"), stored.encode("utf-8", "surrogatepass"))

    @staticmethod
    def _sha256(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


# Singleton instance
crypto_service = CryptoService()
