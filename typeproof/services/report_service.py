"""Plain-text and Markdown reports built from certificates."""

from datetime import datetime, timezone
from typing import Optional

from typeproof.models import Certificate, VerificationResult

RULE = "=" * 80
THIN_RULE = "-" * 80


def format_time_spent(seconds: int) -> str:
    """``125`` -> ``2m 5s``."""
    return f"{seconds // 60}m {seconds % 60}s"


def _yes_no(flag: bool, good_when: bool) -> str:
    mark = "✓" if flag == good_when else "⚠"
    return f"{'Yes' if flag else 'No'} {mark}"


def render_verified_document(
    certificate: Certificate,
    result: VerificationResult,
    verified_at: Optional[datetime] = None,
) -> str:
    """Document text preceded by its certificate details and metrics."""
    verified_at = verified_at or datetime.now(timezone.utc)
    metrics = result.metrics

    lines = [
        "VERIFIED DOCUMENT",
        RULE,
        "",
        f"Certificate ID: {certificate.certificate_id}",
        f"Created: {certificate.created_at}",
        f"Verified: {verified_at.isoformat()}",
        f"Status: {result.status.value.upper()} - {result.message}",
        "",
        "AUTHENTICITY METRICS",
        THIN_RULE,
        f"Signature Valid: {'Yes ✓' if result.is_signature_valid else 'No ✗'}",
        f"Typing Speed: {metrics.typing_speed} WPM",
        f"Total Keystrokes: {metrics.total_keystrokes}",
        f"Time Spent: {format_time_spent(metrics.time_spent)}",
        f"Copy/Paste Detected: {_yes_no(metrics.copy_paste_detected, good_when=False)}",
        f"Version Count: {metrics.version_count}",
        "",
        "PASTE EVENTS",
        THIN_RULE,
        f"Total Pastes: {metrics.total_pastes}",
        f"Justified: {metrics.justified_pastes}",
        f"Unjustified: {metrics.unjustified_pastes}",
    ]
    for paste_type, count in sorted(metrics.paste_by_type.items()):
        lines.append(f"  {paste_type}: {count}")
    for event in result.paste_events:
        label = event.type.value if event.justified else "UNJUSTIFIED"
        preview = event.text if len(event.text) <= 60 else event.text[:57] + "..."
        line = f"- [{label}] {event.length} chars at {event.position}: {preview!r}"
        if event.note:
            line += f" ({event.note})"
        lines.append(line)

    lines += [
        "",
        "DOCUMENT CONTENT",
        RULE,
        "",
        certificate.document.content,
        "",
    ]
    return "\n".join(lines)


def render_verification_guide(certificate: Optional[Certificate] = None) -> str:
    """Markdown guide that travels with a certificate."""
    sections = [
        "# Document Verification Guide",
        "",
        "## What You Received",
        "",
        "You received a **self-contained verification certificate** (JSON file) "
        "that records how a document was written.",
    ]

    if certificate is not None:
        document = certificate.document
        stats = document.typing_stats
        justified = sum(1 for e in document.paste_events if e.justified)
        sections += [
            "",
            "## Document Information",
            "",
            f"- **Certificate ID**: {certificate.certificate_id}",
            f"- **Created**: {certificate.created_at}",
            f"- **Word Count**: {document.word_count}",
            f"- **Character Count**: {document.char_count}",
            "",
            "## Authenticity Metrics",
            "",
            f"- **Typing Speed**: {stats.average_typing_speed} words per minute",
            f"- **Total Keystrokes**: {stats.total_keystrokes}",
            f"- **Time Spent Writing**: {stats.total_time_spent_sec // 60} minutes",
            f"- **Copy/Paste Detected**: {'Yes ⚠️' if stats.copy_paste_detected else 'No ✓'}",
            f"- **Versions Saved**: {len(document.versions)}",
            f"- **Paste Events Tracked**: {len(document.paste_events)}",
            f"- **Justified Pastes**: {justified} / {len(document.paste_events)}",
        ]

    sections += [
        "",
        "## How to Verify This Document",
        "",
        "### Method 1: Upload Certificate File",
        "1. Open the TypeProof verifier",
        "2. Choose **Verify Document**",
        "3. Upload the JSON certificate file",
        "4. Review the verification results",
        "",
        "### Method 2: Command Line",
        "Run `typeproof verify <certificate.json> --report`.",
        "",
        "## Understanding the Results",
        "",
        "- **Valid**: the signature matches and the typing record shows nothing unusual.",
        "- **Warning**: the signature matches, but there are unjustified pastes, "
        "copy/paste was detected, or the typing pattern is unusual.",
        "- **Invalid**: the signature does not match; the file was changed after export.",
        "",
        "## Limitations",
        "",
        "The signature is a SHA-256 hash of data stored in the certificate itself. "
        "It reveals accidental corruption, but anyone who knows the format can "
        "recompute it, so it is not proof against deliberate forgery.",
        "",
    ]
    return "\n".join(sections)
