"""
TypeProof CLI - verify certificates offline or serve the API.

Exit codes of ``typeproof verify``: 0 valid, 1 warning, 2 invalid,
3 unreadable certificate.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import uvicorn
from pydantic import ValidationError

from typeproof import __version__
from typeproof.config import get_settings
from typeproof.errors import CertificateError
from typeproof.logging_config import configure_logging
from typeproof.models import Certificate, VerificationStatus
from typeproof.services.report_service import (
    format_time_spent,
    render_verification_guide,
    render_verified_document,
)
from typeproof.services.verification_service import (
    load_certificate,
    upgrade_legacy_certificate,
    verification_engine,
)

logger = logging.getLogger(__name__)

EXIT_CODES = {
    VerificationStatus.VALID: 0,
    VerificationStatus.WARNING: 1,
    VerificationStatus.INVALID: 2,
}
EXIT_UNREADABLE = 3

STATUS_BADGES = {
    VerificationStatus.VALID: "✓ VALID",
    VerificationStatus.WARNING: "⚠ WARNING",
    VerificationStatus.INVALID: "✗ INVALID",
}


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Override TYPEPROOF_LOG_LEVEL.")
def main(log_level: Optional[str]):
    """TypeProof - verify typing certificates."""
    configure_logging(log_level or get_settings().log_level)


@main.command()
@click.argument("certificate_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--report", is_flag=True, help="Print the verified document with its metrics.")
@click.option("--json", "as_json", is_flag=True, help="Print the verification result as JSON.")
def verify(certificate_file: Path, report: bool, as_json: bool):
    """Verify CERTIFICATE_FILE and print the verdict."""
    try:
        data = load_certificate(certificate_file.read_bytes())
        result = verification_engine.verify(data)
    except CertificateError as exc:
        logger.warning("Could not verify %s: %s", certificate_file, exc)
        click.echo(f"✗ {exc.user_message}", err=True)
        sys.exit(EXIT_UNREADABLE)

    if as_json:
        click.echo(result.model_dump_json(by_alias=True, indent=2))
    elif report:
        try:
            certificate = Certificate.model_validate(upgrade_legacy_certificate(data))
        except ValidationError:
            click.echo(f"✗ {CertificateError.user_message}", err=True)
            sys.exit(EXIT_UNREADABLE)
        click.echo(render_verified_document(certificate, result))
    else:
        metrics = result.metrics
        click.echo(f"{STATUS_BADGES[result.status]}: {result.message}")
        click.echo(f"  Typing speed:     {metrics.typing_speed} WPM")
        click.echo(f"  Keystrokes:       {metrics.total_keystrokes}")
        click.echo(f"  Time spent:       {format_time_spent(metrics.time_spent)}")
        click.echo(f"  Versions:         {metrics.version_count}")
        click.echo(
            f"  Pastes:           {metrics.total_pastes} "
            f"({metrics.justified_pastes} justified, {metrics.unjustified_pastes} not)"
        )
        click.echo(f"  Copy/paste:       {'yes' if metrics.copy_paste_detected else 'no'}")

    sys.exit(EXIT_CODES[result.status])


@main.command()
@click.argument(
    "certificate_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def guide(certificate_file: Optional[Path]):
    """Print the verification guide, optionally for CERTIFICATE_FILE."""
    certificate = None
    if certificate_file is not None:
        try:
            data = load_certificate(certificate_file.read_bytes())
            certificate = Certificate.model_validate(upgrade_legacy_certificate(data))
        except (CertificateError, ValidationError) as exc:
            logger.warning("Could not read %s: %s", certificate_file, exc)
            click.echo(f"✗ {CertificateError.user_message}", err=True)
            sys.exit(EXIT_UNREADABLE)
    click.echo(render_verification_guide(certificate))


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool):
    """Run the TypeProof API server."""
    logger.info("Serving TypeProof API on %s:%d", host, port)
    uvicorn.run("typeproof.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
