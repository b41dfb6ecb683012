"""Error kinds raised while reading and verifying certificates."""


class CertificateError(Exception):
    """Base class for certificates that cannot be verified."""

    user_message = "Invalid certificate file. Please upload a valid JSON certificate."


class ParseFailure(CertificateError):
    """The certificate file is not a JSON object."""


class MalformedCertificate(CertificateError):
    """The certificate is JSON but required fields are missing or ill-typed."""
