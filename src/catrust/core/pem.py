"""PEM encoding and content-addressing helpers for X.509 certificates.

Every component that turns bytes into certificates (root providers,
the info client, the key store) goes through these functions so that a
certificate parsed anywhere produces the same deduplication digest.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import serialization

if TYPE_CHECKING:
    from collections.abc import Iterable


class PEMError(ValueError):
    """Raised when PEM input does not contain the expected certificates."""


def _as_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("ascii", errors="replace")
    return data


def parse_certificates_pem(data: bytes | str) -> list[x509.Certificate]:
    """Parse one or more PEM ``CERTIFICATE`` blocks.

    Raises
    ------
    PEMError
        If *data* holds no certificate or a block fails to decode.

    """
    raw = _as_bytes(data)
    if not raw.strip():
        msg = "no PEM certificate data"
        raise PEMError(msg)
    try:
        certs = x509.load_pem_x509_certificates(raw)
    except ValueError as exc:
        msg = f"failed to parse PEM certificates: {exc}"
        raise PEMError(msg) from exc
    if not certs:
        msg = "no certificates found in PEM data"
        raise PEMError(msg)
    return certs


def parse_certificate_pem(data: bytes | str) -> x509.Certificate:
    """Parse exactly one PEM certificate."""
    certs = parse_certificates_pem(data)
    if len(certs) != 1:
        msg = f"expected a single PEM certificate, found {len(certs)}"
        raise PEMError(msg)
    return certs[0]


def encode_certificate_pem(cert: x509.Certificate) -> str:
    """Return the PEM text of *cert* (with trailing newline)."""
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


def encode_certificates_pem(certs: Iterable[x509.Certificate]) -> str:
    """Concatenate the PEM encodings of *certs*."""
    return "".join(encode_certificate_pem(cert) for cert in certs)


def certificate_digest(cert: x509.Certificate) -> bytes:
    """SHA-256 of the certificate's DER encoding (the dedup key)."""
    return hashlib.sha256(cert.public_bytes(serialization.Encoding.DER)).digest()


def certificate_fingerprint(cert: x509.Certificate) -> str:
    """Hex form of :func:`certificate_digest`, for logs and CLI output."""
    return certificate_digest(cert).hex()
