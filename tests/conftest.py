"""Root conftest for the catrust test suite."""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import yaml

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from cryptography import x509  # noqa: E402
from cryptography.hazmat.primitives import hashes, serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from cryptography.x509.oid import NameOID  # noqa: E402


# ---------------------------------------------------------------------------
# Certificate helpers
# ---------------------------------------------------------------------------


def _name(cn: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])


def _issue(
    subject_cn: str,
    key: ec.EllipticCurvePrivateKey,
    *,
    issuer_cert: x509.Certificate | None = None,
    issuer_key: ec.EllipticCurvePrivateKey | None = None,
    ca: bool = True,
) -> x509.Certificate:
    now = datetime.now(UTC)
    issuer_name = issuer_cert.subject if issuer_cert is not None else _name(subject_cn)
    signing_key = issuer_key if issuer_key is not None else key
    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .sign(signing_key, hashes.SHA256())
    )


@pytest.fixture()
def make_ca():
    """Factory: ``make_ca("Root")`` → ``(certificate, private_key)``."""

    def _make(cn: str = "Test Root CA"):
        key = ec.generate_private_key(ec.SECP256R1())
        return _issue(cn, key), key

    return _make


@pytest.fixture()
def make_intermediate():
    """Factory: ``make_intermediate(parent_cert, parent_key, "Issuing")``."""

    def _make(parent_cert, parent_key, cn: str = "Test Issuing CA"):
        key = ec.generate_private_key(ec.SECP256R1())
        return _issue(cn, key, issuer_cert=parent_cert, issuer_key=parent_key), key

    return _make


@pytest.fixture()
def to_pem():
    """Factory: PEM text of one or more certificates."""

    def _pem(*certs: x509.Certificate) -> str:
        return "".join(c.public_bytes(serialization.Encoding.PEM).decode("ascii") for c in certs)

    return _pem


@pytest.fixture()
def ca_files(tmp_path: Path, make_ca, make_intermediate, to_pem) -> dict:
    """Issuing CA cert/key/chain on disk, as a file key store expects."""
    root_cert, root_key = make_ca("Test Root CA")
    cert, key = make_intermediate(root_cert, root_key, "Test Issuing CA")

    cert_path = tmp_path / "ca.pem"
    key_path = tmp_path / "ca-key.pem"
    chain_path = tmp_path / "chain.pem"
    cert_path.write_text(to_pem(cert), encoding="ascii")
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ),
    )
    os.chmod(key_path, 0o600)
    chain_path.write_text(to_pem(root_cert), encoding="ascii")

    return {
        "cert": cert,
        "key": key,
        "root": root_cert,
        "root_key": root_key,
        "cert_path": str(cert_path),
        "key_path": str(key_path),
        "chain_path": str(chain_path),
    }


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_config(tmp_path: Path):
    """Factory: write *data* to a YAML config file and return its path."""

    def _write(data: dict, name: str = "catrust.yaml") -> Path:
        cfg = tmp_path / name
        cfg.write_text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        return cfg

    return _write


@pytest.fixture()
def signer_config(ca_files: dict) -> dict:
    """Config data for a single ``primary`` signer backed by *ca_files*."""
    return {
        "signers": {
            "labels": {
                "primary": {
                    "keystore": {
                        "cert_path": ca_files["cert_path"],
                        "key_path": ca_files["key_path"],
                        "chain_path": ca_files["chain_path"],
                    },
                },
            },
        },
    }


# ---------------------------------------------------------------------------
# Logging isolation: configure_logging() detaches the ``catrust`` logger
# from the root logger, which would hide records from ``caplog``.
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_catrust_logger():
    logger = logging.getLogger("catrust")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
