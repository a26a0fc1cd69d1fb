"""File key store -- CA certificate, key and chain from local PEM files.

Files are read lazily on first access so a node can start (and serve
health checks) while the key material is still being provisioned.
Once loaded, the material is cached for the life of the process.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization

from catrust.core.pem import PEMError, parse_certificate_pem, parse_certificates_pem
from catrust.keystore.base import KeyStore, KeyStoreError

if TYPE_CHECKING:
    from cryptography import x509
    from cryptography.hazmat.primitives.asymmetric.types import (
        CertificateIssuerPrivateKeyTypes,
    )

    from catrust.config.settings import KeyStoreSettings

log = logging.getLogger(__name__)


class FileKeyStore(KeyStore):
    """Serve CA material from PEM files named in :class:`KeyStoreSettings`."""

    def __init__(self, settings: KeyStoreSettings) -> None:
        self._settings = settings
        self._cert: x509.Certificate | None = None
        self._key: CertificateIssuerPrivateKeyTypes | None = None
        self._chain: list[x509.Certificate] = []
        self._lock = threading.Lock()

    def get_private_key(self) -> CertificateIssuerPrivateKeyTypes:
        self._ensure_loaded()
        return self._key  # type: ignore[return-value]

    def get_cert(self) -> x509.Certificate:
        self._ensure_loaded()
        return self._cert  # type: ignore[return-value]

    def get_trust_certs(self) -> list[x509.Certificate]:
        self._ensure_loaded()
        return list(self._chain)

    def _ensure_loaded(self) -> None:
        with self._lock:
            if self._cert is not None:
                return
            s = self._settings
            cert = self._load_cert(s.cert_path)
            key = self._load_key(s.key_path, s.key_password)
            self._check_key_permissions(s.key_path)
            chain = self._load_chain(s.chain_path) if s.chain_path else []
            self._cert, self._key, self._chain = cert, key, chain

        log.info(
            "File key store loaded (cert=%s, key=%s, chain=%s)",
            s.cert_path,
            s.key_path,
            s.chain_path or "none",
        )

    @staticmethod
    def _load_cert(cert_path: str) -> x509.Certificate:
        if not cert_path:
            msg = "keystore.cert_path is required for the file key store"
            raise KeyStoreError(msg)
        try:
            return parse_certificate_pem(Path(cert_path).read_bytes())
        except FileNotFoundError:
            msg = f"CA certificate not found: {cert_path}"
            raise KeyStoreError(msg) from None
        except (OSError, PEMError) as exc:
            msg = f"Failed to load CA certificate from {cert_path}: {exc}"
            raise KeyStoreError(msg) from exc

    @staticmethod
    def _load_key(key_path: str, password: str | None) -> CertificateIssuerPrivateKeyTypes:
        if not key_path:
            msg = "keystore.key_path is required for the file key store"
            raise KeyStoreError(msg)
        try:
            return serialization.load_pem_private_key(  # type: ignore[return-value]
                Path(key_path).read_bytes(),
                password=password.encode("utf-8") if password else None,
            )
        except FileNotFoundError:
            msg = f"CA private key not found: {key_path}"
            raise KeyStoreError(msg) from None
        except (OSError, ValueError, TypeError) as exc:
            msg = f"Failed to load CA private key from {key_path}: {exc}"
            raise KeyStoreError(msg) from exc

    @staticmethod
    def _load_chain(chain_path: str) -> list[x509.Certificate]:
        try:
            return parse_certificates_pem(Path(chain_path).read_bytes())
        except (OSError, PEMError) as exc:
            msg = f"Failed to load CA chain from {chain_path}: {exc}"
            raise KeyStoreError(msg) from exc

    @staticmethod
    def _check_key_permissions(key_path: str) -> None:
        """Warn if the private key file is readable by group or others."""
        try:
            mode = os.stat(key_path).st_mode
        except OSError:
            return
        if mode & (stat.S_IRGRP | stat.S_IROTH | stat.S_IWGRP | stat.S_IWOTH):
            log.warning(
                "Private key file '%s' has overly permissive "
                "permissions (mode=%o). Recommend chmod 600.",
                key_path,
                stat.S_IMODE(mode),
            )
