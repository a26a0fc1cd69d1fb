"""Key store capability: where a signer's CA material comes from.

A :class:`KeyStore` hides whether the CA key lives on local disk, in an
HSM or behind a secrets service.  Signers never hold a key store
directly; they are given a :class:`~catrust.keystore.hook.KeyStoreHook`
that the embedding system fills in once at startup.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cryptography import x509
    from cryptography.hazmat.primitives.asymmetric.types import (
        CertificateIssuerPrivateKeyTypes,
    )


class KeyStoreError(Exception):
    """Raised when CA key material cannot be produced.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class KeyStoreNotInitializedError(KeyStoreError):
    """A key store accessor was called before one was assigned."""


class KeyStore(abc.ABC):
    """Source of the active CA private key, certificate and trust chain.

    Each accessor raises :class:`KeyStoreError` when the backend cannot
    answer; none of them returns an empty placeholder instead.
    """

    @abc.abstractmethod
    def get_private_key(self) -> CertificateIssuerPrivateKeyTypes:
        """Return the CA signing key."""

    @abc.abstractmethod
    def get_cert(self) -> x509.Certificate:
        """Return the CA certificate matching :meth:`get_private_key`."""

    @abc.abstractmethod
    def get_trust_certs(self) -> list[x509.Certificate]:
        """Return the certificates above the CA certificate (may be empty)."""
