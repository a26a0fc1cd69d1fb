"""Late-bound reference to the active :class:`KeyStore`.

The embedding system creates a hook, injects it into every component
that signs, and assigns the real key store once it is available::

    hook = KeyStoreHook()
    signer = KeyStoreSigner(hook, policy)
    ...
    hook.assign(HsmKeyStore(...))

Until :meth:`KeyStoreHook.assign` runs, every accessor raises
:class:`KeyStoreNotInitializedError`.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from catrust.keystore.base import KeyStore, KeyStoreError, KeyStoreNotInitializedError

if TYPE_CHECKING:
    from cryptography import x509
    from cryptography.hazmat.primitives.asymmetric.types import (
        CertificateIssuerPrivateKeyTypes,
    )

log = logging.getLogger(__name__)


class KeyStoreHook(KeyStore):
    """A :class:`KeyStore` that delegates to one assigned backend."""

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._keystore: KeyStore | None = None
        self._lock = threading.Lock()

    @property
    def assigned(self) -> bool:
        return self._keystore is not None

    def assign(self, keystore: KeyStore) -> None:
        """Bind *keystore*.  A hook can be assigned only once."""
        if not isinstance(keystore, KeyStore):
            msg = f"key store for {self.name!r} must implement KeyStore"
            raise KeyStoreError(msg)
        with self._lock:
            if self._keystore is not None:
                msg = f"key store for {self.name!r} is already assigned"
                raise KeyStoreError(msg)
            self._keystore = keystore
        log.info("Key store assigned for %s: %s", self.name, type(keystore).__name__)

    def _target(self) -> KeyStore:
        keystore = self._keystore
        if keystore is None:
            msg = f"key store for {self.name!r} has not been initialised"
            raise KeyStoreNotInitializedError(msg)
        return keystore

    def get_private_key(self) -> CertificateIssuerPrivateKeyTypes:
        return self._target().get_private_key()

    def get_cert(self) -> x509.Certificate:
        return self._target().get_cert()

    def get_trust_certs(self) -> list[x509.Certificate]:
        return self._target().get_trust_certs()
