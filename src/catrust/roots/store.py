"""Deduplicating, thread-safe store of trust-anchor certificates.

Certificates are keyed by the SHA-256 digest of their DER encoding, so
the same certificate delivered by two providers (or twice by one)
occupies a single entry.

Usage::

    from catrust.roots import RootDefinition, build_trust_store

    store = build_trust_store([RootDefinition("file", {"source": "ca.pem"})])
    ctx = store.pool()          # ssl.SSLContext trusting exactly these roots
"""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING

from catrust.core.locks import ReadWriteLock
from catrust.core.pem import certificate_digest, encode_certificates_pem
from catrust.roots.base import NoSupportedProviderError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cryptography import x509

    from catrust.roots.base import RootDefinition
    from catrust.roots.registry import ProviderRegistry

log = logging.getLogger(__name__)


class TrustStore:
    """A pool of trusted certificates for a given TLS configuration."""

    def __init__(self) -> None:
        self._roots: dict[bytes, x509.Certificate] = {}
        self._lock = ReadWriteLock()

    def add_certs(self, certs: Iterable[x509.Certificate]) -> None:
        """Insert *certs*; already-present digests are left untouched."""
        keyed = [(certificate_digest(cert), cert) for cert in certs]
        with self._lock.writer():
            for digest, cert in keyed:
                self._roots.setdefault(digest, cert)

    def certificates(self) -> list[x509.Certificate]:
        """Return a snapshot of the stored certificates (unordered)."""
        with self._lock.reader():
            return list(self._roots.values())

    def pool(self, purpose: ssl.Purpose = ssl.Purpose.SERVER_AUTH) -> ssl.SSLContext:
        """Build a fresh verification context from the current contents.

        ``Purpose.SERVER_AUTH`` returns a client-side context that
        verifies servers against these roots; ``Purpose.CLIENT_AUTH``
        returns a server-side context that requires client certificates
        issued by them.  Platform defaults are never mixed in.
        """
        if purpose == ssl.Purpose.CLIENT_AUTH:
            ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            ctx.verify_mode = ssl.CERT_REQUIRED
        else:
            ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

        bundle = self.pem_bundle()
        if bundle:
            ctx.load_verify_locations(cadata=bundle)
        return ctx

    def pem_bundle(self) -> str:
        """All stored certificates, PEM-encoded and concatenated."""
        return encode_certificates_pem(self.certificates())

    def __len__(self) -> int:
        with self._lock.reader():
            return len(self._roots)

    def __contains__(self, cert: object) -> bool:
        try:
            digest = certificate_digest(cert)  # type: ignore[arg-type]
        except AttributeError:
            return False
        with self._lock.reader():
            return digest in self._roots


def build_trust_store(
    definitions: Sequence[RootDefinition],
    registry: ProviderRegistry | None = None,
) -> TrustStore:
    """Resolve *definitions* into a new :class:`TrustStore`.

    With no definitions the platform (``system``) roots are used.
    Definitions whose type is not registered are skipped; the first
    failing provider aborts the build and its exception propagates, so
    callers never receive a store with fewer roots than configured.

    Raises
    ------
    NoSupportedProviderError
        If no definition named a registered provider.
    RootError
        Or any other exception raised by a provider.

    """
    if registry is None:
        from catrust.roots.registry import default_registry  # noqa: PLC0415

        registry = default_registry()

    store = TrustStore()

    if not definitions:
        system = registry.get("system")
        if system is None:
            msg = "no root definitions given and no 'system' provider registered"
            raise NoSupportedProviderError(msg)
        store.add_certs(system.resolve({}))
        log.info("Trust store seeded from system roots (%d certificates)", len(store))
        return store

    resolved = 0
    for definition in definitions:
        provider = registry.get(definition.type)
        if provider is None:
            log.debug("Skipping root definition with unsupported type %r", definition.type)
            continue

        certs = provider.resolve(definition.metadata)
        store.add_certs(certs)
        resolved += 1
        log.debug(
            "Root provider %r contributed %d certificates",
            definition.type,
            len(certs),
        )

    if not resolved:
        msg = "no supported root providers found"
        raise NoSupportedProviderError(msg)

    log.info(
        "Trust store built from %d of %d root definitions (%d certificates)",
        resolved,
        len(definitions),
        len(store),
    )
    return store
