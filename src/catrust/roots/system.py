"""``system`` root provider: the platform's trust anchors.

Reads the CA file and CA directory OpenSSL was built to use (both
overridable with ``SSL_CERT_FILE`` / ``SSL_CERT_DIR``).  Minimal
container images often ship neither; that case yields no roots and a
warning rather than an error so startup is not blocked.
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import TYPE_CHECKING

from catrust.core.pem import PEMError, parse_certificates_pem
from catrust.roots.base import RootProvider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cryptography import x509

log = logging.getLogger(__name__)


class SystemRootProvider(RootProvider):
    """Load the operating system's trusted root certificates."""

    name = "system"

    def resolve(self, metadata: Mapping[str, str]) -> list[x509.Certificate]:  # noqa: ARG002
        paths = ssl.get_default_verify_paths()
        certs: list[x509.Certificate] = []

        if paths.cafile:
            certs.extend(self._read_file(Path(paths.cafile)))

        if paths.capath:
            try:
                entries = sorted(Path(paths.capath).iterdir())
            except OSError as exc:
                log.debug("Cannot list system CA directory %s: %s", paths.capath, exc)
                entries = []
            for entry in entries:
                if entry.is_file():
                    certs.extend(self._read_file(entry))

        if not certs:
            log.warning(
                "Platform trust store unavailable (cafile=%s, capath=%s); "
                "continuing with no system roots",
                paths.cafile or paths.openssl_cafile,
                paths.capath or paths.openssl_capath,
            )
        else:
            log.debug("Loaded %d system root certificates", len(certs))
        return certs

    @staticmethod
    def _read_file(path: Path) -> list[x509.Certificate]:
        try:
            return parse_certificates_pem(path.read_bytes())
        except (OSError, PEMError) as exc:
            log.debug("Ignoring unreadable system root file %s: %s", path, exc)
            return []
