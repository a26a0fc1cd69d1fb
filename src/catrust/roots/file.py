"""``file`` root provider: certificates from a local PEM bundle."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from catrust.core.pem import PEMError, parse_certificates_pem
from catrust.roots.base import RootError, RootProvider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cryptography import x509

log = logging.getLogger(__name__)


class FileRootProvider(RootProvider):
    """Trust every certificate in the PEM file named by ``source``."""

    name = "file"

    def resolve(self, metadata: Mapping[str, str]) -> list[x509.Certificate]:
        source = metadata.get("source")
        if not source:
            msg = "PEM root source requires a 'source' file"
            raise RootError(msg)

        try:
            data = Path(source).read_bytes()
        except OSError as exc:
            msg = f"failed to read root certificates from {source}: {exc}"
            raise RootError(msg) from exc

        try:
            certs = parse_certificates_pem(data)
        except PEMError as exc:
            msg = f"failed to parse root certificates from {source}: {exc}"
            raise RootError(msg) from exc

        log.debug("Loaded %d root certificates from %s", len(certs), source)
        return certs
