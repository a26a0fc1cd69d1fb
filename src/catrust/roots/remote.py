"""``cfssl`` root provider: bootstrap trust from a peer CA.

Queries the peer's info endpoint over (mutual) TLS and trusts the
signing certificate it presents plus any trust certificates it
advertises.

Metadata keys:

``host`` (required)
    Peer address, e.g. ``ca.internal`` or ``https://ca.internal:8888``.
``label`` / ``profile``
    Forwarded in the info request.
``mutual-tls-cert`` / ``mutual-tls-key``
    Client credentials presented to the peer.
``tls-remote-ca``
    PEM bundle the peer's server certificate must chain to.

The peer's own certificate is load-bearing: failing to obtain or parse
it is an error.  Advertised trust certificates are additive, so a bad
entry is logged and skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from catrust.core.pem import PEMError, parse_certificate_pem, parse_certificates_pem
from catrust.core.tls import TLSConfigError, create_client_context
from catrust.info.client import InfoClient, InfoClientError
from catrust.info.protocol import InfoRequest
from catrust.roots.base import RootError, RootProvider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cryptography import x509

log = logging.getLogger(__name__)


class RemoteRootProvider(RootProvider):
    """Fetch trust anchors from another CA node's info endpoint.

    Parameters
    ----------
    timeout:
        Socket timeout for the info call; ``None`` leaves the deadline
        to the embedding system.
    insecure_skip_verify:
        Skip verification of the peer's server certificate.

    """

    name = "cfssl"

    def __init__(
        self,
        *,
        timeout: float | None = None,
        insecure_skip_verify: bool = False,
    ) -> None:
        self._timeout = timeout
        self._insecure_skip_verify = insecure_skip_verify

    def resolve(self, metadata: Mapping[str, str]) -> list[x509.Certificate]:
        host = metadata.get("host")
        if not host:
            msg = "CFSSL root provider requires a host"
            raise RootError(msg)

        label = metadata.get("label", "")
        profile = metadata.get("profile", "")

        try:
            ctx = create_client_context(
                metadata.get("tls-remote-ca") or None,
                metadata.get("mutual-tls-cert") or None,
                metadata.get("mutual-tls-key") or None,
                insecure_skip_verify=self._insecure_skip_verify,
            )
        except TLSConfigError as exc:
            msg = f"cannot set up TLS for CA {host}: {exc}"
            raise RootError(msg) from exc

        try:
            client = InfoClient(host, ssl_context=ctx, timeout=self._timeout)
            resp = client.info(InfoRequest(label=label, profile=profile))
        except InfoClientError as exc:
            log.error(
                "Info request to CA failed (host=%s, label=%s): %s",
                host,
                label or "-",
                exc.detail,
            )
            raise

        log.debug(
            "CA %s returned certificate and %d trust certificates",
            host,
            len(resp.trust_certificates),
        )

        try:
            certs = parse_certificates_pem(resp.certificate)
        except PEMError as exc:
            msg = f"CA {host} (label={label or '-'}) returned an unparsable certificate: {exc}"
            raise RootError(msg) from exc

        for index, pem in enumerate(resp.trust_certificates):
            try:
                certs.append(parse_certificate_pem(pem))
            except PEMError as exc:
                log.warning(
                    "Skipping trust certificate %d from CA %s: %s",
                    index,
                    host,
                    exc,
                )

        return certs
