"""TLS context construction for outbound (client) and inbound (server) use.

The client context mirrors what a CA node needs to talk to a peer CA:
an optional client certificate for mutual authentication and an
optional remote-CA bundle that *replaces* the platform roots, so only
peers signed by that CA are accepted.
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path

from catrust.core.pem import PEMError, encode_certificates_pem, parse_certificates_pem

log = logging.getLogger(__name__)


class TLSConfigError(Exception):
    """Raised when TLS credentials or trust material cannot be loaded."""


def load_pem_bundle(path: str) -> str:
    """Read *path* and return its certificates re-encoded as PEM.

    Fails when the file is unreadable or holds no certificate, so an
    empty or mistyped CA file never silently means "trust nothing".
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        msg = f"failed to read certificate bundle {path}: {exc}"
        raise TLSConfigError(msg) from exc
    try:
        certs = parse_certificates_pem(data)
    except PEMError as exc:
        msg = f"invalid certificate bundle {path}: {exc}"
        raise TLSConfigError(msg) from exc
    return encode_certificates_pem(certs)


def create_client_context(
    remote_ca_path: str | None = None,
    client_cert_path: str | None = None,
    client_key_path: str | None = None,
    *,
    insecure_skip_verify: bool = False,
) -> ssl.SSLContext:
    """Build an ``ssl.SSLContext`` for connecting to a peer CA.

    Parameters
    ----------
    remote_ca_path:
        PEM bundle of CAs allowed to sign the peer's server certificate.
        When omitted the platform default roots are used.
    client_cert_path, client_key_path:
        Client certificate and key for mutual TLS.  Both must be given;
        a lone certificate or key is ignored with a warning.
    insecure_skip_verify:
        Disable peer verification entirely (testing only).

    Raises
    ------
    TLSConfigError
        If any of the referenced files cannot be loaded.

    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2

    if remote_ca_path:
        ctx.load_verify_locations(cadata=load_pem_bundle(remote_ca_path))
    else:
        ctx.load_default_certs(ssl.Purpose.SERVER_AUTH)

    if client_cert_path and client_key_path:
        try:
            ctx.load_cert_chain(client_cert_path, client_key_path)
        except (OSError, ssl.SSLError) as exc:
            msg = (
                f"failed to load client certificate {client_cert_path} "
                f"/ key {client_key_path}: {exc}"
            )
            raise TLSConfigError(msg) from exc
    elif client_cert_path or client_key_path:
        log.warning(
            "Mutual TLS needs both a client certificate and key; "
            "continuing without a client certificate (cert=%s, key=%s)",
            client_cert_path or "-",
            client_key_path or "-",
        )

    if insecure_skip_verify:
        log.warning("TLS peer verification is disabled")
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE

    return ctx


def create_server_context(
    cert_path: str,
    key_path: str,
    verify_context: ssl.SSLContext | None = None,
) -> ssl.SSLContext:
    """Build a server-side context presenting *cert_path* / *key_path*.

    *verify_context* is a server context already holding the trusted
    client CAs (see :meth:`TrustStore.pool`); when given, clients must
    present a certificate chaining to one of them.
    """
    if verify_context is not None:
        ctx = verify_context
    else:
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    try:
        ctx.load_cert_chain(cert_path, key_path)
    except (OSError, ssl.SSLError) as exc:
        msg = f"failed to load server certificate {cert_path} / key {key_path}: {exc}"
        raise TLSConfigError(msg) from exc
    return ctx
