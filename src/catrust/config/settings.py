"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the application actually reads.

Access pattern::

    from catrust.config import load_config

    settings = load_config("catrust.yaml").settings
    print(settings.server.bind, settings.server.port)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from catrust.roots.base import RootDefinition

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerTlsSettings:
    """Server certificate and inbound mutual-TLS switch."""

    cert_path: str | None
    key_path: str | None
    client_auth: bool

    @property
    def enabled(self) -> bool:
        return bool(self.cert_path and self.key_path)


@dataclass(frozen=True)
class ServerSettings:
    """HTTP server configuration (bind address, workers, timeouts, TLS)."""

    bind: str
    port: int
    workers: int
    worker_class: str
    timeout: int
    graceful_timeout: int
    keepalive: int
    max_request_body_bytes: int
    info_path: str
    tls: ServerTlsSettings


def _build_server(data: dict | None) -> ServerSettings:
    d = data or {}
    t = d.get("tls") or {}
    return ServerSettings(
        bind=d.get("bind", "0.0.0.0"),  # noqa: S104
        port=d.get("port", 8888),
        workers=d.get("workers", 4),
        worker_class=d.get("worker_class", "gthread"),
        timeout=d.get("timeout", 30),
        graceful_timeout=d.get("graceful_timeout", 30),
        keepalive=d.get("keepalive", 2),
        max_request_body_bytes=d.get("max_request_body_bytes", 65536),
        info_path=d.get("info_path", "/api/v1/cfssl/info"),
        tls=ServerTlsSettings(
            cert_path=t.get("cert_path"),
            key_path=t.get("key_path"),
            client_auth=t.get("client_auth", False),
        ),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and output format (``json`` or ``text``)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "json"),
    )


# ---------------------------------------------------------------------------
# Outbound client
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClientSettings:
    """Outbound calls to peer CAs.

    ``timeout_seconds`` of ``None`` means no deadline from catrust
    itself; ``insecure_skip_verify`` disables peer verification.
    """

    timeout_seconds: float | None
    insecure_skip_verify: bool


def _build_client(data: dict | None) -> ClientSettings:
    d = data or {}
    return ClientSettings(
        timeout_seconds=d.get("timeout_seconds"),
        insecure_skip_verify=d.get("insecure_skip_verify", False),
    )


# ---------------------------------------------------------------------------
# Signers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyStoreSettings:
    """Where a signer's CA certificate, key and chain live."""

    backend: str
    cert_path: str
    key_path: str
    chain_path: str | None
    key_password: str | None


@dataclass(frozen=True)
class SigningProfileSettings:
    """Usages and lifetime applied to certificates issued under a profile."""

    usages: tuple[str, ...]
    extended_usages: tuple[str, ...]
    expiry_hours: int


@dataclass(frozen=True)
class SigningPolicySettings:
    """Default profile plus named profiles."""

    default: SigningProfileSettings
    profiles: dict[str, SigningProfileSettings]


@dataclass(frozen=True)
class SignerSettings:
    keystore: KeyStoreSettings
    signing: SigningPolicySettings


@dataclass(frozen=True)
class SignersSettings:
    """Labelled signers served by this node and the default label."""

    default_label: str
    labels: dict[str, SignerSettings]


def _build_profile(data: dict | None) -> SigningProfileSettings:
    d = data or {}
    return SigningProfileSettings(
        usages=tuple(d.get("usages", ["digital_signature", "key_encipherment"])),
        extended_usages=tuple(d.get("extended_usages", ["server_auth", "client_auth"])),
        expiry_hours=d.get("expiry_hours", 8760),
    )


def _build_signer(data: dict | None) -> SignerSettings:
    d = data or {}
    k = d.get("keystore") or {}
    s = d.get("signing") or {}
    return SignerSettings(
        keystore=KeyStoreSettings(
            backend=k.get("backend", "file"),
            cert_path=k.get("cert_path", ""),
            key_path=k.get("key_path", ""),
            chain_path=k.get("chain_path"),
            key_password=k.get("key_password"),
        ),
        signing=SigningPolicySettings(
            default=_build_profile(s.get("default")),
            profiles={name: _build_profile(p) for name, p in (s.get("profiles") or {}).items()},
        ),
    )


def _build_signers(data: dict | None) -> SignersSettings:
    d = data or {}
    labels = {label: _build_signer(entry) for label, entry in (d.get("labels") or {}).items()}
    default_label = d.get("default_label")
    if default_label is None:
        default_label = next(iter(labels)) if len(labels) == 1 else ""
    return SignersSettings(default_label=default_label, labels=labels)


# ---------------------------------------------------------------------------
# Trust roots
# ---------------------------------------------------------------------------


def _build_roots(data: list | None) -> tuple[RootDefinition, ...]:
    return tuple(RootDefinition.from_dict(entry) for entry in (data or []))


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CatrustSettings:
    """Root of the typed settings tree.

    ``trust_roots`` feed the trust certificates appended to info
    responses; ``client_roots`` verify inbound mutual-TLS clients.
    """

    server: ServerSettings
    logging: LoggingSettings
    client: ClientSettings
    signers: SignersSettings
    trust_roots: tuple[RootDefinition, ...]
    client_roots: tuple[RootDefinition, ...]


def build_settings(data: dict[str, Any]) -> CatrustSettings:
    """Build the full typed settings tree from raw config data.

    Called once during :func:`load_config` after schema validation and
    environment-variable resolution.
    """
    return CatrustSettings(
        server=_build_server(data.get("server")),
        logging=_build_logging(data.get("logging")),
        client=_build_client(data.get("client")),
        signers=_build_signers(data.get("signers")),
        trust_roots=_build_roots(data.get("trust_roots")),
        client_roots=_build_roots(data.get("client_roots")),
    )
