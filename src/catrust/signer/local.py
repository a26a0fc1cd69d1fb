"""Key-store signer -- a signer whose CA material comes from a KeyStoreHook.

The hook is resolved on every call, so a key store assigned after the
signer was built (or an HSM session that comes back) is picked up
without rebuilding anything.  Key store failures propagate unchanged.

Issuance is deliberately minimal: subject, public key and SANs are
copied from the CSR and the profile supplies usages and lifetime.  No
CSR policy is applied here.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed448, ed25519

from catrust.core.pem import encode_certificate_pem
from catrust.info.protocol import InfoResponse
from catrust.signer.base import Signer, SignerError
from catrust.signer.cert_utils import build_eku, build_key_usage

if TYPE_CHECKING:
    from catrust.config.settings import SigningPolicySettings, SigningProfileSettings
    from catrust.info.protocol import InfoRequest
    from catrust.keystore.hook import KeyStoreHook

log = logging.getLogger(__name__)

_BACKDATE = timedelta(minutes=5)


class KeyStoreSigner(Signer):
    """Sign with, and describe, the CA held by a :class:`KeyStoreHook`.

    Parameters
    ----------
    keystore:
        Hook injected at construction; assigned by the embedding system.
    policy:
        Signing profiles available to this signer.

    """

    def __init__(self, keystore: KeyStoreHook, policy: SigningPolicySettings) -> None:
        self._keystore = keystore
        self._policy = policy

    def _profile(self, name: str | None) -> SigningProfileSettings:
        if not name:
            return self._policy.default
        profile = self._policy.profiles.get(name)
        if profile is None:
            msg = f"unknown signing profile '{name}'"
            raise SignerError(msg, status=400)
        return profile

    def info(self, request: InfoRequest) -> InfoResponse:
        profile = self._profile(request.profile)
        cert = self._keystore.get_cert()
        trust = [encode_certificate_pem(c).strip() for c in self._keystore.get_trust_certs()]
        return InfoResponse(
            certificate=encode_certificate_pem(cert).strip(),
            trust_certificates=trust,
            usages=[*profile.usages, *profile.extended_usages],
            expiry=f"{profile.expiry_hours}h",
        )

    def sign(self, csr_pem: str, *, profile: str | None = None) -> str:
        prof = self._profile(profile)

        try:
            csr = x509.load_pem_x509_csr(csr_pem.encode("ascii"))
        except ValueError as exc:
            msg = f"invalid certificate request: {exc}"
            raise SignerError(msg, status=400) from exc

        issuer = self._keystore.get_cert()
        key = self._keystore.get_private_key()

        now = datetime.now(UTC)
        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(issuer.subject)
            .public_key(csr.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - _BACKDATE)
            .not_valid_after(now + timedelta(hours=prof.expiry_hours))
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(csr.public_key()),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer.public_key()),
                critical=False,
            )
        )
        if prof.usages:
            builder = builder.add_extension(build_key_usage(prof.usages), critical=True)
        if prof.extended_usages:
            builder = builder.add_extension(build_eku(prof.extended_usages), critical=False)

        try:
            san = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        except x509.ExtensionNotFound:
            pass
        else:
            builder = builder.add_extension(san.value, critical=False)

        algorithm = hashes.SHA256()
        if isinstance(key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
            algorithm = None
        try:
            cert = builder.sign(key, algorithm)
        except (ValueError, TypeError) as exc:
            msg = f"failed to sign certificate: {exc}"
            raise SignerError(msg) from exc

        log.info(
            "Issued certificate: serial=%x, subject=%s, profile=%s",
            cert.serial_number,
            cert.subject.rfc4514_string(),
            profile or "default",
        )
        return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
