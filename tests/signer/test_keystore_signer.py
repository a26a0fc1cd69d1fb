"""Unit tests for catrust.signer.local.KeyStoreSigner and cert_utils."""

from __future__ import annotations

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from catrust.config.settings import (
    KeyStoreSettings,
    SigningPolicySettings,
    SigningProfileSettings,
)
from catrust.info.protocol import InfoRequest
from catrust.keystore.base import KeyStoreNotInitializedError
from catrust.keystore.file import FileKeyStore
from catrust.keystore.hook import KeyStoreHook
from catrust.signer.base import SignerError
from catrust.signer.cert_utils import build_eku, build_key_usage
from catrust.signer.local import KeyStoreSigner

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DEFAULT = SigningProfileSettings(
    usages=("digital_signature", "key_encipherment"),
    extended_usages=("server_auth", "client_auth"),
    expiry_hours=8760,
)
_CLIENT = SigningProfileSettings(
    usages=("digital_signature",),
    extended_usages=("client_auth",),
    expiry_hours=24,
)


def _policy() -> SigningPolicySettings:
    return SigningPolicySettings(default=_DEFAULT, profiles={"client": _CLIENT})


def _hook(ca_files) -> KeyStoreHook:
    hook = KeyStoreHook("primary")
    hook.assign(
        FileKeyStore(
            KeyStoreSettings(
                backend="file",
                cert_path=ca_files["cert_path"],
                key_path=ca_files["key_path"],
                chain_path=ca_files["chain_path"],
                key_password=None,
            ),
        ),
    )
    return hook


def _csr(cn: str = "svc.internal", sans: tuple[str, ...] = ("svc.internal",)) -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    builder = x509.CertificateSigningRequestBuilder().subject_name(
        x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)]),
    )
    if sans:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(s) for s in sans]),
            critical=False,
        )
    return builder.sign(key, hashes.SHA256()).public_bytes(serialization.Encoding.PEM).decode()


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------


class TestInfo:
    def test_default_profile(self, ca_files, to_pem):
        resp = KeyStoreSigner(_hook(ca_files), _policy()).info(InfoRequest())
        assert resp.certificate == to_pem(ca_files["cert"]).strip()
        assert resp.trust_certificates == [to_pem(ca_files["root"]).strip()]
        assert resp.usages == ["digital_signature", "key_encipherment", "server_auth", "client_auth"]
        assert resp.expiry == "8760h"

    def test_named_profile(self, ca_files):
        resp = KeyStoreSigner(_hook(ca_files), _policy()).info(InfoRequest(profile="client"))
        assert resp.usages == ["digital_signature", "client_auth"]
        assert resp.expiry == "24h"

    def test_unknown_profile(self, ca_files):
        signer = KeyStoreSigner(_hook(ca_files), _policy())
        with pytest.raises(SignerError) as exc_info:
            signer.info(InfoRequest(profile="nope"))
        assert exc_info.value.status == 400

    def test_hook_not_assigned(self):
        signer = KeyStoreSigner(KeyStoreHook(), _policy())
        with pytest.raises(KeyStoreNotInitializedError):
            signer.info(InfoRequest())

    def test_late_assignment_picked_up(self, ca_files):
        hook = KeyStoreHook("late")
        signer = KeyStoreSigner(hook, _policy())
        with pytest.raises(KeyStoreNotInitializedError):
            signer.info(InfoRequest())
        hook.assign(_hook(ca_files))
        assert signer.info(InfoRequest()).certificate.startswith("-----BEGIN CERTIFICATE-----")


# ---------------------------------------------------------------------------
# sign
# ---------------------------------------------------------------------------


class TestSign:
    def test_issues_leaf(self, ca_files):
        pem = KeyStoreSigner(_hook(ca_files), _policy()).sign(_csr())
        cert = x509.load_pem_x509_certificate(pem.encode())

        assert cert.issuer == ca_files["cert"].subject
        assert cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "svc.internal"
        assert cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca is False
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["svc.internal"]
        ku = cert.extensions.get_extension_for_class(x509.KeyUsage).value
        assert ku.digital_signature is True
        assert ku.key_encipherment is True
        eku = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
        assert list(eku) == [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]
        ca_files["cert"].public_key().verify(
            cert.signature,
            cert.tbs_certificate_bytes,
            ec.ECDSA(cert.signature_hash_algorithm),
        )

    def test_profile_lifetime(self, ca_files):
        pem = KeyStoreSigner(_hook(ca_files), _policy()).sign(_csr(), profile="client")
        cert = x509.load_pem_x509_certificate(pem.encode())
        lifetime = cert.not_valid_after_utc - cert.not_valid_before_utc
        assert lifetime.total_seconds() == pytest.approx((24 * 60 + 5) * 60, abs=5)

    def test_csr_without_san(self, ca_files):
        pem = KeyStoreSigner(_hook(ca_files), _policy()).sign(_csr(sans=()))
        cert = x509.load_pem_x509_certificate(pem.encode())
        with pytest.raises(x509.ExtensionNotFound):
            cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)

    def test_invalid_csr(self, ca_files):
        with pytest.raises(SignerError) as exc_info:
            KeyStoreSigner(_hook(ca_files), _policy()).sign("not a csr")
        assert exc_info.value.status == 400

    def test_unknown_profile(self, ca_files):
        with pytest.raises(SignerError, match="unknown signing profile"):
            KeyStoreSigner(_hook(ca_files), _policy()).sign(_csr(), profile="nope")


# ---------------------------------------------------------------------------
# cert_utils
# ---------------------------------------------------------------------------


class TestCertUtils:
    def test_key_usage(self):
        ku = build_key_usage(("digital_signature", "key_cert_sign"))
        assert ku.digital_signature is True
        assert ku.key_cert_sign is True
        assert ku.key_encipherment is False

    def test_unknown_key_usage(self):
        with pytest.raises(SignerError, match="Unknown key usage"):
            build_key_usage(("teleport",))

    def test_eku(self):
        assert list(build_eku(("code_signing",))) == [ExtendedKeyUsageOID.CODE_SIGNING]

    def test_unknown_eku(self):
        with pytest.raises(SignerError, match="Unknown extended key usage"):
            build_eku(("teleport",))
