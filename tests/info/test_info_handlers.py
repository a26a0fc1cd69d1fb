"""Tests for catrust.info.handlers via the Flask test client."""

from __future__ import annotations

import json
import logging

import flask
import pytest

from catrust.app.errors import register_error_handlers
from catrust.info.handlers import new_handler, new_multi_handler, new_trust_certs_handler
from catrust.info.protocol import InfoRequest, InfoResponse
from catrust.keystore.base import KeyStoreNotInitializedError
from catrust.signer.base import Signer, SignerError

PATH = "/api/v1/cfssl/info"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _FakeSigner(Signer):
    def __init__(self, name: str, trust: list[str] | None = None, error: Exception | None = None):
        self.name = name
        self.trust = trust or []
        self.error = error
        self.requests: list[InfoRequest] = []

    def info(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return InfoResponse(
            certificate=f"CERT-{self.name}",
            trust_certificates=list(self.trust),
            usages=["digital_signature"],
            expiry="8760h",
        )

    def sign(self, csr_pem, *, profile=None):
        raise NotImplementedError


def _app(view) -> flask.Flask:
    app = flask.Flask("test")
    app.config["TESTING"] = True
    register_error_handlers(app)
    app.add_url_rule(PATH, view_func=view)
    return app


def _post(app, body):
    data = body if isinstance(body, (bytes, str)) else json.dumps(body)
    return app.test_client().post(PATH, data=data, content_type="application/json")


# ---------------------------------------------------------------------------
# InfoHandler
# ---------------------------------------------------------------------------


class TestInfoHandler:
    def test_success_envelope(self):
        signer = _FakeSigner("a")
        resp = _post(_app(new_handler(signer)), {"label": "x", "profile": "p"})

        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "application/json"
        body = resp.get_json()
        assert body["success"] is True
        assert body["errors"] == []
        assert body["result"]["certificate"] == "CERT-a"
        assert body["result"]["usages"] == ["digital_signature"]
        assert body["result"]["expiry"] == "8760h"
        assert signer.requests == [InfoRequest(label="x", profile="p")]

    def test_empty_object_body(self):
        signer = _FakeSigner("a")
        assert _post(_app(new_handler(signer)), {}).status_code == 200
        assert signer.requests == [InfoRequest()]

    def test_null_body(self):
        assert _post(_app(new_handler(_FakeSigner("a"))), b"null").status_code == 200

    @pytest.mark.parametrize("body", [b"", b"{not json", b"[]", b'{"label": 3}'])
    def test_undecodable_body(self, body):
        signer = _FakeSigner("a")
        resp = _post(_app(new_handler(signer)), body)
        assert resp.status_code == 400
        payload = resp.get_json()
        assert payload["success"] is False
        assert payload["errors"][0]["code"] == 400
        assert signer.requests == []

    def test_get_not_allowed(self):
        resp = _app(new_handler(_FakeSigner("a"))).test_client().get(PATH)
        assert resp.status_code == 405
        assert resp.get_json()["success"] is False

    def test_signer_error_status(self):
        signer = _FakeSigner("a", error=SignerError("unknown signing profile 'x'", status=400))
        resp = _post(_app(new_handler(signer)), {"profile": "x"})
        assert resp.status_code == 400
        assert "unknown signing profile" in resp.get_json()["errors"][0]["message"]

    def test_keystore_not_ready(self):
        signer = _FakeSigner("a", error=KeyStoreNotInitializedError("not yet"))
        resp = _post(_app(new_handler(signer)), {})
        assert resp.status_code == 503

    def test_no_trust_augmentation_without_source(self):
        signer = _FakeSigner("a", trust=["T-own"])
        body = _post(_app(new_handler(signer)), {}).get_json()
        assert body["result"]["trust_certificates"] == ["T-own"]


class TestTrustCertsHandler:
    def test_appends_after_signer_certs(self, make_ca, to_pem):
        extra, _ = make_ca("Extra Root")
        signer = _FakeSigner("a", trust=["T-own"])
        view = new_trust_certs_handler(signer, lambda: [extra])
        body = _post(_app(view), {}).get_json()

        assert body["result"]["trust_certificates"] == ["T-own", to_pem(extra).strip()]

    def test_source_read_per_request(self, make_ca, to_pem):
        a, _ = make_ca("A")
        b, _ = make_ca("B")
        pool = [a]
        app = _app(new_trust_certs_handler(_FakeSigner("s"), lambda: list(pool)))

        first = _post(app, {}).get_json()["result"]["trust_certificates"]
        pool.append(b)
        second = _post(app, {}).get_json()["result"]["trust_certificates"]

        assert len(first) == 1
        assert len(second) == 2

    def test_signer_response_not_mutated(self, make_ca, to_pem):
        extra, _ = make_ca("Extra Root")
        cached = InfoResponse(certificate="CERT-c", trust_certificates=["T-own"])

        class _CachingSigner(_FakeSigner):
            def info(self, request):
                return cached

        app = _app(new_trust_certs_handler(_CachingSigner("c"), lambda: [extra]))
        for _ in range(3):
            body = _post(app, {}).get_json()
            assert body["result"]["trust_certificates"] == ["T-own", to_pem(extra).strip()]
        assert cached.trust_certificates == ["T-own"]

    def test_empty_source(self):
        body = _post(_app(new_trust_certs_handler(_FakeSigner("a"), list)), {}).get_json()
        assert body["result"]["trust_certificates"] == []

    def test_logs_count(self, make_ca, caplog):
        extra, _ = make_ca("Extra Root")
        app = _app(new_trust_certs_handler(_FakeSigner("a"), lambda: [extra]))
        with caplog.at_level(logging.INFO, logger="catrust.info.handlers"):
            _post(app, {})
        assert "Trust certificates in info response: 1" in caplog.text


# ---------------------------------------------------------------------------
# MultiInfoHandler
# ---------------------------------------------------------------------------


class TestMultiInfoHandler:
    @pytest.fixture()
    def signers(self):
        return {"primary": _FakeSigner("primary"), "legacy": _FakeSigner("legacy")}

    def test_routes_by_label(self, signers):
        app = _app(new_multi_handler(signers, "primary"))
        body = _post(app, {"label": "legacy"}).get_json()
        assert body["result"]["certificate"] == "CERT-legacy"
        assert signers["primary"].requests == []

    def test_missing_label_uses_default(self, signers):
        app = _app(new_multi_handler(signers, "primary"))
        body = _post(app, {}).get_json()
        assert body["result"]["certificate"] == "CERT-primary"
        assert signers["primary"].requests == [InfoRequest(label="primary")]

    def test_profile_preserved(self, signers):
        app = _app(new_multi_handler(signers, "primary"))
        _post(app, {"profile": "server"})
        assert signers["primary"].requests == [InfoRequest(label="primary", profile="server")]

    def test_unknown_label(self, signers):
        app = _app(new_multi_handler(signers, "primary"))
        resp = _post(app, {"label": "nope"})
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [{"code": 400, "message": "bad label"}]
        assert all(not s.requests for s in signers.values())

    def test_default_label_not_configured(self, signers, caplog):
        with caplog.at_level(logging.WARNING, logger="catrust.info.handlers"):
            app = _app(new_multi_handler(signers, "missing"))
        assert "not a configured signer" in caplog.text
        assert _post(app, {}).status_code == 400

    def test_signer_error_propagates(self, signers):
        signers["legacy"] = _FakeSigner("legacy", error=SignerError("HSM offline", status=503))
        app = _app(new_multi_handler(signers, "primary"))
        resp = _post(app, {"label": "legacy"})
        assert resp.status_code == 503
        assert resp.get_json()["errors"][0]["message"] == "HSM offline"

    def test_bad_body(self, signers):
        assert _post(_app(new_multi_handler(signers, "primary")), b"{").status_code == 400
