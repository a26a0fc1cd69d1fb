"""Unit tests for catrust.info.protocol."""

from __future__ import annotations

import pytest

from catrust.info.protocol import (
    INFO_PATH,
    InfoRequest,
    InfoResponse,
    error_envelope,
    success_envelope,
)


class TestInfoRequest:
    def test_defaults(self):
        req = InfoRequest()
        assert req.label == ""
        assert req.profile == ""

    def test_from_dict(self):
        req = InfoRequest.from_dict({"label": "primary", "profile": "server"})
        assert req == InfoRequest(label="primary", profile="server")

    def test_from_empty_object(self):
        assert InfoRequest.from_dict({}) == InfoRequest()

    def test_from_null(self):
        assert InfoRequest.from_dict(None) == InfoRequest()

    def test_null_fields(self):
        assert InfoRequest.from_dict({"label": None}) == InfoRequest()

    def test_unknown_fields_ignored(self):
        assert InfoRequest.from_dict({"label": "a", "bundle": True}).label == "a"

    @pytest.mark.parametrize("data", [[], "primary", 42])
    def test_not_an_object(self, data):
        with pytest.raises(ValueError, match="JSON object"):
            InfoRequest.from_dict(data)

    def test_non_string_label(self):
        with pytest.raises(ValueError, match="'label' must be a string"):
            InfoRequest.from_dict({"label": 7})

    def test_to_dict(self):
        assert InfoRequest("a", "b").to_dict() == {"label": "a", "profile": "b"}


class TestInfoResponse:
    def test_to_dict_minimal(self):
        assert InfoResponse(certificate="PEM").to_dict() == {
            "certificate": "PEM",
            "trust_certificates": [],
        }

    def test_to_dict_full(self):
        resp = InfoResponse(
            certificate="PEM",
            trust_certificates=["T1"],
            usages=["digital_signature"],
            expiry="8760h",
        )
        assert resp.to_dict() == {
            "certificate": "PEM",
            "usages": ["digital_signature"],
            "expiry": "8760h",
            "trust_certificates": ["T1"],
        }

    def test_from_dict(self):
        resp = InfoResponse.from_dict(
            {"certificate": "PEM", "trust_certificates": ["T1", "T2"], "usages": ["a"], "expiry": "1h"},
        )
        assert resp.trust_certificates == ["T1", "T2"]
        assert resp.usages == ["a"]
        assert resp.expiry == "1h"

    def test_from_dict_missing_lists(self):
        resp = InfoResponse.from_dict({"certificate": "PEM"})
        assert resp.trust_certificates == []
        assert resp.usages == []

    def test_from_dict_bad_list(self):
        with pytest.raises(ValueError, match="list of strings"):
            InfoResponse.from_dict({"certificate": "PEM", "trust_certificates": "T1"})

    def test_from_dict_non_string_trust_entries(self):
        resp = InfoResponse.from_dict({"certificate": "PEM", "trust_certificates": [None, "T1", 7]})
        assert resp.trust_certificates == ["", "T1", ""]

    def test_from_dict_non_string_usage(self):
        with pytest.raises(ValueError, match="list of strings"):
            InfoResponse.from_dict({"certificate": "PEM", "usages": [None]})

    def test_from_dict_not_object(self):
        with pytest.raises(ValueError):
            InfoResponse.from_dict(None)

    def test_trust_certificates_not_shared(self):
        a = InfoResponse(certificate="A")
        b = InfoResponse(certificate="B")
        a.trust_certificates.append("T")
        assert b.trust_certificates == []


class TestEnvelopes:
    def test_success(self):
        assert success_envelope({"x": 1}) == {
            "success": True,
            "result": {"x": 1},
            "errors": [],
            "messages": [],
        }

    def test_error(self):
        env = error_envelope(400, "bad label")
        assert env["success"] is False
        assert env["result"] is None
        assert env["errors"] == [{"code": 400, "message": "bad label"}]

    def test_info_path(self):
        assert INFO_PATH == "/api/v1/cfssl/info"
