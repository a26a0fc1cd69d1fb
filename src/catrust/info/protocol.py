"""Wire types for the ``info`` exchange between CA nodes.

Request body (JSON)::

    {"label": "primary", "profile": "server"}

Both fields are optional.  Successful responses are wrapped in the
standard API envelope::

    {
        "success": true,
        "result": {
            "certificate": "-----BEGIN CERTIFICATE-----\\n...",
            "usages": ["digital_signature"],
            "expiry": "8760h",
            "trust_certificates": ["-----BEGIN CERTIFICATE-----\\n..."]
        },
        "errors": [],
        "messages": []
    }

Failures carry ``"success": false`` and one ``{"code", "message"}``
entry in ``errors``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

INFO_PATH = "/api/v1/cfssl/info"


def _optional_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"'{key}' must be a string"
        raise ValueError(msg)
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"'{key}' must be a list of strings"
        raise ValueError(msg)
    return list(value)


def _pem_list(data: dict[str, Any], key: str) -> list[str]:
    """Like :func:`_str_list`, but non-string entries decode to ``""``."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"'{key}' must be a list of strings"
        raise ValueError(msg)
    return [v if isinstance(v, str) else "" for v in value]


@dataclass(frozen=True)
class InfoRequest:
    """Which signer (``label``) and profile the caller is asking about."""

    label: str = ""
    profile: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> InfoRequest:  # noqa: ANN401
        """Decode a parsed JSON body.

        ``null`` decodes to an empty request; any other non-object
        raises :class:`ValueError`.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            msg = "info request must be a JSON object"
            raise ValueError(msg)
        return cls(
            label=_optional_str(data, "label"),
            profile=_optional_str(data, "profile"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "profile": self.profile}


@dataclass
class InfoResponse:
    """A signer's certificate plus certificates the caller should also trust."""

    certificate: str
    trust_certificates: list[str] = field(default_factory=list)
    usages: list[str] = field(default_factory=list)
    expiry: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> InfoResponse:  # noqa: ANN401
        if not isinstance(data, dict):
            msg = "info response must be a JSON object"
            raise ValueError(msg)
        return cls(
            certificate=_optional_str(data, "certificate"),
            trust_certificates=_pem_list(data, "trust_certificates"),
            usages=_str_list(data, "usages"),
            expiry=_optional_str(data, "expiry"),
        )

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"certificate": self.certificate}
        if self.usages:
            body["usages"] = list(self.usages)
        if self.expiry:
            body["expiry"] = self.expiry
        body["trust_certificates"] = list(self.trust_certificates)
        return body


def success_envelope(result: Any) -> dict[str, Any]:  # noqa: ANN401
    """Wrap *result* in the standard success envelope."""
    return {"success": True, "result": result, "errors": [], "messages": []}


def error_envelope(code: int, message: str) -> dict[str, Any]:
    """Build the standard failure envelope."""
    return {
        "success": False,
        "result": None,
        "errors": [{"code": code, "message": message}],
        "messages": [],
    }
