"""HTTP handlers for the ``info`` endpoint.

Two handlers share the same request decoding:

* :class:`InfoHandler` serves one signer, optionally appending
  certificates from a supplementary trust source to every response.
* :class:`MultiInfoHandler` routes by ``label`` across several named
  signers, falling back to a default label when the request has none.

Both accept ``POST`` only.  Decoding failures and unknown labels are
client errors (400); whatever the signer raises propagates unchanged to
the application's error handlers.

Usage::

    app.add_url_rule(INFO_PATH, view_func=new_multi_handler(signers, "primary"))
"""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import TYPE_CHECKING

from flask import jsonify, request
from flask.views import MethodView
from werkzeug.exceptions import ClientDisconnected

from catrust.app.errors import bad_request
from catrust.core.pem import encode_certificate_pem
from catrust.info.protocol import InfoRequest, success_envelope

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from cryptography import x509

    from catrust.info.protocol import InfoResponse
    from catrust.signer.base import Signer

    TrustCertSource = Callable[[], Iterable[x509.Certificate]]

log = logging.getLogger(__name__)


def read_info_request() -> InfoRequest:
    """Read and decode the current request body as an :class:`InfoRequest`."""
    try:
        body = request.get_data(cache=False)
    except (ClientDisconnected, OSError) as exc:
        log.warning("failed to read request body: %s", exc)
        raise bad_request(f"failed to read request body: {exc}") from exc

    try:
        return InfoRequest.from_dict(json.loads(body))
    except ValueError as exc:
        log.warning("failed to unmarshal request: %s", exc)
        raise bad_request(f"invalid info request: {exc}") from exc


def info_response(resp: InfoResponse):
    """Wrap *resp* in the success envelope as an ``application/json`` response."""
    response = jsonify(success_envelope(resp.to_dict()))
    response.headers["Content-Type"] = "application/json"
    return response


class InfoHandler(MethodView):
    """Serve a single signer's certificate information.

    Parameters
    ----------
    signer:
        The signer whose ``info`` is returned.
    trust_certs:
        Optional callable returning extra certificates to append to
        ``trust_certificates``.

    """

    methods = ["POST"]

    def __init__(self, signer: Signer, trust_certs: TrustCertSource | None = None) -> None:
        self._signer = signer
        self._trust_certs = trust_certs

    def post(self):
        req = read_info_request()
        resp = self._signer.info(req)

        if self._trust_certs is not None:
            extra = []
            for cert in self._trust_certs():
                pem = encode_certificate_pem(cert).strip()
                if not pem:
                    continue
                extra.append(pem)
            # The signer may hand out a shared instance; never mutate it
            resp = dataclasses.replace(
                resp,
                trust_certificates=[*resp.trust_certificates, *extra],
            )
            log.info("Trust certificates in info response: %d", len(resp.trust_certificates))

        return info_response(resp)


class MultiInfoHandler(MethodView):
    """Serve certificate information for one of several labelled signers.

    Parameters
    ----------
    signers:
        Label → signer mapping.
    default_label:
        Label used when a request does not name one.

    """

    methods = ["POST"]

    def __init__(self, signers: Mapping[str, Signer], default_label: str) -> None:
        self._signers = signers
        self._default_label = default_label

    def post(self):
        req = read_info_request()

        log.debug("checking label")
        if not req.label:
            req = dataclasses.replace(req, label=self._default_label)

        signer = self._signers.get(req.label)
        if signer is None:
            log.warning("info request for unknown label %r", req.label)
            raise bad_request("bad label")

        log.debug("getting info for label %r", req.label)
        try:
            resp = signer.info(req)
        except Exception as exc:
            log.info("error getting certificate for label %r: %s", req.label, exc)
            raise

        return info_response(resp)


# ---------------------------------------------------------------------------
# View factories
# ---------------------------------------------------------------------------


def new_handler(signer: Signer, endpoint: str = "info"):
    """View function serving *signer* alone."""
    return InfoHandler.as_view(endpoint, signer)


def new_trust_certs_handler(signer: Signer, trust_certs: TrustCertSource, endpoint: str = "info"):
    """View function serving *signer*, augmented with *trust_certs*."""
    return InfoHandler.as_view(endpoint, signer, trust_certs)


def new_multi_handler(signers: Mapping[str, Signer], default_label: str, endpoint: str = "info"):
    """View function routing by label across *signers*."""
    if default_label not in signers:
        log.warning(
            "Default label %r is not a configured signer; requests without a label will fail",
            default_label,
        )
    return MultiInfoHandler.as_view(endpoint, signers, default_label)
