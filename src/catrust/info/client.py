"""HTTPS client for a peer CA's ``info`` endpoint.

The client performs exactly one request per call: no retries and no
timeout unless the caller supplies one.  Deadlines and retry policy
belong to whoever embeds the client.

Usage::

    from catrust.core.tls import create_client_context
    from catrust.info.client import InfoClient
    from catrust.info.protocol import InfoRequest

    ctx = create_client_context("remote-ca.pem", "client.pem", "client-key.pem")
    resp = InfoClient("ca.internal:8888", ssl_context=ctx).info(InfoRequest(label="primary"))
"""

from __future__ import annotations

import contextlib
import json
import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from catrust.info.protocol import INFO_PATH, InfoResponse

if TYPE_CHECKING:
    import ssl

    from catrust.info.protocol import InfoRequest

log = logging.getLogger(__name__)

DEFAULT_PORT = 8888


class InfoClientError(Exception):
    """Raised when the info call fails at transport or protocol level.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.
    status:
        HTTP status returned by the peer, when there was one.

    """

    def __init__(self, detail: str, *, status: int | None = None) -> None:
        self.detail = detail
        self.status = status
        super().__init__(detail)


def normalize_url(host: str) -> str:
    """Turn a configured ``host`` into the info endpoint URL.

    ``ca.internal`` → ``https://ca.internal:8888/api/v1/cfssl/info``.
    An explicit scheme, port or base path is preserved.
    """
    host = host.strip()
    if not host:
        msg = "empty CA host"
        raise InfoClientError(msg)
    if "://" not in host:
        host = "https://" + host

    parts = urlsplit(host)
    hostname = parts.hostname
    if not hostname:
        msg = f"invalid CA host {host!r}"
        raise InfoClientError(msg)
    try:
        port = parts.port or DEFAULT_PORT
    except ValueError as exc:
        msg = f"invalid port in CA host {host!r}"
        raise InfoClientError(msg) from exc

    if ":" in hostname:
        hostname = f"[{hostname}]"
    base = parts.path.rstrip("/")
    return f"{parts.scheme}://{hostname}:{port}{base}{INFO_PATH}"


def _envelope_message(data: Any) -> str | None:  # noqa: ANN401
    """Return the first error message of a failure envelope, if any."""
    try:
        return str(data["errors"][0]["message"])
    except (KeyError, IndexError, TypeError):
        return None


def _error_message(body: bytes) -> str:
    try:
        message = _envelope_message(json.loads(body))
    except ValueError:
        message = None
    return message or body.decode("utf-8", errors="replace")[:500]


class InfoClient:
    """Talks to one remote CA's info endpoint."""

    def __init__(
        self,
        host: str,
        *,
        ssl_context: ssl.SSLContext | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = normalize_url(host)
        self._ssl_context = ssl_context
        self._timeout = timeout

    def info(self, request: InfoRequest) -> InfoResponse:
        """POST *request* and return the decoded :class:`InfoResponse`.

        Raises
        ------
        InfoClientError
            On connection failure, a non-2xx status, an unsuccessful
            envelope, or a malformed response body.

        """
        data = self._post(request.to_dict())

        if not data.get("success"):
            message = _envelope_message(data) or "unknown error"
            msg = f"CA at {self.url} rejected info request: {message}"
            raise InfoClientError(msg)

        try:
            return InfoResponse.from_dict(data.get("result"))
        except ValueError as exc:
            msg = f"CA at {self.url} returned a malformed info result: {exc}"
            raise InfoClientError(msg) from exc

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        req = urllib.request.Request(
            self.url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        opener = urllib.request.build_opener(
            urllib.request.HTTPSHandler(context=self._ssl_context),
        )

        open_kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            open_kwargs["timeout"] = self._timeout

        log.debug("Requesting CA info from %s", self.url)
        try:
            resp = opener.open(req, **open_kwargs)
        except urllib.error.HTTPError as exc:
            body = b""
            with contextlib.suppress(Exception):
                body = exc.read()
            msg = f"CA at {self.url} returned HTTP {exc.code}: {_error_message(body)}"
            raise InfoClientError(msg, status=exc.code) from exc
        except (urllib.error.URLError, OSError) as exc:
            msg = f"failed to reach CA at {self.url}: {exc}"
            raise InfoClientError(msg) from exc

        try:
            body = resp.read()
        finally:
            resp.close()

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"CA at {self.url} returned invalid JSON: {exc}"
            raise InfoClientError(msg) from exc
        if not isinstance(data, dict):
            msg = f"CA at {self.url} returned a non-object response"
            raise InfoClientError(msg)
        return data
