"""API error type and the JSON error envelope.

Provides :class:`ApiError`, an exception that renders itself as the
standard ``{"success": false, ...}`` envelope, plus a Flask
error-handler registration function covering signer, key store and
HTTP errors.

Usage::

    raise ApiError("bad label")            # 400
    raise ApiError("no signer", status=503)
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from catrust.info.protocol import error_envelope
from catrust.keystore.base import KeyStoreError
from catrust.signer.base import SignerError

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error exception
# ---------------------------------------------------------------------------


class ApiError(Exception):
    """An API failure that doubles as an exception.

    Raise anywhere in request handling; the registered Flask error
    handler catches it and calls :meth:`to_response`.

    Parameters
    ----------
    message:
        Human-readable explanation returned to the client.
    status:
        HTTP status code (default 400).
    code:
        Error code placed in the envelope; defaults to *status*.

    """

    def __init__(self, message: str, status: int = 400, *, code: int | None = None) -> None:
        self.message = message
        self.status = status
        self.code = code if code is not None else status
        super().__init__(message)

    def to_dict(self) -> dict:
        return error_envelope(self.code, self.message)

    def to_response(self):
        """Build a Flask :class:`~flask.Response`."""
        resp = jsonify(self.to_dict())
        resp.status_code = self.status
        resp.headers["Cache-Control"] = "no-store"
        return resp


def bad_request(message: str) -> ApiError:
    """Client input error: malformed body, bad JSON, unknown label."""
    return ApiError(message, 400)


# ---------------------------------------------------------------------------
# Flask error handler registration
# ---------------------------------------------------------------------------


def register_error_handlers(app: Flask) -> None:
    """Attach handlers that render every error as the JSON envelope."""

    @app.errorhandler(ApiError)
    def _handle_api_error(exc: ApiError):
        return exc.to_response()

    @app.errorhandler(SignerError)
    def _handle_signer_error(exc: SignerError):
        if exc.status >= 500:
            log.error("Signer failure: %s", exc.detail)
        return ApiError(exc.detail, exc.status).to_response()

    @app.errorhandler(KeyStoreError)
    def _handle_keystore_error(exc: KeyStoreError):
        log.error("Key store failure: %s", exc.detail)
        return ApiError(f"key store unavailable: {exc.detail}", 503).to_response()

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        return ApiError(
            exc.description or exc.name or "An error occurred",
            exc.code or 500,
        ).to_response()

    @app.errorhandler(Exception)
    def _handle_unhandled(exc: Exception):
        # HTTPException subclasses are already caught above; this
        # handler covers everything else (genuine 500s).
        log.exception("Unhandled exception during request")
        return ApiError("An unexpected internal error occurred", 500).to_response()
