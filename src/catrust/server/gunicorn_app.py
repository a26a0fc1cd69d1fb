"""Programmatic gunicorn runner for catrust.

Starts gunicorn with settings derived from the catrust config rather
than requiring a separate gunicorn config file.

Usage::

    from catrust.server.gunicorn_app import run_gunicorn

    run_gunicorn(flask_app, settings.server, container.client_store)
"""

from __future__ import annotations

import atexit
import logging
import os
import ssl
import tempfile
from typing import TYPE_CHECKING

from gunicorn.app.base import BaseApplication

if TYPE_CHECKING:
    from flask import Flask

    from catrust.config.settings import ServerSettings
    from catrust.roots.store import TrustStore

log = logging.getLogger(__name__)


def write_client_ca_bundle(client_roots: TrustStore) -> str:
    """Write *client_roots* to a temporary PEM file removed at exit.

    gunicorn only accepts a CA *file*, so the in-memory client trust
    store is materialised once per process.
    """
    fd, path = tempfile.mkstemp(prefix="catrust-client-ca-", suffix=".pem")
    with os.fdopen(fd, "w", encoding="ascii") as f:
        f.write(client_roots.pem_bundle())
    atexit.register(_remove_quietly, path)
    log.debug("Client CA bundle (%d certificates) written to %s", len(client_roots), path)
    return path


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


class CatrustApplication(BaseApplication):
    """gunicorn application serving a prebuilt Flask app."""

    def __init__(
        self,
        flask_app: Flask,
        server: ServerSettings,
        client_ca_path: str | None = None,
    ) -> None:
        self.application = flask_app
        self._server = server
        self._client_ca_path = client_ca_path
        super().__init__()

    def load_config(self) -> None:
        s = self._server
        self.cfg.set("bind", f"{s.bind}:{s.port}")
        self.cfg.set("workers", s.workers)
        self.cfg.set("worker_class", s.worker_class)
        self.cfg.set("timeout", s.timeout)
        self.cfg.set("graceful_timeout", s.graceful_timeout)
        self.cfg.set("keepalive", s.keepalive)
        # Access logging is done by the request hooks
        self.cfg.set("accesslog", None)

        if s.tls.enabled:
            self.cfg.set("certfile", s.tls.cert_path)
            self.cfg.set("keyfile", s.tls.key_path)
            if s.tls.client_auth:
                self.cfg.set("cert_reqs", ssl.CERT_REQUIRED)
                if self._client_ca_path:
                    self.cfg.set("ca_certs", self._client_ca_path)

    def load(self) -> Flask:
        return self.application


def run_gunicorn(
    app: Flask,
    settings: ServerSettings,
    client_roots: TrustStore | None = None,
) -> None:
    """Start a gunicorn server from catrust :class:`ServerSettings`.

    When ``settings.tls.client_auth`` is set, inbound clients must
    present a certificate chaining to *client_roots* (or to the
    platform roots when no client trust store is configured).
    """
    client_ca_path = None
    if settings.tls.client_auth and client_roots is not None:
        client_ca_path = write_client_ca_bundle(client_roots)

    log.info(
        "Starting gunicorn on %s:%s (%d workers, %s, tls=%s, client_auth=%s)",
        settings.bind,
        settings.port,
        settings.workers,
        settings.worker_class,
        settings.tls.enabled,
        settings.tls.client_auth,
    )
    CatrustApplication(app, settings, client_ca_path).run()
