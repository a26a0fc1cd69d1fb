"""Serve subcommand: start the catrust server."""

from __future__ import annotations

import logging
import ssl

log = logging.getLogger(__name__)


def run_serve(config, args) -> None:
    """Start the catrust server."""
    from catrust.app import create_app  # noqa: PLC0415
    from catrust.app.context import Container  # noqa: PLC0415

    app = create_app(config)
    container: Container = app.extensions["container"]
    server = config.settings.server

    if args.dev:
        from catrust.core.tls import create_server_context  # noqa: PLC0415

        log.info("Starting development server (not for production)")
        ssl_ctx = None
        if server.tls.enabled:
            verify_ctx = None
            if server.tls.client_auth:
                if container.client_store is not None:
                    verify_ctx = container.client_store.pool(ssl.Purpose.CLIENT_AUTH)
                else:
                    verify_ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
                    verify_ctx.verify_mode = ssl.CERT_REQUIRED
            ssl_ctx = create_server_context(server.tls.cert_path, server.tls.key_path, verify_ctx)
            log.info("TLS enabled: %s (client_auth=%s)", server.tls.cert_path, server.tls.client_auth)
        app.run(
            host=server.bind,
            port=server.port,
            debug=True,
            use_reloader=False,
            ssl_context=ssl_ctx,
        )
    else:
        from catrust.server.gunicorn_app import run_gunicorn  # noqa: PLC0415

        run_gunicorn(app, server, container.client_store)
