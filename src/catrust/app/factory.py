"""Flask application factory for catrust.

Usage::

    from catrust.app import create_app
    from catrust.config import load_config

    app = create_app(load_config("catrust.yaml"))

An embedding system that manages its own CA key material passes it in
and the default signer uses it instead of the file backend::

    app = create_app(config, keystore=HsmKeyStore(...))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask, jsonify

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from catrust.config.catrust_config import CatrustConfig
    from catrust.keystore.base import KeyStore
    from catrust.roots.registry import ProviderRegistry

log = logging.getLogger(__name__)


def create_app(
    config: CatrustConfig,
    keystore: KeyStore | None = None,
    *,
    registry: ProviderRegistry | None = None,
) -> Flask:
    """Create and configure the catrust Flask application.

    Parameters
    ----------
    config:
        Loaded :class:`CatrustConfig`.
    keystore:
        Key store assigned to the default signer's hook.  When
        ``None`` every signer reads its key material from the files
        named in its ``keystore`` section.
    registry:
        Root provider registry used to resolve ``trust_roots`` and
        ``client_roots``.  Defaults to the built-in providers
        configured from the ``client`` section.

    Returns
    -------
    Flask
        Fully configured WSGI application.

    Raises
    ------
    RootError
        If a configured trust root cannot be resolved.

    """
    settings = config.settings

    app = Flask("catrust")
    app.config["CATRUST_SETTINGS"] = settings
    app.config["CATRUST_CONFIG"] = config
    app.config["MAX_CONTENT_LENGTH"] = settings.server.max_request_body_bytes

    # -- Error handlers -----------------------------------------------------
    from catrust.app.errors import register_error_handlers  # noqa: PLC0415

    register_error_handlers(app)

    # -- Request lifecycle hooks --------------------------------------------
    from catrust.app.middleware import register_request_hooks  # noqa: PLC0415

    register_request_hooks(app)

    # -- Trust stores -------------------------------------------------------
    from catrust.roots import build_trust_store, default_registry  # noqa: PLC0415

    if registry is None:
        registry = default_registry(settings.client)

    trust_store = None
    if settings.trust_roots:
        trust_store = build_trust_store(settings.trust_roots, registry)

    client_store = None
    if settings.client_roots:
        client_store = build_trust_store(settings.client_roots, registry)

    # -- Signers ------------------------------------------------------------
    from catrust.keystore import FileKeyStore, KeyStoreHook  # noqa: PLC0415
    from catrust.signer import KeyStoreSigner  # noqa: PLC0415

    default_label = settings.signers.default_label
    hooks: dict[str, KeyStoreHook] = {}
    signers: dict[str, KeyStoreSigner] = {}
    for label, signer_settings in settings.signers.labels.items():
        hook = KeyStoreHook(label)
        if keystore is not None and label == default_label:
            hook.assign(keystore)
        else:
            hook.assign(FileKeyStore(signer_settings.keystore))
        hooks[label] = hook
        signers[label] = KeyStoreSigner(hook, signer_settings.signing)

    if keystore is not None and default_label not in hooks:
        log.warning("A key store was supplied but no default signer is configured; it is unused")

    from catrust.app.context import Container  # noqa: PLC0415

    app.extensions["container"] = Container(
        settings,
        signers=signers,
        keystore_hooks=hooks,
        trust_store=trust_store,
        client_store=client_store,
    )

    # -- Infrastructure endpoints -------------------------------------------
    _register_health(app)

    # -- Info endpoint ------------------------------------------------------
    from catrust.info.handlers import (  # noqa: PLC0415
        new_handler,
        new_multi_handler,
        new_trust_certs_handler,
    )

    info_path = settings.server.info_path
    if len(signers) > 1:
        view = new_multi_handler(signers, default_label)
        log.info("Info endpoint at %s serving labels %s", info_path, sorted(signers))
    elif signers:
        signer = next(iter(signers.values()))
        if trust_store is not None:
            view = new_trust_certs_handler(signer, trust_store.certificates)
        else:
            view = new_handler(signer)
        log.info("Info endpoint at %s serving a single signer", info_path)
    else:
        view = None
        log.warning("No signers configured; the info endpoint is disabled")

    if view is not None:
        app.add_url_rule(info_path, view_func=view)

    log.info("Flask application created")
    return app


# ---------------------------------------------------------------------------
# Infrastructure endpoints
# ---------------------------------------------------------------------------


def _register_health(app: Flask) -> None:
    """Register ``/health``."""
    from catrust import __version__  # noqa: PLC0415
    from catrust.app.context import get_container  # noqa: PLC0415

    @app.route("/health")
    def health() -> ResponseReturnValue:
        """Return signer labels and the number of trust roots loaded."""
        container = get_container()
        trust_roots = len(container.trust_store) if container.trust_store is not None else 0
        return jsonify(
            {
                "status": "ok",
                "version": __version__,
                "signers": sorted(container.signers),
                "trust_roots": trust_roots,
            },
        ), 200
