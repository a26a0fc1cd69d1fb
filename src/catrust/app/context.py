"""Dependency container for catrust.

Created once during application startup and stored on the Flask app
via ``app.extensions["container"]``.  Accessible from any request
context with :func:`get_container`.

Usage::

    from catrust.app.context import get_container

    c = get_container()
    signer = c.signers[c.default_label]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app

if TYPE_CHECKING:
    from catrust.config.settings import CatrustSettings
    from catrust.keystore.hook import KeyStoreHook
    from catrust.roots.store import TrustStore
    from catrust.signer.base import Signer


class Container:
    """Application-wide dependency container.

    Parameters
    ----------
    settings:
        The typed settings tree the app was built from.
    signers:
        Label → signer mapping served by the info endpoint.
    keystore_hooks:
        Label → :class:`KeyStoreHook` injected into each signer.
    trust_store:
        Supplementary trust roots appended to info responses, or
        ``None`` when ``trust_roots`` is not configured.
    client_store:
        Roots that verify inbound mutual-TLS clients, or ``None``.

    """

    def __init__(
        self,
        settings: CatrustSettings,
        *,
        signers: dict[str, Signer],
        keystore_hooks: dict[str, KeyStoreHook],
        trust_store: TrustStore | None = None,
        client_store: TrustStore | None = None,
    ) -> None:
        self.settings = settings
        self.signers = signers
        self.keystore_hooks = keystore_hooks
        self.trust_store = trust_store
        self.client_store = client_store

    @property
    def default_label(self) -> str:
        return self.settings.signers.default_label


def get_container() -> Container:
    """Return the :class:`Container` from the current Flask app.

    Raises :class:`RuntimeError` if the app was not built by
    :func:`catrust.app.create_app`.
    """
    container = current_app.extensions.get("container")
    if container is None:
        msg = "Dependency container not available -- was the app built with create_app()?"
        raise RuntimeError(msg)
    return container
