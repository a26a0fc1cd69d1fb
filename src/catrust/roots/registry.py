"""Root provider registry.

Maps root definition types to :class:`RootProvider` instances.  The
default registry knows the built-in ``system``, ``file`` and ``cfssl``
providers; more are added with :meth:`ProviderRegistry.register`, or
named in config as ``ext:mypackage.module.ClassName``.

Usage::

    from catrust.roots.registry import default_registry

    registry = default_registry(settings.client)
    registry.register("vault", VaultRootProvider())
"""

from __future__ import annotations

import importlib
import logging
import threading
from typing import TYPE_CHECKING

from catrust.roots.base import RootError, RootProvider
from catrust.roots.file import FileRootProvider
from catrust.roots.remote import RemoteRootProvider
from catrust.roots.system import SystemRootProvider

if TYPE_CHECKING:
    from catrust.config.settings import ClientSettings

log = logging.getLogger(__name__)

_EXT_PREFIX = "ext:"


class ProviderRegistry:
    """Name → provider lookup table consulted by :func:`build_trust_store`."""

    def __init__(self) -> None:
        self._providers: dict[str, RootProvider] = {}
        self._lock = threading.Lock()

    def register(self, name: str, provider: RootProvider) -> None:
        """Register *provider* under *name*, replacing any previous one."""
        if not name or name.startswith(_EXT_PREFIX):
            msg = f"invalid root provider name {name!r}"
            raise RootError(msg)
        if not isinstance(provider, RootProvider):
            msg = f"root provider {name!r} must be a RootProvider instance"
            raise RootError(msg)
        with self._lock:
            self._providers[name] = provider
        log.debug("Registered root provider: %s", name)

    def get(self, name: str) -> RootProvider | None:
        """Return the provider for *name*, or ``None`` if unknown.

        ``ext:`` names are imported on first use and cached.

        Raises
        ------
        RootError
            If an ``ext:`` provider cannot be loaded.

        """
        with self._lock:
            provider = self._providers.get(name)
        if provider is not None or not name.startswith(_EXT_PREFIX):
            return provider

        provider = _load_external(name[len(_EXT_PREFIX) :])
        with self._lock:
            return self._providers.setdefault(name, provider)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._providers


def default_registry(client_settings: ClientSettings | None = None) -> ProviderRegistry:
    """Build a registry holding the built-in providers.

    *client_settings* configures the outbound calls made by the
    ``cfssl`` provider (timeout, verification).
    """
    registry = ProviderRegistry()
    registry.register(SystemRootProvider.name, SystemRootProvider())
    registry.register(FileRootProvider.name, FileRootProvider())
    if client_settings is None:
        remote = RemoteRootProvider()
    else:
        remote = RemoteRootProvider(
            timeout=client_settings.timeout_seconds,
            insecure_skip_verify=client_settings.insecure_skip_verify,
        )
    registry.register(RemoteRootProvider.name, remote)
    return registry


def _load_external(fqn: str) -> RootProvider:
    """Instantiate a custom provider by fully-qualified class name."""
    module_path, _, cls_name = fqn.rpartition(".")
    if not module_path:
        msg = (
            f"Invalid external root provider '{fqn}': must be fully "
            "qualified (e.g. 'mypackage.module.ClassName')"
        )
        raise RootError(msg)

    try:
        module = importlib.import_module(module_path)
        cls = getattr(module, cls_name)
    except (ImportError, AttributeError) as exc:
        msg = f"Failed to load external root provider '{fqn}': {exc}"
        raise RootError(msg) from exc

    if not (isinstance(cls, type) and issubclass(cls, RootProvider)):
        msg = f"External root provider '{fqn}' must be a subclass of RootProvider"
        raise RootError(msg)

    try:
        provider = cls()
    except TypeError as exc:
        msg = f"External root provider '{fqn}' could not be instantiated: {exc}"
        raise RootError(msg) from exc

    log.info("Loaded external root provider: %s", fqn)
    return provider
