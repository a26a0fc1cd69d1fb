"""Trust-root providers and the deduplicating trust store.

Public API::

    from catrust.roots import RootDefinition, build_trust_store

    store = build_trust_store([
        RootDefinition("file", {"source": "/etc/catrust/roots.pem"}),
        RootDefinition("cfssl", {"host": "ca.internal", "label": "primary"}),
    ])
"""

from catrust.roots.base import (
    NoSupportedProviderError,
    RootDefinition,
    RootError,
    RootProvider,
)
from catrust.roots.registry import ProviderRegistry, default_registry
from catrust.roots.store import TrustStore, build_trust_store

__all__ = [
    "NoSupportedProviderError",
    "ProviderRegistry",
    "RootDefinition",
    "RootError",
    "RootProvider",
    "TrustStore",
    "build_trust_store",
    "default_registry",
]
