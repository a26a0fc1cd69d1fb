"""Abstract base class and shared types for trust-root providers.

A root provider turns a :class:`RootDefinition` (a provider name plus
string metadata) into a list of trust-anchor certificates.  Built-in
providers read the platform store (``system``), a PEM file (``file``)
or a peer CA's info endpoint (``cfssl``); custom providers subclass
:class:`RootProvider` and are registered by name.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cryptography import x509


class RootError(Exception):
    """Raised when a root provider cannot produce its certificates.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class NoSupportedProviderError(RootError):
    """None of the configured root definitions named a known provider."""


@dataclass(frozen=True)
class RootDefinition:
    """One configured trust source.

    Attributes
    ----------
    type:
        Name of the provider that resolves this definition.
    metadata:
        Provider-specific string settings (read-only).

    """

    type: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = MappingProxyType({str(k): str(v) for k, v in dict(self.metadata).items()})
        object.__setattr__(self, "metadata", frozen)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RootDefinition:
        """Build a definition from a ``{type, metadata}`` config entry."""
        return cls(type=data["type"], metadata=data.get("metadata") or {})


class RootProvider(abc.ABC):
    """Base class for all trust-root providers.

    Subclasses implement :meth:`resolve`.  A provider must either return
    every certificate its definition describes or raise; it never
    returns a partial result for its primary source.
    """

    name: str = ""

    @abc.abstractmethod
    def resolve(self, metadata: Mapping[str, str]) -> list[x509.Certificate]:
        """Return the trust anchors described by *metadata*.

        Raises
        ------
        RootError
            If required metadata is missing or the source cannot be
            read or parsed.

        """
