"""Abstract base class for signers served by the info endpoint.

A signer answers two questions: "what is your certificate material?"
(:meth:`Signer.info`) and "issue a certificate for this CSR"
(:meth:`Signer.sign`).  The info handlers only ever call ``info``;
issuance is exposed so embedding systems can plug the same object into
their signing path.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catrust.info.protocol import InfoRequest, InfoResponse


class SignerError(Exception):
    """Raised by signers on info or signing failure.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.
    status:
        HTTP status to report when the error reaches an API client.

    """

    def __init__(self, detail: str, *, status: int = 500) -> None:
        self.detail = detail
        self.status = status
        super().__init__(detail)


class Signer(abc.ABC):
    """Base class for all signer implementations."""

    @abc.abstractmethod
    def info(self, request: InfoRequest) -> InfoResponse:
        """Describe this signer's certificate for *request*.

        Raises
        ------
        SignerError
            If the requested profile is unknown or the certificate
            cannot be produced.

        """

    @abc.abstractmethod
    def sign(self, csr_pem: str, *, profile: str | None = None) -> str:
        """Issue a certificate for *csr_pem* and return it as PEM.

        Raises
        ------
        SignerError
            On any signing failure.

        """
