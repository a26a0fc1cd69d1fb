"""Signer interface and the key-store-backed signer.

Public API::

    from catrust.signer import Signer, SignerError, KeyStoreSigner
"""

from catrust.signer.base import Signer, SignerError
from catrust.signer.local import KeyStoreSigner

__all__ = ["KeyStoreSigner", "Signer", "SignerError"]
