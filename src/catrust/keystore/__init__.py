"""CA key material capability.

Public API::

    from catrust.keystore import KeyStore, KeyStoreHook, FileKeyStore
"""

from catrust.keystore.base import KeyStore, KeyStoreError, KeyStoreNotInitializedError
from catrust.keystore.file import FileKeyStore
from catrust.keystore.hook import KeyStoreHook

__all__ = [
    "FileKeyStore",
    "KeyStore",
    "KeyStoreError",
    "KeyStoreHook",
    "KeyStoreNotInitializedError",
]
