"""Configuration subsystem for catrust.

Public API::

    from catrust.config import load_config

    config = load_config("catrust.yaml")
    port = config.settings.server.port       # typed access
    timeout = config.get("client.timeout_seconds")
"""

from catrust.config.catrust_config import (
    CatrustConfig,
    ConfigValidationError,
    load_config,
)
from catrust.config.settings import (
    CatrustSettings,
    ClientSettings,
    KeyStoreSettings,
    LoggingSettings,
    ServerSettings,
    ServerTlsSettings,
    SignerSettings,
    SignersSettings,
    SigningPolicySettings,
    SigningProfileSettings,
)

__all__ = [
    "CatrustConfig",
    "CatrustSettings",
    "ClientSettings",
    "ConfigValidationError",
    "KeyStoreSettings",
    "LoggingSettings",
    "ServerSettings",
    "ServerTlsSettings",
    "SignerSettings",
    "SignersSettings",
    "SigningPolicySettings",
    "SigningProfileSettings",
    "load_config",
]
