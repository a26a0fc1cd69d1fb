"""Logging subsystem for catrust.

Public API::

    from catrust.logging import configure_logging

    configure_logging(settings.logging)
"""

from catrust.logging.setup import configure_logging

__all__ = ["configure_logging"]
