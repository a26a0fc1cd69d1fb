"""The ``info`` protocol: wire types, HTTPS client and server handlers.

Public API::

    from catrust.info import InfoClient, InfoRequest, InfoResponse

Server-side handlers live in :mod:`catrust.info.handlers` (they pull in
Flask and are imported by the application factory).
"""

from catrust.info.client import InfoClient, InfoClientError
from catrust.info.protocol import INFO_PATH, InfoRequest, InfoResponse

__all__ = [
    "INFO_PATH",
    "InfoClient",
    "InfoClientError",
    "InfoRequest",
    "InfoResponse",
]
