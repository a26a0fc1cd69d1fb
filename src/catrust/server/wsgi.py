"""WSGI entry point for external servers (gunicorn, uWSGI, etc.).

The config file path is read from the ``CATRUST_CONFIG`` environment
variable.

Example::

    export CATRUST_CONFIG=/etc/catrust/catrust.yaml
    gunicorn "catrust.server.wsgi:app"
"""

from __future__ import annotations

import os
import sys

_config_path = os.environ.get("CATRUST_CONFIG")
if _config_path is None:
    sys.stderr.write("CATRUST_CONFIG is not set\n")
    sys.exit(1)

from catrust.config import load_config  # noqa: E402

_config = load_config(_config_path)

from catrust.logging import configure_logging  # noqa: E402

configure_logging(_config.settings.logging)

from catrust.app import create_app  # noqa: E402

app = create_app(_config)
