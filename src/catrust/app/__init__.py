"""Flask application package for catrust.

Public API::

    from catrust.app import create_app
"""

from catrust.app.factory import create_app

__all__ = ["create_app"]
