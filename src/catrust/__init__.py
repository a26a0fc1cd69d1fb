"""catrust: trust-root distribution and multi-signer info dispatch for CA nodes."""

__version__ = "1.0.0"
