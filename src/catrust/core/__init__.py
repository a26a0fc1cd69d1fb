"""Shared low-level helpers: PEM handling, TLS contexts, locking."""
