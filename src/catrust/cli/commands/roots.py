"""Roots subcommand: resolve the configured trust roots and list them."""

from __future__ import annotations

import logging
import sys

log = logging.getLogger(__name__)


def run_roots(config, args) -> None:
    """Build the trust store and print one line per certificate.

    Each line is ``<sha256 fingerprint> <subject>``.  An empty root
    list resolves to the platform roots.
    """
    from catrust.core.pem import certificate_fingerprint  # noqa: PLC0415
    from catrust.info import InfoClientError  # noqa: PLC0415
    from catrust.roots import RootError, build_trust_store, default_registry  # noqa: PLC0415

    settings = config.settings
    definitions = settings.client_roots if args.client else settings.trust_roots

    try:
        store = build_trust_store(definitions, default_registry(settings.client))
    except (RootError, InfoClientError) as exc:
        sys.stderr.write(f"catrust: error: {exc.detail}\n")
        sys.exit(1)

    lines = sorted(
        f"{certificate_fingerprint(cert)} {cert.subject.rfc4514_string()}"
        for cert in store.certificates()
    )
    for line in lines:
        sys.stdout.write(line + "\n")
    log.info("%d trust roots resolved", len(store))
