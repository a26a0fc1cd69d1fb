"""Info subcommand: query a remote CA and print its info response."""

from __future__ import annotations

import json
import logging
import sys

log = logging.getLogger(__name__)


def run_info(config, args) -> None:
    """POST an info request to ``args.host`` and print the JSON result."""
    from catrust.core.tls import TLSConfigError, create_client_context  # noqa: PLC0415
    from catrust.info import InfoClient, InfoClientError, InfoRequest  # noqa: PLC0415

    client_settings = config.settings.client

    try:
        ctx = create_client_context(
            args.tls_remote_ca,
            args.mutual_tls_cert,
            args.mutual_tls_key,
            insecure_skip_verify=client_settings.insecure_skip_verify,
        )
    except TLSConfigError as exc:
        sys.stderr.write(f"catrust: error: {exc}\n")
        sys.exit(1)

    try:
        client = InfoClient(args.host, ssl_context=ctx, timeout=client_settings.timeout_seconds)
        resp = client.info(InfoRequest(label=args.label, profile=args.profile))
    except InfoClientError as exc:
        sys.stderr.write(f"catrust: error: {exc.detail}\n")
        sys.exit(1)

    sys.stdout.write(json.dumps(resp.to_dict(), indent=2) + "\n")
