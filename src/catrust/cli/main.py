"""catrust command-line entry point.

Usage::

    catrust -c /etc/catrust/catrust.yaml
    catrust -c catrust.yaml --validate-only
    catrust -c catrust.yaml serve --dev
    catrust -c catrust.yaml roots --client
    catrust -c catrust.yaml info --host ca.internal --label primary
    python -m catrust -c catrust.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

log = logging.getLogger(__name__)


def _get_version() -> str:
    from catrust import __version__  # noqa: PLC0415

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catrust",
        description="catrust: CA trust-root distribution and certificate info service",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Path to the configuration file (YAML or JSON).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration file and exit.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the catrust server")
    serve_parser.add_argument(
        "--dev",
        action="store_true",
        default=False,
        help="Use Flask's development server instead of gunicorn.",
    )

    # roots
    roots_parser = subparsers.add_parser("roots", help="Resolve and list configured trust roots")
    roots_parser.add_argument(
        "--client",
        action="store_true",
        default=False,
        help="List client_roots instead of trust_roots.",
    )

    # info
    info_parser = subparsers.add_parser("info", help="Query a remote CA's info endpoint")
    info_parser.add_argument("--host", required=True, help="Remote CA host[:port] or URL")
    info_parser.add_argument("--label", default="", help="Signer label")
    info_parser.add_argument("--profile", default="", help="Signing profile")
    info_parser.add_argument("--mutual-tls-cert", default=None, metavar="PATH", help="Client certificate")
    info_parser.add_argument("--mutual-tls-key", default=None, metavar="PATH", help="Client private key")
    info_parser.add_argument("--tls-remote-ca", default=None, metavar="PATH", help="CA bundle for the remote")

    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    sys.stderr.write(f"catrust: error: {message}\n")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Parses arguments, loads config, dispatches."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # -- resolve config path ---
    config_path = Path(args.config)
    if not config_path.is_file():
        _print_error(f"configuration file not found: {config_path}")
        sys.exit(1)

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # -- load & validate config ---
    from catrust.config import ConfigValidationError, load_config  # noqa: PLC0415

    try:
        config = load_config(config_path)
    except ConfigValidationError as exc:
        _print_error(str(exc))
        sys.exit(1)

    # -- replace bootstrap logging with structured logging ---
    from catrust.logging import configure_logging  # noqa: PLC0415

    configure_logging(config.settings.logging)
    if args.debug:
        logging.getLogger("catrust").setLevel(logging.DEBUG)

    if args.validate_only:
        _print_settings_summary(config)
        sys.exit(0)

    command = args.command
    if command == "roots":
        from catrust.cli.commands.roots import run_roots  # noqa: PLC0415

        run_roots(config, args)
    elif command == "info":
        from catrust.cli.commands.info import run_info  # noqa: PLC0415

        run_info(config, args)
    else:
        # No subcommand = serve
        if command is None:
            args.dev = False
        from catrust.cli.commands.serve import run_serve  # noqa: PLC0415

        run_serve(config, args)


def _print_settings_summary(config) -> None:
    """Print a short summary of the loaded configuration."""
    s = config.settings
    lines = [
        f"Configuration OK: {config.source}",
        f"  server:       {s.server.bind}:{s.server.port} (tls={s.server.tls.enabled})",
        f"  info path:    {s.server.info_path}",
        f"  signers:      {', '.join(sorted(s.signers.labels)) or '(none)'}",
        f"  default:      {s.signers.default_label or '(none)'}",
        f"  trust roots:  {', '.join(r.type for r in s.trust_roots) or '(none)'}",
        f"  client roots: {', '.join(r.type for r in s.client_roots) or '(none)'}",
    ]
    sys.stdout.write("\n".join(lines) + "\n")


if __name__ == "__main__":
    main()
