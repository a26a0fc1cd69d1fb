"""catrust configuration loader.

Lifecycle::

    # 1. The entry point loads the file once
    config = load_config("/etc/catrust/catrust.yaml")

    # 2. The config object is passed to whatever needs it
    app = create_app(config)
    config.settings.server.port              # typed access
    config.get("client.timeout_seconds")     # dynamic dot-path

Loading runs: YAML/JSON parse → ``${VAR}`` resolution → JSON Schema
validation → cross-field checks → typed settings tree.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from catrust.config.settings import CatrustSettings, build_settings

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

_BUILTIN_ROOT_TYPES = frozenset({"system", "file", "cfssl"})

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when schema or cross-field validation finds problems."""

    def __init__(self, errors: list[str]) -> None:
        """Store *errors* and build a human-readable message."""
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_value(value: str, path: str) -> str:
    """Replace ``${VAR}`` or ``${VAR:-default}`` with env var value."""
    match = _ENV_RE.match(value)
    if match is None:
        return value
    var_name = match.group(1)
    fallback = match.group(2)
    resolved = os.environ.get(var_name)
    if resolved is not None:
        return resolved
    if fallback is not None:
        return fallback
    raise ConfigValidationError(
        [
            f"Environment variable '${{{var_name}}}' referenced "
            f"at '{path}' is not set and has no default",
        ],
    )


def _resolve_env_vars(
    data: Any,  # noqa: ANN401
    path: str = "",
) -> None:
    """Walk *data* in-place and resolve ``${VAR}``/``${VAR:-default}`` strings."""
    if isinstance(data, dict):
        for key in data:
            child_path = f"{path}.{key}" if path else key
            if isinstance(data[key], str):
                data[key] = _resolve_value(data[key], child_path)
            elif isinstance(data[key], (dict, list)):
                _resolve_env_vars(data[key], child_path)
    elif isinstance(data, list):
        for idx, item in enumerate(data):
            child_path = f"{path}[{idx}]"
            if isinstance(item, str):
                data[idx] = _resolve_value(item, child_path)
            elif isinstance(item, (dict, list)):
                _resolve_env_vars(item, child_path)


def _load_schema() -> dict:
    with _SCHEMA_PATH.open(encoding="utf-8") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------


class CatrustConfig:
    """Validated configuration for one catrust node.

    After construction the typed settings tree is available at
    :pyattr:`settings` and the raw dict via :pyattr:`data` /
    :pymeth:`get`.
    """

    def __init__(self, *, config_file: str | Path) -> None:
        self.source = str(config_file)
        self._data = self._read(Path(config_file))
        _resolve_env_vars(self._data)
        self._validate_schema()
        self.additional_checks()
        self._settings: CatrustSettings = build_settings(self._data)

    # -- loading ------------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> dict:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"cannot read configuration file {path}: {exc}"
            raise ConfigValidationError([msg]) from exc

        try:
            if path.suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            msg = f"cannot parse configuration file {path}: {exc}"
            raise ConfigValidationError([msg]) from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            msg = f"configuration file {path} must contain a mapping at the top level"
            raise ConfigValidationError([msg])
        return data

    def _validate_schema(self) -> None:
        validator = jsonschema.Draft7Validator(_load_schema())
        errors = [
            f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
            for err in sorted(validator.iter_errors(self._data), key=lambda e: list(e.absolute_path))
        ]
        if errors:
            raise ConfigValidationError(errors)

    # -- typed access -------------------------------------------------------

    @property
    def settings(self) -> CatrustSettings:
        """Fully-typed, frozen settings tree."""
        return self._settings

    @property
    def data(self) -> dict:
        return self._data

    def get(self, path: str, default: Any = None) -> Any:  # noqa: ANN401
        """Look up a dot-separated *path* in the raw config data."""
        node: Any = self._data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    # -- cross-field validation ---------------------------------------------

    def additional_checks(self) -> None:
        """Semantic & cross-field validation, run after the schema passes."""
        errors: list[str] = []
        warnings: list[str] = []

        server = self._data.get("server") or {}
        tls = server.get("tls") or {}
        signers = self._data.get("signers") or {}
        client = self._data.get("client") or {}

        # -- server TLS --
        if bool(tls.get("cert_path")) != bool(tls.get("key_path")):
            errors.append("server.tls.cert_path and server.tls.key_path must be set together")
        if tls.get("client_auth"):
            if not tls.get("cert_path"):
                errors.append("server.tls.client_auth requires server.tls.cert_path and key_path")
            if not self._data.get("client_roots"):
                warnings.append(
                    "server.tls.client_auth is enabled without client_roots; "
                    "clients will be verified against the system roots",
                )

        # -- signers --
        labels = signers.get("labels") or {}
        default_label = signers.get("default_label")
        if default_label is not None and default_label not in labels:
            errors.append(
                f"signers.default_label '{default_label}' is not one of "
                f"signers.labels ({sorted(labels)})",
            )
        elif default_label is None and len(labels) > 1:
            errors.append("signers.default_label is required when more than one signer is configured")

        # -- roots --
        for section in ("trust_roots", "client_roots"):
            for idx, root in enumerate(self._data.get(section) or []):
                root_type = root.get("type", "")
                metadata = root.get("metadata") or {}
                where = f"{section}[{idx}]"
                if root_type == "file" and not metadata.get("source"):
                    errors.append(f"{where}: 'file' roots require metadata.source")
                elif root_type == "cfssl" and not metadata.get("host"):
                    errors.append(f"{where}: 'cfssl' roots require metadata.host")
                elif root_type not in _BUILTIN_ROOT_TYPES and not root_type.startswith("ext:"):
                    warnings.append(f"{where}: unknown root type '{root_type}' will be ignored")

        # -- client --
        if client.get("insecure_skip_verify"):
            warnings.append("client.insecure_skip_verify disables peer CA verification")

        for w in warnings:
            log.warning("Config warning: %s", w)

        if errors:
            raise ConfigValidationError(errors)

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"<CatrustConfig config_file={self.source}>"


def load_config(config_file: str | Path) -> CatrustConfig:
    """Load, validate and return the configuration in *config_file*."""
    return CatrustConfig(config_file=config_file)
