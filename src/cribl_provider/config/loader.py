"""YAML + environment variable config loader."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import ValidationError

from cribl_provider.config.models import ProviderConfig, ResourcesDocument

PROVIDER_DEFAULTS = Path(__file__).parent / "defaults" / "provider.yaml"

# Matches ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-((?:[^}\\]|\\.)*))?}")


def _resolve_env_str(value: str) -> str:
    """Replace all ${VAR} / ${VAR:-default} references in a string."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        env_val = os.environ.get(var_name)
        if env_val is not None:
            return env_val
        if default is not None:
            return default.replace("\\}", "}")
        msg = f"Environment variable '{var_name}' is not set and no default provided"
        raise ValueError(msg)

    return _ENV_PATTERN.sub(_replace, value)


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve ${VAR} and ${VAR:-default} in parsed YAML data."""
    if isinstance(data, str):
        return _resolve_env_str(data)
    if isinstance(data, dict):
        return {k: resolve_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    return data


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    p = Path(path)
    if not p.exists():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        with p.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse YAML in {p}"
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            msg += f" at line {mark.line + 1}, column {mark.column + 1}"
        msg += f": {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping at top level in {p}, got {type(data).__name__}"
        raise TypeError(msg)
    return cast(dict[str, Any], resolve_env_vars(data))


def load_provider_config(path: str | Path | None = None) -> ProviderConfig:
    """Load provider config from the packaged defaults, then *path* on top.

    Provider settings are a flat mapping, so keys in *path* replace the
    defaults wholesale.
    """
    data = load_yaml(PROVIDER_DEFAULTS)
    if path is not None:
        data.update(load_yaml(path))
    try:
        return ProviderConfig.model_validate(data)
    except ValidationError as exc:
        source = path or "built-in defaults"
        msg = f"Invalid provider config ({source}):\n{exc}"
        raise ValueError(msg) from exc


def load_resources(path: str | Path) -> ResourcesDocument:
    """Load the desired-state resources document."""
    data = load_yaml(path)
    try:
        return ResourcesDocument.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid resources document ({path}):\n{exc}"
        raise ValueError(msg) from exc
