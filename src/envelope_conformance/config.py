"""Checker settings.

Settings come from an optional YAML file and may be overridden by
environment variables:

- ENVELOPE_CONFORMANCE_CONFIG: path of the YAML file when none is given.
- ENVELOPE_CONFORMANCE_ALLOW_BARE: "1"/"true" to accept bare envelopes.
- ENVELOPE_CONFORMANCE_WORKERS: number of parallel checks.
"""

import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from envelope_conformance.errors import SettingsError

CONFIG_ENV = "ENVELOPE_CONFORMANCE_CONFIG"
ALLOW_BARE_ENV = "ENVELOPE_CONFORMANCE_ALLOW_BARE"
WORKERS_ENV = "ENVELOPE_CONFORMANCE_WORKERS"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class CheckerSettings(BaseModel):
    """Tunable behavior of a conformance run.

    Attributes:
        allow_bare_envelope: Accept `{data, metadata}` bodies that carry no
            `success`/`code` pair.
        naming_depth: Number of object levels checked for camelCase keys.
        naming_pattern: Regex every checked key must fully match.
        check_paths: Whether endpoint paths are checked for naming.
        require_version_prefix: Whether paths must start with `/v<N>`.
        workers: Number of samples checked in parallel.
        timeout_seconds: Per-request timeout when probing live endpoints.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    allow_bare_envelope: bool = Field(
        default=False,
        description="Accept {data, metadata} bodies without success/code.",
    )
    naming_depth: int = Field(
        default=2, ge=0, description="Object levels checked for camelCase keys."
    )
    naming_pattern: str = Field(
        default=r"^[a-z][a-zA-Z0-9]*$",
        description="Regex every checked key must fully match.",
    )
    check_paths: bool = Field(
        default=True, description="Check endpoint paths for naming conventions."
    )
    require_version_prefix: bool = Field(
        default=False, description="Require paths to start with /v<N>."
    )
    workers: int = Field(
        default=1, ge=1, le=64, description="Samples checked in parallel."
    )
    timeout_seconds: float = Field(
        default=10.0, gt=0, description="Per-request timeout when probing."
    )

    @field_validator("naming_pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid naming pattern: {e}") from e
        return value


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise SettingsError(f"{name} must be a boolean, got {raw!r}")


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if ALLOW_BARE_ENV in env:
        overrides["allow_bare_envelope"] = _parse_bool(ALLOW_BARE_ENV, env[ALLOW_BARE_ENV])
    if WORKERS_ENV in env:
        try:
            overrides["workers"] = int(env[WORKERS_ENV])
        except ValueError:
            raise SettingsError(
                f"{WORKERS_ENV} must be an integer, got {env[WORKERS_ENV]!r}"
            ) from None
    return overrides


def load_settings(
    path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> CheckerSettings:
    """Loads checker settings.

    Precedence, lowest first: defaults, YAML file, environment variables,
    explicit keyword overrides. Overrides whose value is None are ignored.

    Args:
        path: YAML settings file. Falls back to ENVELOPE_CONFORMANCE_CONFIG.
        env: Environment mapping; defaults to os.environ.
        **overrides: Field values that win over every other source.

    Returns:
        The validated settings.

    Raises:
        SettingsError: If the file cannot be read or a value is invalid.
    """
    env = os.environ if env is None else env
    path = path or env.get(CONFIG_ENV)

    values: dict[str, Any] = {}
    if path:
        file_path = Path(path)
        if not file_path.exists():
            raise SettingsError(f"Settings file not found: {file_path}")
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Error parsing settings file {file_path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise SettingsError(f"Settings file {file_path} must contain a mapping")
        values.update(loaded)

    values.update(_env_overrides(env))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CheckerSettings(**values)
    except ValidationError as e:
        raise SettingsError(str(e)) from e
