"""Default thresholds for the built-in rules."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from fieldcheck.types import ConfigurationError

_ENV_PREFIX = "FIELDCHECK_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class RuleDefaults:
    """Thresholds used by built-in rules when a definition omits them.

    Parameters given on an individual rule definition always win.
    """

    phone_digits: int = 10
    zip_digits: int = 5
    password_min_length: int = 8
    password_require_uppercase: bool = True
    password_require_digit: bool = False
    full_name_min_tokens: int = 2

    @classmethod
    def from_env(cls) -> RuleDefaults:
        """Create defaults from environment variables.

        Each field maps to FIELDCHECK_<FIELD_NAME>, e.g.
        FIELDCHECK_PHONE_DIGITS=11. Unset variables keep the built-in value.

        Raises:
            ConfigurationError: If a variable cannot be parsed
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = os.environ.get(_ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            values[f.name] = _parse(f.name, raw.strip(), f.type)
        return cls(**values)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleDefaults:
        """Create defaults from a mapping, ignoring unknown keys.

        Raises:
            ConfigurationError: If a value has the wrong type or is negative
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name in data:
                values[f.name] = _check(f.name, data[f.name], f.type)
        return cls(**values)


def _check(name: str, value: Any, annotation: Any) -> Any:
    if annotation in (bool, "bool"):
        if not isinstance(value, bool):
            raise ConfigurationError(f"'{name}' must be true or false, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"'{name}' must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"'{name}' must not be negative")
    return value


def _parse(name: str, raw: str, annotation: Any) -> Any:
    # Annotations are strings under postponed evaluation
    if annotation in (bool, "bool"):
        lowered = raw.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigurationError(
            f"{_ENV_PREFIX}{name.upper()} must be a boolean, got '{raw}'"
        )
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{_ENV_PREFIX}{name.upper()} must be an integer, got '{raw}'"
        ) from None
    if value < 0:
        raise ConfigurationError(f"{_ENV_PREFIX}{name.upper()} must not be negative")
    return value
