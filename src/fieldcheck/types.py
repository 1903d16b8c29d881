"""Core types for the fieldcheck validation engine.

This module defines the foundational types shared by every layer:
- ErrorKind: why a rule failed, with a fixed human-readable description
- RuleResult: the verdict a single rule returns for a piece of text
- ValidationError: a failed field, as reported to delegates
- Registration: one row of the field registration table
- Protocols for field handles, rules and the two delegate flavours
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


# =============================================================================
# Exceptions
# =============================================================================


class FieldCheckError(Exception):
    """Base class for fieldcheck usage errors."""
    pass


class ConfigurationError(FieldCheckError):
    """A rule chain or form definition cannot be built.

    Raised at registration time for unknown rule tags, bad rule parameters,
    empty rule chains and malformed form definitions.
    """
    pass


class FieldNotFoundError(FieldCheckError, KeyError):
    """validate_field was called with a key that is not registered."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"No field is registered under key '{self.key}'"


# =============================================================================
# Error kinds
# =============================================================================


class ErrorKind(Enum):
    """Reason a validation rule failed.

    NO_ERROR is the sentinel carried by passing results and is never
    reported to callers. CUSTOM is the extension point for user rules,
    which should supply their own message.
    """

    REQUIRED = "required"
    EMAIL = "email"
    PASSWORD = "password"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    EXACT_LENGTH = "exactLength"
    ZIP_CODE = "zipCode"
    PHONE_NUMBER = "phoneNumber"
    FULL_NAME = "fullName"
    PATTERN = "pattern"
    CONFIRMATION = "confirmation"
    CUSTOM = "custom"
    NO_ERROR = "noError"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ErrorKind, str] = {
    ErrorKind.REQUIRED: "This field is required",
    ErrorKind.EMAIL: "Must be a valid email address",
    ErrorKind.PASSWORD: "Password does not meet the requirements",
    ErrorKind.MIN_LENGTH: "Value is too short",
    ErrorKind.MAX_LENGTH: "Value is too long",
    ErrorKind.EXACT_LENGTH: "Value has the wrong length",
    ErrorKind.ZIP_CODE: "Must be a valid zip code",
    ErrorKind.PHONE_NUMBER: "Must be a valid phone number",
    ErrorKind.FULL_NAME: "Must include first and last name",
    ErrorKind.PATTERN: "Value format is invalid",
    ErrorKind.CONFIRMATION: "Values do not match",
    ErrorKind.CUSTOM: "Value is invalid",
    ErrorKind.NO_ERROR: "",
}


# =============================================================================
# Rule results and errors
# =============================================================================


@dataclass(frozen=True)
class RuleResult:
    """Verdict of a single rule.

    Attributes:
        passed: True if the text satisfied the rule
        error_kind: Why the rule failed; NO_ERROR for passing results
        message: Optional description overriding the error kind's default
    """

    passed: bool
    error_kind: ErrorKind = ErrorKind.NO_ERROR
    message: str | None = None

    @classmethod
    def ok(cls) -> "RuleResult":
        return _OK

    @classmethod
    def fail(cls, error_kind: ErrorKind, message: str | None = None) -> "RuleResult":
        if error_kind is ErrorKind.NO_ERROR:
            raise ValueError("A failing rule result must carry a real error kind")
        return cls(passed=False, error_kind=error_kind, message=message)

    @property
    def description(self) -> str:
        return self.message or self.error_kind.description


_OK = RuleResult(passed=True)


@dataclass(frozen=True)
class ValidationError:
    """A field that failed validation.

    Attributes:
        key: Registration key of the field
        field: The field handle that was read
        error_kind: Error kind of the first rule that failed
        description: Human-readable message for the failure
    """

    key: str
    field: Any
    error_kind: ErrorKind
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "errorKind": self.error_kind.value,
            "description": self.description,
        }


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class FieldHandle(Protocol):
    """Opaque reference to an input field owned by the caller.

    The engine only ever reads the current text.
    """

    def get_text(self) -> str:
        ...


@runtime_checkable
class ValidationRule(Protocol):
    """Protocol that all rules must implement.

    Rules are pure functions of their input and construction parameters.
    They must accept every string, including the empty string, and must
    not raise.
    """

    def evaluate(self, text: str) -> RuleResult:
        ...


class FieldDelegate(Protocol):
    """Receives the outcome of validate_field."""

    def on_field_success(self, key: str, field: Any) -> None:
        ...

    def on_field_failure(self, key: str, error: ValidationError) -> None:
        ...


class FormDelegate(Protocol):
    """Receives the outcome of validate_all_keys."""

    def on_all_success(self) -> None:
        ...

    def on_all_failure(self, errors: Mapping[str, ValidationError]) -> None:
        ...


# =============================================================================
# Definitions
# =============================================================================


@dataclass
class RuleDefinition:
    """Declarative description of a rule (from code or a form file).

    This is the declarative representation; the rule registry resolves it
    to an actual ValidationRule.

    Attributes:
        type: Rule tag ("required", "email", "minLength", ...)
        params: Tag-specific parameters, camelCase as written in YAML
        message: Optional description replacing the error kind's default
    """

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""

    @classmethod
    def from_dict(cls, data: "str | Mapping[str, Any]") -> "RuleDefinition":
        """Create RuleDefinition from a bare tag or a YAML/JSON dict."""
        if isinstance(data, str):
            return cls(type=data)
        if not isinstance(data, Mapping) or not data.get("type"):
            raise ConfigurationError(f"Rule definition needs a 'type': {data!r}")

        params = data.get("params") or {}
        if not isinstance(params, Mapping):
            raise ConfigurationError(
                f"Params for rule '{data['type']}' must be a mapping"
            )
        return cls(
            type=str(data["type"]),
            params=dict(params),
            message=data.get("message") or "",
        )


# =============================================================================
# Registration
# =============================================================================


@dataclass(frozen=True)
class Registration:
    """One row of the field registration table.

    Attributes:
        key: Unique registration key
        field: The caller's field handle
        rules: Rule chain, evaluated left to right
    """

    key: str
    field: Any
    rules: tuple[ValidationRule, ...]


@dataclass(frozen=True)
class FieldResult:
    """Outcome of evaluating one registration.

    Attributes:
        key: Registration key
        field: The field handle that was read
        error: The first failure, or None when every rule passed
    """

    key: str
    field: Any
    error: ValidationError | None = None

    @property
    def passed(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FormResult:
    """Outcome of validating every registered field.

    Attributes:
        errors: Failing keys mapped to their first error, in table order
        checked: Number of fields evaluated
    """

    errors: Mapping[str, ValidationError]
    checked: int = 0

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.passed,
            "checked": self.checked,
            "errors": [e.to_dict() for e in self.errors.values()],
        }
