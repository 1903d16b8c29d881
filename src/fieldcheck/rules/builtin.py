"""Built-in rules for fieldcheck.

These are ready-to-use rules that ship with the engine. They are referenced
by tag from code or form files and configured via parameters.

Available rules:
- required: Text must contain something other than whitespace
- email: Text must be a single email address
- minLength / maxLength / exactLength: Bounds on perceived length
- zipCode: Exactly N digits (default 5)
- phoneNumber: Exactly N digits once punctuation is stripped (default 10)
- fullName: At least N whitespace-separated names (default 2)
- password: Minimum length plus optional character class requirements
- pattern: Text must fully match a regular expression
- confirmation: Text must equal another field's text
"""

import re
import unicodedata
from functools import partial
from typing import Any, Callable

from fieldcheck.config import RuleDefaults
from fieldcheck.registry import BaseRule, RuleRegistry
from fieldcheck.types import (
    ConfigurationError,
    ErrorKind,
    RuleDefinition,
    RuleResult,
)


# Email: single address, no display name or comments
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

_ASCII_DIGITS = frozenset("0123456789")

# Characters that render as part of the preceding character
_JOINERS = frozenset("\u200d\ufe0e\ufe0f")


def perceived_length(text: str) -> int:
    """Count the characters a user would see.

    Text is NFC-normalised and combining marks, zero-width joiners and
    variation selectors are not counted, so "é" has length 1.
    """
    normalized = unicodedata.normalize("NFC", text)
    return sum(
        1 for ch in normalized
        if ch not in _JOINERS and not unicodedata.combining(ch)
    )


def _int_param(definition: RuleDefinition, name: str, default: int | None = None) -> int:
    value = definition.params.get(name, default)
    if value is None:
        raise ConfigurationError(f"Rule '{definition.type}' requires param '{name}'")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"Param '{name}' of rule '{definition.type}' must be an integer, got {value!r}"
        )
    if value < 0:
        raise ConfigurationError(
            f"Param '{name}' of rule '{definition.type}' must not be negative"
        )
    return value


def _bool_param(definition: RuleDefinition, name: str, default: bool) -> bool:
    value = definition.params.get(name, default)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Param '{name}' of rule '{definition.type}' must be true or false, got {value!r}"
        )
    return value


# =============================================================================
# Required
# =============================================================================


class RequiredRule(BaseRule):
    """Fails when the text is empty or whitespace only."""

    error_kind = ErrorKind.REQUIRED

    def evaluate(self, text: str) -> RuleResult:
        if text.strip() == "":
            return self.fail()
        return RuleResult.ok()


def _required_factory(definition: RuleDefinition) -> RequiredRule:
    return RequiredRule()


# =============================================================================
# Email
# =============================================================================


class EmailRule(BaseRule):
    """Fails unless the whole text is one email address.

    The empty string is not an address, so it fails too. Put `required`
    first in the chain to get the friendlier message for blank fields.
    """

    error_kind = ErrorKind.EMAIL

    def evaluate(self, text: str) -> RuleResult:
        if not EMAIL_PATTERN.fullmatch(text):
            return self.fail()
        return RuleResult.ok()


def _email_factory(definition: RuleDefinition) -> EmailRule:
    return EmailRule()


# =============================================================================
# Length Rules
# =============================================================================


class MinLengthRule(BaseRule):
    """Fails when the text is shorter than `length` characters.

    Params:
        length: Minimum perceived length
    """

    error_kind = ErrorKind.MIN_LENGTH

    def __init__(self, length: int):
        self.length = length

    def evaluate(self, text: str) -> RuleResult:
        if perceived_length(text) < self.length:
            return self.fail()
        return RuleResult.ok()


class MaxLengthRule(BaseRule):
    """Fails when the text is longer than `length` characters.

    Params:
        length: Maximum perceived length
    """

    error_kind = ErrorKind.MAX_LENGTH

    def __init__(self, length: int):
        self.length = length

    def evaluate(self, text: str) -> RuleResult:
        if perceived_length(text) > self.length:
            return self.fail()
        return RuleResult.ok()


class ExactLengthRule(BaseRule):
    """Fails unless the text is exactly `length` characters.

    Params:
        length: Required perceived length
    """

    error_kind = ErrorKind.EXACT_LENGTH

    def __init__(self, length: int):
        self.length = length

    def evaluate(self, text: str) -> RuleResult:
        if perceived_length(text) != self.length:
            return self.fail()
        return RuleResult.ok()


def _min_length_factory(definition: RuleDefinition) -> MinLengthRule:
    return MinLengthRule(_int_param(definition, "length"))


def _max_length_factory(definition: RuleDefinition) -> MaxLengthRule:
    return MaxLengthRule(_int_param(definition, "length"))


def _exact_length_factory(definition: RuleDefinition) -> ExactLengthRule:
    return ExactLengthRule(_int_param(definition, "length"))


# =============================================================================
# Zip Code
# =============================================================================


class ZipCodeRule(BaseRule):
    """Fails unless the text is exactly `digits` ASCII digits.

    Params:
        digits: Number of digits (default from RuleDefaults.zip_digits)
    """

    error_kind = ErrorKind.ZIP_CODE

    def __init__(self, digits: int = 5):
        self.digits = digits

    def evaluate(self, text: str) -> RuleResult:
        if len(text) != self.digits or not set(text) <= _ASCII_DIGITS:
            return self.fail()
        return RuleResult.ok()


def _zip_code_factory(definition: RuleDefinition, defaults: RuleDefaults) -> ZipCodeRule:
    return ZipCodeRule(_int_param(definition, "digits", defaults.zip_digits))


# =============================================================================
# Phone Number
# =============================================================================


class PhoneNumberRule(BaseRule):
    """Fails unless the text holds exactly `digits` digits.

    Spaces, dashes, dots, brackets and any other non-digit characters are
    stripped before counting, so "(555) 123-4567" passes with the default.

    Params:
        digits: Number of digits (default from RuleDefaults.phone_digits)
    """

    error_kind = ErrorKind.PHONE_NUMBER

    def __init__(self, digits: int = 10):
        self.digits = digits

    def evaluate(self, text: str) -> RuleResult:
        count = sum(1 for ch in text if ch in _ASCII_DIGITS)
        if count != self.digits:
            return self.fail()
        return RuleResult.ok()


def _phone_number_factory(
    definition: RuleDefinition, defaults: RuleDefaults
) -> PhoneNumberRule:
    return PhoneNumberRule(_int_param(definition, "digits", defaults.phone_digits))


# =============================================================================
# Full Name
# =============================================================================


class FullNameRule(BaseRule):
    """Fails when the text has fewer than `min_tokens` names.

    Params:
        minTokens: Minimum number of whitespace-separated names (default 2)
    """

    error_kind = ErrorKind.FULL_NAME

    def __init__(self, min_tokens: int = 2):
        self.min_tokens = min_tokens

    def evaluate(self, text: str) -> RuleResult:
        if len(text.split()) < self.min_tokens:
            return self.fail()
        return RuleResult.ok()


def _full_name_factory(definition: RuleDefinition, defaults: RuleDefaults) -> FullNameRule:
    return FullNameRule(
        _int_param(definition, "minTokens", defaults.full_name_min_tokens)
    )


# =============================================================================
# Password
# =============================================================================


class PasswordRule(BaseRule):
    """Fails when the text is not a strong enough password.

    Params:
        minLength: Minimum perceived length (default 8)
        requireUppercase: At least one uppercase letter (default true)
        requireDigit: At least one digit (default false)
    """

    error_kind = ErrorKind.PASSWORD

    def __init__(
        self,
        min_length: int = 8,
        require_uppercase: bool = True,
        require_digit: bool = False,
    ):
        self.min_length = min_length
        self.require_uppercase = require_uppercase
        self.require_digit = require_digit

    def evaluate(self, text: str) -> RuleResult:
        too_short = perceived_length(text) < self.min_length
        no_upper = self.require_uppercase and not any(ch.isupper() for ch in text)
        no_digit = self.require_digit and not any(ch.isdigit() for ch in text)
        if too_short or no_upper or no_digit:
            return self.fail()
        return RuleResult.ok()


def _password_factory(definition: RuleDefinition, defaults: RuleDefaults) -> PasswordRule:
    return PasswordRule(
        min_length=_int_param(definition, "minLength", defaults.password_min_length),
        require_uppercase=_bool_param(
            definition, "requireUppercase", defaults.password_require_uppercase
        ),
        require_digit=_bool_param(
            definition, "requireDigit", defaults.password_require_digit
        ),
    )


# =============================================================================
# Pattern
# =============================================================================


class PatternRule(BaseRule):
    """Fails unless the whole text matches a regular expression.

    Params:
        pattern: Regular expression (matched with fullmatch)
        ignoreCase: Case-insensitive matching (default false)
    """

    error_kind = ErrorKind.PATTERN

    def __init__(self, pattern: str, ignore_case: bool = False):
        try:
            self.regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
        except re.error as e:
            raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e

    def evaluate(self, text: str) -> RuleResult:
        if not self.regex.fullmatch(text):
            return self.fail()
        return RuleResult.ok()


def _pattern_factory(definition: RuleDefinition) -> PatternRule:
    pattern = definition.params.get("pattern")
    if not isinstance(pattern, str):
        raise ConfigurationError("Rule 'pattern' requires a string param 'pattern'")
    return PatternRule(pattern, _bool_param(definition, "ignoreCase", False))


# =============================================================================
# Confirmation
# =============================================================================


class ConfirmationRule(BaseRule):
    """Fails unless the text equals the current text of another field.

    Typical use is a "confirm password" field.

    Params:
        field: Handle of the field to compare against. Form files name the
            other field by key with `matches`; the binder swaps in the handle.
    """

    error_kind = ErrorKind.CONFIRMATION

    def __init__(self, other: Any):
        self.other = other

    def evaluate(self, text: str) -> RuleResult:
        if text != self.other.get_text():
            return self.fail()
        return RuleResult.ok()


def _confirmation_factory(definition: RuleDefinition) -> ConfirmationRule:
    other = definition.params.get("field")
    if other is None or not callable(getattr(other, "get_text", None)):
        raise ConfigurationError(
            "Rule 'confirmation' requires param 'field' with a get_text() method"
        )
    return ConfirmationRule(other)


# =============================================================================
# Predicate Rules
# =============================================================================


class PredicateRule(BaseRule):
    """Adapts a plain `str -> bool` callable to the rule protocol."""

    def __init__(
        self,
        predicate: Callable[[str], bool],
        error_kind: ErrorKind = ErrorKind.CUSTOM,
        message: str | None = None,
    ):
        if error_kind is ErrorKind.NO_ERROR:
            raise ConfigurationError("A rule cannot fail with NO_ERROR")
        self.predicate = predicate
        self.error_kind = error_kind
        self.message = message

    def evaluate(self, text: str) -> RuleResult:
        if not self.predicate(text):
            return self.fail(self.message)
        return RuleResult.ok()


def rule_from_predicate(
    predicate: Callable[[str], bool],
    error_kind: ErrorKind = ErrorKind.CUSTOM,
    message: str | None = None,
) -> PredicateRule:
    """Build a rule that passes whenever `predicate(text)` is truthy.

    Usage:
        no_spaces = rule_from_predicate(lambda t: " " not in t, message="No spaces")
        validator.register("username", field, ["required", no_spaces])
    """
    return PredicateRule(predicate, error_kind, message)


# =============================================================================
# Registration
# =============================================================================


def register_builtin_rules(defaults: RuleDefaults | None = None) -> None:
    """Register all built-in rules with the RuleRegistry.

    Args:
        defaults: Thresholds used when a definition omits a param.
            Defaults to RuleDefaults() when not given.
    """
    defaults = defaults or RuleDefaults()

    RuleRegistry.register("required", _required_factory)
    RuleRegistry.register("email", _email_factory)
    RuleRegistry.register("minLength", _min_length_factory)
    RuleRegistry.register("maxLength", _max_length_factory)
    RuleRegistry.register("exactLength", _exact_length_factory)
    RuleRegistry.register("zipCode", partial(_zip_code_factory, defaults=defaults))
    RuleRegistry.register("phoneNumber", partial(_phone_number_factory, defaults=defaults))
    RuleRegistry.register("fullName", partial(_full_name_factory, defaults=defaults))
    RuleRegistry.register("password", partial(_password_factory, defaults=defaults))
    RuleRegistry.register("pattern", _pattern_factory)
    RuleRegistry.register("confirmation", _confirmation_factory)
