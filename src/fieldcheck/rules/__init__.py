"""Built-in rules for fieldcheck.

This module provides ready-to-use rules that can be referenced by tag.
"""

from fieldcheck.rules.builtin import (
    EMAIL_PATTERN,
    ConfirmationRule,
    EmailRule,
    ExactLengthRule,
    FullNameRule,
    MaxLengthRule,
    MinLengthRule,
    PasswordRule,
    PatternRule,
    PhoneNumberRule,
    PredicateRule,
    RequiredRule,
    ZipCodeRule,
    perceived_length,
    register_builtin_rules,
    rule_from_predicate,
)

__all__ = [
    "EMAIL_PATTERN",
    "ConfirmationRule",
    "EmailRule",
    "ExactLengthRule",
    "FullNameRule",
    "MaxLengthRule",
    "MinLengthRule",
    "PasswordRule",
    "PatternRule",
    "PhoneNumberRule",
    "PredicateRule",
    "RequiredRule",
    "ZipCodeRule",
    "perceived_length",
    "register_builtin_rules",
    "rule_from_predicate",
]
