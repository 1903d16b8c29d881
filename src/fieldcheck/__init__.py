"""fieldcheck: declarative field validation.

Fields are registered under a key with an ordered chain of rules. Chains
are evaluated on demand, stopping at the first failing rule, and outcomes
are reported to delegates:
- validate_field(key): on_field_success / on_field_failure
- validate_all_keys(): on_all_success / on_all_failure with every failure

Usage:
    from fieldcheck import TextField, Validator, register_builtin_rules

    # At application startup
    register_builtin_rules()

    email = TextField("")
    validator = Validator(field_delegate=view, form_delegate=view)
    validator.register("email", email, ["required", "email"])
    validator.validate_field("email")
"""

from fieldcheck.config import RuleDefaults
from fieldcheck.fields import CallbackField, TextField
from fieldcheck.forms import (
    FormDefinition,
    FormLoader,
    load_form,
    load_forms_dir,
    validate_form_file,
)
from fieldcheck.registry import BaseRule, RuleRegistry
from fieldcheck.rules import register_builtin_rules, rule_from_predicate
from fieldcheck.table import FieldRegistrationTable
from fieldcheck.types import (
    ConfigurationError,
    ErrorKind,
    FieldCheckError,
    FieldDelegate,
    FieldHandle,
    FieldNotFoundError,
    FieldResult,
    FormDelegate,
    FormResult,
    Registration,
    RuleDefinition,
    RuleResult,
    ValidationError,
    ValidationRule,
)
from fieldcheck.validator import Validator

__version__ = "0.1.0"

__all__ = [
    # Types
    "ErrorKind",
    "FieldDelegate",
    "FieldHandle",
    "FieldResult",
    "FormDelegate",
    "FormResult",
    "Registration",
    "RuleDefinition",
    "RuleResult",
    "ValidationError",
    "ValidationRule",
    # Errors
    "ConfigurationError",
    "FieldCheckError",
    "FieldNotFoundError",
    # Rules
    "BaseRule",
    "RuleDefaults",
    "RuleRegistry",
    "register_builtin_rules",
    "rule_from_predicate",
    # Engine
    "FieldRegistrationTable",
    "Validator",
    # Fields
    "CallbackField",
    "TextField",
    # Forms
    "FormDefinition",
    "FormLoader",
    "load_form",
    "load_forms_dir",
    "validate_form_file",
]
