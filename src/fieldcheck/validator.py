"""Validation engine for fieldcheck.

The Validator ties the pieces together:
1. register() resolves rule tags through the RuleRegistry and stores the
   chain in the FieldRegistrationTable
2. validate_field() evaluates one chain and reports to the FieldDelegate
3. validate_all_keys() evaluates every chain and reports once to the
   FormDelegate

Rule chains stop at the first failing rule. The aggregate pass never stops
early: every field is evaluated and every failure is reported in one call.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from fieldcheck.registry import RuleRegistry
from fieldcheck.table import FieldRegistrationTable
from fieldcheck.types import (
    ConfigurationError,
    ErrorKind,
    FieldDelegate,
    FieldNotFoundError,
    FieldResult,
    FormDelegate,
    FormResult,
    Registration,
    RuleDefinition,
    ValidationError,
    ValidationRule,
)

logger = logging.getLogger(__name__)

# Anything register() accepts as one element of a rule chain
RuleLike = str | RuleDefinition | Mapping[str, Any] | ValidationRule


class Validator:
    """Registers fields with rule chains and validates them on demand.

    The validator holds no state besides its registration table; each
    validate call is a fresh pass over the table as it is at call time.

    Example:
        validator = Validator(field_delegate=form_view, form_delegate=form_view)
        validator.register("email", email_field, ["required", "email"])
        validator.register("zip", zip_field, ["zipCode"])

        validator.validate_field("email")
        validator.validate_all_keys()

    Args:
        field_delegate: Receives on_field_success / on_field_failure
        form_delegate: Receives on_all_success / on_all_failure
        registry: Rule registry used to resolve tags
        on_valid: Optional hook called with the field handle after it passes
        on_invalid: Optional hook called with the handle and error after it fails
    """

    def __init__(
        self,
        field_delegate: FieldDelegate | None = None,
        form_delegate: FormDelegate | None = None,
        registry: type[RuleRegistry] = RuleRegistry,
        on_valid: Callable[[Any], None] | None = None,
        on_invalid: Callable[[Any, ValidationError], None] | None = None,
    ):
        self.field_delegate = field_delegate
        self.form_delegate = form_delegate
        self.registry = registry
        self.on_valid = on_valid
        self.on_invalid = on_invalid
        self.table = FieldRegistrationTable()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, key: str, field: Any, rules: Iterable[RuleLike]) -> Registration:
        """Register `field` under `key` with an ordered rule chain.

        Rules may be given as tags ("email"), RuleDefinitions, definition
        dicts ({"type": "minLength", "params": {"length": 3}}) or ready
        rule objects. All tags are resolved before the table is touched,
        so a bad chain leaves any existing registration in place.

        Args:
            key: Unique registration key; an existing key is replaced
            field: Handle exposing get_text()
            rules: Rule chain in evaluation order

        Returns:
            The stored registration

        Raises:
            ConfigurationError: For unknown tags, bad params or an empty chain
        """
        chain = [self._resolve(item) for item in rules]
        return self.table.register(key, field, chain)

    def unregister(self, key: str) -> bool:
        """Remove the registration for `key`. Returns True if one existed."""
        return self.table.unregister(key)

    def is_registered(self, key: str) -> bool:
        return key in self.table

    def keys(self) -> list[str]:
        """Registered keys in table order."""
        return self.table.keys()

    def _resolve(self, item: RuleLike) -> ValidationRule:
        if isinstance(item, (str, RuleDefinition)):
            return self.registry.create(item)
        if isinstance(item, Mapping):
            return self.registry.create(RuleDefinition.from_dict(item))
        if callable(getattr(item, "evaluate", None)):
            return item
        raise ConfigurationError(
            f"Cannot use {item!r} as a rule; expected a tag, definition or rule object"
        )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_field(self, key: str) -> FieldResult:
        """Validate one registered field and notify the field delegate.

        Exactly one of on_field_success / on_field_failure is called.

        Args:
            key: Registration key

        Returns:
            The field result

        Raises:
            FieldNotFoundError: If `key` is not registered (no delegate call)
        """
        registration = self.table.lookup(key)
        if registration is None:
            raise FieldNotFoundError(key)

        result = self._check(registration)

        if self.field_delegate is not None:
            if result.error is None:
                self.field_delegate.on_field_success(key, registration.field)
            else:
                self.field_delegate.on_field_failure(key, result.error)

        return result

    def validate_field_with(
        self, key: str, callback: Callable[[FieldResult], None]
    ) -> FieldResult:
        """Validate one field and pass the result to `callback`.

        The field delegate, if any, is notified as well.
        """
        result = self.validate_field(key)
        callback(result)
        return result

    def validate_all_keys(self) -> FormResult:
        """Validate every registered field and notify the form delegate.

        Every field is evaluated regardless of earlier failures. Failures
        are collected in table order. The per-field delegate is not called.

        Returns:
            The form result, whose errors map each failing key to the error
            of its first failing rule
        """
        registrations = list(self.table.all_registrations())
        errors: dict[str, ValidationError] = {}

        for registration in registrations:
            result = self._check(registration)
            if result.error is not None:
                errors[registration.key] = result.error

        form_result = FormResult(errors=errors, checked=len(registrations))
        logger.info(
            "Validated %d field(s): %d failed", len(registrations), len(errors)
        )

        if self.form_delegate is not None:
            if errors:
                self.form_delegate.on_all_failure(dict(errors))
            else:
                self.form_delegate.on_all_success()

        return form_result

    def _check(self, registration: Registration) -> FieldResult:
        """Run one rule chain, stopping at the first failure."""
        field = registration.field
        text = field.get_text()
        if text is None:
            text = ""

        error = None
        for position, rule in enumerate(registration.rules):
            verdict = rule.evaluate(text)
            if verdict.passed:
                continue

            error_kind = verdict.error_kind
            if error_kind is ErrorKind.NO_ERROR:
                logger.warning(
                    "Rule %r failed field '%s' without an error kind; reporting CUSTOM",
                    rule,
                    registration.key,
                )
                error_kind = ErrorKind.CUSTOM

            error = ValidationError(
                key=registration.key,
                field=field,
                error_kind=error_kind,
                description=verdict.message or error_kind.description,
            )
            logger.debug(
                "Field '%s' failed rule %d (%s)",
                registration.key,
                position,
                error_kind.value,
            )
            break

        if error is None:
            logger.debug("Field '%s' passed %d rule(s)", registration.key, len(registration.rules))
            if self.on_valid is not None:
                self.on_valid(field)
        elif self.on_invalid is not None:
            self.on_invalid(field, error)

        return FieldResult(key=registration.key, field=field, error=error)
