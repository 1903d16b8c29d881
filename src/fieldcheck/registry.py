"""Rule registry for fieldcheck.

Maps rule tags ("required", "email", "minLength", ...) to factories that
build a fresh ValidationRule from a RuleDefinition.
"""

import logging
from typing import Callable

from fieldcheck.types import (
    ConfigurationError,
    ErrorKind,
    RuleDefinition,
    RuleResult,
    ValidationRule,
)

logger = logging.getLogger(__name__)

RuleFactory = Callable[[RuleDefinition], ValidationRule]


class RuleRegistry:
    """Registry for rule types.

    Rules must be explicitly registered before they can be referenced by
    tag. Built-in rules are registered by register_builtin_rules(); custom
    rules are registered by the application at startup.

    Example:
        RuleRegistry.register("sku", lambda d: SkuRule(d.params.get("prefix", "")))

        rule = RuleRegistry.create("sku")
    """

    _factories: dict[str, RuleFactory] = {}

    @classmethod
    def register(cls, tag: str, factory: RuleFactory) -> None:
        """Register a factory function by tag.

        Idempotent - re-registering the same tag is a no-op.

        Args:
            tag: Unique identifier for the rule type (e.g., "email", "myapp.sku")
            factory: Function that takes a RuleDefinition and returns a rule
        """
        if tag in cls._factories:
            logger.debug("Rule '%s' is already registered, keeping existing factory", tag)
            return
        cls._factories[tag] = factory

    @classmethod
    def create(cls, definition: RuleDefinition | str) -> ValidationRule:
        """Create a rule instance from a definition or a bare tag.

        Every call returns a new instance, so rules built for different
        fields never share state.

        Args:
            definition: The rule definition, or just its tag

        Returns:
            A configured rule

        Raises:
            ConfigurationError: If the tag is not registered or the
                factory rejects the parameters
        """
        if isinstance(definition, str):
            definition = RuleDefinition(type=definition)

        factory = cls._factories.get(definition.type)
        if factory is None:
            available = ", ".join(cls.list_registered()) or "none"
            raise ConfigurationError(
                f"Rule type '{definition.type}' is not registered. "
                f"Available types: {available}"
            )

        try:
            rule = factory(definition)
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid params for rule '{definition.type}': {e}"
            ) from e

        if definition.message:
            return MessageOverride(rule, definition.message)
        return rule

    @classmethod
    def is_registered(cls, tag: str) -> bool:
        """Check if a rule tag is registered."""
        return tag in cls._factories

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered rule tags."""
        return sorted(cls._factories.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._factories.clear()


class BaseRule:
    """Base class for rules with common functionality.

    Subclasses set `error_kind` and override `evaluate`.
    """

    error_kind: ErrorKind = ErrorKind.CUSTOM

    def evaluate(self, text: str) -> RuleResult:
        """Evaluate the text. Override in subclasses."""
        raise NotImplementedError("Subclasses must implement evaluate()")

    def fail(self, message: str | None = None) -> RuleResult:
        return RuleResult.fail(self.error_kind, message)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({params})"


class MessageOverride:
    """Wraps a rule and replaces the description of its failures.

    Used when a definition carries its own message.
    """

    def __init__(self, inner: ValidationRule, message: str):
        self.inner = inner
        self.message = message

    def evaluate(self, text: str) -> RuleResult:
        result = self.inner.evaluate(text)
        if result.passed:
            return result
        # Keep the inner kind as is; the validator maps NO_ERROR to CUSTOM
        return RuleResult(passed=False, error_kind=result.error_kind, message=self.message)

    def __repr__(self) -> str:
        return f"MessageOverride({self.inner!r}, {self.message!r})"
