"""Field registration table.

The single source of truth mapping registration keys to a field handle and
its rule chain.
"""

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from fieldcheck.types import ConfigurationError, Registration, ValidationRule

logger = logging.getLogger(__name__)


class FieldRegistrationTable:
    """In-memory table of registrations, keyed by registration key.

    Registering an existing key replaces its field handle and rule chain
    as a whole. Iteration follows insertion order; a replaced key keeps
    its original position.

    The table is owned by one Validator and is not thread-safe.
    """

    def __init__(self) -> None:
        self._rows: dict[str, Registration] = {}

    def register(
        self,
        key: str,
        field: Any,
        rules: Sequence[ValidationRule],
    ) -> Registration:
        """Insert or replace the registration for `key`.

        Args:
            key: Unique registration key
            field: The caller's field handle
            rules: Rule chain, in evaluation order

        Returns:
            The stored registration

        Raises:
            ConfigurationError: If the rule chain is empty
        """
        chain = tuple(rules)
        if not chain:
            raise ConfigurationError(f"Field '{key}' must have at least one rule")

        registration = Registration(key=key, field=field, rules=chain)
        replaced = key in self._rows
        self._rows[key] = registration
        logger.debug(
            "%s field '%s' with %d rule(s)",
            "Replaced" if replaced else "Registered",
            key,
            len(chain),
        )
        return registration

    def lookup(self, key: str) -> Registration | None:
        """Return the registration for `key`, or None if there is none."""
        return self._rows.get(key)

    def unregister(self, key: str) -> bool:
        """Remove the registration for `key`.

        Returns:
            True if a registration was removed
        """
        removed = self._rows.pop(key, None) is not None
        if removed:
            logger.debug("Unregistered field '%s'", key)
        return removed

    def all_registrations(self) -> Iterator[Registration]:
        """Iterate over every registration in insertion order."""
        return iter(self._rows.values())

    def keys(self) -> list[str]:
        return list(self._rows)

    def clear(self) -> None:
        self._rows.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        return len(self._rows)
