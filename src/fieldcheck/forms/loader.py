"""Load declarative form definitions from YAML files."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fieldcheck.types import ConfigurationError, RuleDefinition

logger = logging.getLogger(__name__)


@dataclass
class FormField:
    """One field of a form definition."""

    key: str
    rules: list[RuleDefinition]
    label: str = ""


@dataclass
class FormDefinition:
    name: str
    fields: list[FormField] = field(default_factory=list)
    description: str = ""
    source: Path | None = None

    def get_field(self, key: str) -> FormField | None:
        for item in self.fields:
            if item.key == key:
                return item
        return None

    def keys(self) -> list[str]:
        return [item.key for item in self.fields]

    def bind(self, validator: Any, handles: Mapping[str, Any]) -> None:
        """Register every field of this form with `validator`.

        Args:
            validator: The Validator to register with
            handles: Field handles keyed by field key

        Raises:
            ConfigurationError: If a handle is missing or a rule is invalid
        """
        missing = [key for key in self.keys() if key not in handles]
        if missing:
            raise ConfigurationError(
                f"Form '{self.name}' has no field handle for: {', '.join(missing)}"
            )

        for item in self.fields:
            rules = [_attach_handles(d, handles, item.key) for d in item.rules]
            validator.register(item.key, handles[item.key], rules)
        logger.debug("Bound form '%s' (%d fields)", self.name, len(self.fields))


def _attach_handles(
    definition: RuleDefinition, handles: Mapping[str, Any], key: str
) -> RuleDefinition:
    """Swap a confirmation rule's `matches` key for the matching handle."""
    matches = definition.params.get("matches")
    if definition.type != "confirmation" or matches is None:
        return definition
    if not isinstance(matches, str):
        raise ConfigurationError(
            f"Field '{key}': confirmation 'matches' must be a field key, got {matches!r}"
        )
    if matches not in handles:
        raise ConfigurationError(
            f"Field '{key}' must match unknown field '{matches}'"
        )
    params = {k: v for k, v in definition.params.items() if k != "matches"}
    params["field"] = handles[matches]
    return RuleDefinition(type=definition.type, params=params, message=definition.message)


class FormLoader:
    """Loads one form definition file.

    File layout:
        form:
          name: signup
          fields:
            - key: email
              rules: [required, email]
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> FormDefinition:
        """Parse the file into a FormDefinition.

        Raises:
            ConfigurationError: If the file cannot be read or is malformed
        """
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read form file {self.path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parse error in {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("form"), dict):
            raise ConfigurationError(f"{self.path} has no top-level 'form' mapping")

        return self._resolve_form(data["form"])

    def _resolve_form(self, data: dict) -> FormDefinition:
        name = data.get("name") or self.path.stem
        fields_data = data.get("fields") or []
        if not isinstance(fields_data, list):
            raise ConfigurationError(f"Form '{name}': 'fields' must be a list")

        fields = [self._resolve_field(name, f) for f in fields_data]

        seen: set[str] = set()
        for item in fields:
            if item.key in seen:
                raise ConfigurationError(f"Form '{name}': duplicate field key '{item.key}'")
            seen.add(item.key)

        return FormDefinition(
            name=name,
            fields=fields,
            description=data.get("description", ""),
            source=self.path,
        )

    def _resolve_field(self, form_name: str, data: Any) -> FormField:
        if not isinstance(data, dict) or not data.get("key"):
            raise ConfigurationError(f"Form '{form_name}': every field needs a 'key'")

        key = str(data["key"])
        rules_data = data.get("rules") or []
        if not isinstance(rules_data, list) or not rules_data:
            raise ConfigurationError(
                f"Form '{form_name}': field '{key}' needs a non-empty 'rules' list"
            )

        return FormField(
            key=key,
            rules=[RuleDefinition.from_dict(r) for r in rules_data],
            label=data.get("label") or _to_display_name(key),
        )


def _to_display_name(key: str) -> str:
    """Convert camelCase or snake_case to Title Case."""
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", key).replace("_", " ")
    return spaced.title()


def load_form(path: Path) -> FormDefinition:
    """Load a single form definition file."""
    return FormLoader(path).load()


def load_forms_dir(forms_dir: Path) -> dict[str, FormDefinition]:
    """Load every *.yaml form in a directory, keyed by form name.

    Raises:
        ConfigurationError: If a file is malformed or two forms share a name
    """
    forms: dict[str, FormDefinition] = {}
    for yaml_file in sorted(Path(forms_dir).glob("*.yaml")):
        form = load_form(yaml_file)
        if form.name in forms:
            raise ConfigurationError(
                f"Duplicate form name '{form.name}' in {yaml_file} and {forms[form.name].source}"
            )
        forms[form.name] = form
    return forms
