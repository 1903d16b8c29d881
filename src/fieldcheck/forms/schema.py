"""
JSON Schema validation for fieldcheck form files.

Usage:
    from fieldcheck.forms.schema import validate_form_file, validate_forms_dir

    issues = validate_forms_dir(Path("forms"))
    for issue in issues:
        print(issue)

Beyond the schema itself, files are checked for problems a schema cannot
express: duplicate field keys, unregistered rule tags, and confirmation
rules that point at a field the form does not have.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry
from referencing.jsonschema import DRAFT202012

from fieldcheck.registry import RuleRegistry

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
FORM_SCHEMA_ID = "https://fieldcheck.dev/schemas/form.schema.json"


@dataclass
class SchemaIssue:
    """A single finding for a form file."""

    file: Path
    message: str
    path: str = ""           # location within the document, e.g. "form/fields[0]"
    severity: str = "error"  # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"

    @classmethod
    def from_schema_error(cls, file: Path, error: ValidationError) -> SchemaIssue:
        # "$.form.fields[0]" -> "form/fields[0]"
        path = error.json_path.removeprefix("$").lstrip(".").replace(".", "/")
        return cls(file=file, message=error.message, path=path)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _schema_registry() -> Registry:
    """Registry of every bundled schema, keyed by its $id."""
    registry = Registry()
    for schema_file in sorted(_SCHEMAS_DIR.glob("*.schema.json")):
        contents = json.loads(schema_file.read_text())
        registry = registry.with_resource(
            contents["$id"], DRAFT202012.create_resource(contents)
        )
    return registry


def _check_semantics(
    yaml_path: Path, doc: dict[str, Any], rule_registry: type[RuleRegistry]
) -> list[SchemaIssue]:
    """Checks that need the whole form or the rule registry."""
    issues: list[SchemaIssue] = []
    fields = doc["form"]["fields"]
    keys = {f["key"] for f in fields}
    seen: set[str] = set()

    for i, field in enumerate(fields):
        key = field["key"]
        if key in seen:
            issues.append(SchemaIssue(
                file=yaml_path,
                message=f"Duplicate field key '{key}'",
                path=f"form/fields[{i}]/key",
            ))
        seen.add(key)

        tags: list[str] = []
        for j, rule in enumerate(field["rules"]):
            loc = f"form/fields[{i}]/rules[{j}]"
            tag = rule if isinstance(rule, str) else rule["type"]
            params = {} if isinstance(rule, str) else rule.get("params", {})

            if not rule_registry.is_registered(tag):
                issues.append(SchemaIssue(
                    file=yaml_path,
                    message=f"Unknown rule type '{tag}'",
                    path=loc,
                ))
            if tag in tags:
                issues.append(SchemaIssue(
                    file=yaml_path,
                    message=f"Rule '{tag}' appears more than once for field '{key}'",
                    path=loc,
                    severity="warning",
                ))
            tags.append(tag)

            if tag == "confirmation":
                matches = params.get("matches")
                if matches is None:
                    issues.append(SchemaIssue(
                        file=yaml_path,
                        message="Confirmation rule needs params.matches",
                        path=loc,
                    ))
                elif matches not in keys:
                    issues.append(SchemaIssue(
                        file=yaml_path,
                        message=f"Confirmation rule matches unknown field '{matches}'",
                        path=loc,
                    ))

    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_form_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
    rule_registry: type[RuleRegistry] = RuleRegistry,
) -> list[SchemaIssue]:
    """
    Validate a single form YAML file.

    Args:
        yaml_path:     Path to the YAML file to validate.
        registry:      Pre-built schema registry.  Built automatically if omitted.
        rule_registry: Registry used to check rule tags.

    Returns:
        A list of :class:`SchemaIssue` objects (empty on success).
    """
    yaml_path = Path(yaml_path)

    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [SchemaIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            SchemaIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if registry is None:
        registry = _schema_registry()

    schema = registry.contents(FORM_SCHEMA_ID)
    validator = Draft202012Validator(schema, registry=registry)
    issues = sorted(
        (SchemaIssue.from_schema_error(yaml_path, e) for e in validator.iter_errors(doc)),
        key=lambda issue: issue.path,
    )

    # Semantic checks assume the document has the right shape
    if not issues:
        issues.extend(_check_semantics(yaml_path, doc, rule_registry))

    logger.debug("Checked %s: %d issue(s)", yaml_path, len(issues))
    return issues


def validate_forms_dir(
    forms_dir: Path,
    *,
    strict: bool = False,
    rule_registry: type[RuleRegistry] = RuleRegistry,
) -> list[SchemaIssue]:
    """
    Validate every ``*.yaml`` file in *forms_dir*.

    Args:
        forms_dir: Directory holding form definition files.
        strict:    If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`SchemaIssue` objects across all files.
    """
    forms_dir = Path(forms_dir)
    if not forms_dir.is_dir():
        return [
            SchemaIssue(file=forms_dir, message=f"Forms directory does not exist: {forms_dir}")
        ]

    # Build registry once, shared across all files
    registry = _schema_registry()

    all_issues: list[SchemaIssue] = []
    for yaml_file in sorted(forms_dir.glob("*.yaml")):
        all_issues.extend(
            validate_form_file(yaml_file, registry=registry, rule_registry=rule_registry)
        )

    if strict:
        for issue in all_issues:
            if issue.severity == "warning":
                issue.severity = "error"
    return all_issues
