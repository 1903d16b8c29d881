"""Declarative form definitions.

Forms are YAML files naming each field's key and rule chain. They are
checked against a bundled JSON Schema and bound to a Validator with
concrete field handles.
"""

from fieldcheck.forms.loader import (
    FormField,
    FormDefinition,
    FormLoader,
    load_form,
    load_forms_dir,
)
from fieldcheck.forms.schema import SchemaIssue, validate_form_file, validate_forms_dir

__all__ = [
    "FormField",
    "FormDefinition",
    "FormLoader",
    "SchemaIssue",
    "load_form",
    "load_forms_dir",
    "validate_form_file",
    "validate_forms_dir",
]
