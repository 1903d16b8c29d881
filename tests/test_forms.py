"""
Tests for fieldcheck.forms

Covers:
  - FormLoader / load_form / load_forms_dir
  - FormDefinition.bind() - registering a form with a Validator
  - validate_form_file() - schema + semantic checks
  - validate_forms_dir(strict=True)
"""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from fieldcheck.fields import TextField
from fieldcheck.forms import (
    load_form,
    load_forms_dir,
    validate_form_file,
    validate_forms_dir,
)
from fieldcheck.registry import RuleRegistry
from fieldcheck.rules import register_builtin_rules
from fieldcheck.types import ConfigurationError, ErrorKind
from fieldcheck.validator import Validator


SIGNUP = {
    "form": {
        "name": "signup",
        "description": "Account sign-up",
        "fields": [
            {"key": "fullName", "rules": ["required", "fullName"]},
            {"key": "email", "label": "Email address", "rules": ["required", "email"]},
            {
                "key": "password",
                "rules": [
                    "required",
                    {"type": "password", "params": {"minLength": 10}},
                ],
            },
            {
                "key": "confirmPassword",
                "rules": [
                    {
                        "type": "confirmation",
                        "params": {"matches": "password"},
                        "message": "Passwords do not match",
                    },
                ],
            },
        ],
    }
}


@pytest.fixture(autouse=True)
def setup_registry():
    RuleRegistry.clear()
    register_builtin_rules()
    yield
    RuleRegistry.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_yaml(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data, sort_keys=False))
    return path


def _write_raw(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def signup_file(tmp_path):
    return _write_yaml(tmp_path / "signup.yaml", SIGNUP)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadForm:
    def test_loads_fields_in_order(self, signup_file):
        form = load_form(signup_file)
        assert form.name == "signup"
        assert form.description == "Account sign-up"
        assert form.keys() == ["fullName", "email", "password", "confirmPassword"]
        assert form.source == signup_file

    def test_rules_become_definitions(self, signup_file):
        form = load_form(signup_file)
        password = form.get_field("password")
        assert [r.type for r in password.rules] == ["required", "password"]
        assert password.rules[1].params == {"minLength": 10}

    def test_labels(self, signup_file):
        form = load_form(signup_file)
        assert form.get_field("email").label == "Email address"
        assert form.get_field("fullName").label == "Full Name"
        assert form.get_field("confirmPassword").label == "Confirm Password"

    def test_get_missing_field(self, signup_file):
        assert load_form(signup_file).get_field("nope") is None

    def test_missing_form_key(self, tmp_path):
        path = _write_yaml(tmp_path / "bad.yaml", {"fields": []})
        with pytest.raises(ConfigurationError, match="no top-level 'form'"):
            load_form(path)

    def test_yaml_error(self, tmp_path):
        path = _write_raw(tmp_path / "bad.yaml", "form: [unclosed")
        with pytest.raises(ConfigurationError, match="YAML parse error"):
            load_form(path)

    def test_field_without_rules(self, tmp_path):
        path = _write_yaml(tmp_path / "bad.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": []}]},
        })
        with pytest.raises(ConfigurationError, match="non-empty 'rules'"):
            load_form(path)

    def test_duplicate_keys(self, tmp_path):
        path = _write_yaml(tmp_path / "bad.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": ["required"]},
                {"key": "a", "rules": ["email"]},
            ]},
        })
        with pytest.raises(ConfigurationError, match="duplicate field key 'a'"):
            load_form(path)

    def test_name_defaults_to_file_stem(self, tmp_path):
        path = _write_yaml(tmp_path / "contact.yaml", {
            "form": {"fields": [{"key": "a", "rules": ["required"]}]},
        })
        assert load_form(path).name == "contact"


class TestLoadFormsDir:
    def test_loads_every_file(self, tmp_path):
        _write_yaml(tmp_path / "signup.yaml", SIGNUP)
        _write_yaml(tmp_path / "contact.yaml", {
            "form": {"name": "contact", "fields": [{"key": "zip", "rules": ["zipCode"]}]},
        })
        forms = load_forms_dir(tmp_path)
        assert sorted(forms) == ["contact", "signup"]

    def test_duplicate_form_names(self, tmp_path):
        _write_yaml(tmp_path / "a.yaml", SIGNUP)
        _write_yaml(tmp_path / "b.yaml", SIGNUP)
        with pytest.raises(ConfigurationError, match="Duplicate form name 'signup'"):
            load_forms_dir(tmp_path)


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


class TestBind:
    def _handles(self, **texts):
        keys = ["fullName", "email", "password", "confirmPassword"]
        return {key: TextField(texts.get(key, "")) for key in keys}

    def test_bind_registers_every_field(self, signup_file):
        validator = Validator()
        load_form(signup_file).bind(validator, self._handles())
        assert validator.keys() == ["fullName", "email", "password", "confirmPassword"]

    def test_valid_submission(self, signup_file):
        validator = Validator()
        handles = self._handles(
            fullName="Ada Lovelace",
            email="ada@example.com",
            password="Analytical1843",
            confirmPassword="Analytical1843",
        )
        load_form(signup_file).bind(validator, handles)
        assert validator.validate_all_keys().passed

    def test_invalid_submission(self, signup_file):
        validator = Validator()
        handles = self._handles(
            fullName="Ada",
            email="ada@example.com",
            password="Short1",
            confirmPassword="Different",
        )
        load_form(signup_file).bind(validator, handles)
        errors = validator.validate_all_keys().errors

        assert set(errors) == {"fullName", "password", "confirmPassword"}
        assert errors["fullName"].error_kind == ErrorKind.FULL_NAME
        assert errors["password"].error_kind == ErrorKind.PASSWORD
        assert errors["confirmPassword"].description == "Passwords do not match"

    def test_confirmation_follows_other_field(self, signup_file):
        validator = Validator()
        handles = self._handles(password="Analytical1843", confirmPassword="Analytical1843")
        load_form(signup_file).bind(validator, handles)
        assert validator.validate_field("confirmPassword").passed

        handles["password"].text = "Babbage1791xx"
        assert not validator.validate_field("confirmPassword").passed

    def test_missing_handle(self, signup_file):
        handles = self._handles()
        del handles["email"]
        with pytest.raises(ConfigurationError, match="no field handle for: email"):
            load_form(signup_file).bind(Validator(), handles)

    def test_unknown_rule_fails_at_bind(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": ["creditCard"]}]},
        })
        with pytest.raises(ConfigurationError, match="creditCard"):
            load_form(path).bind(Validator(), {"a": TextField()})

    def test_confirmation_matches_not_a_string(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": ["required"]},
                {"key": "b", "rules": [{"type": "confirmation", "params": {"matches": ["a"]}}]},
            ]},
        })
        handles = {"a": TextField(), "b": TextField()}
        with pytest.raises(ConfigurationError, match="must be a field key"):
            load_form(path).bind(Validator(), handles)

    def test_confirmation_of_unknown_field(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{
                "key": "a",
                "rules": [{"type": "confirmation", "params": {"matches": "b"}}],
            }]},
        })
        with pytest.raises(ConfigurationError, match="unknown field 'b'"):
            load_form(path).bind(Validator(), {"a": TextField()})


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------


class TestValidateFormFile:
    def test_valid_file(self, signup_file):
        assert validate_form_file(signup_file) == []

    def test_missing_fields(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {"form": {"name": "x"}})
        issues = validate_form_file(path)
        assert len(issues) == 1
        assert "'fields' is a required property" in issues[0].message
        assert issues[0].path == "form"

    def test_unexpected_property(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": ["required"], "colour": "red"},
            ]},
        })
        issues = validate_form_file(path)
        assert issues
        assert issues[0].path == "form/fields[0]"

    def test_empty_file(self, tmp_path):
        path = _write_raw(tmp_path / "x.yaml", "")
        issues = validate_form_file(path)
        assert "empty" in issues[0].message

    def test_yaml_error(self, tmp_path):
        path = _write_raw(tmp_path / "x.yaml", "form: [unclosed")
        assert "YAML parse error" in validate_form_file(path)[0].message

    def test_unknown_rule_type(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": ["creditCard"]}]},
        })
        issues = validate_form_file(path)
        assert [i.message for i in issues] == ["Unknown rule type 'creditCard'"]
        assert issues[0].path == "form/fields[0]/rules[0]"

    def test_duplicate_key(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": ["required"]},
                {"key": "a", "rules": ["required"]},
            ]},
        })
        issues = validate_form_file(path)
        assert issues[0].message == "Duplicate field key 'a'"
        assert issues[0].severity == "error"

    def test_repeated_rule_is_warning(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": ["required", "required"]}]},
        })
        issues = validate_form_file(path)
        assert len(issues) == 1
        assert issues[0].severity == "warning"

    def test_confirmation_needs_matches(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": [{"type": "confirmation"}]},
            ]},
        })
        assert "params.matches" in validate_form_file(path)[0].message

    def test_confirmation_matches_unknown_field(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": [{"type": "confirmation", "params": {"matches": "b"}}]},
            ]},
        })
        assert "unknown field 'b'" in validate_form_file(path)[0].message

    def test_confirmation_matches_must_be_a_key(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [
                {"key": "a", "rules": ["required"]},
                {"key": "b", "rules": [{"type": "confirmation", "params": {"matches": ["a"]}}]},
            ]},
        })
        issues = validate_form_file(path)
        assert issues
        assert issues[0].path.startswith("form/fields[1]/rules[0]")

    def test_issue_str(self, tmp_path):
        path = _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": ["creditCard"]}]},
        })
        text = str(validate_form_file(path)[0])
        assert text.startswith("[ERROR] ")
        assert "at form/fields[0]/rules[0]" in text


class TestValidateFormsDir:
    def test_missing_dir(self, tmp_path):
        issues = validate_forms_dir(tmp_path / "nope")
        assert "does not exist" in issues[0].message

    def test_all_valid(self, tmp_path):
        _write_yaml(tmp_path / "signup.yaml", SIGNUP)
        assert validate_forms_dir(tmp_path) == []

    def test_strict_escalates_warnings(self, tmp_path):
        _write_yaml(tmp_path / "x.yaml", {
            "form": {"name": "x", "fields": [{"key": "a", "rules": ["email", "email"]}]},
        })
        assert validate_forms_dir(tmp_path)[0].severity == "warning"
        assert validate_forms_dir(tmp_path, strict=True)[0].severity == "error"
