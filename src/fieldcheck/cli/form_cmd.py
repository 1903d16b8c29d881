"""Form CLI commands: validate and check."""

import json
from collections.abc import Mapping
from pathlib import Path

import click
import yaml

from fieldcheck.fields import TextField
from fieldcheck.forms import load_form, validate_form_file
from fieldcheck.types import FieldCheckError, ValidationError
from fieldcheck.validator import Validator


class ConsoleReporter:
    """Form delegate that prints the outcome of validate_all_keys."""

    def __init__(self, labels: Mapping[str, str], quiet: bool = False):
        self.labels = labels
        self.quiet = quiet

    def on_all_success(self) -> None:
        if not self.quiet:
            click.echo(click.style("All fields are valid.", fg="green"))

    def on_all_failure(self, errors: Mapping[str, ValidationError]) -> None:
        if self.quiet:
            return
        for key, error in errors.items():
            label = self.labels.get(key, key)
            click.echo(click.style(f"  ✗ {label} ({key}): {error.description}", fg="red"))
        click.echo(f"\n{len(errors)} field(s) failed validation.")


def _parse_values(pairs: tuple[str, ...], values_file: Path | None) -> dict[str, str]:
    values: dict[str, str] = {}
    if values_file is not None:
        try:
            with values_file.open() as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise click.BadParameter(f"YAML parse error: {e}", param_hint="--values") from e
        if not isinstance(data, dict):
            raise click.BadParameter("must contain a mapping of key: text", param_hint="--values")
        values.update({str(k): "" if v is None else str(v) for k, v in data.items()})

    for pair in pairs:
        key, sep, text = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=text, got '{pair}'", param_hint="--value")
        values[key] = text
    return values


@click.group()
def form():
    """Form definition commands."""
    pass


@form.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
def validate(path: Path, strict: bool):
    """Validate a form YAML file against the form schema."""
    issues = validate_form_file(path)
    if strict:
        for issue in issues:
            issue.severity = "error"

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    if errors:
        click.echo(f"\n{len(errors)} error(s), {len(warnings)} warning(s).")
        raise SystemExit(1)

    if warnings:
        click.echo(f"\nForm is valid with {len(warnings)} warning(s).")
    else:
        click.echo("Form is valid.")


@form.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--value",
    "pairs",
    multiple=True,
    metavar="KEY=TEXT",
    help="Text for a field. Repeatable. Unset fields are empty.",
)
@click.option(
    "--values",
    "values_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file mapping field keys to text.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def check(path: Path, pairs: tuple[str, ...], values_file: Path | None, as_json: bool):
    """Validate field values against a form definition."""
    values = _parse_values(pairs, values_file)

    try:
        definition = load_form(path)
        unknown = sorted(set(values) - set(definition.keys()))
        if unknown:
            raise click.BadParameter(
                f"form '{definition.name}' has no field(s): {', '.join(unknown)}",
                param_hint="--value",
            )

        handles = {
            item.key: TextField(values.get(item.key, ""), label=item.label)
            for item in definition.fields
        }
        reporter = ConsoleReporter(
            {item.key: item.label for item in definition.fields}, quiet=as_json
        )
        validator = Validator(form_delegate=reporter)
        definition.bind(validator, handles)
        result = validator.validate_all_keys()
    except FieldCheckError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(2)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))

    if not result.passed:
        raise SystemExit(1)
