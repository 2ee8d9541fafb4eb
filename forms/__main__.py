"""CLI entry point for validating and submitting forms.

Usage:
    python -m forms signup.yaml --set email=ada@example.com
    python -m forms signup.yaml --values answers.yaml --submit
    python -m forms signup.yaml --set cv=@./cv.pdf --submit --endpoint https://example.com/hook
    python -m forms signup.yaml --check

Exit codes:
    0  form is valid (and was submitted, with --submit)
    1  one or more fields are invalid
    2  the definition is broken or the submission failed

With --check, definition problems are printed rather than raised: exit 0
when only warnings are found, 2 when any error is found.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from forms.lib.config_loader import FormDefinition, load_form, validate_form_definition
from forms.lib.env import load_env_file
from forms.lib.errors import ConfigurationError
from forms.lib.files import FileRef
from forms.lib.logging import setup_logging
from forms.lib.validators import ValidationSeverity, format_issues
from forms.models.field import FieldDescriptor, FieldType
from forms.models.form_state import FormController, SubmitStatus

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _parse_assignment(raw: str) -> tuple[str, str]:
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {raw!r}")
    name, value = raw.split("=", 1)
    return name.strip(), value


def coerce_cli_value(descriptor: FieldDescriptor, raw: Any) -> Any:
    """Turn a command-line or YAML value into what the field expects.

    ``@path`` attaches a file to file fields; checkbox strings become
    booleans. Everything else is passed through.
    """
    if descriptor.type == FieldType.FILE:
        if raw in (None, "", []):
            return [] if descriptor.multiple else None
        paths = raw if isinstance(raw, list) else [raw]
        files = []
        for p in paths:
            path = Path(str(p)[1:] if str(p).startswith("@") else str(p))
            if not path.is_file():
                raise ConfigurationError(f"File not found: {path}", field=descriptor.name)
            files.append(FileRef.from_path(path))
        if descriptor.multiple:
            return files
        return files[0] if files else None
    if descriptor.type == FieldType.CHECKBOX and isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return raw


def _collect_values(
    definition: FormDefinition,
    values_file: Optional[str],
    assignments: Sequence[tuple[str, str]],
) -> Dict[str, Any]:
    raw: Dict[str, Any] = {}
    if values_file:
        if not Path(values_file).is_file():
            raise ConfigurationError(f"Values file not found: {values_file}")
        with open(values_file, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Values file must be a mapping: {values_file}")
        raw.update(loaded)

    by_name = {f.name: f for f in definition.fields}
    for name, value in assignments:
        descriptor = by_name.get(name)
        if descriptor is not None and descriptor.type == FieldType.FILE and descriptor.multiple:
            existing = raw.get(name) or []
            raw[name] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            raw[name] = value

    values: Dict[str, Any] = {}
    for name, value in raw.items():
        if name not in by_name:
            raise ConfigurationError(f"Unknown field '{name}'", field=name)
        values[name] = coerce_cli_value(by_name[name], value)
    return values


def _print_errors(errors: Dict[str, str]) -> None:
    print("Invalid fields:", file=sys.stderr)
    for name, error in errors.items():
        print(f"  - {name}: {error}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="form-foundry",
        description="Validate and submit forms declared in YAML",
    )
    parser.add_argument("form", help="Path to the form definition YAML file")
    parser.add_argument("--values", help="YAML file mapping field names to values")
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help="Set a field value (use NAME=@path for file fields). Repeatable.",
    )
    parser.add_argument("--submit", action="store_true", help="Submit after validating")
    parser.add_argument("--endpoint", help="Override the endpoint from the definition")
    parser.add_argument("--env-file", help="Load environment variables from a .env file")
    parser.add_argument("--check", action="store_true", help="Only check the definition itself")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, json_format=args.json_logs)

    if args.env_file:
        if not load_env_file(args.env_file):
            logger.warning("No variables loaded from %s", args.env_file)

    try:
        definition = load_form(Path(args.form), strict=not args.check)
        if args.endpoint:
            definition.options = replace(definition.options, endpoint=args.endpoint)

        if args.check:
            issues = validate_form_definition(definition)
            print(format_issues(issues))
            if any(i.severity == ValidationSeverity.ERROR for i in issues):
                return 2
            return 0

        values = _collect_values(definition, args.values, args.assignments)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    form = FormController(definition.fields, definition.options)
    for name, value in values.items():
        form.change(name, value)

    if not args.submit:
        errors = form.validate()
        if errors:
            _print_errors(errors)
            return 1
        print("Form is valid.")
        return 0

    result = form.submit_blocking()
    if result.status == SubmitStatus.INVALID:
        _print_errors(result.errors)
        return 1
    if result.status == SubmitStatus.FAILED:
        print(f"Submission failed: {result.error}", file=sys.stderr)
        return 2

    if form.state.banner:
        print(form.state.banner)
    if result.result is not None:
        print(json.dumps(result.result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
