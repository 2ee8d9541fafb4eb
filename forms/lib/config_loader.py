"""YAML loader for form definitions.

Allows forms to be declared in plain YAML files instead of Python.

Example YAML (signup.yaml):
    form:
      name: signup
      endpoint: https://hooks.example.com/signup
      headers:
        Authorization: Bearer ${SIGNUP_TOKEN}
      show_success_message: true
      reset_on_submit: true

    fields:
      - name: email
        type: email
        label: Email
        validation:
          required: true
          validation_type: email
      - name: role
        type: select
        options: [user, admin]
      - name: admin_code
        type: text
        depends_on: {field: role, value: admin}

Usage:
    from forms.lib.config_loader import load_form
    definition = load_form("./forms/signup.yaml")
    form = definition.create_controller()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Mapping, Union

import yaml

from forms.lib.errors import ConfigurationError
from forms.lib.validators import ValidationIssue, ValidationSeverity
from forms.models.field import Condition, FieldDescriptor, FieldType
from forms.models.options import FormOptions

if TYPE_CHECKING:
    from forms.models.form_state import FormController

logger = logging.getLogger(__name__)

__all__ = [
    "FormDefinition",
    "load_form",
    "load_form_from_dict",
    "validate_form_definition",
]

_CHOICE_TYPES = (FieldType.SELECT, FieldType.RADIO)


@dataclass
class FormDefinition:
    """Parsed form definition: ordered fields plus form options."""

    fields: List[FieldDescriptor]
    options: FormOptions = field(default_factory=FormOptions)

    def create_controller(self, **kwargs: Any) -> "FormController":
        """Build a ``FormController`` for this definition.

        Keyword arguments (``on_submit``, ``on_success``, ...) are passed
        through to the controller.
        """
        from forms.models.form_state import FormController

        return FormController(self.fields, self.options, **kwargs)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


def load_form_from_dict(config: Mapping[str, Any], strict: bool = True) -> FormDefinition:
    """Create a ``FormDefinition`` from a parsed YAML/JSON document.

    With ``strict`` off, definition issues are neither raised nor logged;
    call ``validate_form_definition`` to inspect them.

    Raises:
        ConfigurationError: If the document is malformed or has duplicate
            field names
    """
    if not isinstance(config, Mapping):
        raise ConfigurationError("Form definition must be a mapping")

    raw_fields = config.get("fields")
    if not raw_fields:
        raise ConfigurationError(
            "Form definition has no fields",
            suggestion="Add a 'fields:' list with at least one field",
        )
    if not isinstance(raw_fields, list):
        raise ConfigurationError("'fields' must be a list", value=type(raw_fields).__name__)

    fields: List[FieldDescriptor] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_fields):
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"fields[{index}] must be a mapping", value=raw)
        descriptor = FieldDescriptor.from_dict(raw)
        if descriptor.name in seen:
            raise ConfigurationError(
                f"Duplicate field name '{descriptor.name}'",
                field=descriptor.name,
            )
        seen.add(descriptor.name)
        fields.append(descriptor)

    options = FormOptions.from_dict(config.get("form"))

    definition = FormDefinition(fields=fields, options=options)
    if not strict:
        return definition

    for issue in validate_form_definition(definition):
        if issue.severity == ValidationSeverity.ERROR:
            raise ConfigurationError(issue.message, field=issue.field, suggestion=issue.suggestion)
        logger.warning("%s", issue)

    return definition


def load_form(path: Union[str, Path], strict: bool = True) -> FormDefinition:
    """Load a form definition from a YAML file.

    ``strict`` is passed to ``load_form_from_dict``.

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or
            describes an invalid form
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Form definition not found: {path}", value=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}", value=str(path)) from exc

    if config is None:
        raise ConfigurationError(f"Form definition is empty: {path}", value=str(path))

    logger.debug("Loaded form definition from %s", path)
    return load_form_from_dict(config, strict=strict)


def validate_form_definition(definition: FormDefinition) -> List[ValidationIssue]:
    """Check a definition for references and options that cannot work.

    Returns a list of issues. Empty list means the definition looks sound.
    """
    issues: List[ValidationIssue] = []
    names = set(definition.field_names())

    for f in definition.fields:
        rule = f.validation

        if rule.matches:
            if rule.matches not in names:
                issues.append(ValidationIssue.error(
                    f.name,
                    f"validation.matches refers to unknown field '{rule.matches}'",
                    suggestion=f"Use one of: {', '.join(sorted(names - {f.name}))}",
                ))
            elif rule.matches == f.name:
                issues.append(ValidationIssue.warning(f.name, "validation.matches refers to the field itself"))

        if f.depends_on is not None:
            target = f.depends_on.field
            if target not in names:
                issues.append(ValidationIssue.warning(
                    f.name,
                    f"depends_on refers to unknown field '{target}'; field will only show "
                    "when the condition holds against an empty value",
                ))
            if not isinstance(f.depends_on.condition, Condition):
                valid = ", ".join(c.value for c in Condition)
                issues.append(ValidationIssue.warning(
                    f.name,
                    f"Unknown depends_on condition '{f.depends_on.condition}'; field will always show",
                    suggestion=f"Use one of: {valid}",
                ))
            elif target == f.name:
                issues.append(ValidationIssue.warning(f.name, "depends_on refers to the field itself"))

        if f.type in _CHOICE_TYPES and not f.options:
            issues.append(ValidationIssue.warning(f.name, f"{f.type.value} field has no options"))
        if f.options and f.type not in _CHOICE_TYPES:
            issues.append(ValidationIssue.warning(
                f.name, f"options are ignored for {f.type.value} fields"
            ))

        if (f.accept or f.multiple) and not f.is_file:
            issues.append(ValidationIssue.warning(
                f.name, "accept/multiple only apply to file fields"
            ))

        if rule.min_length and rule.max_length and rule.min_length > rule.max_length:
            issues.append(ValidationIssue.error(
                f.name, "validation.min_length is greater than max_length"
            ))
        if (
            rule.min_value is not None
            and rule.max_value is not None
            and rule.min_value > rule.max_value
        ):
            issues.append(ValidationIssue.error(f.name, "validation.min is greater than max"))

    return issues
