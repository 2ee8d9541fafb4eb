"""Declarative forms: field definitions, validation and submission.

Usage:
    from forms import load_form

    form = load_form("signup.yaml").create_controller()
    form.change("email", "ada@example.com")
    result = form.submit_blocking()
"""

from __future__ import annotations

__version__ = "1.0.0"

from forms.lib.errors import ConfigurationError, FormError, SubmissionError, ValidationError
from forms.models import (
    FieldDescriptor,
    FieldType,
    FormController,
    FormOptions,
    FormState,
    SubmissionPhase,
    SubmitStatus,
    ValidationRule,
)
from forms.lib.files import FileRef
from forms.lib.validators import validate_all, validate_field
from forms.lib.config_loader import FormDefinition, load_form, load_form_from_dict

__all__ = [
    "ConfigurationError",
    "FormError",
    "SubmissionError",
    "ValidationError",
    "FieldDescriptor",
    "FieldType",
    "FormController",
    "FormOptions",
    "FormState",
    "SubmissionPhase",
    "SubmitStatus",
    "ValidationRule",
    "FileRef",
    "validate_all",
    "validate_field",
    "FormDefinition",
    "load_form",
    "load_form_from_dict",
]
