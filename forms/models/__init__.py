"""UI-agnostic form models.

Field descriptors, form state, visibility rules and the presentation
snapshot. Nothing here depends on a particular UI toolkit; a renderer
only needs ``FormController.view()``.
"""

from forms.models.field import (
    Condition,
    DependsOn,
    FieldDescriptor,
    FieldType,
    SelectOption,
    ValidationRule,
    ValidationType,
)
from forms.models.options import FormOptions
from forms.models.visibility import get_visibility, initial_values, is_visible, visible_fields
from forms.models.form_state import (
    FormController,
    FormState,
    SubmissionPhase,
    SubmitResult,
    SubmitStatus,
)
from forms.models.view import CONTROL_KINDS, ControlKind, FieldView, FormView

__all__ = [
    "Condition",
    "DependsOn",
    "FieldDescriptor",
    "FieldType",
    "SelectOption",
    "ValidationRule",
    "ValidationType",
    "FormOptions",
    "get_visibility",
    "initial_values",
    "is_visible",
    "visible_fields",
    "FormController",
    "FormState",
    "SubmissionPhase",
    "SubmitResult",
    "SubmitStatus",
    "CONTROL_KINDS",
    "ControlKind",
    "FieldView",
    "FormView",
]
