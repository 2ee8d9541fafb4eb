"""Presentation snapshot of a form.

Renderers (web templates, terminal prompts, ...) draw a ``FormView``
instead of reaching into ``FormState``. Each ``FieldType`` maps to exactly
one ``ControlKind`` so a renderer needs one handler per control.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from forms.models.field import FieldDescriptor, FieldType, SelectOption
from forms.models.form_state import FormState, SubmissionPhase
from forms.models.options import FormOptions
from forms.models.visibility import is_visible

__all__ = [
    "ControlKind",
    "CONTROL_KINDS",
    "FieldView",
    "FormView",
    "build_field_view",
    "build_form_view",
]

DEFAULT_TEXTAREA_ROWS = 4
DEFAULT_SELECT_PLACEHOLDER = "Select..."
LOADING_LABEL = "Loading..."


class ControlKind(str, Enum):
    """Input control a renderer should draw."""

    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO_GROUP = "radio_group"
    FILE = "file"
    TEMPORAL = "temporal"  # date, time, datetime-local


CONTROL_KINDS: Dict[FieldType, ControlKind] = {
    FieldType.TEXT: ControlKind.INPUT,
    FieldType.EMAIL: ControlKind.INPUT,
    FieldType.PASSWORD: ControlKind.INPUT,
    FieldType.NUMBER: ControlKind.INPUT,
    FieldType.TEL: ControlKind.INPUT,
    FieldType.URL: ControlKind.INPUT,
    FieldType.TEXTAREA: ControlKind.TEXTAREA,
    FieldType.SELECT: ControlKind.SELECT,
    FieldType.CHECKBOX: ControlKind.CHECKBOX,
    FieldType.RADIO: ControlKind.RADIO_GROUP,
    FieldType.FILE: ControlKind.FILE,
    FieldType.DATE: ControlKind.TEMPORAL,
    FieldType.TIME: ControlKind.TEMPORAL,
    FieldType.DATETIME_LOCAL: ControlKind.TEMPORAL,
}


@dataclass(frozen=True)
class FieldView:
    """What a renderer needs to draw one field."""

    name: str
    type: FieldType
    control: ControlKind
    value: Any
    visible: bool
    disabled: bool
    label: Optional[str] = None
    show_label: bool = True
    required: bool = False
    error: Optional[str] = None
    helper_text: Optional[str] = None
    placeholder: Optional[str] = None
    options: Tuple[SelectOption, ...] = ()
    rows: Optional[int] = None
    accept: Optional[str] = None
    multiple: bool = False


@dataclass(frozen=True)
class FormView:
    """What a renderer needs to draw the whole form."""

    fields: List[FieldView]
    phase: SubmissionPhase
    banner: Optional[str] = None
    banner_kind: Optional[str] = None  # "success" or "error"
    submit_label: str = "Submit"
    submit_disabled: bool = False
    cancel_label: str = "Cancel"
    columns: int = 1
    gap: int = 4
    show_cancel: bool = False

    @property
    def visible_fields(self) -> List[FieldView]:
        return [f for f in self.fields if f.visible]


def build_field_view(
    descriptor: FieldDescriptor,
    state: FormState,
    options: FormOptions,
) -> FieldView:
    """Project one field's descriptor and state into a ``FieldView``."""
    control = CONTROL_KINDS[descriptor.type]
    error = state.errors.get(descriptor.name)
    shown_error = error if (options.inline_errors and state.touched.get(descriptor.name)) else None

    placeholder = descriptor.placeholder
    if control == ControlKind.SELECT and not placeholder:
        placeholder = DEFAULT_SELECT_PLACEHOLDER

    rows = descriptor.rows
    if control == ControlKind.TEXTAREA and not rows:
        rows = DEFAULT_TEXTAREA_ROWS

    return FieldView(
        name=descriptor.name,
        type=descriptor.type,
        control=control,
        value=state.values.get(descriptor.name),
        visible=is_visible(descriptor, state.values),
        disabled=options.disabled or options.loading or descriptor.disabled,
        label=descriptor.label,
        # Checkbox labels sit next to the box, not above it
        show_label=options.show_labels and bool(descriptor.label) and control != ControlKind.CHECKBOX,
        required=descriptor.is_required,
        error=shown_error,
        helper_text=descriptor.helper_text if not error else None,
        placeholder=placeholder,
        options=descriptor.options,
        rows=rows,
        accept=descriptor.accept,
        multiple=descriptor.multiple,
    )


def build_form_view(
    fields: List[FieldDescriptor],
    state: FormState,
    options: FormOptions,
    *,
    show_cancel: bool = False,
) -> FormView:
    """Project the whole form into a ``FormView``."""
    busy = state.phase == SubmissionPhase.SUBMITTING or options.loading

    banner_kind: Optional[str] = None
    if state.banner:
        banner_kind = "error" if state.phase == SubmissionPhase.FAILED else "success"

    return FormView(
        fields=[build_field_view(f, state, options) for f in fields],
        phase=state.phase,
        banner=state.banner,
        banner_kind=banner_kind,
        submit_label=LOADING_LABEL if busy else options.submit_text,
        submit_disabled=busy or options.disabled,
        cancel_label=options.cancel_text,
        show_cancel=show_cancel,
        columns=options.columns,
        gap=options.gap,
    )
