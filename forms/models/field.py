"""Field descriptors and validation rules.

A form is declared as an ordered list of ``FieldDescriptor`` objects. They
are immutable; all mutable data lives in ``FormState``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Pattern, Tuple, Type, TypeVar, Union

from forms.lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "FieldType",
    "ValidationType",
    "Condition",
    "SelectOption",
    "DependsOn",
    "ValidationRule",
    "FieldDescriptor",
    "normalize_keys",
]

E = TypeVar("E", bound=Enum)

CustomValidator = Callable[[Any], Union[bool, str]]

# Keys the presentation layer consumes; accepted but not modelled
PRESENTATION_KEYS = frozenset({"class_name", "field_class_name", "button_class_name"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class FieldType(str, Enum):
    """Closed set of input types a field can take."""

    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"
    DATE = "date"
    TIME = "time"
    DATETIME_LOCAL = "datetime-local"


class ValidationType(str, Enum):
    """Built-in value formats, each bound to a fixed pattern."""

    EMAIL = "email"
    URL = "url"
    PHONE = "phone"
    ALPHANUMERIC = "alphanumeric"
    NUMERIC = "numeric"


class Condition(str, Enum):
    """How a dependent field's value is compared in ``DependsOn``."""

    EQUALS = "equals"
    NOT_EQUALS = "not-equals"
    CONTAINS = "contains"
    NOT_EMPTY = "not-empty"


def normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert camelCase keys (``defaultValue``) to snake_case (``default_value``)."""
    return {_CAMEL_BOUNDARY.sub("_", str(key)).lower(): value for key, value in data.items()}


def _coerce_enum(value: Any, enum_class: Type[E], field_name: str) -> E:
    """Convert a string to an enum member, accepting ``_`` for ``-``."""
    if isinstance(value, enum_class):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    for member in enum_class:
        if member.value.replace("_", "-") == normalized:
            return member
    valid = ", ".join(member.value for member in enum_class)
    raise ConfigurationError(
        f"Invalid {field_name} '{value}'. Must be one of: {valid}",
        field=field_name,
        value=value,
    )


def _warn_unknown_keys(kind: str, data: Mapping[str, Any], known: frozenset) -> None:
    unknown = sorted(set(data) - known - PRESENTATION_KEYS)
    if unknown:
        logger.warning("Ignoring unknown %s keys: %s", kind, ", ".join(unknown))


@dataclass(frozen=True)
class SelectOption:
    """One choice of a select or radio field."""

    label: str
    value: str

    @classmethod
    def from_value(cls, raw: Any) -> "SelectOption":
        """Build from ``{"label": ..., "value": ...}`` or a bare value."""
        if isinstance(raw, SelectOption):
            return raw
        if isinstance(raw, Mapping):
            if "value" not in raw:
                raise ConfigurationError("Option is missing 'value'", value=dict(raw))
            value = str(raw["value"])
            return cls(label=str(raw.get("label", value)), value=value)
        return cls(label=str(raw), value=str(raw))


@dataclass(frozen=True)
class DependsOn:
    """Visibility dependency on another field's value.

    ``condition`` is kept as given when it is not a known ``Condition`` so
    that a malformed definition degrades to "always visible" instead of
    failing.
    """

    field: str
    value: Any = None
    condition: Union[Condition, str] = Condition.EQUALS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependsOn":
        data = normalize_keys(data)
        if not data.get("field"):
            raise ConfigurationError("depends_on requires 'field'", value=dict(data))

        raw_condition = data.get("condition") or Condition.EQUALS.value
        condition: Union[Condition, str]
        try:
            condition = Condition(raw_condition)
        except ValueError:
            condition = str(raw_condition)

        return cls(field=str(data["field"]), value=data.get("value"), condition=condition)


_RULE_KEYS = frozenset({
    "required",
    "min_length",
    "max_length",
    "min",
    "max",
    "min_value",
    "max_value",
    "validation_type",
    "pattern",
    "message",
    "custom",
    "matches",
    "match_message",
})


@dataclass(frozen=True)
class ValidationRule:
    """Constraints attached to a field.

    Attributes:
        required: Value must be non-empty (checkboxes must be checked)
        min_length: Minimum length of the value
        max_length: Maximum length of the value
        min_value: Minimum numeric value
        max_value: Maximum numeric value
        validation_type: Built-in format check (email, url, phone, ...)
        pattern: Caller-supplied regular expression (string or compiled)
        message: Overrides the default text of every rule except ``matches``
        custom: Predicate returning True, False or an error message
        matches: Name of another field whose value must equal this one
        match_message: Overrides the default text of ``matches``
    """

    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    validation_type: Optional[ValidationType] = None
    pattern: Union[str, Pattern[str], None] = None
    message: Optional[str] = None
    custom: Optional[CustomValidator] = field(default=None, compare=False)
    matches: Optional[str] = None
    match_message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.validation_type is not None and not isinstance(self.validation_type, ValidationType):
            object.__setattr__(
                self,
                "validation_type",
                _coerce_enum(self.validation_type, ValidationType, "validation_type"),
            )
        if isinstance(self.pattern, str):
            try:
                re.compile(self.pattern)
            except re.error as exc:
                raise ConfigurationError(
                    f"Invalid pattern: {exc}", field="pattern", value=self.pattern
                ) from exc
        if self.custom is not None and not callable(self.custom):
            raise ConfigurationError("custom must be callable", field="custom", value=self.custom)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ValidationRule":
        """Create from a dictionary, accepting ``min``/``max`` and camelCase keys."""
        if not data:
            return cls()
        data = normalize_keys(data)
        _warn_unknown_keys("validation", data, _RULE_KEYS)

        return cls(
            required=bool(data.get("required", False)),
            min_length=data.get("min_length"),
            max_length=data.get("max_length"),
            min_value=data.get("min_value", data.get("min")),
            max_value=data.get("max_value", data.get("max")),
            validation_type=data.get("validation_type"),
            pattern=data.get("pattern"),
            message=data.get("message"),
            custom=data.get("custom"),
            matches=data.get("matches"),
            match_message=data.get("match_message"),
        )


_FIELD_KEYS = frozenset({
    "name",
    "type",
    "label",
    "placeholder",
    "default_value",
    "options",
    "rows",
    "disabled",
    "helper_text",
    "accept",
    "multiple",
    "validation",
    "depends_on",
})


@dataclass(frozen=True)
class FieldDescriptor:
    """Static configuration of one form input.

    Example:
        FieldDescriptor(
            name="email",
            type=FieldType.EMAIL,
            label="Email",
            validation=ValidationRule(required=True, validation_type=ValidationType.EMAIL),
        )
    """

    name: str
    type: FieldType = FieldType.TEXT
    label: Optional[str] = None
    placeholder: Optional[str] = None
    default_value: Any = None
    options: Tuple[SelectOption, ...] = ()
    rows: Optional[int] = None
    disabled: bool = False
    helper_text: Optional[str] = None
    accept: Optional[str] = None  # e.g. "image/*,.pdf"
    multiple: bool = False
    validation: ValidationRule = field(default_factory=ValidationRule)
    depends_on: Optional[DependsOn] = None

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ConfigurationError("Field name is required", value=self.name)
        if not isinstance(self.type, FieldType):
            object.__setattr__(self, "type", _coerce_enum(self.type, FieldType, "type"))
        if not isinstance(self.options, tuple):
            object.__setattr__(
                self, "options", tuple(SelectOption.from_value(o) for o in self.options)
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDescriptor":
        """Create from a dictionary (YAML/JSON field definition)."""
        data = normalize_keys(data)
        _warn_unknown_keys("field", data, _FIELD_KEYS)

        if "name" not in data:
            raise ConfigurationError("Field definition is missing 'name'", value=dict(data))

        depends_on = data.get("depends_on")
        return cls(
            name=data["name"],
            type=data.get("type", FieldType.TEXT),
            label=data.get("label"),
            placeholder=data.get("placeholder"),
            default_value=data.get("default_value"),
            options=tuple(SelectOption.from_value(o) for o in data.get("options") or ()),
            rows=data.get("rows"),
            disabled=bool(data.get("disabled", False)),
            helper_text=data.get("helper_text"),
            accept=data.get("accept"),
            multiple=bool(data.get("multiple", False)),
            validation=ValidationRule.from_dict(data.get("validation")),
            depends_on=DependsOn.from_dict(depends_on) if depends_on else None,
        )

    @property
    def display_name(self) -> str:
        """Label if set, otherwise the field name."""
        return self.label or self.name

    @property
    def is_file(self) -> bool:
        return self.type == FieldType.FILE

    @property
    def is_required(self) -> bool:
        return self.validation.required

    def initial_value(self) -> Any:
        """Value the field starts with (and returns to on reset).

        File fields start empty (None); checkboxes default to False; all
        other fields to ``default_value`` or an empty string.
        """
        if self.is_file:
            return None
        if self.default_value is not None:
            return self.default_value
        return False if self.type == FieldType.CHECKBOX else ""
