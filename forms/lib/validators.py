"""Field validation engine.

``validate_field`` evaluates a field's ``ValidationRule`` against a
candidate value and the full value set. Rules run in a fixed order and the
first failing rule wins, so a field has at most one error at a time:

1. required
2. matches (cross-field)
3. min_length / max_length
4. min_value / max_value
5. validation_type (built-in patterns, whole value, non-empty values only)
6. pattern (``re.search``, non-empty values only)
7. custom predicate (an exception counts as a failure)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern

from forms.models.field import FieldDescriptor, ValidationType

logger = logging.getLogger(__name__)

__all__ = [
    "BUILTIN_PATTERNS",
    "ValidationSeverity",
    "ValidationIssue",
    "is_empty",
    "value_length",
    "to_number",
    "validate_field",
    "validate_all",
    "format_issues",
]

BUILTIN_PATTERNS: Dict[ValidationType, Pattern[str]] = {
    ValidationType.EMAIL: re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    ValidationType.URL: re.compile(
        r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
        r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
    ),
    ValidationType.PHONE: re.compile(r"^[+]?[(]?[0-9]{3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}$"),
    ValidationType.ALPHANUMERIC: re.compile(r"^[a-zA-Z0-9]+$"),
    ValidationType.NUMERIC: re.compile(r"^[0-9]+$"),
}


class ValidationSeverity(Enum):
    """Severity of form definition issues."""

    ERROR = "error"  # Form cannot work as declared
    WARNING = "warning"  # Form works, but probably not as intended


@dataclass
class ValidationIssue:
    """A problem found in a form definition (not in user input)."""

    severity: ValidationSeverity
    message: str
    field: str
    suggestion: Optional[str] = None

    @classmethod
    def error(cls, field: str, message: str, suggestion: Optional[str] = None) -> "ValidationIssue":
        return cls(ValidationSeverity.ERROR, message, field, suggestion)

    @classmethod
    def warning(cls, field: str, message: str, suggestion: Optional[str] = None) -> "ValidationIssue":
        return cls(ValidationSeverity.WARNING, message, field, suggestion)

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Fix: {self.suggestion}"
        return result


def is_empty(value: Any) -> bool:
    """Whether a value counts as "not provided" for the required rule.

    None, empty strings, False (unchecked checkbox) and empty lists are
    empty. Numeric zero is a real value.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple)):
        return len(value) == 0
    return False


def value_length(value: Any) -> Optional[int]:
    """Length used by the min/max length rules.

    Strings and lists use ``len``; numbers use the length of their string
    form. Booleans, None, files and anything else have no length and skip
    the length rules.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, list, tuple)):
        return len(value)
    if isinstance(value, (int, float)):
        return len(str(value))
    return None


def to_number(value: Any) -> float:
    """Convert a value for the min/max rules; NaN when not numeric.

    Text follows JavaScript ``Number()`` rather than ``float()``: digit
    separators (``1_000``), ``inf`` and ``nan`` are not numbers, while
    ``Infinity`` is.
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text or "_" in text:
        return math.nan
    try:
        number = float(text)
    except ValueError:
        return math.nan
    if math.isinf(number) and text.lstrip("+-") != "Infinity":
        return math.nan
    return number


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def validate_field(
    field: FieldDescriptor,
    value: Any,
    all_values: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Validate one field value.

    Args:
        field: Field descriptor carrying the rule set
        value: Candidate value
        all_values: Full value map (needed for ``matches``)

    Returns:
        Error message, or None if the value is valid
    """
    rule = field.validation
    message = rule.message

    if rule.required and is_empty(value):
        if field.is_file:
            return message or "Please select a file"
        return message or f"{field.display_name} is required"

    if rule.matches and all_values is not None:
        if value != all_values.get(rule.matches):
            return rule.match_message or f"{field.display_name} must match {rule.matches}"

    length = value_length(value)
    if length is not None:
        if rule.min_length and length < rule.min_length:
            return message or f"Minimum length is {rule.min_length} characters"
        if rule.max_length and length > rule.max_length:
            return message or f"Maximum length is {rule.max_length} characters"

    # NaN comparisons are always False, so non-numeric values pass
    number = to_number(value)
    if rule.min_value is not None and number < rule.min_value:
        return message or f"Minimum value is {rule.min_value}"
    if rule.max_value is not None and number > rule.max_value:
        return message or f"Maximum value is {rule.max_value}"

    if rule.validation_type is not None and not is_empty(value):
        pattern = BUILTIN_PATTERNS[rule.validation_type]
        if not pattern.fullmatch(_as_text(value)):
            return message or f"Invalid {rule.validation_type.value} format"

    if rule.pattern is not None and not is_empty(value):
        compiled = re.compile(rule.pattern) if isinstance(rule.pattern, str) else rule.pattern
        if not compiled.search(_as_text(value)):
            return message or "Invalid format"

    if rule.custom is not None:
        try:
            result = rule.custom(value)
        except Exception:
            logger.warning("Custom validator for %s raised", field.name, exc_info=True)
            return message or "Invalid value"
        if isinstance(result, str):
            return result
        if not result:
            return message or "Invalid value"

    return None


def validate_all(
    fields: Iterable[FieldDescriptor],
    values: Mapping[str, Any],
) -> Dict[str, str]:
    """Validate every declared field.

    Visibility is not consulted: hidden fields are validated too.

    Returns:
        Mapping of field name to error message for invalid fields only
    """
    errors: Dict[str, str] = {}
    for field in fields:
        error = validate_field(field, values.get(field.name), values)
        if error:
            errors[field.name] = error
    return errors


def format_issues(issues: List[ValidationIssue]) -> str:
    """Format definition issues for display."""
    if not issues:
        return "No issues found."
    return "\n".join(str(issue) for issue in issues)
