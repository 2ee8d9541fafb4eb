"""Field defaults and conditional visibility rules.

Visibility is a pure function of the current values: a field with a
``depends_on`` descriptor is shown only while its condition holds against
the value of the field it depends on. Hidden fields keep their values.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from forms.models.field import Condition, FieldDescriptor

logger = logging.getLogger(__name__)

__all__ = [
    "initial_values",
    "is_visible",
    "get_visibility",
    "visible_fields",
]

_CONTAINER_TYPES = (str, list, tuple, set, frozenset)


def initial_values(fields: Iterable[FieldDescriptor]) -> Dict[str, Any]:
    """Build the value map a new (or reset) form starts with."""
    return {f.name: f.initial_value() for f in fields}


def _strict_equals(left: Any, right: Any) -> bool:
    """Equality without bool/number or str/number crossover."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def _contains(container: Any, item: Any) -> bool:
    if not isinstance(container, _CONTAINER_TYPES):
        return False
    try:
        return item in container
    except TypeError:
        # e.g. 1 in "abc"
        return False


def is_visible(field: FieldDescriptor, values: Mapping[str, Any]) -> bool:
    """Check whether a field should currently be shown.

    Args:
        field: Field to check
        values: Current form values

    Returns:
        True when the field has no dependency or its condition holds.
        Unknown conditions fail open (visible).
    """
    depends_on = field.depends_on
    if depends_on is None:
        return True

    dependent_value = values.get(depends_on.field)
    condition = depends_on.condition

    if condition == Condition.EQUALS:
        return _strict_equals(dependent_value, depends_on.value)
    if condition == Condition.NOT_EQUALS:
        return not _strict_equals(dependent_value, depends_on.value)
    if condition == Condition.CONTAINS:
        return _contains(dependent_value, depends_on.value)
    if condition == Condition.NOT_EMPTY:
        return bool(dependent_value)

    logger.warning(
        "Unknown depends_on condition %r on field '%s'; showing field",
        condition,
        field.name,
    )
    return True


def get_visibility(
    fields: Iterable[FieldDescriptor], values: Mapping[str, Any]
) -> Dict[str, bool]:
    """Map every field name to its current visibility."""
    return {f.name: is_visible(f, values) for f in fields}


def visible_fields(
    fields: Iterable[FieldDescriptor], values: Mapping[str, Any]
) -> List[FieldDescriptor]:
    """Fields that should be shown, in declaration order."""
    return [f for f in fields if is_visible(f, values)]
