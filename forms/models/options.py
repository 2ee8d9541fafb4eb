"""Form-level options: submission target, messages and layout hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from forms.lib.errors import ConfigurationError
from forms.models.field import normalize_keys

__all__ = ["FormOptions", "ALLOWED_METHODS", "ALLOWED_GAPS", "ALLOWED_COLUMNS"]

ALLOWED_METHODS = ("POST", "PUT", "PATCH")
ALLOWED_GAPS = (0, 1, 2, 3, 4, 5, 6, 8, 10, 12)
ALLOWED_COLUMNS = (1, 2)

# Older definitions call the remote endpoint a webhook
OPTION_ALIASES = {
    "webhook_url": "endpoint",
    "webhook_method": "method",
    "webhook_headers": "headers",
}


@dataclass
class FormOptions:
    """Configuration for one form instance.

    Attributes:
        name: Form name (used in logs and error context)
        submit_text: Submit button label
        cancel_text: Cancel button label
        endpoint: Remote endpoint URL; ${VAR} references are expanded at dispatch
        method: HTTP method for the endpoint
        headers: Extra request headers (override the JSON content type)
        timeout: Request timeout in seconds
        success_message: Banner text after a successful submission
        show_success_message: Whether to show the success banner
        error_message: Banner text when a failure carries no message
        reset_on_submit: Return to defaults after a successful submission
        show_labels: Presentation hint: render labels
        inline_errors: Presentation hint: render errors under fields
        disabled: Disable every input and button
        loading: Externally driven busy state
        columns: Presentation hint: 1 or 2 columns
        gap: Presentation hint: spacing step between fields
    """

    name: str = "form"
    submit_text: str = "Submit"
    cancel_text: str = "Cancel"

    endpoint: Optional[str] = None
    method: str = "POST"
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0

    success_message: str = "Form submitted successfully!"
    show_success_message: bool = False
    error_message: str = "Something went wrong. Please try again."
    reset_on_submit: bool = False

    show_labels: bool = True
    inline_errors: bool = True
    disabled: bool = False
    loading: bool = False
    columns: int = 1
    gap: int = 4

    def __post_init__(self) -> None:
        self.method = str(self.method).upper()
        errors = self._validate()
        if errors:
            error_msg = "\n".join(f"  - {e}" for e in errors)
            raise ConfigurationError(
                f"Form options are invalid:\n{error_msg}",
                form=self.name,
            )

    def _validate(self) -> List[str]:
        errors: List[str] = []

        if self.method not in ALLOWED_METHODS:
            errors.append(f"method must be one of {', '.join(ALLOWED_METHODS)} (got {self.method!r})")

        if self.columns not in ALLOWED_COLUMNS:
            errors.append(f"columns must be 1 or 2 (got {self.columns!r})")

        if self.gap not in ALLOWED_GAPS:
            errors.append(f"gap must be one of {', '.join(str(g) for g in ALLOWED_GAPS)} (got {self.gap!r})")

        if not isinstance(self.headers, Mapping):
            errors.append("headers must be a mapping of header name to value")

        if self.timeout <= 0:
            errors.append("timeout must be positive")

        return errors

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FormOptions":
        """Create from the ``form:`` section of a definition."""
        if not data:
            return cls()
        normalized = normalize_keys(data)
        for alias, target in OPTION_ALIASES.items():
            if alias in normalized:
                normalized.setdefault(target, normalized.pop(alias))

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(normalized) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown form option(s): {', '.join(unknown)}",
                suggestion=f"Valid options: {', '.join(sorted(known))}",
            )
        options = {k: v for k, v in normalized.items() if v is not None}
        if "headers" in options and isinstance(options["headers"], Mapping):
            options["headers"] = {str(k): str(v) for k, v in options["headers"].items()}
        return cls(**options)
