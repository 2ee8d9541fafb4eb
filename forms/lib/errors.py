"""Structured exception hierarchy for forms.

Provides specific exception types for definition and submission failures,
with rich context for debugging and troubleshooting.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

__all__ = [
    "FormError",
    "ConfigurationError",
    "SubmissionError",
    "ValidationError",
]


class FormError(Exception):
    """Base exception for all form errors.

    Provides structured error information for debugging. The short
    ``message`` is kept separately from the full rendered text so it can
    be shown to end users as-is.
    """

    def __init__(
        self,
        message: str,
        *,
        form: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.form = form
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if form:
            parts.insert(0, f"[{form}]")

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "form": self.form,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ConfigurationError(FormError):
    """Error in a form definition.

    Raised when field descriptors or form options are invalid, e.g.
    duplicate field names or an unknown field type.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details=details, **kwargs)


class SubmissionError(FormError):
    """Error while dispatching a submission to a remote endpoint.

    Raised for non-2xx responses and transport failures. ``message`` is
    what ends up in the form's error banner.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.cause = cause

        details = kwargs.pop("details", {})
        if status_code is not None:
            details["status_code"] = status_code
        if url:
            details["url"] = url
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion and status_code is None:
            suggestion = "Check that the endpoint is reachable and the URL is correct."

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class ValidationError(FormError):
    """Field validation errors that prevent submission.

    Raised by helpers that must fail loudly instead of reporting errors
    back into form state (e.g. the command line).
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        self.errors = dict(errors or {})

        details = kwargs.pop("details", {})
        if errors:
            details["error_count"] = len(self.errors)

        if self.errors:
            error_lines = "\n".join(
                f"  - {name}: {error}" for name, error in self.errors.items()
            )
            full_message = f"{message}\n{error_lines}"
        else:
            full_message = message

        super().__init__(full_message, details=details, **kwargs)
        self.message = message
