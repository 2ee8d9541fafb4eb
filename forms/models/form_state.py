"""Form state and the submission coordinator.

``FormState`` holds everything that changes while a user fills in a form:
values, touched flags, per-field errors, the submission phase and the
form-level banner. ``FormController`` owns one ``FormState`` and applies
input events to it (change, blur, submit, reset) using the pure
validation and visibility functions.

Submission phases::

    IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED | FAILED
                |                            |
                +-> IDLE (invalid input)     +-> IDLE on next change
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Sequence

import httpx

from forms.lib.errors import ConfigurationError, FormError, ValidationError
from forms.lib.logging import get_form_logger
from forms.lib.submission import SubmitHandler, call_handler, maybe_await, send_to_endpoint
from forms.lib.validators import validate_all, validate_field
from forms.models.field import FieldDescriptor
from forms.models.options import FormOptions
from forms.models.visibility import get_visibility, initial_values, is_visible

if TYPE_CHECKING:
    from forms.models.view import FormView

__all__ = [
    "SubmissionPhase",
    "SubmitStatus",
    "SubmitResult",
    "FormState",
    "FormController",
]


class SubmissionPhase(str, Enum):
    """Where the form is in the submission state machine."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmitStatus(str, Enum):
    """Outcome of one ``submit`` call."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"  # Dispatch failed
    INVALID = "invalid"  # Validation blocked the submission
    IGNORED = "ignored"  # A submission was already in progress


@dataclass
class SubmitResult:
    """What happened when ``submit`` was called.

    Attributes:
        status: Outcome of the call
        errors: Field errors when validation blocked the submission
        result: Endpoint response (or handler return value) on success
        error: Banner message on dispatch failure
    """

    status: SubmitStatus
    errors: Dict[str, str] = field(default_factory=dict)
    result: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SubmitStatus.SUCCEEDED


@dataclass
class FormState:
    """Mutable state of one form instance.

    ``values``, ``touched`` and ``errors`` always hold exactly the declared
    field names. An error of None means the field is valid.
    """

    values: Dict[str, Any] = field(default_factory=dict)
    touched: Dict[str, bool] = field(default_factory=dict)
    errors: Dict[str, Optional[str]] = field(default_factory=dict)
    phase: SubmissionPhase = SubmissionPhase.IDLE
    banner: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Iterable[FieldDescriptor]) -> "FormState":
        """Create a fresh state from field defaults."""
        fields = list(fields)
        return cls(
            values=initial_values(fields),
            touched={f.name: False for f in fields},
            errors={f.name: None for f in fields},
        )

    def error_messages(self) -> Dict[str, str]:
        """Current errors of invalid fields only."""
        return {name: error for name, error in self.errors.items() if error}

    def touched_fields(self) -> List[str]:
        return [name for name, touched in self.touched.items() if touched]

    @property
    def is_valid(self) -> bool:
        return not self.error_messages()

    @property
    def is_busy(self) -> bool:
        return self.phase in (SubmissionPhase.VALIDATING, SubmissionPhase.SUBMITTING)


class FormController:
    """Drives one form: input events, validation and submission.

    Exactly one of the remote endpoint (``options.endpoint``) or the
    ``on_submit`` handler receives each submission. When both are set the
    endpoint is used and ``on_submit`` receives its result.

    Example:
        form = FormController(
            [FieldDescriptor.from_dict({"name": "email", "type": "email",
                                        "validation": {"required": True}})],
            on_submit=save_signup,
        )
        form.change("email", "ada@example.com")
        result = await form.submit()
    """

    def __init__(
        self,
        fields: Sequence[FieldDescriptor],
        options: Optional[FormOptions] = None,
        *,
        on_submit: Optional[SubmitHandler] = None,
        on_success: Optional[Callable[[], Any]] = None,
        on_cancel: Optional[Callable[[], Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.options = options or FormOptions()
        self.fields: List[FieldDescriptor] = list(fields)
        self._by_name = self._index_fields(self.fields)
        self.on_submit = on_submit
        self.on_success = on_success
        self.on_cancel = on_cancel
        self._transport = transport
        self._logger = get_form_logger(__name__, form=self.options.name)
        self.state = FormState.from_fields(self.fields)

    def _index_fields(self, fields: List[FieldDescriptor]) -> Dict[str, FieldDescriptor]:
        by_name: Dict[str, FieldDescriptor] = {}
        for f in fields:
            if f.name in by_name:
                raise ConfigurationError(
                    f"Duplicate field name '{f.name}'",
                    form=self.options.name,
                    field=f.name,
                )
            by_name[f.name] = f
        return by_name

    def get_field(self, name: str) -> FieldDescriptor:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown field '{name}'",
                form=self.options.name,
                field=name,
                suggestion=f"Declared fields: {', '.join(self._by_name)}",
            ) from None

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def change(self, name: str, value: Any) -> None:
        """Apply a new value for a field.

        Clears success/error banners, re-validates the field if it was
        already touched, and re-validates touched fields that must match it.
        """
        changed = self.get_field(name)
        state = self.state
        state.values[name] = value

        if state.phase in (SubmissionPhase.SUCCEEDED, SubmissionPhase.FAILED):
            state.phase = SubmissionPhase.IDLE
            state.banner = None

        if state.touched[name]:
            state.errors[name] = validate_field(changed, value, state.values)

        for f in self.fields:
            if f.validation.matches == name and state.touched[f.name]:
                state.errors[f.name] = validate_field(f, state.values[f.name], state.values)

    def blur(self, name: str) -> Optional[str]:
        """Mark a field touched and validate it. Returns its error, if any."""
        f = self.get_field(name)
        self.state.touched[name] = True
        error = validate_field(f, self.state.values[name], self.state.values)
        self.state.errors[name] = error
        return error

    def reset(self) -> None:
        """Return to initial defaults and clear touched flags, errors and banners."""
        self.state.values = initial_values(self.fields)
        self.state.touched = {f.name: False for f in self.fields}
        self.state.errors = {f.name: None for f in self.fields}
        self.state.phase = SubmissionPhase.IDLE
        self.state.banner = None

    def cancel(self) -> None:
        if self.on_cancel is not None:
            self.on_cancel()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def value(self, name: str) -> Any:
        self.get_field(name)
        return self.state.values[name]

    def is_visible(self, name: str) -> bool:
        return is_visible(self.get_field(name), self.state.values)

    def visibility(self) -> Dict[str, bool]:
        return get_visibility(self.fields, self.state.values)

    def view(self) -> "FormView":
        """Snapshot for the presentation layer."""
        from forms.models.view import build_form_view

        return build_form_view(
            self.fields, self.state, self.options, show_cancel=self.on_cancel is not None
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def validate(self) -> Dict[str, str]:
        """Validate every declared field and mark all of them touched.

        Returns:
            Errors of invalid fields (empty when the form is valid)
        """
        errors = validate_all(self.fields, self.state.values)
        self.state.errors = {f.name: errors.get(f.name) for f in self.fields}
        self.state.touched = {f.name: True for f in self.fields}
        return errors

    async def submit(self) -> SubmitResult:
        """Validate, dispatch and resolve one submission.

        Triggers arriving while a submission is in flight are ignored.
        Failures are reported into form state, never raised. If the task is
        cancelled mid-flight the phase returns to IDLE before the
        cancellation propagates.
        """
        state = self.state
        if state.is_busy:
            self._logger.debug("Submit ignored: submission already in progress")
            return SubmitResult(status=SubmitStatus.IGNORED)

        state.phase = SubmissionPhase.VALIDATING
        try:
            return await self._validate_and_dispatch()
        except Exception as exc:
            message = self._failure_message(exc)
            self._logger.error(
                "Form submission failed: %s", message, exc_info=not isinstance(exc, FormError)
            )
            state.phase = SubmissionPhase.FAILED
            state.banner = message
            return SubmitResult(status=SubmitStatus.FAILED, error=message)
        finally:
            if state.is_busy:
                state.phase = SubmissionPhase.IDLE

    async def _validate_and_dispatch(self) -> SubmitResult:
        state = self.state
        errors = self.validate()
        if errors:
            state.phase = SubmissionPhase.IDLE
            self._logger.info(
                "Submission blocked by %d invalid field(s): %s",
                len(errors),
                ", ".join(errors),
            )
            return SubmitResult(status=SubmitStatus.INVALID, errors=errors)

        state.phase = SubmissionPhase.SUBMITTING
        state.banner = None
        result = await self._dispatch(dict(state.values))

        if self.options.show_success_message:
            state.banner = self.options.success_message

        if self.options.reset_on_submit:
            state.values = initial_values(self.fields)
            state.touched = {f.name: False for f in self.fields}
            state.errors = {f.name: None for f in self.fields}

        if self.on_success is not None:
            await maybe_await(self.on_success())

        state.phase = SubmissionPhase.SUCCEEDED
        return SubmitResult(status=SubmitStatus.SUCCEEDED, result=result)

    def submit_blocking(self, *, raise_on_invalid: bool = False) -> SubmitResult:
        """Run ``submit`` to completion from synchronous code.

        Args:
            raise_on_invalid: Raise ``ValidationError`` instead of returning
                an INVALID result

        Raises:
            ValidationError: If ``raise_on_invalid`` is set and fields are invalid
        """
        result = asyncio.run(self.submit())
        if raise_on_invalid and result.status == SubmitStatus.INVALID:
            raise ValidationError(
                "Form has invalid fields",
                errors=result.errors,
                form=self.options.name,
            )
        return result

    async def _dispatch(self, payload: Dict[str, Any]) -> Any:
        if self.options.endpoint:
            self._logger.debug("Dispatching to endpoint %s", self.options.endpoint)
            result = await send_to_endpoint(
                self.fields, payload, self.options, transport=self._transport
            )
            if self.on_submit is not None:
                await call_handler(self.on_submit, result)
            return result

        if self.on_submit is not None:
            self._logger.debug("Dispatching to on_submit handler")
            return await call_handler(self.on_submit, payload)

        self._logger.warning("No endpoint or on_submit handler configured; nothing was sent")
        return None

    def _failure_message(self, exc: Exception) -> str:
        if isinstance(exc, FormError):
            return exc.message or self.options.error_message
        return str(exc) or self.options.error_message
