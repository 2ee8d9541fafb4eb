"""Form library modules.

Validation engine, submission dispatch, file encoding, YAML loading and
the logging/error plumbing shared by the models. Import from the
submodules directly (``forms.lib.validators``, ``forms.lib.submission``).
"""

from forms.lib.errors import (
    ConfigurationError,
    FormError,
    SubmissionError,
    ValidationError,
)

__all__ = [
    "FormError",
    "ConfigurationError",
    "SubmissionError",
    "ValidationError",
]
