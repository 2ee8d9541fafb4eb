"""Logging utilities for forms.

Provides a JSON output option for log aggregation and a logger that tags
every record with the form it belongs to.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

__all__ = [
    "setup_logging",
    "JSONFormatter",
    "FormLogger",
    "get_form_logger",
]


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON.

    Records emitted through ``FormLogger`` carry a top-level ``form`` key.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "ERROR",
         "logger": "forms.models.form_state", "form": "signup",
         "message": "Form submission failed: Form submission failed: 503"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
        }
        form = getattr(record, "form", None)
        if form is not None:
            log_data["form"] = form
        log_data["message"] = record.getMessage()

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class FormLogger:
    """Logger that adds ``form=<name>`` to every record.

    Example:
        logger = FormLogger("forms.models.form_state", form="signup")
        logger.info("Submitting")  # record.form == "signup"
    """

    def __init__(self, name: str, form: str):
        self._logger = logging.getLogger(name)
        self.form = form

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.log(level, msg, *args, extra={"form": self.form}, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error with the active traceback."""
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_form_logger(name: str, form: str) -> FormLogger:
    return FormLogger(name, form=form)


def setup_logging(verbose: bool = False, json_format: bool = False) -> None:
    """Configure root logging for the command line.

    Args:
        verbose: Enable debug-level logging
        json_format: Use JSON output format (for log aggregation)
    """
    level = logging.DEBUG if verbose else logging.INFO

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
