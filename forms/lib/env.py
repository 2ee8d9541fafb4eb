"""Environment variable utilities.

Provides expansion of ${VAR_NAME} patterns in endpoint URLs and header
values, and loading of .env files.

Uses python-dotenv for .env file loading.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import load_dotenv

__all__ = ["expand_env_vars", "expand_headers", "load_env_file"]

# Pattern for ${VAR_NAME} or $VAR_NAME
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def load_env_file(
    path: Optional[Union[str, Path]] = None,
    *,
    override: bool = False,
) -> bool:
    """Load environment variables from a .env file.

    Args:
        path: Path to .env file. If None, searches for .env in current
              directory and parent directories.
        override: If True, override existing environment variables.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    return load_dotenv(dotenv_path=path, override=override)


def expand_env_vars(value: str, *, strict: bool = False) -> str:
    """Expand environment variables in a string.

    Supports both ${VAR_NAME} and $VAR_NAME syntax. Unknown variables are
    left untouched unless ``strict`` is set.

    Example:
        >>> os.environ["HOOK_TOKEN"] = "abc"
        >>> expand_env_vars("Bearer ${HOOK_TOKEN}")
        'Bearer abc'
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1) or match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if strict:
                raise KeyError(f"Environment variable not set: {var_name}")
            return str(match.group(0))
        return env_value

    return ENV_VAR_PATTERN.sub(replacer, value)


def expand_headers(headers: Mapping[str, str], *, strict: bool = False) -> Dict[str, str]:
    """Return a copy of ``headers`` with env var references expanded in values."""
    return {
        key: expand_env_vars(str(value), strict=strict)
        for key, value in headers.items()
    }
