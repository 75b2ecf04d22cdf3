from __future__ import annotations

from typing import Dict, Optional


class ConfigError(Exception):
    """Base config exception."""


class ConfigValidationError(ConfigError):
    """Raised when a field validator rejects a raw value."""

    def __init__(
        self, errors: Dict[str, str], key: str | None = None, value: object | None = None
    ) -> None:
        self.errors = errors
        self.key = key
        self.value = value
        msg = f"Validation errors: {errors}"
        if key is not None and value is not None:
            msg += f" (key: {key}, value: {value})"
        super().__init__(msg)


class ConfigLimitError(ConfigValidationError):
    """Raised when a bounded list is full or an entry exceeds the length limit."""

    def __init__(
        self,
        errors: Dict[str, str],
        key: str | None = None,
        value: object | None = None,
        *,
        limit: int,
    ) -> None:
        self.limit = limit
        super().__init__(errors, key, value)


class ConfigOverflowError(ConfigValidationError):
    """Raised when an integer value does not fit the native long range."""


class ConfigTornDownError(ConfigError):
    """Raised if operations are attempted after destroy()."""


class ConfigNotInitializedError(ConfigError):
    """Raised if queries are attempted before init()."""


class ConfigSyntaxError(ConfigError):
    """Raised by a strict tokenizer run on the first malformed line."""

    def __init__(self, lineno: int, path: Optional[str] = None) -> None:
        self.lineno = lineno
        self.path = path
        where = f"{path}:{lineno}" if path else f"line {lineno}"
        super().__init__(f"Syntax error at {where}")
