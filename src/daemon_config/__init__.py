"""
daemon_config: reloadable, thread-safe configuration store for a background daemon.

- Loads an INI file from the working directory or the system config directory.
- Validates entries into fixed-capacity lists and a positive reaper period.
- Serves whitelist/blacklist checks and hook script lists under a read lock.
- Reloads reset every field and reparse under the write lock; failures are logged, never raised.
"""

from __future__ import annotations

from daemon_config.config import GameModeConfig
from daemon_config.constants import (
    CONFIG_DIR,
    CONFIG_LIST_MAX,
    CONFIG_NAME,
    CONFIG_VALUE_MAX,
    DEFAULT_REAPER_FREQ,
)
from daemon_config.exceptions import (
    ConfigError,
    ConfigLimitError,
    ConfigNotInitializedError,
    ConfigOverflowError,
    ConfigSyntaxError,
    ConfigTornDownError,
    ConfigValidationError,
)
from daemon_config.loader import ConfigLoader, LoadResult, ParseHandler
from daemon_config.locks import ReadWriteLock
from daemon_config.params import get_field_spec, list_fields

__all__ = [
    "GameModeConfig",
    "ConfigLoader",
    "LoadResult",
    "ParseHandler",
    "ReadWriteLock",
    "ConfigError",
    "ConfigValidationError",
    "ConfigLimitError",
    "ConfigOverflowError",
    "ConfigSyntaxError",
    "ConfigTornDownError",
    "ConfigNotInitializedError",
    "get_field_spec",
    "list_fields",
    "CONFIG_DIR",
    "CONFIG_NAME",
    "CONFIG_LIST_MAX",
    "CONFIG_VALUE_MAX",
    "DEFAULT_REAPER_FREQ",
]
