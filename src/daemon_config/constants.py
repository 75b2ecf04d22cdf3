from __future__ import annotations

__all__ = [
    "CONFIG_LIST_MAX",
    "CONFIG_VALUE_MAX",
    "DEFAULT_REAPER_FREQ",
    "CONFIG_NAME",
    "CONFIG_DIR",
    "LONG_MIN",
    "LONG_MAX",
]

# Maximum number of entries in a config list
CONFIG_LIST_MAX = 32
# Maximum size in bytes of one list entry, terminator included
CONFIG_VALUE_MAX = 256

DEFAULT_REAPER_FREQ = 5

CONFIG_NAME = "gamemode.ini"
CONFIG_DIR = "/usr/share/gamemode/"

# Native signed long on LP64
LONG_MAX = 2**63 - 1
LONG_MIN = -(2**63)
