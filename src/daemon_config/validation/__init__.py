from __future__ import annotations

from daemon_config.validation.base import BoundedList, append_value_to_list, get_long_value

__all__ = [
    "BoundedList",
    "append_value_to_list",
    "get_long_value",
]
