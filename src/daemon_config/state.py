from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict

from daemon_config.constants import CONFIG_LIST_MAX, CONFIG_VALUE_MAX, DEFAULT_REAPER_FREQ
from daemon_config.validation import BoundedList

logger = logging.getLogger("daemon_config.state")
logger.addHandler(logging.NullHandler())


class ConfigState:
    """
    The mutable config aggregate. Not thread safe on its own; callers guard it
    with the owning ReadWriteLock.
    """

    def __init__(
        self, capacity: int = CONFIG_LIST_MAX, value_max: int = CONFIG_VALUE_MAX
    ) -> None:
        self.whitelist = BoundedList("whitelist", capacity, value_max)
        self.blacklist = BoundedList("blacklist", capacity, value_max)
        self.start_scripts = BoundedList("start", capacity, value_max)
        self.end_scripts = BoundedList("end", capacity, value_max)
        self.reaper_frequency: int = DEFAULT_REAPER_FREQ

    def reset(self) -> None:
        self.whitelist.clear()
        self.blacklist.clear()
        self.start_scripts.clear()
        self.end_scripts.clear()
        self.reaper_frequency = DEFAULT_REAPER_FREQ
        logger.debug("ConfigState reset to defaults")

    def snapshot_internal(self) -> Dict[str, Any]:
        return {
            "whitelist": self.whitelist.entries(),
            "blacklist": self.blacklist.entries(),
            "start_scripts": self.start_scripts.entries(),
            "end_scripts": self.end_scripts.entries(),
            "reaper_frequency": self.reaper_frequency,
        }

    def snapshot(self) -> MappingProxyType[str, Any]:
        return MappingProxyType(self.snapshot_internal())

    def __repr__(self) -> str:
        return (
            f"<ConfigState whitelist={len(self.whitelist)} blacklist={len(self.blacklist)} "
            f"start={len(self.start_scripts)} end={len(self.end_scripts)} "
            f"reaper_frequency={self.reaper_frequency}>"
        )
