from __future__ import annotations

import logging
import re
from typing import List, Tuple

from daemon_config.constants import CONFIG_LIST_MAX, CONFIG_VALUE_MAX, LONG_MAX, LONG_MIN
from daemon_config.exceptions import ConfigLimitError, ConfigOverflowError, ConfigValidationError

logger = logging.getLogger("daemon_config.validation")
logger.addHandler(logging.NullHandler())

# Leading C-locale whitespace, optional sign, decimal digits
_LONG_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class BoundedList:
    """
    Fixed-capacity list of strings.

    Slots are preallocated; an empty slot marks the end of the list and every
    slot after it is empty too. Length is counted in the raw bytes of the
    entry (UTF-8, with surrogate escapes mapped back to their original byte)
    and must stay below ``value_max``.
    """

    __slots__ = ("name", "capacity", "value_max", "_slots")

    def __init__(
        self, name: str, capacity: int = CONFIG_LIST_MAX, value_max: int = CONFIG_VALUE_MAX
    ) -> None:
        if capacity <= 0 or value_max <= 0:
            raise ValueError("capacity and value_max must be positive")
        self.name = name
        self.capacity = capacity
        self.value_max = value_max
        self._slots: List[str] = [""] * capacity

    def __len__(self) -> int:
        i = 0
        while i < self.capacity and self._slots[i]:
            i += 1
        return i

    def __getitem__(self, index: int) -> str:
        return self._slots[index]

    def __setitem__(self, index: int, value: str) -> None:
        self._slots[index] = value

    def __iter__(self):
        return iter(self.entries())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedList):
            return NotImplemented
        return self.capacity == other.capacity and self._slots == other._slots

    def __repr__(self) -> str:
        return f"<BoundedList {self.name!r} {len(self)}/{self.capacity}>"

    def is_empty(self) -> bool:
        return not self._slots[0]

    def is_full(self) -> bool:
        return len(self) >= self.capacity

    def entries(self) -> Tuple[str, ...]:
        return tuple(self._slots[: len(self)])

    def slots(self) -> Tuple[str, ...]:
        """Return every slot, empty ones included."""
        return tuple(self._slots)

    def clear(self) -> None:
        for i in range(self.capacity):
            self._slots[i] = ""


def append_value_to_list(list_name: str, value: str, target: BoundedList) -> None:
    """
    Append ``value`` into the first empty slot of ``target``.

    Raises ConfigLimitError if the list is full (nothing is touched) or if the
    value is too long (the target slot is left empty).
    """
    i = len(target)

    if i >= target.capacity:
        logger.error(
            "Config: Could not add [%s] to [%s], exceeds number of %d",
            value,
            list_name,
            target.capacity,
        )
        raise ConfigLimitError(
            {list_name: f"List is full ({target.capacity} entries)."},
            list_name,
            value,
            limit=target.capacity,
        )

    if len(value.encode("utf-8", "surrogateescape")) >= target.value_max:
        logger.error(
            "Config: Could not add [%s] to [%s], exceeds length limit of %d",
            value,
            list_name,
            target.value_max,
        )
        target[i] = ""
        raise ConfigLimitError(
            {list_name: f"Value exceeds length limit of {target.value_max}."},
            list_name,
            value,
            limit=target.value_max,
        )

    target[i] = value


def get_long_value(value_name: str, value: str) -> int:
    """
    Parse a strictly positive base-10 integer.

    Leading whitespace and a sign are accepted; anything left over after the
    digits is an error. The caller keeps its previous value on failure.
    """
    match = _LONG_PREFIX.match(value)
    if match is None:
        logger.error("Config: %s was invalid, given [%s]", value_name, value)
        raise ConfigValidationError({value_name: "Not a base-10 integer."}, value_name, value)

    parsed = int(match.group(1))
    if parsed > LONG_MAX or parsed < LONG_MIN:
        logger.error("Config: %s overflowed, given [%s]", value_name, value)
        raise ConfigOverflowError({value_name: "Integer overflow."}, value_name, value)

    if parsed <= 0 or match.end() != len(value):
        logger.error("Config: %s was invalid, given [%s]", value_name, value)
        raise ConfigValidationError(
            {value_name: "Expected a positive integer."}, value_name, value
        )

    return parsed
