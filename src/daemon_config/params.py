from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Literal, Optional, Tuple

from daemon_config.validation import append_value_to_list, get_long_value

if TYPE_CHECKING:
    from daemon_config.state import ConfigState

logger = logging.getLogger("daemon_config.params")
logger.addHandler(logging.NullHandler())

__all__ = [
    "FieldSpec",
    "FIELD_SPECS",
    "get_field_spec",
    "list_fields",
]


@dataclass(frozen=True)
class FieldSpec:
    section: str
    key: str
    attr: str
    kind: Literal["list", "long"]
    description: Optional[str] = None

    def apply(self, state: "ConfigState", value: str) -> None:
        """Route one raw value into ``state``; raises ConfigValidationError on rejection."""
        if self.kind == "list":
            append_value_to_list(self.key, value, getattr(state, self.attr))
        else:
            setattr(state, self.attr, get_long_value(self.key, value))


_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("filter", "whitelist", "whitelist", "list", "Clients allowed to request"),
    FieldSpec("filter", "blacklist", "blacklist", "list", "Clients refused"),
    FieldSpec("general", "reaper_freq", "reaper_frequency", "long", "Reaper period in seconds"),
    FieldSpec("custom", "start", "start_scripts", "list", "Commands run on start"),
    FieldSpec("custom", "end", "end_scripts", "list", "Commands run on end"),
)

FIELD_SPECS: Dict[Tuple[str, str], FieldSpec] = {(s.section, s.key): s for s in _SPECS}


def get_field_spec(section: str, key: str) -> Optional[FieldSpec]:
    spec = FIELD_SPECS.get((section, key))
    if spec is None:
        logger.debug("No field for [%s] %s", section, key)
    return spec


def list_fields() -> Tuple[Tuple[str, str], ...]:
    return tuple(FIELD_SPECS.keys())
