from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Optional, Tuple

from daemon_config.constants import CONFIG_DIR, CONFIG_NAME
from daemon_config.exceptions import ConfigValidationError
from daemon_config.locks import ReadWriteLock
from daemon_config.params import get_field_spec
from daemon_config.state import ConfigState
from daemon_config.tokenizer import parse_file

logger = logging.getLogger("daemon_config.loader")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class LoadResult:
    path: Optional[str]
    error_line: int = 0
    snapshot: Optional[MappingProxyType[str, Any]] = field(default=None, compare=False)

    @property
    def found(self) -> bool:
        return self.path is not None

    @property
    def ok(self) -> bool:
        return self.found and self.error_line == 0


class ParseHandler:
    """
    Tokenizer callback routing each entry to its field validator.

    Unknown section/key pairs and rejected values are logged and skipped.
    Always returns True so the tokenizer never flags a line because of a value.
    """

    def __init__(self, state: ConfigState) -> None:
        self._state = state
        self.applied = 0
        self.ignored = 0

    def __call__(self, section: str, name: str, value: str) -> bool:
        spec = get_field_spec(section, name)
        valid = False
        if spec is not None:
            try:
                spec.apply(self._state, value)
                valid = True
            except ConfigValidationError as exc:
                logger.debug("Validator rejected [%s] %s: %s", section, name, exc.errors)

        if valid:
            self.applied += 1
        else:
            self.ignored += 1
            logger.info("Config: Value ignored [%s] %s=%s", section, name, value)

        return True


class ConfigLoader:
    """
    Finds the config file and loads it into a ConfigState.

    Candidates are ``filename`` in each of ``search_dirs`` in order; the
    default is the working directory, then the system config directory.
    """

    def __init__(
        self,
        filename: str = CONFIG_NAME,
        search_dirs: Optional[Iterable[str]] = None,
    ) -> None:
        self.filename = filename
        self.search_dirs: Tuple[str, ...] = (
            tuple(search_dirs) if search_dirs is not None else ("", CONFIG_DIR)
        )

    def candidates(self) -> Tuple[str, ...]:
        return tuple(
            os.path.join(d, self.filename) if d else self.filename for d in self.search_dirs
        )

    def resolve_path(self) -> Optional[str]:
        for path in self.candidates():
            if os.path.isfile(path) and os.access(path, os.R_OK):
                return path
        return None

    def load(self, state: ConfigState, lock: ReadWriteLock) -> LoadResult:
        """
        Reset ``state`` and refill it from the config file under the write lock.

        The returned result carries the snapshot taken before the lock is
        released, so it always describes this load and not a later one.
        """
        with lock.write():
            state.reset()
            path, error = self._parse_into(state)
            return LoadResult(path, error, state.snapshot())

    def _parse_into(self, state: ConfigState) -> Tuple[Optional[str], int]:
        path = self.resolve_path()
        if path is None:
            logger.info(
                "Note: No config file found [%s] in %s",
                self.filename,
                ", ".join(d or "working directory" for d in self.search_dirs),
            )
            return None, 0

        handler = ParseHandler(state)
        try:
            error = parse_file(path, handler)
        except OSError as exc:
            # Vanished or became unreadable between resolve and open
            logger.error("Failed to read config file [%s]: %s", path, exc)
            return None, 0

        if error:
            logger.info("Failed to parse config file [%s] - error on line %d!", path, error)

        logger.debug("Loaded [%s]: %d applied, %d ignored", path, handler.applied, handler.ignored)
        return path, error
