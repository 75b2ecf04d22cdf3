from __future__ import annotations

import logging
from typing import Any, Callable, List, Literal, Mapping, Tuple

logger = logging.getLogger("daemon_config.hooks")
logger.addHandler(logging.NullHandler())

ReloadHook = Callable[[Mapping[str, Any]], None]
HookFailure = Tuple[ReloadHook, Exception]


def _hook_name(hook: ReloadHook) -> str:
    return getattr(hook, "__qualname__", None) or repr(hook)


class HookBus:
    """
    Callbacks notified with the snapshot of each completed load.

    A failing hook never stops the others and never reaches the caller of
    reload(); failures are logged ("log") or only noted at debug ("ignore"),
    and the last run's failures stay available on ``last_failures``.
    """

    def __init__(self, failure_mode: Literal["ignore", "log"] = "log") -> None:
        if failure_mode not in ("ignore", "log"):
            raise ValueError("failure_mode must be one of 'ignore', 'log'")
        self._failure_mode = failure_mode
        self._hooks: List[ReloadHook] = []
        self._last_failures: Tuple[HookFailure, ...] = ()

    def __len__(self) -> int:
        return len(self._hooks)

    @property
    def last_failures(self) -> Tuple[HookFailure, ...]:
        return self._last_failures

    def register(self, hook: ReloadHook) -> None:
        if not callable(hook):
            raise TypeError("Reload hook must be callable")
        self._hooks.append(hook)
        logger.debug("Registered reload hook %s", _hook_name(hook))

    def notify(self, snapshot: Mapping[str, Any]) -> int:
        """Call every hook with ``snapshot``; return how many of them failed."""
        failures: List[HookFailure] = []
        for hook in tuple(self._hooks):
            try:
                hook(snapshot)
            except Exception as exc:
                failures.append((hook, exc))
                if self._failure_mode == "log":
                    logger.error("Reload hook %s failed: %s", _hook_name(hook), exc)
                else:
                    logger.debug("Reload hook %s failed, ignored: %s", _hook_name(hook), exc)
        self._last_failures = tuple(failures)
        return len(failures)

    def clear(self) -> None:
        self._hooks.clear()
        self._last_failures = ()
