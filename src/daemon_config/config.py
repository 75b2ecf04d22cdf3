from __future__ import annotations

import datetime
import logging
import threading
from functools import wraps
from types import MappingProxyType, TracebackType
from typing import Any, Callable, Iterable, Literal, Optional, Tuple, Type, TypeVar, cast

from daemon_config.constants import CONFIG_NAME
from daemon_config.exceptions import ConfigNotInitializedError, ConfigTornDownError

from .hooks import HookBus, ReloadHook
from .loader import ConfigLoader, LoadResult
from .locks import ReadWriteLock
from .state import ConfigState

logger = logging.getLogger("daemon_config.config")
logger.addHandler(logging.NullHandler())


F = TypeVar("F", bound=Callable[..., Any])


def is_active(func: F) -> F:
    """
    Decorator checking the config was initialised and not yet destroyed.
    Raises ConfigTornDownError or ConfigNotInitializedError otherwise.
    """

    @wraps(func)
    def wrapper(self: "GameModeConfig", *args: Any, **kwargs: Any) -> Any:
        if self.torn_down:
            logger.error(f"Attempted {func.__name__} after destroy.")
            raise ConfigTornDownError("Config has been destroyed")
        if not self.initialized:
            logger.error(f"Attempted {func.__name__} before init.")
            raise ConfigNotInitializedError("Config has not been initialised")
        return func(self, *args, **kwargs)

    return cast(F, wrapper)


class GameModeConfig:
    """
    Reloadable daemon configuration with reader-writer locking.

    Create the handle, call init() once before any query, reload() whenever the
    file may have changed, and destroy() at shutdown. Queries take the read
    lock; a reload takes the write lock and replaces every field at once, so a
    single query never sees values from two different loads.

    Direct attribute assignment is forbidden; state only changes through reload().
    """

    def __init__(
        self,
        filename: str = CONFIG_NAME,
        search_dirs: Optional[Iterable[str]] = None,
        *,
        hook_failure_mode: Literal["ignore", "log"] = "log",
    ) -> None:
        self.__lock: Optional[ReadWriteLock] = None
        self.__meta_lock = threading.Lock()

        # lifecycle/meta
        self.__initialized = False
        self.__torn_down = False
        self.__source_path: Optional[str] = None
        self.__loaded_at: Optional[datetime.datetime] = None
        self.__reload_count = 0

        # components
        self.__state = ConfigState()
        self.__loader = ConfigLoader(filename, search_dirs)
        self.__hooks = HookBus(hook_failure_mode)

    @classmethod
    def create(cls, *args: Any, **kwargs: Any) -> "GameModeConfig":
        """Allocate an uninitialised handle. Call init() before querying it."""
        return cls(*args, **kwargs)

    @property
    def initialized(self) -> bool:
        return self.__initialized

    @property
    def torn_down(self) -> bool:
        return self.__torn_down

    @property
    def source_path(self) -> Optional[str]:
        """Path of the file used by the last load, or None if none was found."""
        with self.__meta_lock:
            return self.__source_path

    @property
    def loaded_at(self) -> Optional[datetime.datetime]:
        """UTC time the last load finished."""
        with self.__meta_lock:
            return self.__loaded_at

    @property
    def reload_count(self) -> int:
        """Number of loads performed, the initial one included."""
        with self.__meta_lock:
            return self.__reload_count

    @property
    def loader(self) -> ConfigLoader:
        return self.__loader

    # forbid public attribute mutation
    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_GameModeConfig__state") and not name.startswith("_GameModeConfig__"):
            raise AttributeError("Direct attribute assignment forbidden. Use reload().")
        super().__setattr__(name, value)

    # lifecycle
    def init(self) -> None:
        """
        Set up the lock and perform the first load.
        """
        if self.__torn_down:
            raise ConfigTornDownError("Config has been destroyed")
        if self.__initialized:
            logger.debug("init() called twice; reloading instead")
            self.reload()
            return
        self.__lock = ReadWriteLock()
        self.__initialized = True
        logger.info("GameModeConfig initialised candidates=%s", self.__loader.candidates())
        self._load()

    @is_active
    def reload(self) -> None:
        """
        Reset every field to its default and re-read the config file.

        Never raises for file or content problems; those are logged and the
        store keeps whatever part of the file was valid.
        """
        self._load()

    def _load(self) -> None:
        lock = cast(ReadWriteLock, self.__lock)
        result: LoadResult = self.__loader.load(self.__state, lock)
        with self.__meta_lock:
            self.__source_path = result.path
            self.__loaded_at = datetime.datetime.now(tz=datetime.timezone.utc)
            self.__reload_count += 1
            count = self.__reload_count
        logger.info(
            "Config loaded path=%s error_line=%d reloads=%d",
            result.path,
            result.error_line,
            count,
        )
        if len(self.__hooks) and result.snapshot is not None:
            failed = self.__hooks.notify(result.snapshot)
            if failed:
                logger.warning("%d reload hook(s) failed after load %d", failed, count)

    def destroy(self) -> None:
        """
        Release the handle. No queries may be in flight; later calls raise
        ConfigTornDownError. Calling destroy() again is a no-op.
        """
        if self.__torn_down:
            return
        if self.__lock is not None and not self.__lock.is_idle():
            logger.warning("GameModeConfig destroyed while lock held: %r", self.__lock)
        self.__torn_down = True
        self.__hooks.clear()
        self.__state.reset()
        logger.info("GameModeConfig destroyed.")

    def register_post_reload_hook(self, func: ReloadHook) -> None:
        """
        Register a function called with the new snapshot after each load.
        Hooks registered before init() also see the initial load.
        """
        if self.__torn_down:
            raise ConfigTornDownError("Config has been destroyed")
        self.__hooks.register(func)

    # queries
    @is_active
    def is_client_whitelisted(self, client: str) -> bool:
        """
        True if ``client`` contains any whitelist entry as a substring.
        An empty whitelist lets every client through.
        """
        with cast(ReadWriteLock, self.__lock).read():
            whitelist = self.__state.whitelist
            if whitelist.is_empty():
                return True
            for i in range(whitelist.capacity):
                entry = whitelist[i]
                if not entry:
                    break
                if entry in client:
                    return True
            return False

    @is_active
    def is_client_blacklisted(self, client: str) -> bool:
        """
        True if ``client`` contains any blacklist entry as a substring.
        """
        with cast(ReadWriteLock, self.__lock).read():
            blacklist = self.__state.blacklist
            for i in range(blacklist.capacity):
                entry = blacklist[i]
                if not entry:
                    break
                if entry in client:
                    return True
            return False

    @is_active
    def get_reaper_thread_frequency(self) -> int:
        with cast(ReadWriteLock, self.__lock).read():
            return self.__state.reaper_frequency

    @is_active
    def get_start_scripts(self) -> Tuple[str, ...]:
        """Commands to run when the daemon starts a session, in file order."""
        with cast(ReadWriteLock, self.__lock).read():
            return self.__state.start_scripts.entries()

    @is_active
    def get_end_scripts(self) -> Tuple[str, ...]:
        """Commands to run when the daemon ends a session, in file order."""
        with cast(ReadWriteLock, self.__lock).read():
            return self.__state.end_scripts.entries()

    @is_active
    def snapshot(self) -> MappingProxyType[str, Any]:
        """
        Return every field from a single load as a read-only mapping.
        """
        with cast(ReadWriteLock, self.__lock).read():
            return self.__state.snapshot()

    def __repr__(self) -> str:
        return (
            f"<GameModeConfig initialized={self.__initialized} torn_down={self.__torn_down} "
            f"source={self.__source_path!r}>"
        )

    def __enter__(self) -> "GameModeConfig":
        """
        Enter context manager, initialising the config if needed.
        """
        if not self.__initialized:
            self.init()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        """
        Exit context manager, destroying the config.
        """
        self.destroy()
