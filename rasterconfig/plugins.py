"""
Plugin discovery shared by the store family and authorization registries.

A registry holds an ordered list of plugin instances. On first use it registers
its built-ins and then loads every object published under its entry point group
(``importlib.metadata``). Explicit register() calls append after that. Readers
get an immutable snapshot, so lookups never hold the lock.
"""
from __future__ import annotations

import logging
import threading
from importlib import metadata
from typing import Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from rasterconfig.settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _describe_plugin(obj: object) -> str:
    module = getattr(obj, "__module__", obj.__class__.__module__)
    name = getattr(obj, "__qualname__", obj.__class__.__name__)
    return f"{module}.{name}"


class PluginRegistry(Generic[T]):
    """Ordered, discover-once registry of plugin instances.

    Args:
        group: entry point group scanned during discovery
        base: class every plugin must be an instance of
        key: returns the identity used to replace re-registered plugins
        builtins: zero-argument callable returning the built-in plugins
    """

    def __init__(
            self,
            group: str,
            base: type,
            key: Callable[[T], str],
            builtins: Optional[Callable[[], Iterable[T]]] = None,
    ):
        self.group = group
        self._base = base
        self._key = key
        self._builtins = builtins
        self._lock = threading.RLock()
        self._plugins: Tuple[T, ...] = ()
        self._discovered = False

    def discover(self) -> None:
        """Register built-ins and entry point plugins exactly once."""
        if self._discovered:
            return
        with self._lock:
            if self._discovered:
                return
            found: List[T] = list(self._builtins() if self._builtins else ())
            if get_settings().discover_plugins:
                found.extend(self._load_entry_points())
            existing = list(self._plugins)
            self._plugins = ()
            for plugin in found + existing:
                self._add_locked(plugin)
            self._discovered = True
            logger.debug(f"Discovered {len(self._plugins)} plugin(s) for {self.group}")

    def _load_entry_points(self) -> List[T]:
        loaded: List[T] = []
        for entry in metadata.entry_points(group=self.group):
            try:
                candidate = entry.load()
                plugin = candidate() if isinstance(candidate, type) else candidate
                if not isinstance(plugin, self._base):
                    raise TypeError(f"plugin must be a {self._base.__name__}")
            except Exception as e:
                logger.warning(f"Skipping plugin '{entry.name}' from {self.group}: {e}")
                continue
            logger.info(f"Registered plugin '{entry.name}' ({_describe_plugin(plugin)}) for {self.group}")
            loaded.append(plugin)
        return loaded

    def _add_locked(self, plugin: T) -> None:
        if not isinstance(plugin, self._base):
            raise TypeError(f"Expected a {self._base.__name__}, got {type(plugin).__name__}")
        name = self._key(plugin)
        plugins = list(self._plugins)
        for i, current in enumerate(plugins):
            if self._key(current) == name:
                plugins[i] = plugin
                break
        else:
            plugins.append(plugin)
        self._plugins = tuple(plugins)

    def register(self, plugin: T) -> None:
        """Add a plugin after the discovered ones; a plugin with the same key is replaced in place."""
        with self._lock:
            self._add_locked(plugin)
        logger.debug(f"Registered {self._key(plugin)!r} in {self.group}")

    def unregister(self, name: str) -> bool:
        with self._lock:
            remaining = tuple(p for p in self._plugins if self._key(p) != name)
            removed = len(remaining) != len(self._plugins)
            self._plugins = remaining
        return removed

    def plugins(self) -> Tuple[T, ...]:
        """Snapshot of registered plugins in discovery order."""
        self.discover()
        return self._plugins

    def names(self) -> List[str]:
        return [self._key(p) for p in self.plugins()]

    def reset(self) -> None:
        """Drop every plugin and re-arm discovery (tests)."""
        with self._lock:
            self._plugins = ()
            self._discovered = False
