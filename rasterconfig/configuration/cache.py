"""
Configuration Cache

Process-wide memo from raw descriptor to RasterConfig. The first request for a
descriptor resolves it while holding a lock for that descriptor only; everyone
else asking for the same descriptor waits and receives the same instance.
Failed resolutions insert nothing, so the next call starts over. Entries live
for the rest of the process; clear() exists for tests.
"""

import logging
import threading
from typing import Callable, Dict, Mapping, Optional

from rasterconfig.configuration.params import is_document_locator, parse_params, read_document
from rasterconfig.configuration.raster_config import RasterConfig, resolve_config
from rasterconfig.observability.context import obs_scope
from rasterconfig.settings import get_settings

logger = logging.getLogger(__name__)


class ConfigCache:
    """Thread-safe descriptor -> RasterConfig memo."""

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[str, RasterConfig] = {}
        self._key_locks: Dict[str, threading.Lock] = {}

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def _get_or_build(self, key: str, load: Callable[[], Mapping[str, str]]) -> RasterConfig:
        result = self._entries.get(key)
        if result is not None:
            logger.debug("Configuration cache hit")
            return result

        with self._key_lock(key):
            result = self._entries.get(key)
            if result is not None:
                return result
            with obs_scope(descriptor=key):
                try:
                    result = resolve_config(load(), descriptor=key)
                except Exception as e:
                    logger.warning(f"Could not resolve configuration: {type(e).__name__}")
                    raise
                else:
                    with self._lock:
                        self._entries[key] = result
                finally:
                    with self._lock:
                        self._key_locks.pop(key, None)
                logger.info(f"Resolved configuration with store family '{result.factory_family.type_name}'")
            return result

    def read_from_config_params(self, config_params: str) -> RasterConfig:
        """Resolve a ``key=value;...`` parameter string.

        Raises:
            MalformedDescriptor, InvalidOverrideValue, NoMatchingBackend
        """
        return self._get_or_build(config_params, lambda: parse_params(config_params))

    def read_from_url(self, locator) -> RasterConfig:
        """Resolve the parameter document at locator (path or URL); keyed by str(locator).

        Raises:
            DocumentParseError, InvalidOverrideValue, NoMatchingBackend
        """
        key = str(locator)
        return self._get_or_build(key, lambda: read_document(key, get_settings().document_timeout))

    def get_or_resolve(self, descriptor: str) -> RasterConfig:
        """Resolve either descriptor form, choosing by is_document_locator()."""
        if descriptor is not None and is_document_locator(descriptor):
            return self.read_from_url(descriptor)
        return self.read_from_config_params(descriptor)

    def peek(self, descriptor: str) -> Optional[RasterConfig]:
        """The cached configuration for descriptor, without resolving."""
        return self._entries.get(descriptor)

    def __contains__(self, descriptor: str) -> bool:
        return descriptor in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Forget every cached configuration (tests)."""
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()


_default_cache = ConfigCache()


def get_config_cache() -> ConfigCache:
    return _default_cache


def read_from_config_params(config_params: str) -> RasterConfig:
    return _default_cache.read_from_config_params(config_params)


def read_from_url(locator) -> RasterConfig:
    return _default_cache.read_from_url(locator)


def get_or_resolve(descriptor: str) -> RasterConfig:
    return _default_cache.get_or_resolve(descriptor)


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    _default_cache.clear()
