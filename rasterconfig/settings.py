"""
Process Settings

Runtime knobs for configuration resolution, read from the environment after
loading a local .env file. Values are cached process-wide; call
clear_settings_cache() after changing the environment (tests do this).
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "RASTERCONFIG_"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")
_LOG_FORMATS = ("text", "json")


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}")


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Ignoring {ENV_PREFIX}{name}={raw!r}: expected a boolean, using {default}")
    return default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {ENV_PREFIX}{name}={raw!r}: expected a number, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring {ENV_PREFIX}{name}={raw!r}: must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class RasterConfigSettings:
    """Settings that tune how descriptors are resolved."""

    document_timeout: float = 10.0
    discover_plugins: bool = True
    expand_env: bool = False
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self):
        if self.log_format not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {_LOG_FORMATS}, got '{self.log_format}'")

    @classmethod
    def from_env(cls) -> "RasterConfigSettings":
        """Build settings from RASTERCONFIG_* variables (after .env is loaded)."""
        load_dotenv()  # does not override variables already set
        return cls(
            document_timeout=_env_float("DOCUMENT_TIMEOUT", cls.document_timeout),
            discover_plugins=_env_bool("DISCOVER_PLUGINS", cls.discover_plugins),
            expand_env=_env_bool("EXPAND_ENV", cls.expand_env),
            log_level=(_env("LOG_LEVEL") or cls.log_level).strip().upper(),
            log_format=(_env("LOG_FORMAT") or cls.log_format).strip().lower(),
        )


_settings_cache: Optional[RasterConfigSettings] = None
_settings_lock = threading.RLock()


def get_settings() -> RasterConfigSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings_cache

    with _settings_lock:
        if _settings_cache is None:
            _settings_cache = RasterConfigSettings.from_env()
            logger.debug(f"Loaded settings: {_settings_cache}")
        return _settings_cache


def clear_settings_cache() -> None:
    """Forget cached settings so the next get_settings() re-reads the environment."""
    global _settings_cache
    with _settings_lock:
        _settings_cache = None
