"""
Raster store configuration: descriptor parsing, override extraction, store
family resolution and the process-wide configuration cache.
"""

from .cache import (
    ConfigCache,
    get_config_cache,
    read_from_config_params,
    read_from_url,
    get_or_resolve,
    clear_config_cache,
)
from .overrides import ConfigParameter, Interpolation, Override, OverrideSettings, extract_overrides
from .params import parse_params, format_params, parse_document, read_document, is_document_locator
from .raster_config import RasterConfig, resolve_config

__all__ = [
    "ConfigCache",
    "get_config_cache",
    "read_from_config_params",
    "read_from_url",
    "get_or_resolve",
    "clear_config_cache",
    "ConfigParameter",
    "Interpolation",
    "Override",
    "OverrideSettings",
    "extract_overrides",
    "parse_params",
    "format_params",
    "parse_document",
    "read_document",
    "is_document_locator",
    "RasterConfig",
    "resolve_config",
]
