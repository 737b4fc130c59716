"""
rasterconfig resolves raster store descriptors into cached configurations.

    from rasterconfig import read_from_config_params

    config = read_from_config_params("type=memory;gwNamespace=tiles;scaleTo8Bit=true")
    if config.is_scale_to_8bit_set():
        scale = config.is_scale_to_8bit()
    data_store = config.get_data_store()
"""

from rasterconfig.configuration import (
    RasterConfig,
    ConfigCache,
    ConfigParameter,
    Interpolation,
    Override,
    OverrideSettings,
    get_config_cache,
    read_from_config_params,
    read_from_url,
    get_or_resolve,
    clear_config_cache,
    parse_params,
    format_params,
)
from rasterconfig.errors import (
    RasterConfigError,
    DescriptorError,
    MalformedDescriptor,
    DocumentParseError,
    InvalidOverrideValue,
    NoMatchingBackend,
    OverrideNotSet,
    StoreConstructionFailed,
)
from rasterconfig.stores import StoreKind, StoreFactoryFamily, register_store_family
from rasterconfig.auth import AuthorizationFactory, register_authorization_factory
from rasterconfig.settings import RasterConfigSettings, get_settings, clear_settings_cache
from rasterconfig.observability import configure_logging

__version__ = "0.1.0"

__all__ = [
    "RasterConfig",
    "ConfigCache",
    "ConfigParameter",
    "Interpolation",
    "Override",
    "OverrideSettings",
    "get_config_cache",
    "read_from_config_params",
    "read_from_url",
    "get_or_resolve",
    "clear_config_cache",
    "parse_params",
    "format_params",
    "RasterConfigError",
    "DescriptorError",
    "MalformedDescriptor",
    "DocumentParseError",
    "InvalidOverrideValue",
    "NoMatchingBackend",
    "OverrideNotSet",
    "StoreConstructionFailed",
    "StoreKind",
    "StoreFactoryFamily",
    "register_store_family",
    "AuthorizationFactory",
    "register_authorization_factory",
    "RasterConfigSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
]
