"""
Resolved raster store configuration.

A RasterConfig holds the backend parameters, the store family that claimed
them, the override settings and the authorization selection. Store handles are
built lazily, once per kind, through the family's factories and then reused
for the lifetime of the configuration.
"""
from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Union

from rasterconfig.auth.base import AuthorizationFactory, AuthorizationProvider
from rasterconfig.auth.registry import get_authorization_factory
from rasterconfig.configuration.environment import EnvironmentHandler
from rasterconfig.configuration.overrides import Interpolation, OverrideSettings, extract_overrides
from rasterconfig.errors import StoreConstructionFailed
from rasterconfig.observability.context import obs_scope
from rasterconfig.settings import get_settings
from rasterconfig.stores.base import StoreFactoryFamily, StoreHandle, StoreKind
from rasterconfig.stores.options import populate_options
from rasterconfig.stores.registry import find_store_family

logger = logging.getLogger(__name__)

NAMESPACE_PARAM = "gwNamespace"


class _LazyHandle:
    """Compute-once cell for one store kind.

    The value is published only after construction succeeds; a failed build
    leaves the cell empty so the next call retries.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[StoreHandle] = None

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def get(self, build: Callable[[], StoreHandle]) -> StoreHandle:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = build()
            return self._value


class RasterConfig:
    """Resolved configuration for one descriptor.

    Build instances through the configuration cache (read_from_config_params,
    read_from_url, get_or_resolve) or RasterConfig.create() for an uncached
    programmatic configuration.
    """

    def __init__(
            self,
            store_params: Mapping[str, str],
            factory_family: StoreFactoryFamily,
            overrides: Optional[OverrideSettings] = None,
            authorization_factory: Optional[AuthorizationFactory] = None,
            descriptor: Optional[str] = None,
    ):
        overrides = overrides or OverrideSettings()
        self._store_params = MappingProxyType(dict(store_params))
        self._factory_family = factory_family
        self._overrides = overrides
        self._authorization_factory = (authorization_factory
                                       or get_authorization_factory(overrides.authorization_provider))
        self._descriptor = descriptor
        self._handles: Dict[StoreKind, _LazyHandle] = {kind: _LazyHandle() for kind in StoreKind}

    @classmethod
    def create(
            cls,
            store_params: Mapping[str, str],
            namespace: Optional[str] = None,
            *,
            equalize_histogram_override: Optional[bool] = None,
            scale_to_8bit: Optional[bool] = None,
            interpolation_override: Optional[int] = None,
            authorization_provider: Optional[str] = None,
            authorization_url: Optional[str] = None,
    ) -> "RasterConfig":
        """Build an uncached configuration from already-separated parameters.

        Args:
            store_params: backend parameters (no reserved override keys)
            namespace: when given, stored as the ``gwNamespace`` parameter

        Raises:
            NoMatchingBackend: no family claims store_params
            InvalidOverrideValue: interpolation_override is not an integer
        """
        params = dict(store_params)
        if namespace is not None:
            params[NAMESPACE_PARAM] = namespace
        overrides = OverrideSettings.build(
            interpolation=interpolation_override,
            scale_to_8bit=scale_to_8bit,
            equalize_histogram=equalize_histogram_override,
            authorization_provider=authorization_provider,
            authorization_url=authorization_url,
        )
        return cls(params, find_store_family(params), overrides)

    # ---- Resolved attributes ----------------------------------------------

    @property
    def store_params(self) -> Mapping[str, str]:
        """Read-only backend parameters (reserved override keys removed)."""
        return self._store_params

    @property
    def factory_family(self) -> StoreFactoryFamily:
        return self._factory_family

    @property
    def overrides(self) -> OverrideSettings:
        return self._overrides

    @property
    def authorization_factory(self) -> AuthorizationFactory:
        return self._authorization_factory

    @property
    def authorization_url(self) -> Optional[str]:
        return self._overrides.authorization_url

    @property
    def descriptor(self) -> Optional[str]:
        """The raw descriptor this configuration was resolved from, if cached."""
        return self._descriptor

    def create_authorization_provider(self) -> AuthorizationProvider:
        return self._authorization_factory.create_authorization_provider(self.authorization_url)

    # ---- Store handles ----------------------------------------------------

    def _build_store(self, kind: StoreKind) -> StoreHandle:
        family = self._factory_family
        with obs_scope(store_kind=kind.value, family=family.type_name, descriptor=self._descriptor):
            try:
                factory = family.get_factory(kind)
                options = populate_options(factory.create_options_instance(), self._store_params)
                handle = factory.create_store(options)
            except StoreConstructionFailed:
                raise
            except Exception as e:
                logger.error(f"Failed to create {kind.value} store with family '{family.type_name}': {e}")
                raise StoreConstructionFailed(kind.value, family.type_name, str(e)) from e
            if handle is None:
                raise StoreConstructionFailed(kind.value, family.type_name, "factory returned no store")
            logger.info(f"Created {kind.value} store {handle!r}")
            return handle

    def get_store(self, kind: StoreKind) -> StoreHandle:
        """Return the handle for kind, building it on first use.

        Raises:
            StoreConstructionFailed: the factory failed; a later call retries
        """
        return self._handles[kind].get(lambda: self._build_store(kind))

    def has_store(self, kind: StoreKind) -> bool:
        """Whether a handle for kind has been built (no side effects)."""
        return self._handles[kind].is_set

    def get_data_store(self) -> StoreHandle:
        return self.get_store(StoreKind.DATA)

    def get_index_store(self) -> StoreHandle:
        return self.get_store(StoreKind.INDEX)

    def get_adapter_store(self) -> StoreHandle:
        return self.get_store(StoreKind.ADAPTER)

    def get_internal_adapter_store(self) -> StoreHandle:
        return self.get_store(StoreKind.INTERNAL_ADAPTER)

    def get_data_statistics_store(self) -> StoreHandle:
        return self.get_store(StoreKind.DATA_STATISTICS)

    def get_adapter_index_mapping_store(self) -> StoreHandle:
        return self.get_store(StoreKind.ADAPTER_INDEX_MAPPING)

    # ---- Overrides --------------------------------------------------------

    def is_interpolation_override_set(self) -> bool:
        return self._overrides.interpolation.is_set

    def get_interpolation_override(self) -> Union[Interpolation, int]:
        """The Interpolation for a known code, else the raw integer.

        Raises OverrideNotSet unless is_interpolation_override_set().
        """
        return self._overrides.interpolation.get()

    def is_scale_to_8bit_set(self) -> bool:
        return self._overrides.scale_to_8bit.is_set

    def is_scale_to_8bit(self) -> bool:
        """Raises OverrideNotSet unless is_scale_to_8bit_set()."""
        return self._overrides.scale_to_8bit.get()

    def is_equalize_histogram_override_set(self) -> bool:
        return self._overrides.equalize_histogram.is_set

    def is_equalize_histogram_override(self) -> bool:
        """Raises OverrideNotSet unless is_equalize_histogram_override_set()."""
        return self._overrides.equalize_histogram.get()

    def __repr__(self) -> str:
        return (f"RasterConfig(family={self._factory_family.type_name!r}, "
                f"params={sorted(self._store_params)}, overrides={self._overrides})")


def resolve_config(params: Mapping[str, str], descriptor: Optional[str] = None) -> RasterConfig:
    """Run override extraction, family resolution and authorization resolution."""
    if get_settings().expand_env:
        params = EnvironmentHandler.expand_params(params)
    overrides, store_params = extract_overrides(params)
    family = find_store_family(store_params)
    return RasterConfig(store_params, family, overrides, descriptor=descriptor)
