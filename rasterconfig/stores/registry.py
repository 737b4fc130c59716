"""
Store family registry.

Families come from the built-ins, the ``rasterconfig.store_families`` entry
point group, and explicit register_store_family() calls, in that order.
resolve() asks each family in turn whether it claims the parameters; the first
that does wins. Installed families should use mutually exclusive identifying
parameters, otherwise the selection depends on that order.
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Tuple

from rasterconfig.errors import NoMatchingBackend
from rasterconfig.plugins import PluginRegistry
from rasterconfig.stores.base import StoreFactoryFamily

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "rasterconfig.store_families"


def _builtin_families() -> List[StoreFactoryFamily]:
    # Imported lazily so plugin modules can import this one without cycles
    from rasterconfig.stores.json_store import JSONStoreFamily
    from rasterconfig.stores.memory import MemoryStoreFamily
    return [MemoryStoreFamily(), JSONStoreFamily()]


class BackendRegistry(PluginRegistry[StoreFactoryFamily]):
    def __init__(self, group: str = ENTRY_POINT_GROUP, include_builtins: bool = True):
        super().__init__(
            group,
            StoreFactoryFamily,
            key=lambda family: family.type_name,
            builtins=_builtin_families if include_builtins else None,
        )

    def families(self) -> Tuple[StoreFactoryFamily, ...]:
        return self.plugins()

    def resolve(self, params: Mapping[str, str]) -> StoreFactoryFamily:
        """Return the first family that claims params.

        Raises:
            NoMatchingBackend: no family claims them
        """
        for family in self.families():
            if family.claims(params):
                logger.debug(f"Store family '{family.type_name}' claims parameters {sorted(params)}")
                return family
        raise NoMatchingBackend(params.keys(), self.names())


_default_registry = BackendRegistry()


def get_backend_registry() -> BackendRegistry:
    return _default_registry


def register_store_family(family: StoreFactoryFamily) -> None:
    _default_registry.register(family)


def find_store_family(params: Mapping[str, str]) -> StoreFactoryFamily:
    return _default_registry.resolve(params)


def list_store_families() -> List[str]:
    return _default_registry.names()
