"""
Store Family Interfaces

A store family bundles one StoreFactory per StoreKind for a single storage
backend. Configurations pick a family by asking each registered one whether it
claims the backend parameters, then build handles on demand through the
family's factories.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import fields, MISSING
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class StoreKind(Enum):
    """The six kinds of store handle a configuration manages."""
    DATA = "data"
    INDEX = "index"
    ADAPTER = "adapter"
    INTERNAL_ADAPTER = "internal_adapter"
    DATA_STATISTICS = "data_statistics"
    ADAPTER_INDEX_MAPPING = "adapter_index_mapping"


class StoreHandle(ABC):
    """Minimal key/value contract shared by the handles of the built-in families."""

    def __init__(self, kind: StoreKind, namespace: str):
        self.kind = kind
        self.namespace = namespace

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    def clear(self) -> None:
        """Remove every entry (optional)."""
        raise NotImplementedError("clear() not implemented")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value}, namespace={self.namespace!r})"


class StoreFactory(ABC):
    """Builds the handle for one store kind from a typed options object."""

    kind: StoreKind

    @abstractmethod
    def create_options_instance(self) -> Any:
        """Return a fresh, unpopulated options dataclass instance."""

    @abstractmethod
    def create_store(self, options: Any) -> StoreHandle:
        """Construct a handle; may block on backend I/O."""


class StoreFactoryFamily(ABC):
    """One storage backend implementation, exposing a factory per store kind.

    Subclasses set ``type_name`` and implement get_factory(). The default
    claims() policy recognises an explicit ``type`` parameter and otherwise
    requires every required data store option to be present.
    """

    type_name: str = ""
    description: str = ""

    TYPE_PARAM = "type"

    @abstractmethod
    def get_factory(self, kind: StoreKind) -> StoreFactory:
        ...

    def claims(self, params: Mapping[str, str]) -> bool:
        requested = params.get(self.TYPE_PARAM)
        if requested is not None:
            return requested.strip().lower() == self.type_name.lower()
        required = self.required_params()
        return bool(required) and all(name in params for name in required)

    def required_params(self) -> List[str]:
        """Parameter names of the data store options that have no default."""
        options = self.get_data_store_factory().create_options_instance()
        return [param_name(f) for f in fields(options)
                if f.default is MISSING and f.default_factory is MISSING]

    def get_data_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.DATA)

    def get_index_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.INDEX)

    def get_adapter_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.ADAPTER)

    def get_internal_adapter_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.INTERNAL_ADAPTER)

    def get_data_statistics_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.DATA_STATISTICS)

    def get_adapter_index_mapping_store_factory(self) -> StoreFactory:
        return self.get_factory(StoreKind.ADAPTER_INDEX_MAPPING)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type_name={self.type_name!r})"


def param_name(f) -> str:
    """Parameter key for an options field: metadata 'param' alias or the field name."""
    return f.metadata.get("param", f.name)


class SimpleStoreFactory(StoreFactory):
    """Factory built from an options class and a handle constructor.

    Families whose kinds differ only by the handle they create can declare
    their factories as data instead of one subclass per kind.
    """

    def __init__(self, kind: StoreKind, options_cls: type, builder):
        self.kind = kind
        self._options_cls = options_cls
        self._builder = builder

    def create_options_instance(self) -> Any:
        return _instantiate_unpopulated(self._options_cls)

    def create_store(self, options: Any) -> StoreHandle:
        return self._builder(self.kind, options)

    def __repr__(self) -> str:
        return f"SimpleStoreFactory(kind={self.kind.value}, options={self._options_cls.__name__})"


class _Unpopulated:
    """Placeholder for required option fields that have not been filled yet."""

    def __repr__(self) -> str:
        return "<unpopulated>"


UNPOPULATED = _Unpopulated()


def _instantiate_unpopulated(options_cls: type) -> Any:
    kwargs: Dict[str, Any] = {}
    for f in fields(options_cls):
        if f.init and f.default is MISSING and f.default_factory is MISSING:
            kwargs[f.name] = UNPOPULATED
    return options_cls(**kwargs)
