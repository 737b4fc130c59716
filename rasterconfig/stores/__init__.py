from .base import StoreKind, StoreHandle, StoreFactory, StoreFactoryFamily, SimpleStoreFactory
from .options import StoreOptions, MemoryStoreOptions, JSONStoreOptions, populate_options
from .memory import MemoryStore, MemoryStoreFamily
from .json_store import JSONStore, JSONStoreFamily
from .registry import (
    BackendRegistry,
    get_backend_registry,
    register_store_family,
    find_store_family,
    list_store_families,
)

__all__ = [
    "StoreKind",
    "StoreHandle",
    "StoreFactory",
    "StoreFactoryFamily",
    "SimpleStoreFactory",
    "StoreOptions",
    "MemoryStoreOptions",
    "JSONStoreOptions",
    "populate_options",
    "MemoryStore",
    "MemoryStoreFamily",
    "JSONStore",
    "JSONStoreFamily",
    "BackendRegistry",
    "get_backend_registry",
    "register_store_family",
    "find_store_family",
    "list_store_families",
]
