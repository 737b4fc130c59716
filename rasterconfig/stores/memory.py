"""
In-process store family ("memory").

Handles are views over process-wide tables keyed by (namespace, kind), so two
configurations naming the same namespace share data. Meant for tests and
single-process deployments.

Select it with ``type=memory``; it has no required options.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from rasterconfig.stores.base import SimpleStoreFactory, StoreFactory, StoreFactoryFamily, StoreHandle, StoreKind
from rasterconfig.stores.options import MemoryStoreOptions

logger = logging.getLogger(__name__)

_TABLES: Dict[Tuple[str, StoreKind], "OrderedDict[str, Any]"] = {}
_TABLES_LOCK = threading.RLock()


def _table(namespace: str, kind: StoreKind) -> "OrderedDict[str, Any]":
    with _TABLES_LOCK:
        return _TABLES.setdefault((namespace, kind), OrderedDict())


def clear_memory_tables() -> None:
    """Drop every in-process table (tests)."""
    with _TABLES_LOCK:
        _TABLES.clear()


class MemoryStore(StoreHandle):
    """Thread-safe in-process handle; oldest entries are evicted past max_entries."""

    def __init__(self, kind: StoreKind, namespace: str = "", max_entries: Optional[int] = None):
        super().__init__(kind, namespace)
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"maxEntries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._items = _table(namespace, kind)

    def put(self, key: str, value: Any) -> None:
        with _TABLES_LOCK:
            self._items[key] = value
            self._items.move_to_end(key)
            if self.max_entries is not None:
                while len(self._items) > self.max_entries:
                    evicted, _ = self._items.popitem(last=False)
                    logger.debug(f"Evicted '{evicted}' from {self.kind.value} store '{self.namespace}'")

    def get(self, key: str) -> Optional[Any]:
        with _TABLES_LOCK:
            return self._items.get(key)

    def delete(self, key: str) -> bool:
        with _TABLES_LOCK:
            return self._items.pop(key, None) is not None

    def keys(self) -> List[str]:
        with _TABLES_LOCK:
            return list(self._items.keys())

    def clear(self) -> None:
        with _TABLES_LOCK:
            self._items.clear()


def _build(kind: StoreKind, options: MemoryStoreOptions) -> MemoryStore:
    return MemoryStore(kind, namespace=options.namespace, max_entries=options.max_entries)


class MemoryStoreFamily(StoreFactoryFamily):
    type_name = "memory"
    description = "In-process tables shared by namespace"

    def __init__(self):
        self._factories = {kind: SimpleStoreFactory(kind, MemoryStoreOptions, _build) for kind in StoreKind}

    def get_factory(self, kind: StoreKind) -> StoreFactory:
        return self._factories[kind]
