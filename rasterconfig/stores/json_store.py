"""
JSON file store family ("json").

Each handle persists one store kind of one namespace to
``<dataDir>/<namespace>_<kind>_store.json``. Claimed by ``type=json`` or by
any parameter set that carries ``dataDir``.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from rasterconfig.stores.base import SimpleStoreFactory, StoreFactory, StoreFactoryFamily, StoreHandle, StoreKind
from rasterconfig.stores.options import JSONStoreOptions

logger = logging.getLogger(__name__)

# One lock per file path so handles from different configurations stay consistent
_FILE_LOCKS: Dict[str, threading.RLock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(key, threading.RLock())


class JSONStore(StoreHandle):
    """JSON file-backed handle for one store kind."""

    def __init__(self, kind: StoreKind, data_dir: str, namespace: str = "",
                 pretty: bool = True, create_dirs: bool = True):
        super().__init__(kind, namespace)
        self.data_dir = Path(data_dir)
        if create_dirs:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        elif not self.data_dir.is_dir():
            raise FileNotFoundError(f"Data directory does not exist: {self.data_dir}")
        self.pretty = pretty
        self._lock = _lock_for(self._get_file_path())
        with self._lock:
            self._items: Dict[str, Any] = self._load_all_items()

    def _get_file_path(self) -> Path:
        return self.data_dir / f"{self.namespace or 'default'}_{self.kind.value}_store.json"

    def _load_all_items(self) -> Dict[str, Any]:
        file_path = self._get_file_path()
        if not file_path.exists():
            return {}
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data.get('items', {})

    def _save_all_items(self) -> None:
        file_path = self._get_file_path()
        data = {
            'items': self._items,
            'metadata': {
                'kind': self.kind.value,
                'namespace': self.namespace,
                'last_updated': datetime.now(timezone.utc).isoformat(),
                'item_count': len(self._items),
            },
        }
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2 if self.pretty else None, default=str)
            os.replace(tmp, file_path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[key] = value
            self._save_all_items()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._items.get(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._items:
                return False
            del self._items[key]
            self._save_all_items()
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items.keys())

    def clear(self) -> None:
        with self._lock:
            self._items = {}
            self._save_all_items()


def _build(kind: StoreKind, options: JSONStoreOptions) -> JSONStore:
    logger.debug(f"Opening JSON {kind.value} store in {options.data_dir}")
    return JSONStore(
        kind,
        data_dir=options.data_dir,
        namespace=options.namespace,
        pretty=options.pretty,
        create_dirs=options.create_dirs,
    )


class JSONStoreFamily(StoreFactoryFamily):
    type_name = "json"
    description = "One JSON file per namespace and store kind"

    def __init__(self):
        self._factories = {kind: SimpleStoreFactory(kind, JSONStoreOptions, _build) for kind in StoreKind}

    def get_factory(self, kind: StoreKind) -> StoreFactory:
        return self._factories[kind]
