"""
Test configuration and fixtures for the rasterconfig test suite.
Resets process-wide state (configuration cache, plugin registries, settings,
in-process tables) around every test and provides stub store families.
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from rasterconfig.auth.registry import get_authorization_registry
from rasterconfig.configuration.cache import clear_config_cache
from rasterconfig.observability.context import clear_obs_context
from rasterconfig.settings import clear_settings_cache
from rasterconfig.stores.base import SimpleStoreFactory, StoreFactory, StoreFactoryFamily, StoreHandle, StoreKind
from rasterconfig.stores.memory import clear_memory_tables
from rasterconfig.stores.registry import get_backend_registry


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Autouse fixture isolating tests from each other and from installed plugins."""
    for name in ("DOCUMENT_TIMEOUT", "DISCOVER_PLUGINS", "EXPAND_ENV", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"RASTERCONFIG_{name}", raising=False)
    monkeypatch.setenv("RASTERCONFIG_DISCOVER_PLUGINS", "false")
    clear_settings_cache()
    clear_config_cache()
    get_backend_registry().reset()
    get_authorization_registry().reset()
    clear_memory_tables()
    clear_obs_context()
    yield
    clear_config_cache()
    get_backend_registry().reset()
    get_authorization_registry().reset()
    clear_memory_tables()
    clear_settings_cache()


@dataclass
class StubOptions:
    endpoint: str = field(metadata={"param": "stubEndpoint"})
    retries: int = 0


class StubStore(StoreHandle):
    def __init__(self, kind: StoreKind, options: StubOptions):
        super().__init__(kind, "")
        self.options = options
        self._items: Dict[str, Any] = {}

    def put(self, key, value):
        self._items[key] = value

    def get(self, key):
        return self._items.get(key)

    def delete(self, key):
        return self._items.pop(key, None) is not None

    def keys(self):
        return list(self._items)


class StubFamily(StoreFactoryFamily):
    """Family claimed by 'stubEndpoint'; counts and optionally fails constructions.

    fail_times: number of initial create_store calls per kind that raise
        ConnectionError before construction succeeds.
    gate: optional threading.Event each construction waits on, to widen races.
    """

    def __init__(self, type_name: str = "stub", fail_times: int = 0, gate: Optional[threading.Event] = None):
        self.type_name = type_name
        self.fail_times = fail_times
        self.gate = gate
        self.created: List[StoreKind] = []
        self.attempts: Dict[StoreKind, int] = {kind: 0 for kind in StoreKind}
        self._lock = threading.Lock()
        self._factories = {kind: SimpleStoreFactory(kind, StubOptions, self._build) for kind in StoreKind}

    def _build(self, kind: StoreKind, options: StubOptions) -> StubStore:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.attempts[kind] += 1
            if self.attempts[kind] <= self.fail_times:
                raise ConnectionError(f"{options.endpoint} unreachable")
            self.created.append(kind)
        return StubStore(kind, options)

    def get_factory(self, kind: StoreKind) -> StoreFactory:
        return self._factories[kind]


@pytest.fixture
def make_stub_family():
    """Build a StubFamily with the given arguments and register it."""

    def _make(**kwargs) -> StubFamily:
        family = StubFamily(**kwargs)
        get_backend_registry().register(family)
        return family

    return _make


@pytest.fixture
def stub_family(make_stub_family):
    return make_stub_family()


@pytest.fixture
def write_xml(tmp_path):
    """Write an XML parameter document and return its path as a string."""

    def _write(body: str, name: str = "config.xml") -> str:
        path = tmp_path / name
        path.write_text(body, encoding="utf-8")
        return str(path)

    return _write
