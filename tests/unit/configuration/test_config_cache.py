"""
Unit tests for the process-wide configuration cache.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

import rasterconfig.configuration.cache as cache_module
from rasterconfig.auth.base import EmptyAuthorizationFactory
from rasterconfig.auth.json_file import JsonFileAuthorizationFactory
from rasterconfig.configuration.cache import (
    ConfigCache,
    get_config_cache,
    get_or_resolve,
    read_from_config_params,
    read_from_url,
)
from rasterconfig.configuration.overrides import Interpolation
from rasterconfig.errors import (
    DocumentParseError,
    InvalidOverrideValue,
    MalformedDescriptor,
    NoMatchingBackend,
    OverrideNotSet,
)
from rasterconfig.settings import clear_settings_cache
from rasterconfig.stores.json_store import JSONStore
from rasterconfig.stores.registry import list_store_families


class TestReadFromConfigParams:
    def test_same_descriptor_same_instance(self):
        first = read_from_config_params("type=memory;gwNamespace=tiles")
        second = read_from_config_params("type=memory;gwNamespace=tiles")
        assert first is second
        assert first.descriptor == "type=memory;gwNamespace=tiles"
        assert len(get_config_cache()) == 1

    def test_keys_are_raw_strings(self):
        a = read_from_config_params("type=memory;gwNamespace=tiles")
        b = read_from_config_params("gwNamespace=tiles;type=memory")
        assert a is not b
        assert dict(a.store_params) == dict(b.store_params)

    def test_overrides_are_resolved(self):
        config = read_from_config_params(
            "type=memory;scaleTo8Bit=TRUE;equalizeHistogramOverride=false;interpolationOverride=3"
        )
        assert config.is_scale_to_8bit_set()
        assert config.is_scale_to_8bit() is True
        assert config.is_equalize_histogram_override_set()
        assert config.is_equalize_histogram_override() is False
        assert config.get_interpolation_override() is Interpolation.BICUBIC_2
        assert dict(config.store_params) == {"type": "memory"}

    def test_absent_override_is_unset(self):
        config = read_from_config_params("type=memory")
        assert not config.is_scale_to_8bit_set()
        with pytest.raises(OverrideNotSet):
            config.is_scale_to_8bit()

    def test_family_selected_by_identifying_param(self, tmp_path):
        config = read_from_config_params(f"dataDir={tmp_path};gwNamespace=tiles")
        assert config.factory_family.type_name == "json"
        store = config.get_index_store()
        assert isinstance(store, JSONStore)
        store.put("k", {"v": 1})
        assert (tmp_path / "tiles_index_store.json").exists()

    def test_authorization_selection(self):
        config = read_from_config_params(
            "type=memory;authorizationProvider=jsonFile;authorizationUrl=file:///etc/raster/auth.json"
        )
        assert isinstance(config.authorization_factory, JsonFileAuthorizationFactory)
        assert config.authorization_url == "file:///etc/raster/auth.json"

    def test_unknown_authorization_provider_uses_empty(self):
        config = read_from_config_params("type=memory;authorizationProvider=none-registered-xyz")
        assert isinstance(config.authorization_factory, EmptyAuthorizationFactory)

    def test_malformed_descriptor(self):
        with pytest.raises(MalformedDescriptor):
            read_from_config_params("type=memory;=x")

    def test_unnamed_interpolation_code_resolves(self):
        config = read_from_config_params("type=memory;interpolationOverride=4")
        assert config.is_interpolation_override_set()
        assert config.get_interpolation_override() == 4

    def test_invalid_override_is_not_cached(self):
        descriptor = "type=memory;interpolationOverride=lanczos"
        with pytest.raises(InvalidOverrideValue):
            read_from_config_params(descriptor)
        assert descriptor not in get_config_cache()


class TestFailuresAreNotCached:
    def test_no_matching_backend_then_success(self, make_stub_family, caplog):
        descriptor = "stubEndpoint=db.local:9000"
        with caplog.at_level(logging.WARNING, logger="rasterconfig"):
            with pytest.raises(NoMatchingBackend) as excinfo:
                read_from_config_params(descriptor)
        assert "stubEndpoint" in excinfo.value.keys
        assert "Could not resolve configuration" in caplog.text
        assert get_config_cache().peek(descriptor) is None

        make_stub_family()
        config = read_from_config_params(descriptor)
        assert config.factory_family.type_name == "stub"
        assert read_from_config_params(descriptor) is config

    def test_failed_descriptor_does_not_affect_another(self):
        cache = ConfigCache()
        with pytest.raises(NoMatchingBackend):
            cache.read_from_config_params("zookeeper=zk:2181")
        config = cache.read_from_config_params("type=memory;gwNamespace=tiles")
        assert config.store_params["gwNamespace"] == "tiles"
        assert len(cache) == 1
        assert "zookeeper=zk:2181" not in cache

    def test_failures_leave_no_locks_behind(self):
        cache = ConfigCache()
        for i in range(50):
            with pytest.raises(MalformedDescriptor):
                cache.read_from_config_params(f"type=memory;=x{i}")
        assert len(cache) == 0
        assert cache._key_locks == {}

    def test_rejected_entry_text_is_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="rasterconfig"):
            with pytest.raises(MalformedDescriptor) as excinfo:
                read_from_config_params("type=memory;=hunter2")
        assert "hunter2" not in str(excinfo.value)
        assert "hunter2" not in caplog.text
        assert "Could not resolve configuration: MalformedDescriptor" in caplog.text


class TestConcurrency:
    def test_concurrent_callers_share_one_instance(self, monkeypatch):
        cache = ConfigCache()
        calls = []
        release = threading.Event()

        original = cache_module.resolve_config

        def slow_resolve(params, descriptor=None):
            calls.append(descriptor)
            release.wait(timeout=5)
            return original(params, descriptor=descriptor)

        monkeypatch.setattr(cache_module, "resolve_config", slow_resolve)

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(cache.read_from_config_params, "type=memory") for _ in range(24)]
            release.set()
            configs = [f.result(timeout=10) for f in futures]

        assert all(c is configs[0] for c in configs)
        assert calls == ["type=memory"]

    def test_different_descriptors_do_not_block_each_other(self, monkeypatch):
        cache = ConfigCache()
        started = threading.Event()
        release = threading.Event()

        original = cache_module.resolve_config

        def resolve(params, descriptor=None):
            if descriptor == "type=memory;gwNamespace=slow":
                started.set()
                release.wait(timeout=5)
            return original(params, descriptor=descriptor)

        monkeypatch.setattr(cache_module, "resolve_config", resolve)

        with ThreadPoolExecutor(max_workers=2) as pool:
            slow = pool.submit(cache.read_from_config_params, "type=memory;gwNamespace=slow")
            assert started.wait(timeout=5)
            fast = cache.read_from_config_params("type=memory;gwNamespace=fast")
            assert fast.store_params["gwNamespace"] == "fast"
            assert not slow.done()
            release.set()
            assert slow.result(timeout=10).store_params["gwNamespace"] == "slow"


class TestReadFromUrl:
    def test_document_descriptor(self, write_xml):
        path = write_xml("""<config>
            <type>memory</type>
            <gwNamespace>mosaic</gwNamespace>
            <scaleTo8Bit>TRUE</scaleTo8Bit>
            <interpolationOverride>0</interpolationOverride>
        </config>""")
        config = read_from_url(path)
        assert config is read_from_url(path)
        assert config.is_scale_to_8bit() is True
        assert config.get_interpolation_override() is Interpolation.NEAREST
        assert dict(config.store_params) == {"type": "memory", "gwNamespace": "mosaic"}
        assert config.descriptor == path

    def test_path_objects_are_keyed_by_string(self, write_xml):
        path = write_xml("<config><type>memory</type></config>")
        assert read_from_url(Path(path)) is read_from_url(path)

    def test_unreadable_document_is_not_cached(self, tmp_path):
        locator = str(tmp_path / "missing.xml")
        with pytest.raises(DocumentParseError):
            read_from_url(locator)
        assert locator not in get_config_cache()


class TestGetOrResolve:
    def test_dispatches_parameter_strings(self):
        config = get_or_resolve("type=memory")
        assert config is read_from_config_params("type=memory")

    def test_dispatches_documents(self, write_xml):
        path = write_xml("<config><type>memory</type></config>", name="raster.xml")
        assert get_or_resolve(path) is read_from_url(path)


class TestEnvironmentExpansion:
    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.setenv("RASTER_NS", "expanded")
        config = read_from_config_params("type=memory;gwNamespace=${RASTER_NS}")
        assert config.store_params["gwNamespace"] == "${RASTER_NS}"

    def test_enabled(self, monkeypatch):
        monkeypatch.setenv("RASTERCONFIG_EXPAND_ENV", "true")
        monkeypatch.setenv("RASTER_NS", "expanded")
        clear_settings_cache()
        config = read_from_config_params("type=memory;gwNamespace=${RASTER_NS};scaleTo8Bit=${SCALE:-true}")
        assert config.store_params["gwNamespace"] == "expanded"
        assert config.is_scale_to_8bit() is True


def test_register_store_family_after_resolution_does_not_change_cached_entries(make_stub_family):
    config = read_from_config_params("type=memory")
    make_stub_family(type_name="memory2")
    assert "memory2" in list_store_families()
    assert read_from_config_params("type=memory") is config
