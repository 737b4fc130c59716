"""
Unit tests for descriptor parameter extraction (strings and XML documents).
"""
from unittest.mock import Mock, patch

import pytest
import requests

from rasterconfig.configuration.params import (
    format_params,
    is_document_locator,
    parse_document,
    parse_params,
    read_document,
)
from rasterconfig.errors import DocumentParseError, MalformedDescriptor


class TestParseParams:
    """Flat key=value;... descriptors."""

    def test_basic_pairs(self):
        assert parse_params("type=memory;gwNamespace=tiles") == {"type": "memory", "gwNamespace": "tiles"}

    def test_whitespace_is_stripped(self):
        assert parse_params("  type = memory ;  gwNamespace=tiles  ") == {"type": "memory", "gwNamespace": "tiles"}

    def test_key_without_value_maps_to_empty_string(self):
        assert parse_params("flag;other=") == {"flag": "", "other": ""}

    def test_value_keeps_later_equals_signs(self):
        params = parse_params("authorizationUrl=http://auth.local/check?a=1&b=2")
        assert params["authorizationUrl"] == "http://auth.local/check?a=1&b=2"

    def test_blank_entries_are_skipped(self):
        assert parse_params(";;type=memory;;") == {"type": "memory"}

    def test_empty_descriptor_gives_empty_mapping(self):
        assert parse_params("") == {}

    def test_empty_key_is_rejected(self):
        with pytest.raises(MalformedDescriptor):
            parse_params("type=memory;=orphan")

    def test_duplicate_key_is_rejected(self):
        with pytest.raises(MalformedDescriptor, match="more than once"):
            parse_params("type=memory;type=json")

    def test_none_is_rejected(self):
        with pytest.raises(MalformedDescriptor):
            parse_params(None)


class TestFormatParams:
    def test_sorted_and_parseable(self):
        text = format_params({"type": "memory", "gwNamespace": "tiles"})
        assert text == "gwNamespace=tiles;type=memory"
        assert parse_params(text) == {"type": "memory", "gwNamespace": "tiles"}

    def test_rejects_separator_in_value(self):
        with pytest.raises(MalformedDescriptor):
            format_params({"a": "x;y"})

    def test_rejects_equals_in_key(self):
        with pytest.raises(MalformedDescriptor):
            format_params({"a=b": "x"})


class TestIsDocumentLocator:
    @pytest.mark.parametrize("descriptor", [
        "http://config.local/raster.xml",
        "https://config.local/raster",
        "FILE:///etc/raster.xml",
        "/etc/raster/config.xml",
        "relative/config.XML",
    ])
    def test_locators(self, descriptor):
        assert is_document_locator(descriptor)

    @pytest.mark.parametrize("descriptor", [
        "type=memory",
        "dataDir=/tmp/config.xml",
        "",
        "memory",
    ])
    def test_parameter_strings(self, descriptor):
        assert not is_document_locator(descriptor)


class TestParseDocument:
    def test_children_become_pairs(self):
        doc = """<config>
            <type>memory</type>
            <gwNamespace> tiles </gwNamespace>
            <scaleTo8Bit>true</scaleTo8Bit>
        </config>"""
        assert parse_document(doc) == {"type": "memory", "gwNamespace": "tiles", "scaleTo8Bit": "true"}

    def test_nested_text_is_joined(self):
        assert parse_document("<c><a>x<b>y</b>z</a></c>") == {"a": "xyz"}

    def test_empty_element_maps_to_empty_string(self):
        assert parse_document("<c><flag/></c>") == {"flag": ""}

    def test_comments_are_ignored(self):
        assert parse_document("<c><!-- note --><a>1</a></c>") == {"a": "1"}

    def test_namespaced_tags_use_local_name(self):
        assert parse_document('<c xmlns:g="urn:g"><g:type>json</g:type></c>') == {"type": "json"}

    def test_malformed_markup(self):
        with pytest.raises(DocumentParseError):
            parse_document("<config><type>memory</config>")

    def test_repeated_child_is_rejected(self):
        with pytest.raises(DocumentParseError, match="more than once"):
            parse_document("<c><a>1</a><a>2</a></c>")

    def test_doctype_is_rejected(self):
        doc = '<!DOCTYPE config [<!ELEMENT config ANY>]><config><type>memory</type></config>'
        with pytest.raises(DocumentParseError):
            parse_document(doc)

    def test_external_entity_is_never_fetched(self, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("top-secret")
        doc = (
            f'<?xml version="1.0"?>'
            f'<!DOCTYPE config [<!ENTITY xxe SYSTEM "file://{secret}">]>'
            f'<config><type>&xxe;</type></config>'
        )
        with pytest.raises(DocumentParseError) as excinfo:
            parse_document(doc)
        assert "top-secret" not in str(excinfo.value)

    def test_entity_expansion_is_rejected(self):
        doc = (
            '<!DOCTYPE config [<!ENTITY a "aaaaaaaaaa"><!ENTITY b "&a;&a;&a;&a;">]>'
            '<config><type>&b;</type></config>'
        )
        with pytest.raises(DocumentParseError):
            parse_document(doc)


class TestReadDocument:
    def test_reads_path(self, write_xml):
        path = write_xml("<config><type>memory</type></config>")
        assert read_document(path) == {"type": "memory"}

    def test_reads_file_url(self, write_xml):
        path = write_xml("<config><type>json</type></config>")
        assert read_document(f"file://{path}") == {"type": "json"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentParseError) as excinfo:
            read_document(str(tmp_path / "absent.xml"))
        assert excinfo.value.locator.endswith("absent.xml")

    @patch("rasterconfig.configuration.params.requests.get")
    def test_reads_http(self, mock_get):
        response = Mock()
        response.content = b"<config><type>memory</type></config>"
        response.raise_for_status.return_value = None
        mock_get.return_value = response

        assert read_document("http://config.local/raster.xml", timeout=3) == {"type": "memory"}
        mock_get.assert_called_once_with("http://config.local/raster.xml", timeout=3)

    @patch("rasterconfig.configuration.params.requests.get")
    def test_http_error_status(self, mock_get):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        mock_get.return_value = response

        with pytest.raises(DocumentParseError, match="404"):
            read_document("http://config.local/missing.xml")

    @patch("rasterconfig.configuration.params.requests.get")
    def test_unreachable_host(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(DocumentParseError):
            read_document("https://config.local/raster.xml")
