"""
Tests for JSON/YAML serialization

These tests verify the serialization bridge:
- to_json()/to_yaml() followed by from_json()/from_yaml() round-trips
- Every supported source form (text, bytes, path, stream, URL)
- Invalid documents raise ConfigParseError
- I/O errors propagate unchanged

Run with: python -m pytest tests/test_serialization.py -v
"""

import io
import json
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests
import yaml

from kvconfig import ConfigFormat, ConfigParseError
from kvconfig.codec import Codec, StringCodec
from kvconfig.codec import codecs as codecs_module
from kvconfig.config.settings import settings
from kvconfig.config.topology_config import TopologyConfig
from kvconfig.servers import ReadMode, TopologyKind

SENTINEL_YAML = """\
threads: 4
nettyThreads: 0
referenceFeatureEnabled: false
sentinelServersConfig:
  masterName: mymaster
  sentinelAddresses:
    - 10.0.0.1:26379
    - 10.0.0.2:26379
  readMode: MASTER_SLAVE
"""


class PrefixCodec(Codec):
    """Codec that cannot be created without a prefix argument."""

    def __init__(self, prefix: bytes):
        self.prefix = prefix

    def encode(self, value):
        return self.prefix + value

    def decode(self, data):
        return data[len(self.prefix):]


def loaders(fmt: ConfigFormat):
    if fmt is ConfigFormat.JSON:
        return TopologyConfig.to_json, TopologyConfig.from_json
    return TopologyConfig.to_yaml, TopologyConfig.from_yaml


@pytest.fixture(params=list(ConfigFormat), ids=lambda fmt: fmt.value)
def fmt(request) -> ConfigFormat:
    """Parametrize a test over JSON and YAML."""
    return request.param


class TestRoundTrip:
    """Test serialize-then-deserialize yields an equal config."""

    def test_sentinel_round_trip(self, sentinel_config: TopologyConfig, fmt):
        """Test the sentinel scenario round-trips in both formats."""
        dump, load = loaders(fmt)

        loaded = load(dump(sentinel_config))

        assert loaded == sentinel_config
        assert loaded.threads == 4
        assert loaded.netty_threads == 0
        assert loaded.reference_feature_enabled is False
        assert loaded.sentinel_servers_config.master_name == "mymaster"
        assert loaded.sentinel_servers_config.sentinel_addresses == [
            "10.0.0.1:26379",
            "10.0.0.2:26379",
            "10.0.0.3:26379",
        ]

    def test_every_kind_round_trips(self, config, select, topology_kind, make_server_config, fmt):
        """Test every topology kind round-trips with non-default values."""
        select(config, topology_kind, make_server_config(topology_kind))
        dump, load = loaders(fmt)

        loaded = load(dump(config))

        assert loaded == config
        assert loaded.topology is topology_kind

    def test_unselected_round_trips(self, config: TopologyConfig, fmt):
        """Test a config without a topology round-trips."""
        dump, load = loaders(fmt)

        loaded = load(dump(config))

        assert loaded == config
        assert loaded.topology is None

    def test_codec_round_trips(self, single_config: TopologyConfig, fmt):
        """Test a configured codec is restored by class."""
        single_config.codec = StringCodec()
        dump, load = loaders(fmt)

        loaded = load(dump(single_config))

        assert isinstance(loaded.codec, StringCodec)

    def test_enum_and_optional_fields(self, config: TopologyConfig, fmt):
        """Test enums and None values survive the round trip."""
        cluster = config.use_cluster_servers().add_node_address("n1:7000")
        cluster.read_mode = ReadMode.MASTER
        cluster.password = None
        cluster.client_name = "svc"
        dump, load = loaders(fmt)

        loaded = load(dump(config))

        assert loaded.cluster_servers_config.read_mode is ReadMode.MASTER
        assert loaded.cluster_servers_config.password is None
        assert loaded.cluster_servers_config.client_name == "svc"

    def test_runtime_resources_excluded(self, single_config: TopologyConfig, fmt):
        """Test executor and event loop are never written."""
        with ThreadPoolExecutor(max_workers=1) as executor:
            single_config.executor = executor
            single_config.event_loop_group = MagicMock()
            dump, load = loaders(fmt)

            loaded = load(dump(single_config))

        assert loaded.executor is None
        assert loaded.event_loop_group is None
        loaded.executor = single_config.executor
        loaded.event_loop_group = single_config.event_loop_group
        assert loaded == single_config


class TestDocumentLayout:
    """Test the persisted document shape."""

    def test_top_level_keys(self, sentinel_config: TopologyConfig):
        """Test shared settings and exactly one topology key are written."""
        document = json.loads(sentinel_config.to_json())

        assert document["threads"] == 4
        assert document["nettyThreads"] == 0
        assert document["referenceFeatureEnabled"] is False
        assert document["useNativeTransport"] is False
        assert "sentinelServersConfig" in document
        for kind in TopologyKind:
            if kind is not TopologyKind.SENTINEL:
                assert kind.key not in document
        assert "executor" not in document
        assert "eventLoopGroup" not in document

    def test_unset_codec_omitted(self, config: TopologyConfig):
        """Test no codec key is written when the codec is unset."""
        assert "codec" not in config.to_dict()

    def test_strategies_as_class_references(self, config: TopologyConfig):
        """Test codec and providers are written as class references."""
        config.ensure_default_codec()
        document = config.to_dict()

        assert document["codec"] == {"class": "kvconfig.codec.codecs.JsonCodec"}
        assert document["codecProvider"] == {"class": "kvconfig.codec.provider.DefaultCodecProvider"}
        assert document["resolverProvider"] == {"class": "kvconfig.resolver.DefaultResolverProvider"}

    def test_camel_case_server_keys(self, single_config: TopologyConfig):
        """Test server config fields use camelCase keys."""
        document = yaml.safe_load(single_config.to_yaml())
        single = document["singleServerConfig"]

        assert single["address"] == "redis://127.0.0.1:6379"
        assert single["connectionPoolSize"] == 64
        assert single["sslEnableEndpointIdentification"] is True

    def test_slave_addresses_sorted_list(self, config: TopologyConfig):
        """Test set fields are written as sorted lists."""
        config.use_master_slave_servers().add_slave_address("r2:6379", "r1:6379")

        document = config.to_dict()

        assert document["masterSlaveServersConfig"]["slaveAddresses"] == ["r1:6379", "r2:6379"]

    def test_partial_document_uses_defaults(self):
        """Test missing keys keep their defaults."""
        loaded = TopologyConfig.from_yaml(SENTINEL_YAML)

        sentinel = loaded.sentinel_servers_config
        assert sentinel.read_mode is ReadMode.MASTER_SLAVE
        assert sentinel.scan_interval == 1000
        assert loaded.use_native_transport is False
        assert loaded.codec is None

    def test_yaml_reads_json_text(self, sentinel_config: TopologyConfig):
        """Test JSON text is also accepted by the YAML reader."""
        assert TopologyConfig.from_yaml(sentinel_config.to_json()) == sentinel_config


class TestSources:
    """Test every supported input source."""

    def test_bytes(self):
        """Test loading from bytes."""
        loaded = TopologyConfig.from_yaml(SENTINEL_YAML.encode("utf-8"))
        assert loaded.topology is TopologyKind.SENTINEL

    def test_path(self, tmp_path):
        """Test loading from a file path."""
        path = tmp_path / "client.yaml"
        path.write_text(SENTINEL_YAML)

        loaded = TopologyConfig.from_yaml(path)

        assert loaded == TopologyConfig.from_yaml(SENTINEL_YAML)

    def test_binary_stream(self):
        """Test loading from a binary stream."""
        loaded = TopologyConfig.from_yaml(io.BytesIO(SENTINEL_YAML.encode("utf-8")))
        assert loaded == TopologyConfig.from_yaml(SENTINEL_YAML)

    def test_text_stream(self, sentinel_config: TopologyConfig):
        """Test loading from a text stream."""
        loaded = TopologyConfig.from_json(io.StringIO(sentinel_config.to_json()))
        assert loaded == sentinel_config

    def test_url(self, sentinel_config: TopologyConfig):
        """Test loading from an http URL."""
        response = MagicMock()
        response.content = sentinel_config.to_json().encode("utf-8")

        with patch("kvconfig.config.support.requests.get", return_value=response) as mock_get:
            loaded = TopologyConfig.from_json("https://config.example.com/client.json")

        mock_get.assert_called_once_with("https://config.example.com/client.json")
        response.raise_for_status.assert_called_once()
        assert loaded == sentinel_config

    def test_unsupported_source(self):
        """Test an unsupported source type raises TypeError."""
        with pytest.raises(TypeError):
            TopologyConfig.from_json(42)


class TestIOErrors:
    """Test I/O failures propagate unchanged."""

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            TopologyConfig.from_yaml(tmp_path / "missing.yaml")

    def test_http_error(self):
        """Test an HTTP error status raises requests.HTTPError."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")

        with patch("kvconfig.config.support.requests.get", return_value=response):
            with pytest.raises(requests.HTTPError):
                TopologyConfig.from_yaml("http://config.example.com/missing.yaml")

    def test_connection_error(self):
        """Test a connection failure raises requests.ConnectionError."""
        with patch(
            "kvconfig.config.support.requests.get",
            side_effect=requests.ConnectionError("refused"),
        ):
            with pytest.raises(requests.ConnectionError):
                TopologyConfig.from_json("http://127.0.0.1:1/client.json")


class TestParseErrors:
    """Test invalid documents raise ConfigParseError."""

    def test_two_topologies(self, fmt):
        """Test two populated topology keys are rejected."""
        document = {
            "singleServerConfig": {"address": "a:6379"},
            "clusterServersConfig": {"nodeAddresses": ["b:7000"]},
        }
        text = json.dumps(document) if fmt is ConfigFormat.JSON else yaml.safe_dump(document)
        _, load = loaders(fmt)

        with pytest.raises(ConfigParseError, match="Only one topology"):
            load(text)

    def test_null_topology_key_ignored(self):
        """Test a topology key with a null value does not count as populated."""
        loaded = TopologyConfig.from_json(
            '{"singleServerConfig": null, "clusterServersConfig": {"nodeAddresses": ["b:7000"]}}'
        )
        assert loaded.is_clustered()

    def test_json_syntax_error_position(self):
        """Test a JSON syntax error carries line and column."""
        with pytest.raises(ConfigParseError) as exc_info:
            TopologyConfig.from_json('{\n  "threads": 4,\n  oops\n}')

        assert exc_info.value.line == 3
        assert exc_info.value.column is not None
        assert exc_info.value.source == "<string>"

    def test_yaml_syntax_error_position(self):
        """Test a YAML syntax error carries line and column."""
        with pytest.raises(ConfigParseError) as exc_info:
            TopologyConfig.from_yaml("threads: 4\nsingleServerConfig: [unclosed\n")

        assert exc_info.value.line is not None

    def test_error_names_file(self, tmp_path):
        """Test the error names the file it came from."""
        path = tmp_path / "bad.json"
        path.write_text("{")

        with pytest.raises(ConfigParseError, match="bad.json"):
            TopologyConfig.from_json(path)

    def test_is_value_error(self):
        """Test ConfigParseError can be caught as ValueError."""
        with pytest.raises(ValueError):
            TopologyConfig.from_json("[]")

    @pytest.mark.parametrize("text, message", [
        ("[]", "mapping"),
        ("", "mapping"),
        ("unknownKey: 1", "Unknown field"),
        ("executor: pool", "Unknown field"),
        ("threads: many", "threads: expected int"),
        ("threads: true", "threads: expected int"),
        ("threads: -1", "non-negative"),
        ("referenceFeatureEnabled: 1", "expected bool"),
        ("singleServerConfig: 5", "expected a mapping"),
        ("singleServerConfig: {adress: 'a:6379'}", "unknown field"),
        ("singleServerConfig: {address: 'nohost'}", "Invalid address"),
        ("singleServerConfig: {timeout: -5}", "non-negative"),
        ("clusterServersConfig: {nodeAddresses: 'a:7000'}", "expected a list"),
        ("clusterServersConfig: {readMode: ANY}", "expected one of"),
        ("codec: {class: no.such.Codec}", "cannot import"),
        ("codec: {class: kvconfig.resolver.UUIDResolver}", "is not a Codec"),
        ("codec: json", "single 'class' key"),
        ("codec: {class: kvconfig.codec.codecs.Codec}", "is abstract"),
        ("codecProvider: {class: kvconfig.codec.provider.CodecProvider}", "is abstract"),
        ("resolverProvider: {class: kvconfig.resolver.ResolverProvider}", "is abstract"),
    ])
    def test_invalid_documents(self, text, message):
        """Test each invalid document is rejected with a useful message."""
        with pytest.raises(ConfigParseError, match=message):
            TopologyConfig.from_yaml(text)

    def test_codec_needing_arguments(self, monkeypatch):
        """Test a codec class whose constructor takes arguments is rejected."""
        monkeypatch.setattr(codecs_module, "PrefixCodec", PrefixCodec, raising=False)

        with pytest.raises(ConfigParseError, match="cannot instantiate") as exc_info:
            TopologyConfig.from_yaml("codec: {class: kvconfig.codec.codecs.PrefixCodec}")

        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_untrusted_module(self, monkeypatch):
        """Test class references outside the trusted prefixes are not imported."""
        monkeypatch.setattr(settings, "TRUSTED_MODULE_PREFIXES", ("kvconfig.",))

        with patch("kvconfig.config.support.importlib.import_module") as mock_import:
            with pytest.raises(ConfigParseError, match="not allowed"):
                TopologyConfig.from_yaml("codec: {class: collections.OrderedDict}")

        mock_import.assert_not_called()

    def test_trusted_module(self, monkeypatch):
        """Test class references inside the trusted prefixes still load."""
        monkeypatch.setattr(settings, "TRUSTED_MODULE_PREFIXES", ("kvconfig",))

        loaded = TopologyConfig.from_yaml("codec: {class: kvconfig.codec.codecs.StringCodec}")

        assert isinstance(loaded.codec, StringCodec)

    @pytest.mark.parametrize("load", [TopologyConfig.from_json, TopologyConfig.from_yaml])
    def test_deeply_nested_document(self, load):
        """Test a document nested past the recursion limit is a parse error."""
        with pytest.raises(ConfigParseError):
            load("[" * 100000 + "]" * 100000)

    def test_invalid_utf8(self):
        """Test undecodable bytes are rejected."""
        with pytest.raises(ConfigParseError, match="utf-8"):
            TopologyConfig.from_json(b'{"threads": "\xff"}')

    def test_duplicate_node_addresses(self):
        """Test repeated node addresses load once, like add_node_address()."""
        loaded = TopologyConfig.from_yaml("clusterServersConfig: {nodeAddresses: ['a:1', 'a:1']}")

        assert loaded.cluster_servers_config.node_addresses == ["a:1"]


class TestByteOrderMark:
    """Test UTF-8 content starting with a byte order mark."""

    def test_json_bytes(self, sentinel_config: TopologyConfig):
        """Test JSON bytes with a byte order mark load."""
        loaded = TopologyConfig.from_json(b"\xef\xbb\xbf" + sentinel_config.to_json().encode("utf-8"))
        assert loaded == sentinel_config

    def test_yaml_path(self, tmp_path, sentinel_config: TopologyConfig):
        """Test a YAML file saved with a byte order mark loads."""
        path = tmp_path / "client.yaml"
        path.write_bytes(b"\xef\xbb\xbf" + sentinel_config.to_yaml().encode("utf-8"))

        assert TopologyConfig.from_yaml(path) == sentinel_config

    def test_json_text(self, sentinel_config: TopologyConfig):
        """Test JSON text starting with a byte order mark loads."""
        assert TopologyConfig.from_json("\ufeff" + sentinel_config.to_json()) == sentinel_config


class TestDictEntryPoints:
    """Test to_dict()/from_dict() directly."""

    def test_from_dict(self):
        """Test building a config from a plain dict."""
        loaded = TopologyConfig.from_dict({
            "threads": 8,
            "singleServerConfig": {"address": "cache:6379", "database": 1},
        })

        assert loaded.threads == 8
        assert loaded.single_server_config.database == 1

    def test_to_dict_is_plain_data(self, sentinel_config: TopologyConfig):
        """Test the document holds only JSON-compatible values."""
        document = sentinel_config.to_dict()
        assert json.loads(json.dumps(document)) == document
