"""
Tests for the pydantic configuration layer.

Covers:
- ProviderDescriptor: validation, attribute stringification, reserved keys
- LoggingConfig: from_dict, from_yaml_string, from_yaml
- Error reporting as ConfigurationError
"""

import pytest

from cascadelog.config import LoggingConfig, ProviderDescriptor
from cascadelog.logger.errors import ConfigurationError


SAMPLE_YAML = """
logging:
  default_provider: main
  providers:
    - name: main
      type: Composite
      fallbackProvider: emergency
      attributes:
        provider1: database
        provider2: console
    - name: database
      type: sql
      attributes:
        database: logs/events.duckdb
        initializeSchema: true
    - name: console
      type: console
      threshold: warning
      attributes:
        color: false
    - name: emergency
      type: memory
      attributes:
        capacity: 500
"""


# ═══════════════════════════════════════════════════════════════════
#  ProviderDescriptor
# ═══════════════════════════════════════════════════════════════════

class TestProviderDescriptor:
    def test_minimal(self):
        d = ProviderDescriptor(name="mem", type="memory")
        assert d.attributes == {}
        assert d.fallback_provider is None
        assert d.threshold is None

    def test_type_normalized(self):
        assert ProviderDescriptor(name="c", type=" Composite ").type == "composite"

    def test_name_stripped(self):
        assert ProviderDescriptor(name="  mem ", type="memory").name == "mem"

    @pytest.mark.parametrize("field", ["name", "type"])
    def test_empty_rejected(self, field):
        data = {"name": "mem", "type": "memory", field: "   "}
        with pytest.raises(ValueError, match="must not be empty"):
            ProviderDescriptor(**data)

    def test_attribute_values_stringified(self):
        d = ProviderDescriptor(
            name="db", type="sql",
            attributes={"initializeSchema": True, "capacity": 10, "color": False},
        )
        assert d.attributes == {"initializeSchema": "true", "capacity": "10", "color": "false"}

    def test_camel_case_fallback_field(self):
        d = ProviderDescriptor(name="a", type="memory", fallbackProvider="b")
        assert d.fallback_provider == "b"

    def test_reserved_keys_lifted_from_attributes(self):
        d = ProviderDescriptor(
            name="a", type="memory",
            attributes={"fallbackProvider": "b", "threshold": "error", "capacity": "3"},
        )
        assert d.fallback_provider == "b"
        assert d.threshold == "error"
        assert d.attributes == {"capacity": "3"}

    def test_conflicting_reserved_key(self):
        with pytest.raises(ValueError, match="both as a field and as an attribute"):
            ProviderDescriptor(
                name="a", type="memory", fallbackProvider="b",
                attributes={"fallbackProvider": "c"},
            )

    def test_numeric_threshold_stringified(self):
        assert ProviderDescriptor(name="a", type="memory", threshold=40).threshold == "40"

    def test_blank_fallback_is_none(self):
        assert ProviderDescriptor(name="a", type="memory", fallbackProvider=" ").fallback_provider is None

    def test_provider_attributes_is_fresh_copy(self):
        d = ProviderDescriptor(
            name="a", type="memory", fallbackProvider="b", threshold="warning",
            attributes={"capacity": "3"},
        )
        attributes = d.provider_attributes()
        assert attributes == {"capacity": "3", "fallbackProvider": "b", "threshold": "warning"}
        attributes.clear()
        assert d.attributes == {"capacity": "3"}

    def test_frozen(self):
        d = ProviderDescriptor(name="a", type="memory")
        with pytest.raises(Exception):
            d.name = "b"


# ═══════════════════════════════════════════════════════════════════
#  LoggingConfig
# ═══════════════════════════════════════════════════════════════════

class TestLoggingConfig:
    def test_from_yaml_string(self):
        config = LoggingConfig.from_yaml_string(SAMPLE_YAML)
        assert config.default_provider == "main"
        assert [p.name for p in config.providers] == ["main", "database", "console", "emergency"]

        main = config.providers[0]
        assert main.type == "composite"
        assert main.fallback_provider == "emergency"
        assert main.attributes == {"provider1": "database", "provider2": "console"}

        database = config.providers[1]
        assert database.attributes["initializeSchema"] == "true"

        console = config.providers[2]
        assert console.threshold == "warning"
        assert console.attributes == {"color": "false"}

        assert config.providers[3].attributes == {"capacity": "500"}

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "logging.yaml"
        path.write_text(SAMPLE_YAML)
        config = LoggingConfig.from_yaml(path)
        assert len(config.providers) == 4

    def test_from_dict_without_logging_key(self):
        config = LoggingConfig.from_dict({
            "default_provider": "mem",
            "providers": [{"name": "mem", "type": "memory"}],
        })
        assert config.providers[0].type == "memory"

    def test_invalid_yaml(self):
        with pytest.raises(ConfigurationError, match="Invalid logging configuration YAML"):
            LoggingConfig.from_yaml_string("logging: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            LoggingConfig.from_yaml_string("- just\n- a list\n")

    def test_empty_document(self):
        with pytest.raises(ConfigurationError):
            LoggingConfig.from_yaml_string("")

    def test_missing_default_provider(self):
        with pytest.raises(ConfigurationError, match="default_provider"):
            LoggingConfig.from_dict({"providers": [{"name": "mem", "type": "memory"}]})

    def test_missing_type(self):
        with pytest.raises(ConfigurationError, match="type"):
            LoggingConfig.from_dict({"default_provider": "mem", "providers": [{"name": "mem"}]})

    def test_validation_errors_are_configuration_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            LoggingConfig.from_dict({"default_provider": "", "providers": []})
        assert isinstance(exc_info.value, ValueError)

    def test_to_dict(self):
        config = LoggingConfig.from_dict({
            "default_provider": "mem",
            "providers": [{"name": "mem", "type": "memory", "threshold": "error"}],
        })
        data = config.to_dict()
        assert data["providers"][0] == {
            "name": "mem", "type": "memory", "attributes": {}, "threshold": "error",
        }

    def test_round_trip_through_dict(self):
        config = LoggingConfig.from_yaml_string(SAMPLE_YAML)
        assert LoggingConfig.from_dict(config.to_dict()) == config
