"""
Pydantic configuration schemas for cascadelog.

A logging configuration is a default provider name plus an ordered list
of provider descriptors. Every descriptor attribute is a string, exactly
as a provider's initialize() receives it.

Usage:
    config = LoggingConfig.from_yaml("logging.yaml")
    Logger.instance().configure(config)

Minimal YAML:
    logging:
      default_provider: main
      providers:
        - name: main
          type: composite
          fallbackProvider: memory
          attributes:
            provider1: database
            provider2: console
        - name: database
          type: sql
          attributes: {database: logs/events.duckdb, initializeSchema: true}
        - name: console
          type: console
          threshold: warning
        - name: memory
          type: memory
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from cascadelog.logger.errors import ConfigurationError

RESERVED_ATTRIBUTES = {
    "fallbackProvider": "fallback_provider",
    "fallback_provider": "fallback_provider",
    "threshold": "threshold",
}


# ═══════════════════════════════════════════════════════════════════
#  Provider descriptor
# ═══════════════════════════════════════════════════════════════════

class ProviderDescriptor(BaseModel):
    """
    Declarative description of one provider. Immutable once parsed.

    `fallbackProvider` and `threshold` may be given either as fields or
    inside `attributes`; both end up in the dedicated fields.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    attributes: dict[str, str] = {}
    fallback_provider: Optional[str] = None
    threshold: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def lift_reserved_attributes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "fallbackProvider" in data:
            data["fallback_provider"] = data.pop("fallbackProvider")
        attributes = dict(data.get("attributes") or {})
        for key, field_name in RESERVED_ATTRIBUTES.items():
            if key in attributes:
                value = attributes.pop(key)
                if data.get(field_name) not in (None, "") and data[field_name] != value:
                    raise ValueError(
                        f"'{key}' is given both as a field and as an attribute "
                        f"of provider '{data.get('name')}'"
                    )
                data[field_name] = value
        data["attributes"] = attributes
        return data

    @field_validator("name", "type")
    @classmethod
    def not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        return value.lower()

    @field_validator("attributes", mode="before")
    @classmethod
    def stringify_attributes(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {str(k): _to_attribute_string(v) for k, v in value.items()}

    @field_validator("fallback_provider", "threshold", mode="before")
    @classmethod
    def stringify_optional(cls, value: Any) -> Any:
        if value is None:
            return None
        text = _to_attribute_string(value).strip()
        return text or None

    def provider_attributes(self) -> dict[str, str]:
        """Fresh mutable attribute dict for LoggingProvider.initialize()."""
        attributes = dict(self.attributes)
        if self.fallback_provider:
            attributes["fallbackProvider"] = self.fallback_provider
        if self.threshold:
            attributes["threshold"] = self.threshold
        return attributes


# ═══════════════════════════════════════════════════════════════════
#  Logging configuration
# ═══════════════════════════════════════════════════════════════════

class LoggingConfig(BaseModel):
    """Top-level logging section: default provider + provider list."""

    default_provider: str
    providers: list[ProviderDescriptor]

    @field_validator("default_provider")
    @classmethod
    def default_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoggingConfig":
        """Load and validate from a YAML file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml_string(raw)

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "LoggingConfig":
        """Load and validate from a YAML string."""
        try:
            data = yaml.safe_load(yaml_string)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid logging configuration YAML: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> "LoggingConfig":
        """Load and validate from a dict, optionally nested under 'logging'."""
        if isinstance(data, dict) and isinstance(data.get("logging"), dict):
            data = data["logging"]
        if not isinstance(data, dict):
            raise ConfigurationError("Logging configuration must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid logging configuration: {exc}") from exc

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(exclude_none=exclude_none)


def _to_attribute_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
