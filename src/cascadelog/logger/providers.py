"""
Provider base class.

A provider is configured in two phases. initialize() consumes the
attributes it recognizes and rejects the rest; complete_initialization()
runs once every provider exists and turns name references (fallback,
composite members) into direct links.

    provider = MemoryProvider()
    provider.initialize("mem", {"threshold": "warning"})
    provider.complete_initialization(registry, default_provider)
    provider.log(LogEntry.create("error", "disk full"))
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, MutableMapping, Optional

from cascadelog.logger.errors import (
    CascadeLogError,
    ConfigurationError,
    LoggingWriteError,
    ProviderNotInitializedError,
)
from cascadelog.logger.records import LogEntry, Severity

logger = logging.getLogger(__name__)

DESCRIPTION_ATTRIBUTE = "description"
THRESHOLD_ATTRIBUTE = "threshold"
FALLBACK_ATTRIBUTE = "fallbackProvider"


class LoggingProvider(ABC):
    """
    Base provider: threshold gate, write, one-hop fallback.

    Subclasses implement _write() and may pop their own attributes in
    _configure(). Any attribute still present afterwards is rejected.
    """

    default_description = "Logging provider"

    def __init__(self) -> None:
        self._name: Optional[str] = None
        self._description: Optional[str] = None
        self._threshold = Severity.DEBUG
        self._fallback_provider_name: Optional[str] = None
        self._fallback_provider: Optional[LoggingProvider] = None
        self._initialized = False
        self._wired = False

    # ── Identity ──────────────────────────────────────────────────

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def threshold(self) -> Severity:
        return self._threshold

    @property
    def fallback_provider_name(self) -> Optional[str]:
        return self._fallback_provider_name

    @property
    def fallback_provider(self) -> Optional["LoggingProvider"]:
        return self._fallback_provider

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_wired(self) -> bool:
        return self._wired

    # ── Lifecycle ─────────────────────────────────────────────────

    def initialize(self, name: str, attributes: Optional[MutableMapping[str, str]]) -> None:
        """
        Consume configuration attributes.

        Recognized keys are removed from `attributes`. Raises
        ConfigurationError when called twice, when attributes is None,
        when name is empty, or when unrecognized attributes remain.
        """
        if self._initialized:
            raise ConfigurationError(
                f"Provider '{self._name}' has already been initialized",
                provider_name=self._name,
            )
        if attributes is None:
            raise ConfigurationError(
                f"Attributes for provider '{name}' must not be None",
                provider_name=name,
            )
        if not name:
            raise ConfigurationError("Provider name must not be empty")

        description = attributes.pop(DESCRIPTION_ATTRIBUTE, None) or self.default_description
        threshold = pop_severity(name, attributes, THRESHOLD_ATTRIBUTE, Severity.DEBUG)
        fallback_name = attributes.pop(FALLBACK_ATTRIBUTE, None) or None

        self._configure(name, attributes)
        check_for_unrecognized_attributes(name, attributes)

        # Assigned last so a failed initialize leaves the provider untouched.
        self._name = name
        self._description = description
        self._threshold = threshold
        self._fallback_provider_name = fallback_name
        self._initialized = True

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        """Pop provider-specific attributes. Override in subclasses."""

    def complete_initialization(
        self,
        registry: Mapping[str, "LoggingProvider"],
        default_provider: Optional["LoggingProvider"],
    ) -> None:
        """
        Resolve the fallback provider name against the registry, then the
        subclass's own references. The provider is marked wired only when
        every reference resolved.
        """
        self._require_initialized()

        fallback = None
        if self._fallback_provider_name:
            if self._fallback_provider_name == self._name:
                raise ConfigurationError(
                    f"Provider '{self._name}' names itself as fallbackProvider: "
                    f"circular reference detected involving provider '{self._name}'",
                    provider_name=self._name,
                    attribute=FALLBACK_ATTRIBUTE,
                )
            fallback = registry.get(self._fallback_provider_name)
            if fallback is None:
                raise ConfigurationError(
                    f"The fallbackProvider '{self._fallback_provider_name}' of provider "
                    f"'{self._name}' does not reference a configured provider",
                    provider_name=self._name,
                    attribute=FALLBACK_ATTRIBUTE,
                )

        self._resolve_references(registry, default_provider)
        self._fallback_provider = fallback
        self._wired = True

    def _resolve_references(
        self,
        registry: Mapping[str, "LoggingProvider"],
        default_provider: Optional["LoggingProvider"],
    ) -> None:
        """Resolve provider-specific references. Override in subclasses."""

    def close(self) -> None:
        """Release resources. Override if the provider holds any."""

    # ── Logging ───────────────────────────────────────────────────

    def log(self, entry: LogEntry) -> Any:
        """
        Log an entry. Returns the sink's id, or None when the entry is
        below the threshold. A failed write is handed to the fallback
        provider when one is wired; otherwise the failure is raised.
        """
        self._require_initialized()

        if entry.severity < self._threshold:
            return None

        try:
            return self._write(entry)
        except Exception as exc:
            if isinstance(exc, CascadeLogError):
                error = exc
            else:
                error = LoggingWriteError(self._name, exc)

            if self._fallback_provider is None:
                if error is exc:
                    raise
                raise error from exc

            logger.warning(
                "Provider '%s' failed, logging to fallback provider '%s': %s",
                self._name, self._fallback_provider.name, error,
            )
            return self._fallback_provider.log(entry)

    @abstractmethod
    def _write(self, entry: LogEntry) -> Any:
        """Write an entry to the backing sink and return its id."""
        ...

    # ── Introspection ─────────────────────────────────────────────

    @classmethod
    def referenced_names(cls, attributes: Mapping[str, str]) -> list[str]:
        """Provider names this type references through its attributes."""
        return []

    def describe(self) -> dict[str, Any]:
        return {
            "type": type(self).__name__,
            "description": self._description,
            "threshold": self._threshold.name,
            "fallback_provider": self._fallback_provider_name,
        }

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise ProviderNotInitializedError(
                f"{type(self).__name__} has not been initialized"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self._name!r}>"


# ── Attribute helpers ─────────────────────────────────────────────────

def check_for_unrecognized_attributes(name: str, attributes: Mapping[str, str]) -> None:
    """Reject whatever a provider left behind in its attributes."""
    if attributes:
        keys = ", ".join(f"'{key}'" for key in sorted(attributes))
        raise ConfigurationError(
            f"Unrecognized attribute(s) {keys} in the configuration of provider '{name}'",
            provider_name=name,
            attribute=sorted(attributes)[0],
        )


def pop_required(name: str, attributes: MutableMapping[str, str], key: str) -> str:
    value = attributes.pop(key, None)
    if not value:
        raise ConfigurationError(
            f"Missing mandatory attribute '{key}' in the configuration of provider '{name}'",
            provider_name=name,
            attribute=key,
        )
    return value


def pop_bool(name: str, attributes: MutableMapping[str, str], key: str, default: bool) -> bool:
    value = attributes.pop(key, None)
    if value is None or value == "":
        return default
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ConfigurationError(
        f"Invalid value '{value}' for attribute '{key}' of provider '{name}': "
        f"expected 'true' or 'false'",
        provider_name=name,
        attribute=key,
    )


def pop_int(name: str, attributes: MutableMapping[str, str], key: str, default: int) -> int:
    value = attributes.pop(key, None)
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        number = -1
    if number < 1:
        raise ConfigurationError(
            f"Invalid value '{value}' for attribute '{key}' of provider '{name}': "
            f"expected a positive integer",
            provider_name=name,
            attribute=key,
        )
    return number


def pop_choice(
    name: str,
    attributes: MutableMapping[str, str],
    key: str,
    choices: tuple[str, ...],
    default: str,
) -> str:
    value = attributes.pop(key, None)
    if value is None or value == "":
        return default
    lowered = value.strip().lower()
    if lowered not in choices:
        raise ConfigurationError(
            f"Invalid value '{value}' for attribute '{key}' of provider '{name}'. "
            f"Valid values: {', '.join(choices)}",
            provider_name=name,
            attribute=key,
        )
    return lowered


def pop_severity(
    name: str,
    attributes: MutableMapping[str, str],
    key: str,
    default: Severity,
) -> Severity:
    value = attributes.pop(key, None)
    if value is None or value == "":
        return default
    try:
        return Severity.from_value(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid value '{value}' for attribute '{key}' of provider '{name}': {exc}",
            provider_name=name,
            attribute=key,
        ) from exc
