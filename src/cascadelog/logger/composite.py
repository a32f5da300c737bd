"""
Composite provider: one entry, many referenced providers.

Configured with provider<N> attributes. N need not be contiguous; the
referenced providers are called in ascending order of N.

    <composite> provider1="database" provider2="console" provider10="mem"
"""

from __future__ import annotations

import re
from typing import Any, Mapping, MutableMapping, Optional

from cascadelog.logger.errors import (
    AggregateLoggingError,
    ConfigurationError,
    ProviderNotInitializedError,
)
from cascadelog.logger.providers import LoggingProvider
from cascadelog.logger.records import LogEntry

REFERENCE_ATTRIBUTE = re.compile(r"^provider(\d+)$")


def reference_attributes(attributes: Mapping[str, str]) -> list[tuple[int, str, str]]:
    """(N, key, value) for every provider<N> attribute, sorted by N."""
    found = []
    for key, value in attributes.items():
        match = REFERENCE_ATTRIBUTE.match(key)
        if match:
            found.append((int(match.group(1)), key, value))
    return sorted(found)


class CompositeProvider(LoggingProvider):
    """
    Fans an entry out to every referenced provider.

    Every referenced provider is called even when an earlier one fails.
    Failures are collected and raised as a single AggregateLoggingError.
    """

    default_description = "Composite logging provider"

    def __init__(self) -> None:
        super().__init__()
        self._reference_names: tuple[str, ...] = ()
        self._providers: tuple[LoggingProvider, ...] = ()

    @property
    def reference_names(self) -> tuple[str, ...]:
        return self._reference_names

    @property
    def providers(self) -> tuple[LoggingProvider, ...]:
        if not self.is_initialized:
            raise ProviderNotInitializedError(
                "CompositeProvider has not been initialized"
            )
        return self._providers

    @classmethod
    def referenced_names(cls, attributes: Mapping[str, str]) -> list[str]:
        return [value for _, _, value in reference_attributes(attributes) if value]

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        references = reference_attributes(attributes)
        if not references:
            raise ConfigurationError(
                f"Provider '{name}' must reference at least one provider through "
                f"a 'provider<N>' attribute (for instance provider1=\"MyProvider\")",
                provider_name=name,
            )

        names = []
        for _, key, value in references:
            if not value:
                raise ConfigurationError(
                    f"Attribute '{key}' of provider '{name}' must not be empty",
                    provider_name=name,
                    attribute=key,
                )
            names.append(value)
            del attributes[key]

        self._reference_names = tuple(names)

    def _resolve_references(
        self,
        registry: Mapping[str, LoggingProvider],
        default_provider: Optional[LoggingProvider],
    ) -> None:
        resolved: list[LoggingProvider] = []
        seen: set[str] = set()
        for reference in self._reference_names:
            if reference in seen:
                raise ConfigurationError(
                    f"Provider '{self.name}' references provider '{reference}' more than once",
                    provider_name=self.name,
                )
            seen.add(reference)

            if reference == self.name:
                raise ConfigurationError(
                    f"Provider '{self.name}' references itself: "
                    f"circular reference detected involving provider '{self.name}'",
                    provider_name=self.name,
                )

            provider = registry.get(reference)
            if provider is None:
                raise ConfigurationError(
                    f"Provider '{self.name}' references provider '{reference}', "
                    f"which is not configured",
                    provider_name=self.name,
                )
            if not provider.is_initialized:
                raise ConfigurationError(
                    f"Provider '{self.name}' references provider '{reference}', "
                    f"which has not been initialized",
                    provider_name=self.name,
                )
            resolved.append(provider)

        self._providers = tuple(resolved)

    def _write(self, entry: LogEntry) -> Any:
        if not self.is_wired:
            raise ProviderNotInitializedError(
                f"Composite provider '{self.name}' has not been wired: "
                f"call complete_initialization() before logging"
            )

        results = []
        failures: list[Exception] = []
        for provider in self._providers:
            try:
                results.append(provider.log(entry))
            except Exception as exc:
                failures.append(exc)

        if failures:
            raise AggregateLoggingError(self.name, failures) from failures[0]

        # First referenced provider's id identifies the entry.
        return results[0] if results else None

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["providers"] = list(self._reference_names)
        return info
