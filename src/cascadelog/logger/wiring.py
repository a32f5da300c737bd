"""
Provider registry construction.

Two phases, because providers may reference providers that appear later
in the descriptor list:

  1. construct every provider and call initialize(name, attributes)
  2. call complete_initialization(registry, default) on every provider

The reference graph is checked for cycles before phase 1. Either every
provider ends up wired or build_registry raises and nothing is returned.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping, Optional, Sequence

from cascadelog.logger.cycles import check_circular_references
from cascadelog.logger.errors import ConfigurationError
from cascadelog.logger.providers import LoggingProvider

if TYPE_CHECKING:
    from cascadelog.config import ProviderDescriptor
    from cascadelog.registry import ProviderTypeRegistry

logger = logging.getLogger(__name__)


class ProviderRegistry(Mapping[str, LoggingProvider]):
    """
    Read-only name → provider mapping. Owns every provider it holds.
    """

    def __init__(self, providers: Mapping[str, LoggingProvider], default_provider_name: str):
        if default_provider_name not in providers:
            raise ConfigurationError(
                f"The default provider '{default_provider_name}' is not configured",
                provider_name=default_provider_name,
            )
        self._providers = dict(providers)
        self._default_provider_name = default_provider_name

    def __getitem__(self, name: str) -> LoggingProvider:
        return self._providers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def default_provider_name(self) -> str:
        return self._default_provider_name

    @property
    def default_provider(self) -> LoggingProvider:
        return self._providers[self._default_provider_name]

    def close(self) -> None:
        """Close every provider."""
        _close_all(self._providers.values())

    def describe(self) -> dict:
        return {name: provider.describe() for name, provider in self._providers.items()}


def build_registry(
    descriptors: Sequence[ProviderDescriptor],
    default_provider: str,
    types: Optional["ProviderTypeRegistry"] = None,
) -> ProviderRegistry:
    """
    Build and wire every provider described by `descriptors`.

    Args:
        descriptors: parsed provider descriptors, in any order
        default_provider: name of the provider the facade logs to
        types: ProviderTypeRegistry; defaults to the process-wide one

    Raises:
        ConfigurationError: duplicate or empty names, unknown types, a
            missing default provider, circular references, invalid
            attributes or unresolved references.
    """
    if types is None:
        from cascadelog.registry import ProviderTypeRegistry

        types = ProviderTypeRegistry.instance()

    _validate_descriptors(descriptors, default_provider, types)
    check_circular_references(descriptors, types)

    providers: dict[str, LoggingProvider] = {}
    try:
        # Phase 1: construct and initialize.
        for descriptor in descriptors:
            providers[descriptor.name] = _create_provider(descriptor, types)
            logger.debug("Provider '%s' (%s) initialized", descriptor.name, descriptor.type)

        # Phase 2: resolve references.
        default = providers[default_provider]
        for provider in providers.values():
            provider.complete_initialization(providers, default)
    except Exception:
        _close_all(providers.values())
        raise

    logger.debug(
        "Wired %d logging provider(s), default provider '%s'",
        len(providers), default_provider,
    )
    return ProviderRegistry(providers, default_provider)


def _validate_descriptors(
    descriptors: Sequence[ProviderDescriptor],
    default_provider: str,
    types: "ProviderTypeRegistry",
) -> None:
    names = [d.name for d in descriptors]
    if any(not name for name in names):
        raise ConfigurationError("Every provider must have a non-empty name")

    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        raise ConfigurationError(
            f"Duplicate provider name(s): {', '.join(duplicates)}",
            provider_name=duplicates[0],
        )

    for descriptor in descriptors:
        if not types.has(descriptor.type):
            raise ConfigurationError(
                f"Provider '{descriptor.name}' has unknown type '{descriptor.type}'. "
                f"Available: {', '.join(types.list_types())}",
                provider_name=descriptor.name,
                attribute="type",
            )

    if not default_provider:
        raise ConfigurationError("A default provider must be specified")
    if default_provider not in names:
        raise ConfigurationError(
            f"The default provider '{default_provider}' is not configured",
            provider_name=default_provider,
        )


def _create_provider(descriptor: ProviderDescriptor, types: "ProviderTypeRegistry") -> LoggingProvider:
    try:
        provider = types.create(descriptor.type)
        provider.initialize(descriptor.name, descriptor.provider_attributes())
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Provider '{descriptor.name}' of type '{descriptor.type}' could not be "
            f"created: {exc}",
            provider_name=descriptor.name,
        ) from exc
    return provider


def _close_all(providers: Iterable[LoggingProvider]) -> None:
    for provider in providers:
        try:
            provider.close()
        except Exception as exc:
            logger.debug("Closing provider '%s' failed: %s", provider.name, exc)
