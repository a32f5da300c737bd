"""
Provider type registry.

Resolves the type identifier of a provider descriptor ("sql", "composite",
...) to the factory that builds an uninitialized provider. Types are
registered explicitly; nothing is imported by dotted path.

Usage:
    types = ProviderTypeRegistry.instance()
    provider = types.create("memory")
    provider.initialize("mem", {})
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from cascadelog.logger.errors import ConfigurationError
from cascadelog.logger.providers import LoggingProvider

ProviderFactory = Callable[[], LoggingProvider]


class ProviderTypeRegistry:
    """
    Maps type identifier → provider class.

    The process-wide instance is populated with the built-in types on
    first access; separate instances can be created for tests or for
    applications with their own provider set.
    """

    _instance: Optional["ProviderTypeRegistry"] = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._types: dict[str, type[LoggingProvider]] = {}

    @classmethod
    def instance(cls) -> "ProviderTypeRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    from cascadelog.registry.defaults import register_defaults

                    registry = cls()
                    register_defaults(registry)
                    cls._instance = registry
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton. For testing only."""
        with cls._lock:
            cls._instance = None

    # ── Registration ──────────────────────────────────────────────

    def register(self, type_id: str, provider_cls: type[LoggingProvider]) -> None:
        """
        Register a provider class under a type identifier.

        Args:
            type_id: "sql", "memory", ... (case-insensitive)
            provider_cls: LoggingProvider subclass with a no-argument constructor
        """
        if not (isinstance(provider_cls, type) and issubclass(provider_cls, LoggingProvider)):
            raise TypeError(
                f"Provider type '{type_id}' must be a LoggingProvider subclass, "
                f"got {provider_cls!r}"
            )
        self._types[_normalize(type_id)] = provider_cls

    def register_from_config(self, config: dict[str, type[LoggingProvider]]) -> int:
        """Bulk register {type_id: provider_cls}. Returns count registered."""
        for type_id, provider_cls in config.items():
            self.register(type_id, provider_cls)
        return len(config)

    # ── Resolution ────────────────────────────────────────────────

    def resolve(self, type_id: str) -> type[LoggingProvider]:
        """
        Resolve a provider class by type identifier.

        Raises:
            ConfigurationError: If the type is not registered.
        """
        provider_cls = self._types.get(_normalize(type_id))
        if provider_cls is None:
            available = self.list_types()
            raise ConfigurationError(
                f"Unknown provider type '{type_id}'. "
                f"Available: {', '.join(available) if available else 'none'}"
            )
        return provider_cls

    def create(self, type_id: str) -> LoggingProvider:
        """Build a fresh, uninitialized provider of the given type."""
        return self.resolve(type_id)()

    def has(self, type_id: str) -> bool:
        return _normalize(type_id) in self._types

    # ── Introspection ─────────────────────────────────────────────

    def list_types(self) -> list[str]:
        return sorted(self._types)

    def describe(self) -> dict[str, str]:
        """{type_id: class name}."""
        return {type_id: cls.__name__ for type_id, cls in sorted(self._types.items())}

    @property
    def count(self) -> int:
        return len(self._types)


def _normalize(type_id: str) -> str:
    return (type_id or "").strip().lower()
