"""
Built-in provider types.

Usage:
    from cascadelog.registry.defaults import register_defaults
    register_defaults(ProviderTypeRegistry())
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cascadelog.logger.adapters import (
    ConsoleProvider,
    FileProvider,
    MemoryProvider,
    SqlProvider,
    TerminatorProvider,
)
from cascadelog.logger.composite import CompositeProvider

if TYPE_CHECKING:
    from cascadelog.registry import ProviderTypeRegistry


BUILTIN_PROVIDERS = {
    "composite": CompositeProvider,
    "console": ConsoleProvider,
    "file": FileProvider,
    "memory": MemoryProvider,
    "sql": SqlProvider,
    "terminator": TerminatorProvider,
}


def register_defaults(registry: "ProviderTypeRegistry | None" = None) -> int:
    """
    Register all built-in provider types.

    Args:
        registry: Registry to populate. Defaults to singleton.

    Returns count of types registered.
    """
    if registry is None:
        from cascadelog.registry import ProviderTypeRegistry

        registry = ProviderTypeRegistry.instance()
    return registry.register_from_config(BUILTIN_PROVIDERS)
