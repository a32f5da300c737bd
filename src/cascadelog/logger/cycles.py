"""
Circular reference detection over provider descriptors.

Runs before any provider is constructed. A cycle in the fallback /
composite graph would otherwise recurse without bound once a failure
cascades from fallback to fallback at log time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Sequence

from cascadelog.logger.errors import ConfigurationError

if TYPE_CHECKING:
    from cascadelog.config import ProviderDescriptor
    from cascadelog.registry import ProviderTypeRegistry


def build_reference_graph(
    descriptors: Iterable["ProviderDescriptor"],
    types: "ProviderTypeRegistry",
) -> dict[str, list[str]]:
    """
    Edges A → B for every provider B that A references, either as its
    fallbackProvider or through its type-specific attributes.
    """
    graph: dict[str, list[str]] = {}
    for descriptor in descriptors:
        edges = []
        if descriptor.fallback_provider:
            edges.append(descriptor.fallback_provider)
        provider_cls = types.resolve(descriptor.type)
        edges.extend(provider_cls.referenced_names(descriptor.attributes))
        graph[descriptor.name] = edges
    return graph


def find_cycle(graph: Mapping[str, Sequence[str]]) -> Optional[list[str]]:
    """
    Depth-first search from every node, in graph order.

    Returns the first cycle found as a path whose first and last
    elements are the same provider, or None. Edges to names missing
    from the graph are ignored.
    """
    done: set[str] = set()

    for start in graph:
        if start in done:
            continue
        path: list[str] = [start]
        on_path: set[str] = {start}
        stack = [iter(graph[start])]

        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if target in on_path:
                return path[path.index(target):] + [target]
            if target in done or target not in graph:
                continue
            path.append(target)
            on_path.add(target)
            stack.append(iter(graph[target]))

    return None


def check_circular_references(
    descriptors: Sequence["ProviderDescriptor"],
    types: "ProviderTypeRegistry",
) -> None:
    """Raise ConfigurationError when the reference graph contains a cycle."""
    cycle = find_cycle(build_reference_graph(descriptors, types))
    if cycle is not None:
        raise ConfigurationError(
            f"circular reference detected involving provider '{cycle[0]}' "
            f"({' -> '.join(cycle)}). Check the fallbackProvider and provider<N> "
            f"attributes of these providers",
            provider_name=cycle[0],
        )
