"""
Tests for the provider type registry.

Covers:
- ProviderTypeRegistry singleton
- Registration (single, bulk, validation)
- Resolution (case-insensitive, unknown types)
- Introspection (list, describe, count)
- Built-in defaults registration
"""

import threading

import pytest

from cascadelog.logger.adapters import MemoryProvider
from cascadelog.logger.composite import CompositeProvider
from cascadelog.logger.errors import ConfigurationError
from cascadelog.logger.providers import LoggingProvider
from cascadelog.registry import ProviderTypeRegistry
from cascadelog.registry.defaults import BUILTIN_PROVIDERS, register_defaults


class QueueProvider(LoggingProvider):
    def __init__(self):
        super().__init__()
        self.queue = []

    def _write(self, entry):
        self.queue.append(entry)
        return len(self.queue)


# ═══════════════════════════════════════════════════════════════════
#  Fixtures
# ═══════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def reset_singletons():
    ProviderTypeRegistry.reset()
    yield
    ProviderTypeRegistry.reset()


@pytest.fixture
def registry():
    return ProviderTypeRegistry()


# ═══════════════════════════════════════════════════════════════════
#  Singleton
# ═══════════════════════════════════════════════════════════════════

class TestSingleton:
    def test_identity(self):
        assert ProviderTypeRegistry.instance() is ProviderTypeRegistry.instance()

    def test_reset_creates_new_instance(self):
        a = ProviderTypeRegistry.instance()
        ProviderTypeRegistry.reset()
        assert ProviderTypeRegistry.instance() is not a

    def test_instance_has_builtins(self):
        assert ProviderTypeRegistry.instance().list_types() == sorted(BUILTIN_PROVIDERS)

    def test_thread_safe_singleton(self):
        instances = []

        def get_instance():
            instances.append(ProviderTypeRegistry.instance())

        threads = [threading.Thread(target=get_instance) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(inst is instances[0] for inst in instances)

    def test_new_instances_start_empty(self, registry):
        assert registry.count == 0


# ═══════════════════════════════════════════════════════════════════
#  Registration and resolution
# ═══════════════════════════════════════════════════════════════════

class TestRegistration:
    def test_register_and_resolve(self, registry):
        registry.register("queue", QueueProvider)
        assert registry.resolve("queue") is QueueProvider

    def test_type_ids_are_case_insensitive(self, registry):
        registry.register(" Queue ", QueueProvider)
        assert registry.has("QUEUE")
        assert registry.list_types() == ["queue"]

    def test_create_returns_uninitialized_provider(self, registry):
        registry.register("queue", QueueProvider)
        provider = registry.create("queue")
        assert isinstance(provider, QueueProvider)
        assert not provider.is_initialized

    def test_create_returns_fresh_instances(self, registry):
        registry.register("queue", QueueProvider)
        assert registry.create("queue") is not registry.create("queue")

    def test_reregister_replaces(self, registry):
        registry.register("sink", QueueProvider)
        registry.register("sink", MemoryProvider)
        assert registry.resolve("sink") is MemoryProvider

    def test_rejects_non_provider(self, registry):
        with pytest.raises(TypeError, match="LoggingProvider subclass"):
            registry.register("bad", dict)

    def test_rejects_instance(self, registry):
        with pytest.raises(TypeError):
            registry.register("bad", MemoryProvider())

    def test_register_from_config(self, registry):
        count = registry.register_from_config({"queue": QueueProvider, "memory": MemoryProvider})
        assert count == 2
        assert registry.count == 2

    def test_unknown_type(self, registry):
        registry.register("memory", MemoryProvider)
        with pytest.raises(ConfigurationError, match="Unknown provider type 'mail'") as exc_info:
            registry.resolve("mail")
        assert "memory" in str(exc_info.value)

    def test_unknown_type_on_empty_registry(self, registry):
        with pytest.raises(ConfigurationError, match="Available: none"):
            registry.create("memory")


# ═══════════════════════════════════════════════════════════════════
#  Introspection and defaults
# ═══════════════════════════════════════════════════════════════════

class TestDefaults:
    def test_register_defaults(self, registry):
        assert register_defaults(registry) == len(BUILTIN_PROVIDERS)
        assert registry.resolve("composite") is CompositeProvider

    def test_register_defaults_into_singleton(self):
        register_defaults()
        assert ProviderTypeRegistry.instance().has("sql")

    def test_describe(self, registry):
        register_defaults(registry)
        info = registry.describe()
        assert info["memory"] == "MemoryProvider"
        assert info["terminator"] == "TerminatorProvider"
        assert list(info) == sorted(info)

    def test_custom_type_alongside_builtins(self):
        types = ProviderTypeRegistry.instance()
        types.register("queue", QueueProvider)
        assert "queue" in types.list_types()
        assert types.has("composite")
