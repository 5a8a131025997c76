"""Tests for the registry pattern."""

from threading import Thread

import pytest

from reqknobs_common.exceptions import NotFoundError, OperationError
from reqknobs_common.registry import Registry


def make_check():
    return lambda value, context: True


class TestRegistry:
    """Test basic Registry functionality."""

    def test_create_registry(self):
        """Test creating a registry."""
        registry = Registry[str]("test_registry")
        assert registry.name == "test_registry"
        assert registry.count() == 0
        assert repr(registry) == "Registry(name='test_registry', items=0)"

    def test_register_item(self):
        """Test registering an item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        assert registry.count() == 1
        assert registry.has("key1")
        assert "key1" in registry
        assert registry.get("key1") == "value1"

    def test_register_with_metadata(self):
        """Test registering with metadata."""
        registry = Registry("validators", enable_metrics=True)
        registry.register("is_check", make_check, metadata={"builtin": False})

        metrics = registry.get_metrics("is_check")
        assert "registered_at" in metrics
        assert metrics["metadata"] == {"builtin": False}
        assert list(registry.get_metrics()) == ["is_check"]

    def test_metrics_disabled(self):
        """Test that metrics are empty when disabled."""
        registry = Registry[str]("test")
        registry.register("key1", "value1", metadata={"a": 1})

        assert registry.get_metrics() == {}

    def test_register_duplicate_raises_error(self):
        """Test that registering duplicate key raises error."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        with pytest.raises(OperationError) as exc_info:
            registry.register("key1", "value2")

        assert "already registered" in str(exc_info.value)
        assert exc_info.value.context == {"key": "key1", "registry": "test"}

    def test_register_duplicate_with_overwrite(self):
        """Test overwriting existing item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")
        registry.register("key1", "value2", allow_overwrite=True)

        assert registry.get("key1") == "value2"

    def test_unregister_item(self):
        """Test unregistering an item."""
        registry = Registry[str]("test", enable_metrics=True)
        registry.register("key1", "value1")

        assert registry.unregister("key1") == "value1"
        assert registry.count() == 0
        assert registry.get_metrics("key1") == {}

    def test_unregister_nonexistent_raises_error(self):
        """Test unregistering non-existent item raises error."""
        registry = Registry[str]("test")

        with pytest.raises(NotFoundError):
            registry.unregister("nonexistent")

    def test_get_nonexistent_raises_error(self):
        """Test getting non-existent item raises error."""
        registry = Registry[str]("test")
        registry.register("trim", "value")

        with pytest.raises(NotFoundError) as exc_info:
            registry.get("nonexistent")

        error = exc_info.value
        assert "not found" in str(error).lower()
        assert error.context["available_keys"] == ["trim"]

    def test_list_keys(self):
        """Test key listing in registration order."""
        registry = Registry[int]("test")
        registry.register("b", 2)
        registry.register("a", 1)

        assert registry.list_keys() == ["b", "a"]
        assert len(registry) == 2

    def test_non_string_membership(self):
        """Test that non-string keys are never members."""
        registry = Registry[str]("test")
        assert 1 not in registry


class TestRegistryThreadSafety:
    """Test concurrent access."""

    def test_concurrent_registration(self):
        """Test registering from many threads."""
        registry = Registry[int]("test")

        def worker(start):
            for i in range(start, start + 100):
                registry.register(f"key{i}", i)

        threads = [Thread(target=worker, args=(n * 100,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 1000
