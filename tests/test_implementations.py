"""Tests for implementation resolution."""

from collections import OrderedDict
from collections.abc import MutableMapping

import pytest
from sortedcontainers import SortedDict

from map_shootout.core.schemas import KeyDomain
from map_shootout.implementations import (
    BUILTIN_IMPLEMENTATIONS,
    DICT,
    ORDERED_DICT,
    SORTED_DICT,
    MapImplementation,
    resolve_implementation,
    resolve_implementations,
)


class ReversedKeysImplementation(MapImplementation):
    """Plain dict under another name, for import-path tests."""

    @property
    def name(self) -> str:
        return "ReversedKeys"

    def create_string_map(self) -> MutableMapping[str, int]:
        return {}

    def create_integer_map(self) -> MutableMapping[int, int]:
        return {}


REVERSED_KEYS = ReversedKeysImplementation()
NOT_AN_IMPLEMENTATION = object()


class TestBuiltins:
    """Tests for the built-in implementations."""

    def test_names(self):
        assert set(BUILTIN_IMPLEMENTATIONS) == {"dict", "OrderedDict", "SortedDict"}

    def test_fresh_maps(self):
        """Test that every call returns a new empty map."""
        first = DICT.create_string_map()
        second = DICT.create_string_map()
        assert first == {} and first is not second
        assert isinstance(ORDERED_DICT.create_integer_map(), OrderedDict)

    def test_sorted_dict_keeps_keys_ordered(self):
        """Test the sorted map under the mapping operations the workloads use."""
        container = SORTED_DICT.create_integer_map()
        assert isinstance(container, SortedDict)
        for key in (5, -3, 12, 0):
            container[key] = 1
        assert container.pop(12, None) == 1
        assert container.pop(12, None) is None
        assert container.get(-3) == 1
        assert list(container.items()) == [(-3, 1), (0, 1), (5, 1)]

        strings = SORTED_DICT.create_string_map()
        strings.update({"b": 1, "a": 1})
        assert list(strings) == ["a", "b"]

    def test_map_factory(self):
        """Test selecting the constructor by key domain."""
        assert DICT.map_factory(KeyDomain.STRING) == DICT.create_string_map
        assert ORDERED_DICT.map_factory(KeyDomain.INTEGER) == ORDERED_DICT.create_integer_map

    def test_repr(self):
        assert repr(DICT) == "DictImplementation(name='dict')"


class TestResolve:
    """Tests for resolving configured names."""

    def test_builtin_name(self):
        assert resolve_implementation("OrderedDict") is ORDERED_DICT
        assert resolve_implementation("SortedDict") is SORTED_DICT

    def test_import_instance(self):
        """Test loading an instance from a module:attribute path."""
        impl = resolve_implementation(f"{__name__}:REVERSED_KEYS")
        assert impl is REVERSED_KEYS

    def test_import_class(self):
        """Test that a class is instantiated."""
        impl = resolve_implementation(f"{__name__}:ReversedKeysImplementation")
        assert isinstance(impl, ReversedKeysImplementation)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown implementation"):
            resolve_implementation("HashTrieMap")

    def test_malformed_path(self):
        with pytest.raises(ValueError):
            resolve_implementation(f"{__name__}:")

    def test_missing_attribute(self):
        with pytest.raises(ValueError):
            resolve_implementation(f"{__name__}:DoesNotExist")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            resolve_implementation("no_such_module_anywhere:Thing")

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            resolve_implementation(f"{__name__}:NOT_AN_IMPLEMENTATION")

    def test_duplicates_rejected(self):
        """Test that names must be unique within a run."""
        with pytest.raises(ValueError, match="Duplicate"):
            resolve_implementations(["dict", "dict"])

    def test_resolve_many(self):
        impls = resolve_implementations(["dict", f"{__name__}:REVERSED_KEYS"])
        assert [impl.name for impl in impls] == ["dict", "ReversedKeys"]
