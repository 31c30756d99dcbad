"""Tests for benchmark matrix construction."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeMemoryProbe
from map_shootout.core.constants import INT64_MIN
from map_shootout.core.schemas import KeyType, ShootoutConfig, WorkloadKind, dataset_sizes
from map_shootout.implementations.base import MapImplementation
from map_shootout.implementations.builtin import DICT, ORDERED_DICT
from map_shootout.keys.generator import KeyGenerator
from map_shootout.lifecycle import BenchmarkCase
from map_shootout.matrix import (
    INTEGER_WORKLOADS,
    STRING_WORKLOADS,
    IntegerRange,
    MatrixBuilder,
    MatrixGroup,
    iter_cases,
)


def make_builder(**kwargs) -> MatrixBuilder:
    kwargs.setdefault("sizes", [40, 20])
    kwargs.setdefault("large_string_length", 8)
    kwargs.setdefault("small_string_length", 3)
    kwargs.setdefault("memory_probe", FakeMemoryProbe())
    generator = kwargs.pop("key_generator", KeyGenerator(seed=11))
    implementations = kwargs.pop("implementations", [DICT, ORDERED_DICT])
    return MatrixBuilder(implementations, generator, **kwargs)


def cases_by_path(builder: MatrixBuilder) -> dict[tuple[str, ...], BenchmarkCase]:
    return dict(iter_cases(builder.build()))


class TestDatasetSizes:
    """Tests for dataset size enumeration."""

    def test_default_sizes(self):
        """Test the fifteen default sizes from 3,000,000 down to 200,000."""
        sizes = dataset_sizes()
        assert len(sizes) == 15
        assert sizes[0] == 3_000_000
        assert sizes[1] == 2_800_000
        assert sizes[-1] == 200_000

    def test_uneven_step(self):
        """Test that sizes stop before reaching zero."""
        assert dataset_sizes(1000, 300) == [1000, 700, 400, 100]

    @pytest.mark.parametrize("max_size,step", [(0, 10), (10, 0), (-5, 1)])
    def test_invalid(self, max_size, step):
        """Test that non-positive arguments are rejected."""
        with pytest.raises(ValueError):
            dataset_sizes(max_size, step)


class TestHierarchy:
    """Tests for the shape of the matrix tree."""

    def test_root_groups(self):
        """Test one root group per key type, in order."""
        root = make_builder().build()
        assert isinstance(root, MatrixGroup)
        assert [group.name for group in root] == [
            "Large String Tests",
            "Small String Tests",
            "Integer Tests",
        ]

    def test_size_and_implementation_groups(self):
        """Test size groups containing implementation groups containing cases."""
        root = make_builder().build()
        integer_group = list(root)[2]
        size_groups = list(integer_group)
        assert [g.name for g in size_groups] == ["40 keys", "20 keys"]
        impl_groups = list(size_groups[0])
        assert [g.name for g in impl_groups] == ["dict", "OrderedDict"]
        cases = list(impl_groups[1])
        assert all(isinstance(case, BenchmarkCase) for case in cases)
        assert [case.name for case in cases] == [label for _, label, _ in INTEGER_WORKLOADS]

    def test_case_count(self):
        """Test that every combination yields exactly one case."""
        builder = make_builder()
        cases = cases_by_path(builder)
        per_size = 2 * (len(STRING_WORKLOADS) * 2 + len(INTEGER_WORKLOADS))
        assert len(cases) == per_size * 2
        assert builder.expected_case_count() == len(cases)

    def test_paths_are_unique(self):
        """Test that every case has its own path."""
        paths = [path for path, _ in iter_cases(make_builder().build())]
        assert len(paths) == len(set(paths))
        assert ("Map Shootout", "Integer Tests", "20 keys", "dict", "randomFullIteration") in paths

    def test_key_type_subset(self):
        """Test restricting the matrix to some key types."""
        builder = make_builder(key_types=[KeyType.INT64])
        assert [g.name for g in builder.build()] == ["Integer Tests"]

    def test_string_workload_labels(self):
        """Test the labels and kinds of string cases."""
        root = make_builder(key_types=[KeyType.SMALL_STRING]).build()
        cases = [case for _, case in iter_cases(root)]
        assert [c.name for c in cases[:5]] == [
            "inserts",
            "deletes",
            "reads",
            "readMisses",
            "readsAfterDeletingHalf",
        ]
        assert {c.key_label for c in cases} == {"smallString"}


class TestKeySets:
    """Tests for key set reuse and derivation."""

    def test_implementations_share_key_sets(self):
        """Test that every implementation in a cell gets the identical key set."""
        cases = cases_by_path(make_builder())
        base = ("Map Shootout", "Large String Tests", "40 keys")
        dict_reads = cases[(*base, "dict", "reads")]
        ordered_reads = cases[(*base, "OrderedDict", "reads")]
        assert dict_reads._keys is ordered_reads._keys

        dict_misses = cases[(*base, "dict", "readMisses")]
        ordered_misses = cases[(*base, "OrderedDict", "readMisses")]
        assert dict_misses._different_keys is ordered_misses._different_keys
        assert len(dict_misses._different_keys) == 40

    def test_large_strings_are_prefixes(self):
        """Test that smaller sizes are prefixes of the largest key set."""
        cases = cases_by_path(make_builder())
        large = cases[("Map Shootout", "Large String Tests", "40 keys", "dict", "inserts")]._keys
        small = cases[("Map Shootout", "Large String Tests", "20 keys", "dict", "inserts")]._keys
        assert len(large) == 40
        assert small == large[:20]
        assert all(len(key) == 8 for key in large)

    def test_small_strings_truncate_large(self):
        """Test positional correspondence between small and large keys."""
        builder = make_builder()
        large = builder.string_key_set(KeyType.LARGE_STRING)
        small = builder.string_key_set(KeyType.SMALL_STRING)
        assert len(small) == len(large)
        assert all(short == long[:3] for short, long in zip(small, large))

    def test_large_keys_generated_once(self):
        """Test that the largest string key set is generated a single time."""
        generator = KeyGenerator(seed=3)
        generator.generate_string_keys = MagicMock(wraps=generator.generate_string_keys)
        builder = make_builder(key_generator=generator, key_types=[KeyType.LARGE_STRING])
        list(iter_cases(builder.build()))
        list(iter_cases(builder.build()))

        key_set_calls = [
            c for c in generator.generate_string_keys.call_args_list if c.args == (8, 40)
        ]
        # One for the key set itself, one per walk for the 40-key miss set
        assert len(key_set_calls) == 3

    def test_integer_domains(self):
        """Test which workloads use non-negative and full-range keys."""
        cases = cases_by_path(make_builder(key_types=[KeyType.INT64], sizes=[500]))
        base = ("Map Shootout", "Integer Tests", "500 keys", "dict")
        non_negative = cases[(*base, "randomShuffleInserts")]._keys
        full = cases[(*base, "randomShuffleFullInserts")]._keys
        assert cases[(*base, "randomShuffleReads")]._keys is non_negative
        assert all(key >= 0 for key in non_negative)
        assert any(key < 0 for key in full)
        for _, label, key_range in INTEGER_WORKLOADS:
            expected = non_negative if key_range is IntegerRange.NON_NEGATIVE else full
            assert cases[(*base, label)]._keys is expected

    def test_integer_keys_regenerated_per_size(self):
        """Test that integer key sets are not prefixes of each other."""
        generator = KeyGenerator(seed=5)
        generator.generate_integer_keys = MagicMock(wraps=generator.generate_integer_keys)
        builder = make_builder(key_generator=generator, key_types=[KeyType.INT64])
        list(iter_cases(builder.build()))
        calls = [(c.args[0], c.args[1]) for c in generator.generate_integer_keys.call_args_list]
        assert (0, 40) in calls and (0, 20) in calls
        assert (INT64_MIN, 40) in calls and (INT64_MIN, 20) in calls

    def test_nothing_generated_until_iterated(self):
        """Test that building the tree is lazy."""
        generator = MagicMock(spec=KeyGenerator)
        builder = make_builder(key_generator=generator)
        builder.build()
        generator.generate_string_keys.assert_not_called()
        generator.generate_integer_keys.assert_not_called()

    def test_string_key_set_rejects_integer_type(self):
        """Test that integer key types have no string key set."""
        with pytest.raises(ValueError):
            make_builder().string_key_set(KeyType.INT64)


class TestValidation:
    """Tests for construction-time validation."""

    def test_requires_implementations(self):
        with pytest.raises(ValueError):
            make_builder(implementations=[])

    def test_none_implementations(self):
        with pytest.raises(TypeError):
            MatrixBuilder(None)

    def test_duplicate_names(self):
        """Test that implementation names must be unique."""
        with pytest.raises(ValueError):
            make_builder(implementations=[DICT, DICT])

    def test_separator_in_implementation_name(self):
        """Test that a name that would split a result row fails before any case exists."""
        generator = MagicMock(spec=KeyGenerator)
        impl = MagicMock(spec=MapImplementation)
        impl.name = "tab\tmap"
        with pytest.raises(ValueError, match="Implementation name"):
            make_builder(implementations=[DICT, impl], key_generator=generator)
        generator.generate_string_keys.assert_not_called()
        generator.generate_integer_keys.assert_not_called()

    def test_non_positive_size(self):
        with pytest.raises(ValueError):
            make_builder(sizes=[10, 0])

    def test_small_longer_than_large(self):
        with pytest.raises(ValueError):
            make_builder(large_string_length=4, small_string_length=5)


class TestFromConfig:
    """Tests for building from configuration."""

    def test_from_config(self):
        """Test that sizes, key types and name come from the config."""
        config = ShootoutConfig(
            name="tiny",
            max_size=30,
            size_step=10,
            key_types=[KeyType.INT64],
            seed=1,
            gc_hint=False,
        )
        builder = MatrixBuilder.from_config(config, [DICT], FakeMemoryProbe())
        assert builder.sizes == [30, 20, 10]
        root = builder.build()
        assert root.name == "tiny"
        paths = [path for path, _ in iter_cases(root)]
        assert len(paths) == 3 * len(INTEGER_WORKLOADS)

    def test_seeded_configs_reproduce_keys(self):
        """Test that the same seed gives the same key sets."""
        config = ShootoutConfig(max_size=10, size_step=10, seed=42)
        first = MatrixBuilder.from_config(config, [DICT], FakeMemoryProbe())
        second = MatrixBuilder.from_config(config, [DICT], FakeMemoryProbe())
        assert first.string_key_set(KeyType.LARGE_STRING) == second.string_key_set(
            KeyType.LARGE_STRING
        )


def test_read_miss_cases_use_full_range_different_keys():
    """Test that integer miss cases carry a key set of equal size."""
    cases = cases_by_path(make_builder(key_types=[KeyType.INT64], sizes=[64]))
    case = cases[("Map Shootout", "Integer Tests", "64 keys", "dict", "randomShuffleFullReadMisses")]
    assert case.workload.kind is WorkloadKind.READ_MISS
    assert len(case._different_keys) == 64
