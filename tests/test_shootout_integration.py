"""End-to-end shootout over the built-in maps.

Scaled-down matrix with real key generation, process memory readings and
garbage collection. Select with ``pytest -m benchmark``.
"""

from pathlib import Path

import pytest

from map_shootout.core.schemas import ShootoutConfig
from map_shootout.matrix import INTEGER_WORKLOADS, STRING_WORKLOADS
from map_shootout.results.sink import ResultSink
from map_shootout.results.storage import ResultsStorage
from map_shootout.runner import ShootoutRunner

pytestmark = pytest.mark.benchmark


def test_full_matrix_scaled_down(tmp_path: Path):
    """Test every key type, workload and implementation at small sizes."""
    config = ShootoutConfig(max_size=2_000, size_step=1_000, seed=42)
    output = tmp_path / "data.tsv"

    runner = ShootoutRunner(config)
    with ResultSink.open(output) as sink:
        summary = runner.run(sink)

    assert summary.ok
    expected = (2 * len(STRING_WORKLOADS) + len(INTEGER_WORKLOADS)) * 2 * 3
    assert summary.completed == expected == runner.builder.expected_case_count()

    results = ResultsStorage(output).load_results()
    assert len(results) == expected
    assert {r.key_label for r in results} == {"largeString", "smallString", "int64"}
    assert {r.implementation for r in results} == {"dict", "OrderedDict", "SortedDict"}
    assert {r.dataset_size for r in results} == {2_000, 1_000}
    assert all(r.elapsed_ns > 0 for r in results)

    summary_frame = ResultsStorage(output).summary()
    assert (summary_frame["runs"] == 1).all()
