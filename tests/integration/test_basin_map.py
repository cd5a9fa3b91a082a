import numpy as np
import pytest

from gravbasin import RenderConfig, render
from gravbasin.analysis.basin import basin_map, iter_labels, iter_rows
from gravbasin.attractors import AttractorSet
from gravbasin.config import SimParams
from gravbasin.runtime.integrator import Integrator
from gravbasin.analysis.classify import classify
from gravbasin.runtime.outcomes import PixelLabel, Termination
from gravbasin.sampling import PlaneSampler


def _small_map(**kwargs):
    return basin_map(
        AttractorSet.corners(),
        PlaneSampler(width=4, height=4, zoom=1.0),
        jit=False,
        **kwargs,
    )


def test_grid_pixels_on_attractor_and_origin():
    # zoom 1 on a 4x4 grid: col/row 0 -> -1.0, col/row 2 -> 0.0
    result = _small_map(parallel_mode="none")
    assert result.shape == (4, 4)
    assert result.label_at(0, 0) is PixelLabel.ATTRACTOR_0
    assert result.reasons[0, 0] == Termination.NEAR_ATTRACTOR_AT_START
    assert result.label_at(2, 2) is PixelLabel.ATTRACTOR_0
    assert result.reasons[2, 2] == Termination.ESCAPED
    assert result.steps[2, 2] == 1


def test_labels_match_per_pixel_pipeline():
    attractors = AttractorSet.build(seed=21)
    sampler = PlaneSampler(width=5, height=3, zoom=1.5)
    params = SimParams(steps=200)
    result = basin_map(attractors, sampler, params=params, jit=False, parallel_mode="none")

    integ = Integrator(attractors, params, jit=False)
    for col, row, px, py in sampler.cells():
        out = integ.simulate(px, py)
        assert result.label_at(col, row) is classify(out, attractors, params.far_sq)
        assert result.reasons[row, col] == out.reason
        assert result.steps[row, col] == out.steps


def test_threads_and_serial_agree():
    serial = _small_map(parallel_mode="none")
    threaded = _small_map(parallel_mode="threads", max_workers=3)
    np.testing.assert_array_equal(serial.labels, threaded.labels)
    np.testing.assert_array_equal(serial.reasons, threaded.reasons)
    np.testing.assert_array_equal(serial.steps, threaded.steps)
    assert threaded.meta["backend"] == "threads"
    assert serial.meta["backend"] == "none"


def test_process_mode_falls_back_to_threads():
    with pytest.warns(RuntimeWarning, match="process"):
        result = _small_map(parallel_mode="process", max_workers=2)
    assert result.meta["backend"] == "threads"


def test_unknown_parallel_mode():
    with pytest.raises(ValueError, match="parallel_mode"):
        _small_map(parallel_mode="gpu")


def test_result_invariants():
    result = _small_map()
    assert result.labels.min() >= 0 and result.labels.max() <= int(PixelLabel.FAR_AWAY)
    assert set(np.unique(result.reasons)) <= {int(t) for t in Termination}
    assert result.steps.max() <= result.params.steps
    assert sum(result.counts().values()) == 16


def test_iter_labels_streams_every_pixel_once():
    attractors = AttractorSet.corners()
    sampler = PlaneSampler(width=3, height=4, zoom=1.2)
    triples = list(iter_labels(attractors, sampler, jit=False, max_workers=2))
    assert len(triples) == 12
    assert {(c, r) for c, r, _ in triples} == {(c, r) for c in range(3) for r in range(4)}

    result = basin_map(attractors, sampler, jit=False, parallel_mode="none")
    for col, row, label in triples:
        assert result.label_at(col, row) is label


def test_iter_rows_reports_row_index():
    rows = list(iter_rows(AttractorSet.corners(), PlaneSampler(2, 3, 1.0), jit=False, parallel_mode="none"))
    assert [r.row for r in rows] == [0, 1, 2]
    assert all(r.labels.shape == (2,) for r in rows)


def test_render_builds_reproducible_maps():
    config = RenderConfig(width=3, height=3, seed=8, jit=False, parallel_mode="none", sim=SimParams(steps=100))
    first = render(config)
    second = render(config)
    assert first.attractors == AttractorSet.build(seed=8)
    np.testing.assert_array_equal(first.labels, second.labels)


def test_iter_rows_validates_on_call():
    with pytest.raises(ValueError, match="max_workers"):
        iter_rows(AttractorSet.corners(), PlaneSampler(2, 2, 1.0), jit=False, max_workers=0)
    with pytest.raises(ValueError, match="parallel_mode"):
        iter_labels(AttractorSet.corners(), PlaneSampler(2, 2, 1.0), jit=False, parallel_mode="gpu")


def test_process_fallback_warning_points_at_caller():
    with pytest.warns(RuntimeWarning, match="process") as record:
        iter_rows(AttractorSet.corners(), PlaneSampler(2, 2, 1.0), jit=False, parallel_mode="process")
    assert record[0].filename == __file__
