import numpy as np
import pytest

from gravbasin.sampling import PlaneSampler


def test_reference_grid_mapping():
    sampler = PlaneSampler()
    assert (sampler.width, sampler.height, sampler.zoom) == (1500, 1500, 1.5)
    assert sampler.plane_x(0) == -1.5
    assert sampler.plane_x(750) == 0.0
    assert sampler.plane_y(1125) == pytest.approx(0.75)


def test_vectorised_coordinates_match_scalar_mapping():
    sampler = PlaneSampler(width=7, height=5, zoom=1.3)
    assert sampler.columns().tolist() == [sampler.plane_x(c) for c in range(7)]
    assert sampler.rows().tolist() == [sampler.plane_y(r) for r in range(5)]


def test_cells_cover_grid_once():
    sampler = PlaneSampler(width=3, height=2, zoom=1.0)
    cells = list(sampler.cells())
    assert len(cells) == len(sampler) == 6
    assert cells[0] == (0, 0, -1.0, -1.0)
    assert {(c, r) for c, r, _, _ in cells} == {(c, r) for c in range(3) for r in range(2)}


def test_extent_spans_zoomed_plane():
    left, right, bottom, top = PlaneSampler(width=4, height=4, zoom=2.0).extent
    np.testing.assert_allclose([left, right, bottom, top], [-2.0, 2.0, 2.0, -2.0])


def test_rejects_empty_grid():
    with pytest.raises(ValueError):
        PlaneSampler(width=0, height=10)
    with pytest.raises(ValueError):
        PlaneSampler(zoom=0.0)


@pytest.mark.parametrize("size", [2.5, True])
def test_rejects_non_integer_grid_size(size):
    with pytest.raises(ValueError, match="must be an integer"):
        PlaneSampler(width=size, height=2)
