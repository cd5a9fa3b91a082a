import numpy as np
import pytest

from gravbasin.analysis.classify import classify
from gravbasin.attractors import AttractorSet
from gravbasin.config import SimParams
from gravbasin.runtime.integrator import Integrator, simulate
from gravbasin.runtime.outcomes import PixelLabel, SimulationOutcome, Termination


def _corners_integrator(params: SimParams | None = None) -> Integrator:
    return Integrator(AttractorSet.corners(), params, jit=False)


def test_start_inside_radius_snaps_to_attractor():
    out = _corners_integrator().simulate(-1.0 + 0.07, -1.0 + 0.07)  # 0.099 away
    assert out.reason is Termination.NEAR_ATTRACTOR_AT_START
    assert (out.final_x, out.final_y) == (-1.0, -1.0)
    assert out.steps == 0


def test_start_exactly_on_attractor_maps_to_its_color():
    attractors = AttractorSet.corners()
    out = simulate(-1.0, -1.0, attractors, jit=False)
    assert out == SimulationOutcome(-1.0, -1.0, Termination.NEAR_ATTRACTOR_AT_START, 0)
    assert classify(out, attractors) is PixelLabel.ATTRACTOR_0


def test_start_check_is_first_match_not_nearest():
    attractors = AttractorSet.from_points(
        [(0.0, 0.0, 1.0), (0.05, 0.0, 1.0), (5.0, 5.0, 1.0), (-5.0, 5.0, 1.0)]
    )
    # 0.06 from attractor 0, 0.01 from attractor 1
    out = simulate(0.06, 0.0, attractors, jit=False)
    assert out.reason is Termination.NEAR_ATTRACTOR_AT_START
    assert (out.final_x, out.final_y) == (0.0, 0.0)


def test_origin_of_symmetric_fixture_comes_to_rest():
    attractors = AttractorSet.corners()
    out = simulate(0.0, 0.0, attractors, jit=False)
    # forces cancel exactly, so the speed is zero after the first step
    assert out.reason is Termination.ESCAPED
    assert (out.final_x, out.final_y) == (0.0, 0.0)
    assert out.steps == 1
    assert classify(out, attractors) is PixelLabel.ATTRACTOR_0


def test_near_miss_during_run_uses_per_axis_window():
    integ = _corners_integrator(SimParams(start_radius=0.0))
    # radial distance 0.0269 > 0.02, yet each axis is inside the window
    out = integ.simulate(-1.0 + 0.019, -1.0 + 0.019)
    assert out.reason is Termination.NEAR_ATTRACTOR_DURING_RUN
    assert (out.final_x, out.final_y) == (-1.0, -1.0)
    assert out.steps == 1


def test_near_miss_fires_mid_step_for_later_attractor():
    integ = _corners_integrator(SimParams(start_radius=0.0))
    out = integ.simulate(-1.0 + 0.01, 1.0 - 0.01)
    assert out.reason is Termination.NEAR_ATTRACTOR_DURING_RUN
    assert (out.final_x, out.final_y) == (-1.0, 1.0)
    assert out.steps == 1


def test_outside_per_axis_window_is_not_captured_immediately():
    integ = _corners_integrator(SimParams(start_radius=0.0))
    out = integ.simulate(-1.0 + 0.025, -1.0)
    assert out.steps > 1


def test_coincident_position_terminates_without_division_by_zero():
    integ = _corners_integrator(SimParams(start_radius=0.0))
    out = integ.simulate(1.0, -1.0)
    assert out.reason is Termination.NEAR_ATTRACTOR_DURING_RUN
    assert (out.final_x, out.final_y) == (1.0, -1.0)
    assert classify(out, integ.attractors) is PixelLabel.ATTRACTOR_1


def test_subnormal_offset_from_attractor_terminates_without_division_by_zero():
    attractors = AttractorSet.from_points([(0.0, 0.0, 1.0), (5.0, 5.0, 1.0), (-5.0, 5.0, 1.0), (5.0, -5.0, 1.0)])
    out = simulate(0.0, 1e-170, attractors, SimParams(start_radius=0.0), jit=False)
    assert out.reason is Termination.NEAR_ATTRACTOR_DURING_RUN
    assert (out.final_x, out.final_y) == (0.0, 0.0)
    assert out.steps == 1


def test_budget_exhaustion_is_stable_orbit():
    integ = _corners_integrator(SimParams(steps=3))
    out = integ.simulate(0.5, 0.0)
    assert out.reason is Termination.EXHAUSTED
    assert out.steps == 3
    assert classify(out, integ.attractors) is PixelLabel.STABLE_ORBIT


def test_escape_radius_terminates_as_escaped():
    integ = _corners_integrator(SimParams(escape_radius=0.5))
    out = integ.simulate(0.6, 0.0)
    assert out.reason is Termination.ESCAPED
    assert out.steps == 1
    assert np.hypot(out.final_x, out.final_y) > 0.5


def test_every_trajectory_terminates_within_budget():
    integ = Integrator(AttractorSet.build(seed=2024), jit=False)
    for x0 in np.linspace(-1.5, 1.5, 4):
        for y0 in np.linspace(-1.5, 1.5, 4):
            out = integ.simulate(x0, y0)
            assert isinstance(out.reason, Termination)
            assert 0 <= out.steps <= integ.params.steps


def test_simulation_is_deterministic():
    integ = Integrator(AttractorSet.build(seed=7), jit=False)
    first = integ.simulate(0.37, -0.81)
    second = integ.simulate(0.37, -0.81)
    assert first == second
    assert Integrator(AttractorSet.build(seed=7), jit=False).simulate(0.37, -0.81) == first


def test_simulate_many_validates_shape():
    integ = _corners_integrator()
    outs = integ.simulate_many(np.array([[-1.0, -1.0], [1.0, 1.0]]))
    assert [o.final_x for o in outs] == [-1.0, 1.0]
    with pytest.raises(ValueError):
        integ.simulate_many(np.zeros((3, 3)))
