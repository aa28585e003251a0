# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest
from swarmlab.common import errors
from swarmlab.common import testing
from . import core


def _snapshot(problem: core.DF1) -> list:
    return [(peak.h, peak.r, peak.x) for peak in problem.peaks]


def test_single_peak_value() -> None:
    peak = core.Peak(h=50, r=1, x=(0, 0))
    assert peak.value((3, 4)) == 45.0
    assert peak.value((0, 0)) == 50.0


def test_peak_value_at_own_location_is_height() -> None:
    problem = core.DF1(core.DFParameters(dimension=3, peak_count=4), random_state=12)
    for peak in problem.peaks:
        assert peak.value(peak.x) == peak.h


def test_fitness_is_upper_envelope() -> None:
    problem = core.DF1(core.DFParameters(dimension=2, peak_count=3), random_state=3)
    position = np.array([0.2, -0.4])
    assert problem.fitness(position) == max(peak.value(position) for peak in problem.peaks)
    assert problem.maximize
    assert problem.is_better(2.0, 1.0)
    np.testing.assert_array_equal(problem.lower_bounds, [-1.0, -1.0])
    np.testing.assert_array_equal(problem.upper_bounds, [1.0, 1.0])


def test_random_peaks_within_ranges() -> None:
    params = core.DFParameters(dimension=4, peak_count=20, h_base=10, h_range=5, r_base=2, r_range=3, x_range=2)
    problem = core.DF1(params, random_state=0)
    assert len(problem.peaks) == 20
    for peak in problem.peaks:
        assert 10 <= peak.h <= 15
        assert 2 <= peak.r <= 5
        testing.assert_within_bounds(peak.x, np.full(4, -2.0), np.full(4, 2.0))


def test_static_landscape_is_unchanged() -> None:
    problem = core.DF1(core.DFParameters(peak_count=6), random_state=1)
    initial = _snapshot(problem)
    for iteration in range(10):
        problem.change_peaks(iteration)
    for (h0, r0, x0), (h1, r1, x1) in zip(initial, _snapshot(problem)):
        assert h0 == h1
        assert r0 == r1
        np.testing.assert_array_equal(x0, x1)


@testing.parametrized(
    height=("h", dict(dynamic_h=True)),
    slope=("r", dict(dynamic_r=True)),
    location=("x", dict(dynamic_x=True, x_scale=0.3)),
)
def test_only_enabled_axis_changes(axis: str, config: dict) -> None:
    problem = core.DF1(core.DFParameters(peak_count=3, **config), random_state=5)
    initial = _snapshot(problem)
    lower, upper = problem.parameters.interval(axis)
    for iteration in range(25):
        problem.change_peaks(iteration)
        for peak in problem.peaks:
            values = np.atleast_1d(getattr(peak, axis))
            assert np.all(values >= lower) and np.all(values <= upper)
    index = core.AXES.index(axis)
    for before, after in zip(initial, _snapshot(problem)):
        for k, (value0, value1) in enumerate(zip(before, after)):
            if k == index:
                assert not np.array_equal(value0, value1)
            else:
                np.testing.assert_array_equal(value0, value1)


def test_change_is_deterministic() -> None:
    params = core.DFParameters(dynamic_h=True, dynamic_r=True, dynamic_x=True)
    problems = [core.DF1(params, random_state=42) for _ in range(2)]
    for problem in problems:
        for iteration in range(15):
            problem.evolve(iteration)
    for (h0, r0, x0), (h1, r1, x1) in zip(*(_snapshot(p) for p in problems)):
        assert (h0, r0) == (h1, r1)
        np.testing.assert_array_equal(x0, x1)


def test_same_iteration_changes_once() -> None:
    problem = core.DF1(core.DFParameters(dynamic_h=True), random_state=2)
    problem.change_peaks(0)
    heights = [peak.h for peak in problem.peaks]
    problem.change_peaks(0)
    assert heights == [peak.h for peak in problem.peaks]
    with pytest.raises(errors.SwarmlabValueError):
        problem.change_peaks(-1)


def test_logistic_recurrence() -> None:
    logistic = core.LogisticFunction(1, np.random.RandomState(0))
    y0 = logistic.state("h")[0]
    h = logistic.generate_dynamic_h(50.0, base=0.0, range_=100.0, scale=2.0, iteration=0, a=3.5)
    y1 = 3.5 * y0 * (1 - y0)
    np.testing.assert_almost_equal(logistic.state("h")[0], y1)
    np.testing.assert_almost_equal(abs(h - 50.0), 2.0 * y1)


def test_optimum() -> None:
    problem = core.DF1(core.DFParameters(dimension=2, peak_count=7), random_state=9)
    location, value = problem.optimum()
    assert value == max(peak.h for peak in problem.peaks)
    samples = np.random.RandomState(0).uniform(-1, 1, size=(200, 2))
    assert all(problem.fitness(s) <= value for s in samples)
    np.testing.assert_equal(problem.fitness(location), value)


def test_flat_configuration() -> None:
    config = dict(
        dimension=3, peak_count=2, h_base=1.0, h_range=2.0, h_scale=0.5, a_h=3.9, dynamic_h=True,
    )
    problem = core.DF1(config, random_state=0)
    assert problem.dimension == 3
    assert problem.parameters.h == core.AxisParameters(1.0, 2.0, 0.5, 3.9, True)
    assert core.DFParameters.from_dict(problem.parameters.to_dict()).to_dict() == problem.parameters.to_dict()


@testing.parametrized(
    unknown_key=(dict(peaks=3),),
    zero_peaks=(dict(peak_count=0),),
    zero_dimension=(dict(dimension=0),),
    bad_rate=(dict(a_x=4.5),),
    negative_range=(dict(r_range=-1.0),),
)
def test_invalid_configuration(config: dict) -> None:
    with pytest.raises(errors.ConfigurationError):
        core.DFParameters.from_dict(config)


def test_peak_without_parameters_cannot_change() -> None:
    with pytest.raises(errors.SwarmlabRuntimeError):
        core.Peak(1.0, 1.0, [0.0]).change(0)
