# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import numpy as np
import pytest
from swarmlab.common import errors
from swarmlab.common import testing
from swarmlab.functions import base
from . import topology
from .particle import Particle


def _sphere(x: np.ndarray) -> float:
    return float(x.dot(x))


def _swarm(best_values: tp.List[float]) -> tp.List[Particle]:
    """1d swarm where particle k has its personal best at position best_values[k]"""
    swarm = []
    for value in best_values:
        particle = Particle(1)
        particle.set_current_position([value], value ** 2)
        particle.set_best_position([value], value ** 2)
        swarm.append(particle)
    return swarm


PROBLEM = base.ArrayProblem(_sphere, -10, 10, dimension=1)


def test_global_best_same_for_all() -> None:
    swarm = _swarm([3.0, -1.0, 2.0, 4.0])
    topo = topology.GlobalBestTopology()
    for index in range(4):
        np.testing.assert_array_equal(topo.best_neighbor(swarm, index, PROBLEM), [-1.0])


def test_local_best_differs_per_index() -> None:
    swarm = _swarm([3.0, -1.0, 2.0, 4.0])
    topo = topology.LocalBestTopology(radius=1)
    neighbors = [topo.best_neighbor(swarm, index, PROBLEM)[0] for index in range(4)]
    # particle 3 sees particles 2, 3 and 0 (wrapping)
    assert neighbors == [-1.0, -1.0, -1.0, 2.0]


@testing.parametrized(
    first=(0, 1, [4, 0, 1]),
    last=(4, 1, [3, 4, 0]),
    middle=(2, 1, [1, 2, 3]),
    radius2_first=(0, 2, [3, 4, 0, 1, 2]),
)
def test_ring_wrapping(index: int, radius: int, expected: tp.List[int]) -> None:
    assert topology.LocalBestTopology(radius=radius).neighbors(5, index) == expected


def test_ring_wrapping_best_neighbor() -> None:
    swarm = _swarm([5.0, 6.0, 7.0, 8.0, 0.5])
    topo = topology.LocalBestTopology(radius=1)
    np.testing.assert_array_equal(topo.best_neighbor(swarm, 0, PROBLEM), [0.5])  # last is adjacent to first
    np.testing.assert_array_equal(topo.best_neighbor(swarm, 4, PROBLEM), [0.5])
    swarm = _swarm([0.5, 6.0, 7.0, 8.0, 9.0])
    np.testing.assert_array_equal(topo.best_neighbor(swarm, 4, PROBLEM), [0.5])  # first is adjacent to last
    np.testing.assert_array_equal(topo.best_neighbor(swarm, 2, PROBLEM), [6.0])


def test_tie_first_found_wins() -> None:
    swarm = _swarm([1.0, 2.0, -1.0, 3.0])  # -1 and 1 have the same fitness
    topo = topology.LocalBestTopology(radius=1)
    np.testing.assert_array_equal(topo.best_neighbor(swarm, 1, PROBLEM), [1.0])
    np.testing.assert_array_equal(topology.GlobalBestTopology().best_neighbor(swarm, 3, PROBLEM), [1.0])


def test_small_swarm_neighbors_unique() -> None:
    assert topology.LocalBestTopology(radius=3).neighbors(2, 0) == [1, 0]
    with pytest.warns(errors.InefficientSettingsWarning):
        topology.LocalBestTopology(radius=3).check(4)


def test_invalid_index_and_radius() -> None:
    swarm = _swarm([1.0, 2.0])
    with pytest.raises(errors.ConfigurationError):
        topology.GlobalBestTopology().best_neighbor(swarm, 2, PROBLEM)
    with pytest.raises(errors.ConfigurationError):
        topology.LocalBestTopology().best_neighbor(swarm, -1, PROBLEM)
    with pytest.raises(errors.ConfigurationError):
        topology.LocalBestTopology(radius=0)


def test_make() -> None:
    assert isinstance(topology.make("global"), topology.GlobalBestTopology)
    ring = topology.make("LocalBestTopology", radius=2)
    assert isinstance(ring, topology.LocalBestTopology)
    assert ring.radius == 2
    with pytest.raises(errors.ConfigurationError):
        topology.make("star")
