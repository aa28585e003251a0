# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest
from swarmlab.common import errors
from swarmlab.common import testing
from . import charged


def test_two_particles_repel() -> None:
    repulsion = charged.CoulombRepulsion(charge=1.0, radius=2.0, epsilon=1e-12)
    accelerations = repulsion.accelerations(np.array([[0.0], [1.0]]), np.ones(2))
    np.testing.assert_array_almost_equal(accelerations, [[-1.0], [1.0]])
    np.testing.assert_array_almost_equal(repulsion.force([0.0], [1.0], 1.0, 1.0), [-1.0])


def test_no_interaction_beyond_radius() -> None:
    repulsion = charged.CoulombRepulsion(charge=1.0, radius=2.0)
    accelerations = repulsion.accelerations(np.array([[0.0, 0.0], [2.0, 0.5]]), np.ones(2))
    np.testing.assert_array_equal(accelerations, np.zeros((2, 2)))
    np.testing.assert_array_equal(repulsion.force([0.0, 0.0], [2.0, 0.5], 1.0, 1.0), [0.0, 0.0])


def test_epsilon_floor() -> None:
    repulsion = charged.CoulombRepulsion(charge=1.0, radius=1.0, epsilon=0.1)
    accelerations = repulsion.accelerations(np.array([[0.0], [0.01], [0.01]]), np.ones(3))
    # each distance is floored at 0.1 and coinciding particles do not interact
    np.testing.assert_array_almost_equal(accelerations, [[-200.0], [100.0], [100.0]])
    assert np.all(np.isfinite(accelerations))


def test_neutral_particles() -> None:
    repulsion = charged.CoulombRepulsion(charge=2.0, radius=5.0, charged_fraction=0.5)
    charges = repulsion.charges(4)
    np.testing.assert_array_equal(charges, [2.0, 2.0, 0.0, 0.0])
    positions = np.array([[0.0], [1.0], [2.0], [3.0]])
    accelerations = repulsion.accelerations(positions, charges)
    np.testing.assert_array_almost_equal(accelerations, [[-4.0], [4.0], [0.0], [0.0]])


def test_matches_pairwise_forces() -> None:
    rng = np.random.RandomState(12)
    positions = rng.uniform(-1, 1, size=(6, 3))
    charges = rng.uniform(0.5, 2.0, size=6)
    repulsion = charged.CoulombRepulsion(radius=1.5)
    accelerations = repulsion.accelerations(positions, charges)
    for i in range(6):
        expected = sum(
            repulsion.force(positions[i], positions[j], charges[i], charges[j]) for j in range(6) if j != i
        )
        np.testing.assert_array_almost_equal(accelerations[i], expected)


@testing.parametrized(
    radius=(dict(radius=0.0),),
    epsilon=(dict(epsilon=-1.0),),
    fraction=(dict(charged_fraction=1.5),),
)
def test_invalid_settings(kwargs: dict) -> None:
    with pytest.raises(errors.ConfigurationError):
        charged.CoulombRepulsion(**kwargs)


def test_shape_mismatch() -> None:
    with pytest.raises(errors.ConfigurationError):
        charged.CoulombRepulsion().accelerations(np.zeros((3, 2)), np.ones(2))
