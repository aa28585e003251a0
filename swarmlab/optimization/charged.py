# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors


class CoulombRepulsion:
    """Repulsion between charged particles, to preserve the diversity of the swarm.

    Particle i is accelerated away from every other particle j closer than the
    interaction radius, by :code:`q_i * q_j / max(d_ij, epsilon) ** 2`.

    Parameters
    ----------
    charge: float
        charge of the charged particles
    radius: float
        interaction radius: particles further apart do not interact
    epsilon: float
        distance floor, avoiding infinite forces for near-zero distances
    charged_fraction: float
        fraction of the swarm which is charged, the remaining particles are neutral

    Note
    ----
    - Reference: T. M. Blackwell and P. J. Bentley, Dynamic search with charged swarms, GECCO 2002.
    - Two particles sitting exactly at the same position do not repel each other
      (the direction of the force is undefined).
    """

    def __init__(
        self, charge: float = 16.0, radius: float = 1.0, epsilon: float = 1e-6, charged_fraction: float = 1.0
    ) -> None:
        if radius <= 0 or epsilon <= 0:
            raise errors.ConfigurationError(
                f"Interaction radius and epsilon must be strictly positive (got {radius} and {epsilon})"
            )
        if not 0 <= charged_fraction <= 1:
            raise errors.ConfigurationError(f"Charged fraction must lie in [0, 1] (got {charged_fraction})")
        self.charge = float(charge)
        self.radius = float(radius)
        self.epsilon = float(epsilon)
        self.charged_fraction = float(charged_fraction)

    def charges(self, swarm_size: int) -> np.ndarray:
        """Charges of the particles of a swarm: the first ones are charged, the others neutral"""
        num_charged = int(round(self.charged_fraction * swarm_size))
        charges = np.zeros(swarm_size)
        charges[:num_charged] = self.charge
        return charges

    def force(self, target: np.ndarray, source: np.ndarray, q_target: float, q_source: float) -> np.ndarray:
        """Repulsion applied by a particle at source on a particle at target.
        This is the pairwise form of the interaction, for inspection and checks:
        engines use the vectorized :code:`accelerations` instead.
        """
        diff = np.asarray(target, dtype=float) - np.asarray(source, dtype=float)
        distance = float(np.linalg.norm(diff))
        if distance > self.radius or distance == 0:
            return np.zeros_like(diff)
        return q_target * q_source / max(distance, self.epsilon) ** 2 * diff / distance

    def accelerations(self, positions: np.ndarray, charges: np.ndarray) -> np.ndarray:
        """Accelerations of all the particles of the swarm, as a (swarm_size, dimension) array.
        All forces are computed from the same positions.
        """
        positions = np.asarray(positions, dtype=float)
        if positions.ndim != 2 or charges.shape != (positions.shape[0],):
            raise errors.ConfigurationError(
                f"Expected positions of shape (n, d) and charges of shape (n,), got "
                f"{positions.shape} and {charges.shape}"
            )
        diffs = positions[:, None, :] - positions[None, :, :]  # diffs[i, j] = x_i - x_j
        distances = np.linalg.norm(diffs, axis=2)
        interacting = np.logical_and(distances <= self.radius, distances > 0)
        magnitudes = np.zeros_like(distances)
        safe = np.where(interacting, distances, 1.0)
        magnitudes[interacting] = (
            np.outer(charges, charges)[interacting] / np.maximum(safe[interacting], self.epsilon) ** 2
        )
        units = diffs / safe[:, :, None]
        return np.sum(magnitudes[:, :, None] * units, axis=1)  # type: ignore

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(charge={self.charge}, radius={self.radius}, "
            f"epsilon={self.epsilon}, charged_fraction={self.charged_fraction})"
        )
