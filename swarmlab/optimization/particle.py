# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors
from swarmlab.functions import base


class Particle:
    """Candidate solution of the swarm, with its velocity and personal best.

    Parameters
    ----------
    dimension: int
        dimension of the search space

    Note
    ----
    Position, velocity and best position are returned as copies,
    the particle state can only be modified through its methods.
    """

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            raise errors.ConfigurationError(f"Particles need a strictly positive dimension (got {dimension})")
        self.dimension = dimension
        self._position = np.zeros(dimension)
        self._velocity = np.zeros(dimension)
        self._best_position = np.zeros(dimension)
        self.current_fitness = float("nan")
        self.best_fitness = float("nan")

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self._velocity.copy()

    @property
    def best_position(self) -> np.ndarray:
        return self._best_position.copy()

    def _as_vector(self, values: tp.ArrayLike, name: str) -> np.ndarray:
        array = np.array(values, dtype=float, copy=True)
        if array.shape != (self.dimension,):
            raise errors.ConfigurationError(
                f"Expected {name} of shape ({self.dimension},) but got {array.shape}"
            )
        return array

    def set_velocity(self, velocity: tp.ArrayLike) -> None:
        self._velocity = self._as_vector(velocity, "velocity")

    def set_current_position(self, position: tp.ArrayLike, fitness: float) -> None:
        self._position = self._as_vector(position, "position")
        self.current_fitness = float(fitness)

    def set_best_position(self, position: tp.ArrayLike, fitness: float) -> None:
        self._best_position = self._as_vector(position, "best position")
        self.best_fitness = float(fitness)

    def update_pbest(self, problem: base.Problem) -> bool:
        """Replaces the personal best by the current position if it is strictly better.
        Returns whether the personal best was replaced.
        """
        improved = checked_is_better(problem, self.current_fitness, self.best_fitness)
        if improved:
            self._best_position = self._position.copy()
            self.best_fitness = self.current_fitness
        return improved

    # pylint: disable=too-many-arguments
    def update_velocity(
        self,
        inertia_weight: float,
        neighborhood_best: tp.ArrayLike,
        c1: float,
        c2: float,
        random_state: np.random.RandomState,
    ) -> None:
        """Standard PSO velocity update, with independent uniform draws per dimension
        for the cognitive (r1) and social (r2) terms
        """
        neighborhood_best = self._as_vector(neighborhood_best, "neighborhood best")
        r1 = random_state.uniform(0.0, 1.0, size=self.dimension)
        r2 = random_state.uniform(0.0, 1.0, size=self.dimension)
        self._velocity = (
            inertia_weight * self._velocity
            + c1 * r1 * (self._best_position - self._position)
            + c2 * r2 * (neighborhood_best - self._position)
        )

    def accelerate(self, acceleration: tp.ArrayLike) -> None:
        """Adds an external acceleration (e.g. a repulsion) to the velocity"""
        self._velocity = self._velocity + self._as_vector(acceleration, "acceleration")

    def update_current_position(self, problem: base.Problem) -> None:
        """Moves the particle by its velocity, clamps it into the problem bounds
        and evaluates the new position
        """
        position = np.clip(self._position + self._velocity, problem.lower_bounds, problem.upper_bounds)
        fitness = problem.fitness(position)
        self._position = position
        self.current_fitness = fitness

    def copy(self) -> "Particle":
        particle = Particle(self.dimension)
        particle.__dict__.update(
            {x: y.copy() if isinstance(y, np.ndarray) else y for x, y in self.__dict__.items()}
        )
        return particle

    def __repr__(self) -> str:
        return (
            f"Particle(position={self._position.tolist()}, fitness={self.current_fitness}, "
            f"best_fitness={self.best_fitness})"
        )


def checked_is_better(problem: base.Problem, a: float, b: float) -> bool:
    """Calls the problem comparator, making sure it answers with a boolean"""
    output = problem.is_better(a, b)
    if not isinstance(output, (bool, np.bool_)):
        raise errors.ConfigurationError(
            f"Comparator of {problem} must return a boolean, got {output!r} ({type(output).__name__})"
        )
    return bool(output)
