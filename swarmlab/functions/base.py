# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors


class Problem:
    """Objective to optimize, as seen by the swarm engine.

    Subclasses must provide the bounds (through :code:`_lower` and :code:`_upper`
    arrays of equal length) and implement :code:`_evaluate`.

    Parameters
    ----------
    lower: float or array-like
        lower bound of each dimension
    upper: float or array-like
        upper bound of each dimension
    dimension: int (optional)
        dimension of the search space, required if both bounds are scalars
    maximize: bool
        direction of the comparator: True if greater fitness values are better

    Note
    ----
    - the comparator direction is a property of the problem, not of the engine.
    - dynamic problems override :code:`evolve`, which is called by the driving
      loop once per generation, never by the engine itself.
    """

    dynamic = False

    def __init__(
        self,
        lower: tp.BoundValue,
        upper: tp.BoundValue,
        dimension: tp.Optional[int] = None,
        maximize: bool = False,
    ) -> None:
        if dimension is None:
            sizes = {np.asarray(b).size for b in (lower, upper) if np.asarray(b).ndim}
            if len(sizes) != 1:
                raise errors.ConfigurationError(
                    "Dimension must be provided if both bounds are scalars, "
                    "and array bounds must have the same length"
                )
            dimension = sizes.pop()
        if dimension <= 0:
            raise errors.ConfigurationError(f"Dimension must be strictly positive (got {dimension})")
        try:
            self._lower = np.broadcast_to(np.asarray(lower, dtype=float), (dimension,)).copy()
            self._upper = np.broadcast_to(np.asarray(upper, dtype=float), (dimension,)).copy()
        except ValueError as e:
            raise errors.ConfigurationError(f"Bounds do not match dimension {dimension}: {e}") from e
        if np.any(self._lower > self._upper):
            raise errors.ConfigurationError(f"Lower bounds {self._lower} exceed upper bounds {self._upper}")
        self.maximize = maximize
        self._random_state: tp.Optional[np.random.RandomState] = None

    @property
    def dimension(self) -> int:
        return self._lower.size

    def lower_bound(self, index: int) -> float:
        return float(self._lower[index])

    def upper_bound(self, index: int) -> float:
        return float(self._upper[index])

    @property
    def lower_bounds(self) -> np.ndarray:
        return self._lower.copy()

    @property
    def upper_bounds(self) -> np.ndarray:
        return self._upper.copy()

    @property
    def random_state(self) -> np.random.RandomState:
        """Random state the problem pulls from when it needs randomness.
        It can be seeded/replaced.
        """
        if self._random_state is None:
            seed = np.random.randint(2 ** 32, dtype=np.uint32)
            self._random_state = np.random.RandomState(seed)
        return self._random_state

    @random_state.setter
    def random_state(self, random_state: np.random.RandomState) -> None:
        self._random_state = random_state

    def fitness(self, position: tp.ArrayLike) -> float:
        """Evaluates a position of the search space"""
        position = np.asarray(position, dtype=float)
        if position.shape != (self.dimension,):
            raise errors.ConfigurationError(
                f"Expected a position of shape ({self.dimension},) but got {position.shape}"
            )
        return float(self._evaluate(position))

    def _evaluate(self, position: np.ndarray) -> float:
        raise NotImplementedError

    def is_better(self, a: float, b: float) -> bool:
        """Returns True iff fitness a is strictly better than fitness b"""
        return bool(a > b) if self.maximize else bool(a < b)

    def evolve(self, iteration: int) -> None:  # pylint: disable=unused-argument
        """Updates the landscape of dynamic problems (no-op for static ones)"""

    def __repr__(self) -> str:
        direction = "max" if self.maximize else "min"
        return f"{self.__class__.__name__}(dimension={self.dimension}, {direction})"


class ArrayProblem(Problem):
    """Wraps a function of a 1-d numpy array into a bounded problem

    Parameters
    ----------
    function: callable
        the function to optimize
    lower: float or array-like
        lower bound of each dimension
    upper: float or array-like
        upper bound of each dimension
    dimension: int (optional)
        dimension, if both bounds are scalars
    maximize: bool
        whether greater values are better
    """

    def __init__(
        self,
        function: tp.Callable[[np.ndarray], float],
        lower: tp.BoundValue,
        upper: tp.BoundValue,
        dimension: tp.Optional[int] = None,
        maximize: bool = False,
    ) -> None:
        if not callable(function):
            raise errors.ConfigurationError(f"{function!r} is not callable")
        super().__init__(lower, upper, dimension=dimension, maximize=maximize)
        self._function = function

    @property
    def function(self) -> tp.Callable[[np.ndarray], float]:
        return self._function

    def _evaluate(self, position: np.ndarray) -> float:
        return self._function(position)

    def __repr__(self) -> str:
        name = getattr(self._function, "__name__", self._function.__class__.__name__)
        return f"{super().__repr__()[:-1]}, function={name})"
