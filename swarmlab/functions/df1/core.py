# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
#
# DF1 is extracted from: R.W. Morrison and K.A. De Jong,
# A test problem generator for non-stationary environments, CEC 1999.

import logging
import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors
from .. import base


logger = logging.getLogger(__name__)
AXES = ("h", "r", "x")


class AxisParameters(tp.NamedTuple):
    """Settings of one of the h (height), r (slope) or x (location) axes"""

    base: float
    range: float
    scale: float
    a: float
    dynamic: bool


class DFParameters:
    """Parameters of the DF1 generator, one (base, range, scale, a, dynamic) set for
    each of the height (h), slope (r) and location (x) axes.

    Parameters
    ----------
    dimension: int
        dimension of the peak locations
    peak_count: int
        number of peaks of the landscape
    h_base, r_base, x_base: float
        base value of the axis
    h_range, r_range, x_range: float
        spread of the axis: h and r lie in [base, base + range], each coordinate
        of x in [base - range, base + range]
    h_scale, r_scale, x_scale: float
        maximum step of the axis at each change
    a_h, a_r, a_x: float
        rate constant of the logistic map driving the axis, in (0, 4]
    dynamic_h, dynamic_r, dynamic_x: bool
        whether the axis changes over time

    Note
    ----
    :code:`DFParameters.from_dict` accepts the flat configuration mapping.
    """

    # pylint: disable=too-many-instance-attributes,too-many-arguments,too-many-locals
    def __init__(
        self,
        dimension: int = 2,
        peak_count: int = 5,
        h_base: float = 30.0,
        h_range: float = 40.0,
        h_scale: float = 1.0,
        a_h: float = 3.3,
        dynamic_h: bool = False,
        r_base: float = 1.0,
        r_range: float = 19.0,
        r_scale: float = 1.0,
        a_r: float = 3.3,
        dynamic_r: bool = False,
        x_base: float = 0.0,
        x_range: float = 1.0,
        x_scale: float = 0.1,
        a_x: float = 3.3,
        dynamic_x: bool = False,
    ) -> None:
        for name, value in [("dimension", dimension), ("peak_count", peak_count)]:
            if int(value) != value or value <= 0:
                raise errors.ConfigurationError(f"{name} must be a strictly positive integer (got {value})")
        self.dimension = int(dimension)
        self.peak_count = int(peak_count)
        self.h = AxisParameters(float(h_base), float(h_range), float(h_scale), float(a_h), bool(dynamic_h))
        self.r = AxisParameters(float(r_base), float(r_range), float(r_scale), float(a_r), bool(dynamic_r))
        self.x = AxisParameters(float(x_base), float(x_range), float(x_scale), float(a_x), bool(dynamic_x))
        for axis in AXES:
            params = self.axis(axis)
            if params.range < 0 or params.scale < 0:
                raise errors.ConfigurationError(f"Range and scale of axis {axis} must be non-negative")
            if not 0 < params.a <= 4:
                raise errors.ConfigurationError(f"Logistic rate a_{axis} must lie in (0, 4] (got {params.a})")

    @classmethod
    def from_dict(cls, config: tp.Mapping[str, tp.Any]) -> "DFParameters":
        """Builds the parameters from the flat configuration
        (h_base, h_range, h_scale, a_h, dynamic_h, same for r and x, peak_count, dimension)
        """
        known = set(cls().to_dict())
        unknown = set(config) - known
        if unknown:
            raise errors.ConfigurationError(f"Unknown DF1 parameters: {sorted(unknown)}")
        return cls(**config)

    def to_dict(self) -> tp.Dict[str, tp.Any]:
        config: tp.Dict[str, tp.Any] = dict(dimension=self.dimension, peak_count=self.peak_count)
        for axis in AXES:
            params = self.axis(axis)
            config.update(
                {
                    f"{axis}_base": params.base,
                    f"{axis}_range": params.range,
                    f"{axis}_scale": params.scale,
                    f"a_{axis}": params.a,
                    f"dynamic_{axis}": params.dynamic,
                }
            )
        return config

    def axis(self, name: str) -> AxisParameters:
        if name not in AXES:
            raise errors.ConfigurationError(f"Unknown axis {name}, expected one of {AXES}")
        return getattr(self, name)  # type: ignore

    def interval(self, name: str) -> tp.Tuple[float, float]:
        """Admissible interval of the values of an axis"""
        params = self.axis(name)
        if name == "x":
            return params.base - params.range, params.base + params.range
        return params.base, params.base + params.range

    def __repr__(self) -> str:
        params = ", ".join(f"{x}={y!r}" for x, y in self.to_dict().items())
        return f"DFParameters({params})"


class LogisticFunction:
    """Chaotic drift of the parameters of a peak.

    Each axis holds a logistic map state y (one per coordinate for x) which evolves
    as :code:`y <- a * y * (1 - y)` once per iteration. The value of the axis then moves
    by :code:`scale * y` in its current direction, reflecting on the admissible
    interval (the direction flips on reflection).

    Parameters
    ----------
    dimension: int
        number of coordinates of the x axis
    random_state: np.random.RandomState
        random state used to draw the initial logistic states and directions
    """

    def __init__(self, dimension: int, random_state: np.random.RandomState) -> None:
        sizes = dict(h=1, r=1, x=dimension)
        # avoid the fixed points of the map at 0 and 1
        self._states = {axis: random_state.uniform(0.01, 0.99, size) for axis, size in sizes.items()}
        self._directions = {axis: random_state.choice([-1.0, 1.0], size) for axis, size in sizes.items()}
        self._iterations: tp.Dict[str, tp.Optional[int]] = {axis: None for axis in AXES}

    def state(self, axis: str) -> np.ndarray:
        return self._states[axis].copy()

    def _num_steps(self, axis: str, iteration: int) -> int:
        last = self._iterations[axis]
        if last is not None and iteration < last:
            raise errors.SwarmlabValueError(
                f"Iterations must not decrease (got {iteration} after {last} on axis {axis})"
            )
        self._iterations[axis] = iteration
        return 1 if last is None else iteration - last

    # pylint: disable=too-many-arguments
    def _generate(
        self,
        axis: str,
        value: np.ndarray,
        bounds: tp.Tuple[float, float],
        scale: float,
        iteration: int,
        a: float,
    ) -> np.ndarray:
        lower, upper = bounds
        value = np.array(value, dtype=float, copy=True)
        state = self._states[axis]
        direction = self._directions[axis]
        for _ in range(self._num_steps(axis, iteration)):
            state[:] = a * state * (1 - state)
            value += direction * scale * state
            above = value > upper
            value[above] = 2 * upper - value[above]
            below = value < lower
            value[below] = 2 * lower - value[below]
            direction[np.logical_or(above, below)] *= -1
            np.clip(value, lower, upper, out=value)
        return value

    # pylint: disable=too-many-arguments
    def generate_dynamic_h(
        self, h: float, base: float, range_: float, scale: float, iteration: int, a: float
    ) -> float:
        return float(self._generate("h", np.array([h]), (base, base + range_), scale, iteration, a)[0])

    def generate_dynamic_r(
        self, r: float, base: float, range_: float, scale: float, iteration: int, a: float
    ) -> float:
        return float(self._generate("r", np.array([r]), (base, base + range_), scale, iteration, a)[0])

    def generate_dynamic_x(
        self, x: np.ndarray, base: float, range_: float, scale: float, iteration: int, a: float
    ) -> np.ndarray:
        return self._generate("x", x, (base - range_, base + range_), scale, iteration, a)


class Peak:
    """Cone of the DF1 landscape, of height h and slope r, centered on x.
    Its value at a position is :code:`h - r * ||position - x||`.

    The parameters only change through :code:`change`, which requires the peak
    to have been created with DF1 parameters and a logistic function (see :code:`Peak.random`).
    """

    def __init__(
        self,
        h: float,
        r: float,
        x: tp.ArrayLike,
        parameters: tp.Optional[DFParameters] = None,
        logistic: tp.Optional[LogisticFunction] = None,
    ) -> None:
        self._h = float(h)
        self._r = float(r)
        self._x = np.array(x, dtype=float, copy=True)
        if self._x.ndim != 1 or not self._x.size:
            raise errors.ConfigurationError(f"Peak location must be a non-empty vector (got {x!r})")
        self._parameters = parameters
        self._logistic = logistic

    @classmethod
    def random(cls, parameters: DFParameters, random_state: np.random.RandomState) -> "Peak":
        """Draws a peak uniformly in the ranges provided by the parameters"""
        h = parameters.h.base + random_state.uniform(0, parameters.h.range)
        r = parameters.r.base + random_state.uniform(0, parameters.r.range)
        x = parameters.x.base + random_state.uniform(-parameters.x.range, parameters.x.range, parameters.dimension)
        logistic = LogisticFunction(parameters.dimension, random_state)
        return cls(h, r, x, parameters=parameters, logistic=logistic)

    @property
    def h(self) -> float:
        return self._h

    @property
    def r(self) -> float:
        return self._r

    @property
    def x(self) -> np.ndarray:
        return self._x.copy()

    def value(self, position: tp.ArrayLike) -> float:
        distance = np.linalg.norm(np.asarray(position, dtype=float) - self._x)
        return float(self._h - self._r * distance)

    def change(self, iteration: int) -> None:
        """Moves the enabled axes of the peak one step along their chaotic trajectory"""
        if self._parameters is None or self._logistic is None:
            raise errors.SwarmlabRuntimeError("Only peaks created from DF1 parameters can change")
        params = self._parameters
        if params.h.dynamic:
            h = params.h
            self._h = self._logistic.generate_dynamic_h(self._h, h.base, h.range, h.scale, iteration, h.a)
        if params.r.dynamic:
            r = params.r
            self._r = self._logistic.generate_dynamic_r(self._r, r.base, r.range, r.scale, iteration, r.a)
        if params.x.dynamic:
            x = params.x
            self._x = self._logistic.generate_dynamic_x(self._x, x.base, x.range, x.scale, iteration, x.a)

    def __repr__(self) -> str:
        return f"Peak(h={self._h!r}, r={self._r!r}, x={self._x.tolist()!r})"


class DF1(base.Problem):
    """DF1 dynamic landscape: the upper envelope of a set of moving cones.

    Parameters
    ----------
    parameters: DFParameters or dict
        generator parameters (a flat dict is converted through DFParameters.from_dict)
    random_state: int or np.random.RandomState (optional)
        seed or random state used to draw the peaks and their chaotic states

    Note
    ----
    - this is a maximization problem, over [x_base - x_range, x_base + x_range]^dimension.
    - :code:`change_peaks(iteration)` must be called by the driving loop once per
      generation, the swarm engine never calls it.
    """

    dynamic = True

    def __init__(
        self,
        parameters: tp.Union[DFParameters, tp.Mapping[str, tp.Any], None] = None,
        random_state: tp.Seed = None,
    ) -> None:
        if parameters is None:
            parameters = DFParameters()
        elif not isinstance(parameters, DFParameters):
            parameters = DFParameters.from_dict(parameters)
        lower, upper = parameters.interval("x")
        super().__init__(lower, upper, dimension=parameters.dimension, maximize=True)
        self.parameters = parameters
        if random_state is not None:
            self.random_state = (
                random_state
                if isinstance(random_state, np.random.RandomState)
                else np.random.RandomState(random_state)
            )
        self._peaks = tuple(Peak.random(parameters, self.random_state) for _ in range(parameters.peak_count))
        logger.debug("Created DF1 landscape with %s peaks in dimension %s", len(self._peaks), self.dimension)

    @property
    def peaks(self) -> tp.Tuple[Peak, ...]:
        return self._peaks

    def _evaluate(self, position: np.ndarray) -> float:
        return max(peak.value(position) for peak in self._peaks)

    def change_peaks(self, iteration: int) -> None:
        """Changes every peak along its enabled axes"""
        for peak in self._peaks:
            peak.change(iteration)

    def evolve(self, iteration: int) -> None:
        self.change_peaks(iteration)

    def optimum(self) -> tp.Tuple[np.ndarray, float]:
        """Location and value of the global optimum (the apex of the highest peak)"""
        highest = max(self._peaks, key=lambda peak: peak.h)
        return highest.x, self.fitness(highest.x)
