# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import warnings
import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors
from swarmlab.common.decorators import Registry
from swarmlab.functions import base
from .particle import Particle
from .particle import checked_is_better


registry: Registry[tp.Type["Topology"]] = Registry(kind="topology")


class Topology:
    """Defines which particles belong to the neighborhood of a given particle.

    Topologies are stateless: they only read the personal bests of the swarm they are given,
    and compare them with the comparator of the problem.
    """

    name = "abstract"

    def neighbors(self, swarm_size: int, index: int) -> tp.List[int]:
        """Indices of the neighborhood of particle index, in scanning order"""
        raise NotImplementedError

    def best_neighbor(self, swarm: tp.Sequence[Particle], index: int, problem: base.Problem) -> np.ndarray:
        """Returns (a copy of) the best personal-best position of the neighborhood of particle index.
        The first particle found wins when none is strictly better.
        """
        if not 0 <= index < len(swarm):
            raise errors.ConfigurationError(f"Particle index {index} is out of range for a swarm of {len(swarm)}")
        best: tp.Optional[Particle] = None
        for k in self.neighbors(len(swarm), index):
            particle = swarm[k]
            if best is None or checked_is_better(problem, particle.best_fitness, best.best_fitness):
                best = particle
        assert best is not None
        return best.best_position

    def check(self, swarm_size: int) -> None:
        """Checks that the topology is compatible with the swarm size (called once at init)"""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@registry.register
class GlobalBestTopology(Topology):
    """Fully connected swarm: every particle is informed by the swarm-wide best"""

    name = "global"

    def neighbors(self, swarm_size: int, index: int) -> tp.List[int]:
        return list(range(swarm_size))


@registry.register
class LocalBestTopology(Topology):
    """Ring topology: particle i is informed by particles i - radius to i + radius,
    indices wrapping around the ends of the swarm.

    Parameters
    ----------
    radius: int
        number of neighbors on each side of the particle
    """

    name = "local"

    def __init__(self, radius: int = 1) -> None:
        if int(radius) != radius or radius < 1:
            raise errors.ConfigurationError(f"Ring radius must be a strictly positive integer (got {radius})")
        self.radius = int(radius)

    def neighbors(self, swarm_size: int, index: int) -> tp.List[int]:
        indices: tp.List[int] = []
        for offset in range(-self.radius, self.radius + 1):
            k = (index + offset) % swarm_size
            if k not in indices:
                indices.append(k)
        return indices

    def check(self, swarm_size: int) -> None:
        if 2 * self.radius + 1 >= swarm_size:
            warnings.warn(
                f"A ring of radius {self.radius} covers the whole swarm of {swarm_size} particles, "
                "this is equivalent to a global best topology",
                errors.InefficientSettingsWarning,
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(radius={self.radius})"


def make(name: str, radius: int = 1) -> Topology:
    """Instantiates a topology from its short name ("global" or "local") or class name.
    The radius is only used by ring topologies.
    """
    names = {cls.name: cls for cls in registry.values()}
    cls = names[name] if name in names else registry.lookup(name)
    if issubclass(cls, LocalBestTopology):
        return cls(radius=radius)
    return cls()
