# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import inspect
import logging
import contextlib
import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors
from swarmlab.common.decorators import Registry
from swarmlab.functions import base
from . import topology as topolib
from .particle import Particle
from .particle import checked_is_better
from .charged import CoulombRepulsion


logger = logging.getLogger(__name__)
registry: Registry["ConfPSO"] = Registry(kind="engine configuration")
_EngineCallBack = tp.Callable[["ParticleSwarm"], None]

INITIAL_WEIGHT = 0.9
FINAL_WEIGHT = 0.4


def _as_random_state(seed: tp.Seed) -> tp.Optional[np.random.RandomState]:
    if seed is None or isinstance(seed, np.random.RandomState):
        return seed
    return np.random.RandomState(seed)


class _Snapshot(tp.NamedTuple):
    particles: tp.List[Particle]
    gbest_position: np.ndarray
    gbest_fitness: float
    inertia_weight: float
    num_iterations: int
    rng_state: tp.Any


class ParticleSwarm:  # pylint: disable=too-many-instance-attributes
    """Particle swarm optimizer with linearly decreasing inertia weight.

    The engine performs exactly one generation per :code:`iterate()` call, the
    driving loop (see :code:`swarmlab.optimization.runner`) decides when to stop.

    Parameters
    ----------
    problem: Problem
        the problem to optimize (it provides bounds and the comparator direction)
    max_iterations: int
        maximum number of generations, used by the inertia weight decay (required)
    swarm_size: int
        number of particles
    c1: float
        cognitive coefficient
    c2: float
        social coefficient
    topology: Topology
        neighborhood topology (defaults to the global best topology)
    repulsion: CoulombRepulsion (optional)
        repulsion model between charged particles, if any
    random_state: int or np.random.RandomState (optional)
        seed or random state of all the stochastic operations of the engine

    Note
    ----
    - The inertia weight starts at 0.9 and decays toward 0.4 following
      :code:`w <- (w - 0.4) * (max_iterations - elapsed) / max_iterations + 0.4`.
    - If a generation fails (e.g. the problem raises), the swarm is restored to its
      state before the generation and the error is propagated.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        problem: base.Problem,
        *,
        max_iterations: tp.Optional[int] = None,
        swarm_size: int = 30,
        c1: float = 2.0,
        c2: float = 2.0,
        topology: tp.Optional[topolib.Topology] = None,
        repulsion: tp.Optional[CoulombRepulsion] = None,
        random_state: tp.Seed = None,
    ) -> None:
        self.problem = problem
        self.max_iterations = max_iterations
        self.swarm_size = swarm_size
        self.c1 = c1
        self.c2 = c2
        self.topology = topolib.GlobalBestTopology() if topology is None else topology
        self.repulsion = repulsion
        self.name = self.__class__.__name__  # printed name in repr
        self._random_state = _as_random_state(random_state)
        self._check_configuration()
        # instance state
        self._particles: tp.List[Particle] = []
        self._charges: tp.Optional[np.ndarray] = None
        self._gbest_position = np.zeros(0)
        self._gbest_fitness = float("nan")
        self.inertia_weight = INITIAL_WEIGHT
        self._num_iterations = 0
        self._callbacks: tp.Dict[str, tp.List[_EngineCallBack]] = {}

    def _check_configuration(self) -> None:
        max_iterations = self.max_iterations
        if max_iterations is None:
            raise errors.ConfigurationError("max_iterations must be provided")
        if isinstance(max_iterations, bool) or int(max_iterations) != max_iterations or max_iterations <= 0:
            raise errors.ConfigurationError(f"max_iterations must be a strictly positive integer (got {max_iterations})")
        swarm_size = self.swarm_size
        if isinstance(swarm_size, bool) or int(swarm_size) != swarm_size or swarm_size <= 0:
            raise errors.ConfigurationError(f"swarm_size must be a strictly positive integer (got {swarm_size})")
        for name in ["c1", "c2"]:
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise errors.ConfigurationError(f"{name} must be a non-negative real number (got {value})")
        if not isinstance(self.topology, topolib.Topology):
            raise errors.SwarmlabTypeError(f"{self.topology!r} is not a Topology")
        if not isinstance(self.problem, base.Problem):
            raise errors.SwarmlabTypeError(f"{self.problem!r} is not a Problem")

    @property
    def random_state(self) -> np.random.RandomState:
        """Random state all the stochastic operations of the engine pull from.
        It can be seeded/replaced.
        """
        if self._random_state is None:
            seed = np.random.randint(2 ** 32, dtype=np.uint32)
            self._random_state = np.random.RandomState(seed)
        return self._random_state

    @random_state.setter
    def random_state(self, random_state: np.random.RandomState) -> None:
        self._random_state = random_state

    @property
    def dimension(self) -> int:
        return self.problem.dimension

    @property
    def particles(self) -> tp.Tuple[Particle, ...]:
        """Particles of the swarm, in their (stable) index order"""
        return tuple(self._particles)

    @property
    def num_iterations(self) -> int:
        """int: Number of generations completed since init"""
        return self._num_iterations

    @property
    def parameters(self) -> tp.Dict[str, tp.Any]:
        """Tunable parameters of the engine, by name"""
        return {"C1": self.c1, "C2": self.c2, "Swarm size": self.swarm_size}

    @property
    def best_solution(self) -> np.ndarray:
        """Copy of the global best position"""
        self._check_initialized()
        return self._gbest_position.copy()

    @property
    def best_solution_value(self) -> float:
        """Fitness of the global best position. On dynamic problems it is evaluated
        on the current landscape, otherwise it is the value recorded when it was found.
        """
        self._check_initialized()
        if self.problem.dynamic:
            return self.problem.fitness(self._gbest_position)
        return self._gbest_fitness

    def register_callback(self, name: str, callback: _EngineCallBack) -> None:
        """Add a callback method called after :code:`init` or after each :code:`iterate`,
        with the engine as sole argument. This can be useful for custom logging.

        Parameters
        ----------
        name: str
            name of the method to register the callback for (either :code:`init` or :code:`iterate`)
        callback: callable
            a callable taking the engine as argument
        """
        assert name in ["init", "iterate"], f'Only "init" and "iterate" methods can have callbacks (not {name})'
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    def _check_initialized(self) -> None:
        if not self._particles:
            raise errors.NotInitializedError(f"{self.name} must be initialized through init() first")

    def init(self) -> None:
        """Creates the swarm at uniformly random positions with velocities in [0, 1),
        and sets the initial global best
        """
        self._check_configuration()
        problem = self.problem
        dimension = problem.dimension
        lower, upper = problem.lower_bounds, problem.upper_bounds
        self.topology.check(self.swarm_size)
        rng = self.random_state
        particles: tp.List[Particle] = []
        for _ in range(self.swarm_size):
            position = np.clip(lower + (upper - lower) * rng.uniform(0.0, 1.0, size=dimension), lower, upper)
            particle = Particle(dimension)
            particle.set_current_position(position, problem.fitness(position))
            particle.set_best_position(position, particle.current_fitness)
            particle.set_velocity(rng.uniform(0.0, 1.0, size=dimension))
            particles.append(particle)
        self._charges = None if self.repulsion is None else self.repulsion.charges(self.swarm_size)
        self._gbest_position = particles[0].best_position
        self._gbest_fitness = particles[0].best_fitness
        for particle in particles:
            self._update_gbest(particle)
        self._particles = particles
        self.inertia_weight = INITIAL_WEIGHT
        self._num_iterations = 0
        logger.debug("Initialized %s with %s particles, best value %s", self.name, self.swarm_size, self._gbest_fitness)
        for callback in self._callbacks.get("init", []):
            callback(self)

    def _update_gbest(self, particle: Particle) -> None:
        if checked_is_better(self.problem, particle.best_fitness, self._gbest_fitness):
            self._gbest_position = particle.best_position
            self._gbest_fitness = particle.best_fitness

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            particles=[p.copy() for p in self._particles],
            gbest_position=self._gbest_position.copy(),
            gbest_fitness=self._gbest_fitness,
            inertia_weight=self.inertia_weight,
            num_iterations=self._num_iterations,
            rng_state=self.random_state.get_state(),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        # particles are restored in place so that references held by callers stay valid
        for particle, saved in zip(self._particles, snapshot.particles):
            particle.__dict__.update(saved.__dict__)
        self._gbest_position = snapshot.gbest_position
        self._gbest_fitness = snapshot.gbest_fitness
        self.inertia_weight = snapshot.inertia_weight
        self._num_iterations = snapshot.num_iterations
        self.random_state.set_state(snapshot.rng_state)

    @contextlib.contextmanager
    def _rollback_on_error(self) -> tp.Iterator[None]:
        snapshot = self._snapshot()
        try:
            yield
        except Exception:
            logger.debug("Restoring %s after a failure at generation %s", self.name, self._num_iterations)
            self._restore(snapshot)
            raise

    def iterate(self, elapsed_iterations: tp.Optional[int] = None) -> None:
        """Runs one generation of the swarm

        Parameters
        ----------
        elapsed_iterations: int (optional)
            number of generations completed before this one, as tracked by the driving loop.
            Defaults to the number of generations run by this engine since init.

        Note
        ----
        The engine does not stop by itself: past max_iterations generations, the inertia
        weight stays at its final value.
        """
        self._check_initialized()
        elapsed = self._num_iterations if elapsed_iterations is None else elapsed_iterations
        if elapsed < 0:
            raise errors.ConfigurationError(f"Elapsed iterations must be non-negative (got {elapsed})")
        with self._rollback_on_error():
            self._run_generation(elapsed)
        logger.debug(
            "Generation %s of %s: best value %s, inertia weight %s",
            self._num_iterations,
            self.name,
            self._gbest_fitness,
            self.inertia_weight,
        )
        for callback in self._callbacks.get("iterate", []):
            callback(self)

    def _run_generation(self, elapsed: int) -> None:
        problem = self.problem
        particles = self._particles
        if problem.dynamic:
            # the landscape may have changed since the global best was found
            self._gbest_fitness = problem.fitness(self._gbest_position)
        # personal and global bests
        for particle in particles:
            particle.update_pbest(problem)
            self._update_gbest(particle)
        # repulsions are computed from the positions at the start of the move
        accelerations: tp.Optional[np.ndarray] = None
        if self.repulsion is not None:
            assert self._charges is not None
            positions = np.array([p.position for p in particles])
            accelerations = self.repulsion.accelerations(positions, self._charges)
        for index, particle in enumerate(particles):
            neighborhood_best = self.topology.best_neighbor(particles, index, problem)
            particle.update_velocity(self.inertia_weight, neighborhood_best, self.c1, self.c2, self.random_state)
            if accelerations is not None:
                particle.accelerate(accelerations[index])
            particle.update_current_position(problem)
        # linear decay of the inertia weight
        max_iterations = self.max_iterations
        assert max_iterations is not None
        self.inertia_weight = (self.inertia_weight - FINAL_WEIGHT) * max(
            0.0, (max_iterations - elapsed) / max_iterations
        ) + FINAL_WEIGHT
        self._num_iterations += 1

    def reevaluate_memory(self) -> None:
        """Re-evaluates the current positions, personal bests and global best against the
        current landscape (for dynamic problems, after the landscape changed).
        """
        self._check_initialized()
        problem = self.problem
        with self._rollback_on_error():
            for particle in self._particles:
                particle.set_current_position(particle.position, problem.fitness(particle.position))
                particle.set_best_position(particle.best_position, problem.fitness(particle.best_position))
            self._gbest_fitness = problem.fitness(self._gbest_position)
            for particle in self._particles:
                self._update_gbest(particle)

    def __repr__(self) -> str:
        return (
            f"Instance of {self.name}(problem={self.problem!r}, swarm_size={self.swarm_size}, "
            f"max_iterations={self.max_iterations}, topology={self.topology!r}, repulsion={self.repulsion!r})"
        )


class ConfPSO:
    """Configured particle swarm: creates engines sharing the same settings.

    Parameters
    ----------
    swarm_size: int
        number of particles
    c1: float
        cognitive coefficient
    c2: float
        social coefficient
    topology: str
        name of the neighborhood topology, "global" or "local" (ring)
    radius: int
        number of neighbors on each side of a particle, for the ring topology
    charge: float (optional)
        charge of the charged particles. No repulsion is applied if None
    interaction_radius: float
        distance under which charged particles repel each other
    epsilon: float
        distance floor of the repulsion
    charged_fraction: float
        fraction of the swarm which is charged

    Note
    ----
    This provides a default repr which can be bypassed through set_name
    """

    # pylint: disable=unused-argument,too-many-arguments
    def __init__(
        self,
        swarm_size: int = 30,
        c1: float = 2.0,
        c2: float = 2.0,
        topology: str = "global",
        radius: int = 1,
        charge: tp.Optional[float] = None,
        interaction_radius: float = 1.0,
        epsilon: float = 1e-6,
        charged_fraction: float = 1.0,
    ) -> None:
        config = dict(locals())
        config.pop("self")
        self._config = config
        topolib.make(topology, radius=radius)  # fails early on bad topology settings
        if charge is not None:
            self._make_repulsion()
        defaults = {
            x: y.default for x, y in inspect.signature(self.__class__.__init__).parameters.items() if x != "self"
        }
        params = ", ".join(f"{x}={y!r}" for x, y in sorted(config.items()) if y != defaults[x])
        self.name = f"{self.__class__.__name__}({params})"

    def config(self) -> tp.Dict[str, tp.Any]:
        return dict(self._config)

    def _make_repulsion(self) -> CoulombRepulsion:
        config = self._config
        return CoulombRepulsion(
            charge=config["charge"],
            radius=config["interaction_radius"],
            epsilon=config["epsilon"],
            charged_fraction=config["charged_fraction"],
        )

    def __call__(
        self, problem: base.Problem, max_iterations: tp.Optional[int] = None, random_state: tp.Seed = None
    ) -> ParticleSwarm:
        """Creates an engine optimizing the problem

        Parameters
        ----------
        problem: Problem
            the problem to optimize
        max_iterations: int
            maximum number of generations (required)
        random_state: int or np.random.RandomState (optional)
            seed or random state of the engine
        """
        config = self._config
        engine = ParticleSwarm(
            problem,
            max_iterations=max_iterations,
            swarm_size=config["swarm_size"],
            c1=config["c1"],
            c2=config["c2"],
            topology=topolib.make(config["topology"], radius=config["radius"]),
            repulsion=None if config["charge"] is None else self._make_repulsion(),
            random_state=random_state,
        )
        engine.name = self.name
        return engine

    def __repr__(self) -> str:
        return self.name

    def set_name(self, name: str, register: bool = False) -> "ConfPSO":
        """Set a new representation for the instance"""
        self.name = name
        if register:
            registry.register_name(name, self)
        return self

    def __eq__(self, other: tp.Any) -> tp.Any:
        if self.__class__ == other.__class__:
            if self._config == other._config:
                return True
        return False


# charged presets follow mixed swarms of charged and neutral particles with a unit core radius
GlobalBestPSO = ConfPSO().set_name("GlobalBestPSO", register=True)
LocalBestPSO = ConfPSO(topology="local").set_name("LocalBestPSO", register=True)
ChargedGlobalBestPSO = ConfPSO(charge=16.0, epsilon=1.0, charged_fraction=0.5).set_name(
    "ChargedGlobalBestPSO", register=True
)
ChargedLocalBestPSO = ConfPSO(topology="local", charge=16.0, epsilon=1.0, charged_fraction=0.5).set_name(
    "ChargedLocalBestPSO", register=True
)
