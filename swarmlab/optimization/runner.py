# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
import numpy as np
import swarmlab.common.typing as tp
from swarmlab.common import errors
from . import pso


logger = logging.getLogger(__name__)


class MaxIterations:
    """Stop condition which is met once the engine completed a number of generations

    Parameters
    ----------
    max_iterations: int (optional)
        number of generations to run, defaults to the max_iterations of the engine
    """

    def __init__(self, max_iterations: tp.Optional[int] = None) -> None:
        if max_iterations is not None and max_iterations <= 0:
            raise errors.ConfigurationError(f"max_iterations must be strictly positive (got {max_iterations})")
        self.max_iterations = max_iterations

    def __call__(self, engine: pso.ParticleSwarm) -> bool:
        limit = engine.max_iterations if self.max_iterations is None else self.max_iterations
        assert limit is not None
        return engine.num_iterations >= limit

    def __repr__(self) -> str:
        return f"MaxIterations({self.max_iterations})"


class RunSummary(tp.NamedTuple):
    generations: int
    best_value: float
    best_solution: np.ndarray


def run(
    engine: pso.ParticleSwarm,
    stop: tp.Optional[tp.StopConditionLike[pso.ParticleSwarm]] = None,
    reevaluate: bool = False,
) -> RunSummary:
    """Initializes the engine and runs generations until the stop condition is met.
    Dynamic problems are evolved after each generation.

    Parameters
    ----------
    engine: ParticleSwarm
        the engine to run
    stop: callable (optional)
        stop condition, called with the engine after each generation.
        Defaults to reaching the max_iterations of the engine.
    reevaluate: bool
        whether to re-evaluate the memory of the swarm after each change of a dynamic problem

    Returns
    -------
    RunSummary
        number of generations, best value and best solution at the end of the run
    """
    stop = MaxIterations() if stop is None else stop
    assert engine.max_iterations is not None
    problem = engine.problem
    engine.init()
    while not stop(engine):
        if engine.num_iterations >= engine.max_iterations:
            raise errors.ConfigurationError(
                f"Stop condition {stop!r} was not met within max_iterations={engine.max_iterations}"
            )
        elapsed = engine.num_iterations
        engine.iterate(elapsed)
        if problem.dynamic:
            problem.evolve(elapsed)
            if reevaluate:
                engine.reevaluate_memory()
    logger.info(
        "%s stopped after %s generation(s) with best value %s",
        engine.name,
        engine.num_iterations,
        engine.best_solution_value,
    )
    return RunSummary(engine.num_iterations, engine.best_solution_value, engine.best_solution)
