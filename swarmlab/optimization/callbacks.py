# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import numpy as np
import swarmlab.common.typing as tp
from . import pso

global_logger = logging.getLogger(__name__)


class GenerationLogger:
    """Logger to register as callback in an engine, for logging
    the global best regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_generations: int
        max number of generations before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_generations: int = 1,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_generations > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_generations = int(log_interval_generations)
        self._log_interval_seconds = log_interval_seconds
        self._next_generation = self._log_interval_generations
        self._next_time = time.time() + log_interval_seconds

    def __call__(self, engine: pso.ParticleSwarm) -> None:
        if time.time() >= self._next_time or engine.num_iterations >= self._next_generation:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_generation = engine.num_iterations + self._log_interval_generations
            self._logger.log(
                self._log_level,
                "After %s generation(s), best value is %s at %s (inertia weight %.4f)",
                engine.num_iterations,
                engine.best_solution_value,
                engine.best_solution,
                engine.inertia_weight,
            )


class BestValueHistory:
    """Records the global best value after init and after each generation.
    Register it on both "init" and "iterate".
    """

    def __init__(self) -> None:
        self.values: tp.List[float] = []
        self.positions: tp.List[np.ndarray] = []

    def __call__(self, engine: pso.ParticleSwarm) -> None:
        self.values.append(engine.best_solution_value)
        self.positions.append(engine.best_solution)

    def __len__(self) -> int:
        return len(self.values)
