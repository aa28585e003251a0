# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .pso import ParticleSwarm  # engine class, for type checking
from .pso import ConfPSO
from .pso import registry
from .particle import Particle
from .topology import GlobalBestTopology
from .topology import LocalBestTopology
from .charged import CoulombRepulsion
from .runner import run
from .runner import MaxIterations
