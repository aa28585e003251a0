# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .common import typing as typing
from .common import errors as errors
from .functions import DF1 as DF1
from .functions import DFParameters as DFParameters
from .functions import ArrayProblem as ArrayProblem
from .optimization import pso as engines
from .optimization import callbacks as callbacks
from .optimization import topology as topologies
from .optimization.runner import run as run


__all__ = ["engines", "callbacks", "topologies", "run", "DF1", "DFParameters", "ArrayProblem", "typing", "errors"]


__version__ = "0.1.0"
