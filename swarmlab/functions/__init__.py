# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .base import Problem as Problem
from .base import ArrayProblem as ArrayProblem
from .df1 import DF1 as DF1
from .df1 import DFParameters as DFParameters
