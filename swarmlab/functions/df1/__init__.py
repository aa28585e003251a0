# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .core import DF1 as DF1
from .core import DFParameters as DFParameters
from .core import Peak as Peak
