# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# base classes


class SwarmlabError(Exception):
    """Base class for error raised by swarmlab"""


class SwarmlabWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class SwarmlabRuntimeError(RuntimeError, SwarmlabError):
    """Runtime error raised by swarmlab"""


class SwarmlabTypeError(TypeError, SwarmlabError):
    """Type error raised by swarmlab"""


class SwarmlabValueError(ValueError, SwarmlabError):
    """Value error raised by swarmlab"""


class ConfigurationError(SwarmlabValueError):
    """Invalid or missing configuration (swarm size, iteration count, bounds,
    dimensions, comparator...). Raised before any generation is run.
    """


class NotInitializedError(SwarmlabRuntimeError):
    """The engine was asked to run a generation before being initialized"""


# warnings


class SwarmlabRuntimeWarning(RuntimeWarning, SwarmlabWarning):
    """Runtime warning raised by swarmlab"""


class InefficientSettingsWarning(SwarmlabRuntimeWarning):
    """Settings are legal but probably not what was intended"""
