"""
Exception types raised by moldens.

Cancellation of a first-order density task is a normal outcome and is
reported through the task's completion channel, not as an exception.
"""


class MolDensError(Exception):
    """Base class for all moldens errors."""


class DimensionMismatchError(MolDensError, ValueError):
    """Coefficient matrix or atom offset shapes disagree with the basis size."""


class InsufficientInputDataError(MolDensError, ValueError):
    """Not every occupied orbital has a grid."""


class GeometryMismatchError(MolDensError, ValueError):
    """Orbital grids are sampled on different spatial points."""


class UnsupportedConfigurationError(MolDensError, NotImplementedError):
    """Requested an orbital configuration the engine does not handle."""
