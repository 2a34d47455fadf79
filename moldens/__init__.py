"""
moldens - Electron densities from molecular orbitals

Builds alpha, beta, total, spin and Mulliken density matrices from
molecular-orbital coefficients, and computes the first-order density
distribution of occupied orbitals on a grid in the background.
"""

__version__ = "0.1.0"

from . import data
from . import engine
from . import physics
from . import utils
from .errors import (
    MolDensError,
    DimensionMismatchError,
    InsufficientInputDataError,
    GeometryMismatchError,
    UnsupportedConfigurationError,
)
from .layer import OrbitalDensityLayer

__all__ = [
    "data",
    "engine",
    "physics",
    "utils",
    "MolDensError",
    "DimensionMismatchError",
    "InsufficientInputDataError",
    "GeometryMismatchError",
    "UnsupportedConfigurationError",
    "OrbitalDensityLayer",
    "__version__",
]
