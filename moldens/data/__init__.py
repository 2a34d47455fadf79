"""
Data containers for orbital information.

This module provides:
- Canonical orbital coefficients, energies and atom offsets
- Orbital values sampled on regular 3D grids
"""

from .orbitals import CanonicalOrbitals, OrbitalType
from .grids import OrbitalGrid, Spin, find_grids

__all__ = [
    "CanonicalOrbitals",
    "OrbitalType",
    "OrbitalGrid",
    "Spin",
    "find_grids",
]
