"""
Density matrices from molecular-orbital coefficients.

This module provides:
- Per-atom partition of the basis
- Alpha, beta, total, spin and Mulliken density matrices
- The ordered catalog of available densities
- Consistency checks (symmetry, trace, idempotency)
"""

from .partition import AtomicPartition, partition_atoms
from .catalog import DensityKind, DensityMatrix, DensityCatalog
from .densities import (
    spin_density_matrix,
    mulliken_split,
    build_density_matrices,
)
from .constraints import (
    check_symmetry,
    check_trace,
    check_idempotency,
    check_positive_semidefinite,
    check_catalog_consistency,
)

__all__ = [
    # Partition
    "AtomicPartition",
    "partition_atoms",
    # Catalog
    "DensityKind",
    "DensityMatrix",
    "DensityCatalog",
    # Builder
    "spin_density_matrix",
    "mulliken_split",
    "build_density_matrices",
    # Constraint checking
    "check_symmetry",
    "check_trace",
    "check_idempotency",
    "check_positive_semidefinite",
    "check_catalog_consistency",
]
