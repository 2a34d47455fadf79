"""
Density matrices from molecular-orbital coefficients.

For occupied coefficients C (rows = orbitals, columns = basis functions)
the spin density matrix is P = Cᵀ C. From the alpha and beta matrices we
form the total and spin densities and a simple Mulliken-style split of the
total density into one-centre (atomic) and two-centre (diatomic) parts.

The split uses the density matrix alone, without weighting by the overlap
matrix.
"""

from typing import Tuple, Union

import numpy as np
import torch
from torch import Tensor

from ..errors import DimensionMismatchError
from .catalog import DensityKind, DensityMatrix
from .partition import AtomicPartition


def spin_density_matrix(coefficients: Union[Tensor, np.ndarray], n_basis: int) -> Tensor:
    """
    Compute P = Cᵀ C for one spin channel.

    Args:
        coefficients: Occupied MO coefficients, shape (n_occ, n_basis)
        n_basis: Expected number of basis functions

    Returns:
        Density matrix, shape (n_basis, n_basis) float64
    """
    coeffs = torch.as_tensor(coefficients, dtype=torch.float64)
    if coeffs.dim() != 2 or coeffs.shape[1] != n_basis:
        raise DimensionMismatchError(
            f"Coefficient matrix must have shape (n_occ, {n_basis}), "
            f"got {tuple(coeffs.shape)}"
        )
    return coeffs.T @ coeffs


def mulliken_split(total: Tensor, partition: AtomicPartition) -> Tuple[Tensor, Tensor]:
    """
    Split a density matrix into diatomic and atomic parts.

    The diatomic part is the total with every intra-atom block zeroed;
    the atomic part is what remains, so diatomic + atomic == total.

    Args:
        total: Total density matrix, shape (n_basis, n_basis)
        partition: Per-atom basis ranges

    Returns:
        Tuple of (diatomic, atomic)
    """
    if total.shape != (partition.n_basis, partition.n_basis):
        raise DimensionMismatchError(
            f"Density matrix shape {tuple(total.shape)} does not match "
            f"partition of {partition.n_basis} basis functions"
        )

    mask = partition.intra_atom_mask()
    diatomic = total.masked_fill(mask, 0.0)
    atomic = total - diatomic
    return diatomic, atomic


def build_density_matrices(
    alpha_coefficients: Union[Tensor, np.ndarray],
    beta_coefficients: Union[Tensor, np.ndarray],
    partition: AtomicPartition,
) -> Tuple[DensityMatrix, ...]:
    """
    Build the alpha, beta, total, spin and Mulliken density matrices.

    Args:
        alpha_coefficients: Occupied alpha coefficients, shape (n_alpha, n_basis)
        beta_coefficients: Occupied beta coefficients, shape (n_beta, n_basis)
        partition: Per-atom basis ranges

    Returns:
        Six DensityMatrix entries: Alpha, Beta, Total, Spin,
        Mulliken Diatomic, Mulliken Atomic

    Raises:
        DimensionMismatchError: If a coefficient matrix does not have
            n_basis columns
    """
    n_basis = partition.n_basis

    Pa = spin_density_matrix(alpha_coefficients, n_basis)
    Pb = spin_density_matrix(beta_coefficients, n_basis)

    total = Pa + Pb
    spin = Pa - Pb

    diatomic, atomic = mulliken_split(total, partition)

    return (
        DensityMatrix.create(DensityKind.ALPHA, Pa),
        DensityMatrix.create(DensityKind.BETA, Pb),
        DensityMatrix.create(DensityKind.TOTAL, total),
        DensityMatrix.create(DensityKind.SPIN, spin),
        DensityMatrix.create(DensityKind.MULLIKEN_DIATOMIC, diatomic),
        DensityMatrix.create(DensityKind.MULLIKEN_ATOMIC, atomic),
    )
