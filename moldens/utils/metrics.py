"""
Matrix comparison metrics.

Provides:
- Largest elementwise difference between density matrices
- Symmetry violation of a real density matrix
"""

import torch
from torch import Tensor


def max_absolute_error(pred: Tensor, true: Tensor) -> Tensor:
    """Compute maximum absolute error (0 for empty matrices)."""
    if pred.numel() == 0:
        return torch.zeros((), dtype=pred.dtype)
    return (pred - true).abs().max()


def symmetry_violation(rho: Tensor) -> Tensor:
    """
    Compute symmetry violation: max |ρ - ρᵀ|.

    Args:
        rho: Density matrix, shape (n, n)

    Returns:
        Maximum symmetry violation
    """
    return max_absolute_error(rho, rho.transpose(-2, -1))
