"""
Consistency checks for density matrices built from orbital coefficients.

These functions check properties without modifying the matrices. They
are used to validate a catalog after it has been built.
"""

import torch
from torch import Tensor
from typing import Dict, Optional, Tuple

from ..utils.metrics import max_absolute_error, symmetry_violation
from .catalog import DensityCatalog, DensityKind


def check_symmetry(rho: Tensor, atol: float = 1e-10) -> Tuple[bool, float]:
    """
    Check if density matrix is symmetric: ρ = ρᵀ.

    Args:
        rho: Density matrix, shape (n, n)
        atol: Absolute tolerance

    Returns:
        Tuple of (is_symmetric, max_error)
    """
    error = symmetry_violation(rho).item()
    return error < atol, error


def check_trace(
    rho: Tensor,
    n_electrons: float,
    overlap: Optional[Tensor] = None,
    atol: float = 1e-6,
) -> Tuple[bool, float]:
    """
    Check if density matrix has correct trace: Tr(ρS) = n_electrons.

    Args:
        rho: Density matrix, shape (n, n)
        n_electrons: Expected number of electrons
        overlap: Overlap matrix, shape (n, n). Orthonormal basis if None.
        atol: Absolute tolerance

    Returns:
        Tuple of (is_correct, trace_error)
    """
    if overlap is None:
        trace = rho.diagonal().sum()
    else:
        trace = torch.einsum("ij,ji->", rho, overlap.to(rho.dtype))

    error = abs(trace.item() - n_electrons)
    return error < atol, error


def check_idempotency(
    rho: Tensor,
    overlap: Optional[Tensor] = None,
    atol: float = 1e-8,
) -> Tuple[bool, float]:
    """
    Check if a single-spin density matrix is idempotent: ρSρ = ρ.

    Holds for densities built from orthonormal occupied orbitals.

    Args:
        rho: Density matrix, shape (n, n)
        overlap: Overlap matrix, shape (n, n). Orthonormal basis if None.
        atol: Absolute tolerance

    Returns:
        Tuple of (is_idempotent, max_error)
    """
    if overlap is None:
        rho_S_rho = rho @ rho
    else:
        rho_S_rho = rho @ overlap.to(rho.dtype) @ rho
    error = max_absolute_error(rho_S_rho, rho).item()
    return error < atol, error


def check_positive_semidefinite(rho: Tensor, atol: float = 1e-10) -> Tuple[bool, float]:
    """
    Check if density matrix is positive semi-definite.

    Args:
        rho: Symmetric density matrix, shape (n, n)
        atol: Absolute tolerance for negative eigenvalues

    Returns:
        Tuple of (is_psd, min_eigenvalue)
    """
    if rho.numel() == 0:
        return True, 0.0
    min_eig = torch.linalg.eigvalsh(rho).min().item()
    return min_eig > -atol, min_eig


def check_catalog_consistency(
    catalog: DensityCatalog,
    atol: float = 1e-12,
) -> Dict[str, Tuple[bool, float]]:
    """
    Check the relations between the computed densities of a catalog.

    Uses the first entry of each computed kind. Relations involving a
    missing kind are skipped.

    Args:
        catalog: Catalog holding computed densities
        atol: Absolute tolerance

    Returns:
        Dictionary with relation names and (passed, error) tuples
    """
    first = {}
    for kind in DensityKind:
        matches = catalog.find(kind)
        if matches:
            first[kind] = matches[0].matrix

    results = {}

    if {DensityKind.ALPHA, DensityKind.BETA, DensityKind.TOTAL} <= first.keys():
        error = max_absolute_error(
            first[DensityKind.ALPHA] + first[DensityKind.BETA], first[DensityKind.TOTAL]
        ).item()
        results['total'] = (error <= atol, error)

    if {DensityKind.ALPHA, DensityKind.BETA, DensityKind.SPIN} <= first.keys():
        error = max_absolute_error(
            first[DensityKind.ALPHA] - first[DensityKind.BETA], first[DensityKind.SPIN]
        ).item()
        results['spin'] = (error <= atol, error)

    mulliken = {DensityKind.MULLIKEN_ATOMIC, DensityKind.MULLIKEN_DIATOMIC, DensityKind.TOTAL}
    if mulliken <= first.keys():
        error = max_absolute_error(
            first[DensityKind.MULLIKEN_ATOMIC] + first[DensityKind.MULLIKEN_DIATOMIC],
            first[DensityKind.TOTAL],
        ).item()
        results['mulliken'] = (error <= atol, error)

    for kind, rho in first.items():
        results[f'symmetric_{kind.value}'] = check_symmetry(rho, atol=max(atol, 1e-10))

    return results
