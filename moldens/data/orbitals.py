"""
Container for molecular-orbital data consumed by moldens.

The orbital data (coefficients, energies, atom offsets) is produced by an
external quantum-chemistry program; this module only holds it and hands out
the occupied blocks as double-precision tensors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
import torch
from torch import Tensor

from ..errors import DimensionMismatchError


class OrbitalType(Enum):
    """Kind of orbital set; density matrices are only built for canonical orbitals."""
    CANONICAL = "canonical"
    LOCALIZED = "localized"
    NATURAL_TRANSITION = "natural_transition"
    NATURAL_BOND = "natural_bond"
    DYSON = "dyson"


@dataclass
class CanonicalOrbitals:
    """
    Molecular orbitals for one calculation.

    Attributes:
        alpha_coefficients: Alpha MO coefficients, shape (n_orbitals, n_basis).
            Rows are orbitals ordered by energy, occupied first.
        beta_coefficients: Beta MO coefficients, shape (n_orbitals, n_basis)
        n_alpha: Number of occupied alpha orbitals
        n_beta: Number of occupied beta orbitals
        atom_offsets: Index of the first basis function on each atom
        alpha_energies: Alpha orbital energies, shape (n_orbitals,)
        beta_energies: Beta orbital energies, shape (n_orbitals,)
        orbital_type: Kind of orbitals held
        restricted: True if alpha and beta spatial orbitals are identical
        base_densities: Densities supplied with the orbital data (e.g. from
            the output file); listed ahead of the computed densities
    """

    alpha_coefficients: np.ndarray
    beta_coefficients: np.ndarray
    n_alpha: int
    n_beta: int
    atom_offsets: Sequence[int]
    alpha_energies: Optional[np.ndarray] = None
    beta_energies: Optional[np.ndarray] = None
    orbital_type: OrbitalType = OrbitalType.CANONICAL
    restricted: bool = True
    base_densities: List = field(default_factory=list)

    def __post_init__(self):
        for name, coeffs, n_occ in (
            ("alpha", self.alpha_coefficients, self.n_alpha),
            ("beta", self.beta_coefficients, self.n_beta),
        ):
            if coeffs.ndim != 2:
                raise DimensionMismatchError(
                    f"{name} coefficients must be 2D, got shape {coeffs.shape}"
                )
            if not 0 <= n_occ <= coeffs.shape[0]:
                raise DimensionMismatchError(
                    f"{n_occ} occupied {name} orbitals requested but only "
                    f"{coeffs.shape[0]} are available"
                )

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return self.alpha_coefficients.shape[1]

    @property
    def n_atoms(self) -> int:
        """Number of atoms carrying basis functions."""
        return len(self.atom_offsets)

    def occupied_alpha_tensor(self, device: str = "cpu") -> Tensor:
        """Get occupied alpha coefficients as a float64 tensor, shape (n_alpha, n_basis)."""
        return torch.as_tensor(
            self.alpha_coefficients[: self.n_alpha], dtype=torch.float64, device=device
        )

    def occupied_beta_tensor(self, device: str = "cpu") -> Tensor:
        """Get occupied beta coefficients as a float64 tensor, shape (n_beta, n_basis)."""
        return torch.as_tensor(
            self.beta_coefficients[: self.n_beta], dtype=torch.float64, device=device
        )

    def alpha_orbital_energy(self, index: int) -> float:
        """Energy of alpha orbital ``index``."""
        return _orbital_energy(self.alpha_energies, index, "alpha")

    def beta_orbital_energy(self, index: int) -> float:
        """Energy of beta orbital ``index``."""
        return _orbital_energy(self.beta_energies, index, "beta")


def _orbital_energy(energies: Optional[np.ndarray], index: int, spin: str) -> float:
    if energies is None:
        raise ValueError(f"No {spin} orbital energies available")
    if not 0 <= index < len(energies):
        raise IndexError(
            f"{spin} orbital index {index} out of range (0..{len(energies) - 1})"
        )
    return float(energies[index])
