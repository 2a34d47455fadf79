"""
Orbital values sampled on regular 3D grids.

Grids are generated elsewhere (e.g. by a cube-file writer or an on-the-fly
evaluator); moldens only reads their values and checks that a set of grids
share the same sampling points.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

import numpy as np
import torch
from torch import Tensor


class Spin(Enum):
    """Spin channel of an orbital."""
    ALPHA = "alpha"
    BETA = "beta"


@dataclass
class OrbitalGrid:
    """
    Values of one orbital on a regular grid.

    Attributes:
        orbital_index: Index of the orbital in its spin channel
        spin: Spin channel
        origin: Position of the first grid point, shape (3,)
        spacing: Step along each axis, shape (3,)
        values: Orbital values, shape (nx, ny, nz)
    """

    orbital_index: int
    spin: Spin
    origin: np.ndarray
    spacing: np.ndarray
    values: np.ndarray

    @property
    def shape(self) -> Tuple[int, ...]:
        """Number of points along each axis."""
        return tuple(self.values.shape)

    @property
    def n_points(self) -> int:
        """Total number of sample points."""
        return int(self.values.size)

    def same_geometry(self, other: "OrbitalGrid", atol: float = 1e-10) -> bool:
        """True if both grids sample exactly the same points."""
        return (
            self.shape == other.shape
            and np.allclose(self.origin, other.origin, rtol=0.0, atol=atol)
            and np.allclose(self.spacing, other.spacing, rtol=0.0, atol=atol)
        )

    def get_values_tensor(self, device: str = "cpu") -> Tensor:
        """Flattened grid values as a float64 tensor, shape (n_points,)."""
        return torch.as_tensor(self.values, dtype=torch.float64, device=device).reshape(-1)


def find_grids(grids: Sequence[OrbitalGrid], spin: Spin) -> list:
    """Select the grids of one spin channel, ordered by orbital index."""
    selected = [g for g in grids if g.spin is spin]
    return sorted(selected, key=lambda g: g.orbital_index)
