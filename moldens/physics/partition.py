"""
Partition of the basis into per-atom blocks.

Basis functions are ordered atom by atom, so each atom owns a contiguous
range of basis indices described by its starting offset.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import torch
from torch import Tensor

from ..errors import DimensionMismatchError


@dataclass(frozen=True)
class AtomicPartition:
    """
    Per-atom basis-function ranges.

    Attributes:
        n_basis: Number of basis functions N
        blocks: Closed-open ranges (begin, end), one per atom
    """

    n_basis: int
    blocks: Tuple[Tuple[int, int], ...]

    @property
    def n_atoms(self) -> int:
        return len(self.blocks)

    @property
    def offsets(self) -> List[int]:
        """Offsets including the terminal sentinel N."""
        return [begin for begin, _ in self.blocks] + [self.n_basis]

    def atom_of_basis(self) -> Tensor:
        """
        Mapping from basis function to atom.

        Returns:
            Atom index of each basis function, shape (n_basis,).
            Empty partitions map every function to atom 0.
        """
        atom_map = torch.zeros(self.n_basis, dtype=torch.long)
        for atom, (begin, end) in enumerate(self.blocks):
            atom_map[begin:end] = atom
        return atom_map

    def intra_atom_mask(self) -> Tensor:
        """
        Boolean mask of the entries removed from the diatomic density.

        An entry (i, j) is masked when i and j belong to the same atom. A lone
        atom has no pairs to separate from, so its mask is empty.

        Returns:
            Mask, shape (n_basis, n_basis)
        """
        mask = torch.zeros(self.n_basis, self.n_basis, dtype=torch.bool)
        if self.n_atoms < 2:
            return mask

        for begin, end in self.blocks:
            mask[begin:end, begin:end] = True
        return mask


def partition_atoms(offsets: Sequence[int], n_basis: int) -> AtomicPartition:
    """
    Build per-atom basis ranges from atom offsets.

    Args:
        offsets: First basis index of each atom, ascending, starting at 0.
            A trailing sentinel equal to n_basis is accepted.
        n_basis: Number of basis functions

    Returns:
        AtomicPartition with one [offsets[a], offsets[a+1]) range per atom

    Raises:
        DimensionMismatchError: If offsets are not strictly increasing,
            do not start at 0, or run past n_basis
    """
    offsets = [int(o) for o in offsets]
    if n_basis < 0:
        raise DimensionMismatchError(f"Number of basis functions must be >= 0, got {n_basis}")

    if not offsets:
        return AtomicPartition(n_basis=n_basis, blocks=())

    if offsets[0] != 0:
        raise DimensionMismatchError(f"First atom offset must be 0, got {offsets[0]}")

    if offsets[-1] != n_basis:
        offsets.append(n_basis)

    for begin, end in zip(offsets[:-1], offsets[1:]):
        if end <= begin:
            raise DimensionMismatchError(
                f"Atom offsets must be strictly increasing and end at {n_basis}, "
                f"got {offsets}"
            )

    blocks = tuple(zip(offsets[:-1], offsets[1:]))
    return AtomicPartition(n_basis=n_basis, blocks=blocks)
