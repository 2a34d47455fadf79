"""
Ordered, read-only collection of named density matrices.

The catalog is what downstream consumers (surface rendering, descriptions)
enumerate to offer the available densities. It is built once and never
mutated; adding entries produces a new catalog.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union
import logging

import h5py
import numpy as np
import torch
from torch import Tensor

logger = logging.getLogger(__name__)


class DensityKind(Enum):
    """Kind of density matrix."""
    ALPHA = "alpha"
    BETA = "beta"
    TOTAL = "total"
    SPIN = "spin"
    MULLIKEN_DIATOMIC = "mulliken_diatomic"
    MULLIKEN_ATOMIC = "mulliken_atomic"
    CUSTOM = "custom"

    @property
    def default_label(self) -> str:
        return _DEFAULT_LABELS[self]


_DEFAULT_LABELS = {
    DensityKind.ALPHA: "Alpha Density",
    DensityKind.BETA: "Beta Density",
    DensityKind.TOTAL: "Total Density",
    DensityKind.SPIN: "Spin Density",
    DensityKind.MULLIKEN_DIATOMIC: "Mulliken Diatomic Density",
    DensityKind.MULLIKEN_ATOMIC: "Mulliken Atomic Density",
    DensityKind.CUSTOM: "Density",
}


@dataclass(frozen=True)
class DensityMatrix:
    """
    A labelled density matrix.

    Attributes:
        kind: Kind of density
        label: Human-readable label (not necessarily unique)
        matrix: Density matrix, shape (n_basis, n_basis) float64. Each access
            returns a fresh copy, so callers may modify it freely.
    """

    kind: DensityKind
    label: str
    _matrix: Tensor = field(repr=False)

    @classmethod
    def create(
        cls,
        kind: DensityKind,
        matrix: Union[Tensor, np.ndarray],
        label: Optional[str] = None,
    ) -> "DensityMatrix":
        """Create a density with the kind's default label unless one is given."""
        return cls(
            kind=kind,
            label=label if label is not None else kind.default_label,
            _matrix=torch.as_tensor(matrix, dtype=torch.float64).detach().clone(),
        )

    @property
    def matrix(self) -> Tensor:
        return self._matrix.clone()

    @property
    def n_basis(self) -> int:
        return self._matrix.shape[-1]

    def as_numpy(self) -> np.ndarray:
        """Read-only numpy copy of the matrix."""
        array = self._matrix.cpu().numpy().copy()
        array.flags.writeable = False
        return array


class DensityCatalog:
    """
    Append-only, read-only view of density matrices in construction order.

    Args:
        entries: Density matrices, in the order they should be listed
    """

    def __init__(self, entries: Iterable[DensityMatrix] = ()):
        self._entries: Tuple[DensityMatrix, ...] = tuple(entries)

    @classmethod
    def build(
        cls,
        alpha_coefficients: Union[Tensor, np.ndarray],
        beta_coefficients: Union[Tensor, np.ndarray],
        partition,
        base_entries: Sequence[DensityMatrix] = (),
    ) -> "DensityCatalog":
        """
        Build a catalog of base entries followed by the computed densities.

        The computed densities are Alpha, Beta, Total, Spin, Mulliken
        Diatomic and Mulliken Atomic, in that order. If the computation
        fails no catalog is created.

        Args:
            alpha_coefficients: Occupied alpha coefficients, shape (n_alpha, n_basis)
            beta_coefficients: Occupied beta coefficients, shape (n_beta, n_basis)
            partition: AtomicPartition of the basis
            base_entries: Densities listed ahead of the computed ones

        Returns:
            DensityCatalog
        """
        from .densities import build_density_matrices

        computed = build_density_matrices(alpha_coefficients, beta_coefficients, partition)
        return cls(tuple(base_entries) + computed)

    @property
    def entries(self) -> Tuple[DensityMatrix, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DensityMatrix]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> DensityMatrix:
        return self._entries[index]

    def labels(self) -> List[str]:
        """Labels of all entries, in order."""
        return [entry.label for entry in self._entries]

    def find(self, kind: DensityKind) -> List[DensityMatrix]:
        """All entries of the given kind, in order (possibly empty)."""
        return [entry for entry in self._entries if entry.kind is kind]

    def extended(self, entries: Iterable[DensityMatrix]) -> "DensityCatalog":
        """New catalog with ``entries`` appended; this catalog is unchanged."""
        return DensityCatalog(self._entries + tuple(entries))

    def save(self, filepath: Union[str, Path]) -> None:
        """
        Save catalog to HDF5 file.

        Args:
            filepath: Path to output HDF5 file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with h5py.File(filepath, "w") as f:
            f.attrs["n_entries"] = len(self._entries)
            for i, entry in enumerate(self._entries):
                data = entry._matrix.cpu().numpy()
                if data.size > 0:
                    dset = f.create_dataset(
                        f"densities/{i:04d}", data=data, compression="gzip", compression_opts=4
                    )
                else:
                    dset = f.create_dataset(f"densities/{i:04d}", data=data)
                dset.attrs["kind"] = entry.kind.value
                dset.attrs["label"] = entry.label

        logger.info(f"Saved density catalog: {filepath}")

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "DensityCatalog":
        """
        Load catalog from HDF5 file.

        Args:
            filepath: Path to HDF5 file

        Returns:
            DensityCatalog
        """
        entries = []
        with h5py.File(filepath, "r") as f:
            n_entries = int(f.attrs["n_entries"])
            for i in range(n_entries):
                dset = f[f"densities/{i:04d}"]
                entries.append(
                    DensityMatrix.create(
                        DensityKind(_as_str(dset.attrs["kind"])),
                        dset[:],
                        label=_as_str(dset.attrs["label"]),
                    )
                )
        return cls(entries)

    def __repr__(self) -> str:
        return f"DensityCatalog({self.labels()!r})"


def _as_str(value) -> str:
    # h5py may return fixed-length string attributes as bytes
    if isinstance(value, bytes):
        return value.decode()
    return str(value)
