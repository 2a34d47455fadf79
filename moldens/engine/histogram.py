"""
Fixed-width histograms of grid contributions.

Each contribution c is added to bin floor(c / bin_width). Only visited bins
are stored; every other bin is implicitly zero.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

import numpy as np
import torch
from torch import Tensor


@dataclass(frozen=True)
class Histogram:
    """
    Sums of contributions per bin.

    Attributes:
        bin_width: Width of every bin
        bins: Visited bin indices, ascending
        values: Accumulated sum for each visited bin
    """

    bin_width: float
    bins: Tuple[int, ...] = ()
    values: Tuple[float, ...] = ()

    @classmethod
    def from_contributions(
        cls,
        contributions: Union[Tensor, np.ndarray],
        bin_width: float,
    ) -> "Histogram":
        """Histogram a flat array of contributions in one pass."""
        accumulator = HistogramAccumulator(bin_width)
        accumulator.add(torch.as_tensor(contributions, dtype=torch.float64).reshape(-1))
        return accumulator.to_histogram()

    def __len__(self) -> int:
        return len(self.bins)

    def items(self) -> List[Tuple[int, float]]:
        """(bin index, accumulated value) pairs in bin order."""
        return list(zip(self.bins, self.values))

    def get(self, index: int) -> float:
        """Value of bin ``index``; 0.0 if the bin was never visited."""
        for b, v in zip(self.bins, self.values):
            if b == index:
                return v
        return 0.0

    def total(self) -> float:
        """Sum over all bins."""
        return float(sum(self.values))

    def edges(self) -> List[float]:
        """Lower edge of each visited bin."""
        return [b * self.bin_width for b in self.bins]

    def rows(self) -> List[Tuple[float, float]]:
        """(lower edge, value) pairs, as printed in listings."""
        return list(zip(self.edges(), self.values))

    def dense(self) -> Tuple[int, np.ndarray]:
        """
        Contiguous bin values.

        Returns:
            Tuple of:
            - Index of the first bin
            - Values from the first to the last visited bin, unvisited bins 0
        """
        if not self.bins:
            return 0, np.zeros(0)

        first = self.bins[0]
        dense = np.zeros(self.bins[-1] - first + 1)
        for b, v in zip(self.bins, self.values):
            dense[b - first] = v
        return first, dense


class HistogramAccumulator:
    """
    Incremental histogram builder used while streaming grid chunks.

    Args:
        bin_width: Width of every bin, must be positive
    """

    def __init__(self, bin_width: float):
        if bin_width <= 0:
            raise ValueError(f"bin_width must be positive, got {bin_width}")
        self.bin_width = float(bin_width)
        self._sums: Dict[int, float] = {}

    def add(self, contributions: Tensor):
        """
        Add contributions, each to bin floor(c / bin_width).

        Args:
            contributions: Values, shape (n,) float64

        Raises:
            ValueError: If any contribution is NaN or infinite
        """
        if contributions.numel() == 0:
            return
        if not torch.isfinite(contributions).all():
            raise ValueError("Cannot bin non-finite contributions")

        indices = torch.floor(contributions / self.bin_width).to(torch.long)
        unique_bins, inverse = torch.unique(indices, return_inverse=True)
        sums = torch.zeros(unique_bins.shape[0], dtype=torch.float64)
        sums.index_add_(0, inverse, contributions.to(torch.float64))

        for b, s in zip(unique_bins.tolist(), sums.tolist()):
            self._sums[b] = self._sums.get(b, 0.0) + s

    def clear(self):
        self._sums.clear()

    def to_histogram(self) -> Histogram:
        bins = tuple(sorted(self._sums))
        return Histogram(
            bin_width=self.bin_width,
            bins=bins,
            values=tuple(self._sums[b] for b in bins),
        )
