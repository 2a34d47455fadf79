"""
Density view of a set of canonical orbitals.

Combines the orbital data with the density builder and the first-order
density engine: the available densities are computed once when the layer
is created, and first-order density runs are started on request.
"""

import logging
from typing import Optional, Sequence

from .config import EngineConfig
from .data.grids import OrbitalGrid, Spin, find_grids
from .data.orbitals import CanonicalOrbitals, OrbitalType
from .engine import FirstOrderDensityEngine, FirstOrderDensityTask, ProgressReporter, TaskOutcome
from .physics.catalog import DensityCatalog
from .physics.partition import partition_atoms

logger = logging.getLogger(__name__)


class OrbitalDensityLayer:
    """
    Densities and first-order density runs for one orbital set.

    Args:
        orbitals: Canonical orbital data
        config: Engine configuration (defaults if None)
    """

    def __init__(self, orbitals: CanonicalOrbitals, config: Optional[EngineConfig] = None):
        self.orbitals = orbitals
        self.config = config if config is not None else EngineConfig()

        if orbitals.orbital_type is OrbitalType.CANONICAL:
            partition = partition_atoms(orbitals.atom_offsets, orbitals.n_basis)
            self._densities = DensityCatalog.build(
                orbitals.occupied_alpha_tensor(),
                orbitals.occupied_beta_tensor(),
                partition,
                base_entries=orbitals.base_densities,
            )
        else:
            self._densities = DensityCatalog(orbitals.base_densities)

        logger.debug(f"Number of available densities: {len(self._densities)}")

    @property
    def available_densities(self) -> DensityCatalog:
        return self._densities

    def alpha_orbital_energy(self, index: int) -> float:
        return self.orbitals.alpha_orbital_energy(index)

    def beta_orbital_energy(self, index: int) -> float:
        return self.orbitals.beta_orbital_energy(index)

    def orbital_energy(self, index: int, spin: Spin) -> float:
        """Energy of orbital ``index`` in the given spin channel."""
        if spin is Spin.ALPHA:
            return self.alpha_orbital_energy(index)
        return self.beta_orbital_energy(index)

    def compute_first_order_density(
        self,
        grids: Sequence[OrbitalGrid],
        bin_width: Optional[float] = None,
        progress: Optional[ProgressReporter] = None,
    ) -> FirstOrderDensityTask:
        """
        Start the first-order density computation from the occupied alpha grids.

        Grids of other spin channels and of virtual orbitals are ignored.

        Args:
            grids: Available orbital grids
            bin_width: Histogram bin width (config.bin_width if None)
            progress: Optional progress reporter

        Returns:
            The running task
        """
        n_alpha = self.orbitals.n_alpha
        engine = FirstOrderDensityEngine(
            n_alpha=n_alpha,
            restricted=self.orbitals.restricted,
            config=self.config,
        )
        alpha_grids = [g for g in find_grids(grids, Spin.ALPHA) if g.orbital_index < n_alpha]
        if len(alpha_grids) != n_alpha:
            logger.error("Not all orbitals available")

        task = engine.start(alpha_grids, bin_width=bin_width, progress=progress)
        task.add_done_callback(self._first_order_density_finished)
        return task

    def _first_order_density_finished(self, outcome: TaskOutcome):
        if not outcome.completed:
            return
        for edge, value in outcome.histogram.rows():
            logger.debug(f"{edge:.4f}  {value}")
