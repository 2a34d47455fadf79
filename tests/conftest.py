"""
Pytest fixtures for moldens tests.

Provides common test data including coefficient matrices, atom offsets,
orbital grids and progress reporters.
"""

import tempfile
import threading
from pathlib import Path

import numpy as np
import pytest

from moldens.data.grids import OrbitalGrid, Spin
from moldens.data.orbitals import CanonicalOrbitals


# Sample orbital sets (minimal basis sizes)
MOLECULES = {
    "h2": {
        "atom_offsets": [0, 1],
        "n_basis": 2,
        "n_alpha": 1,
        "n_beta": 1,
    },
    "lih": {
        "atom_offsets": [0, 5],  # Li(1s,2s,2px,2py,2pz) + H(1s)
        "n_basis": 6,
        "n_alpha": 2,
        "n_beta": 2,
    },
    "h2o": {
        "atom_offsets": [0, 5, 6],  # O(1s,2s,2p) + H(1s) + H(1s)
        "n_basis": 7,
        "n_alpha": 5,
        "n_beta": 5,
    },
    "oh": {
        "atom_offsets": [0, 5],
        "n_basis": 6,
        "n_alpha": 5,
        "n_beta": 4,
    },
}


@pytest.fixture
def random_coefficients():
    """Generate MO coefficients with orthonormal rows."""
    def _make_coefficients(n_orbitals: int, n_basis: int, seed: int = 0):
        rng = np.random.default_rng(seed)
        A = rng.standard_normal((n_basis, n_basis))
        Q, _ = np.linalg.qr(A)
        return Q.T[:n_orbitals].copy()

    return _make_coefficients


@pytest.fixture
def sample_orbitals(random_coefficients):
    """Generate CanonicalOrbitals for one of the sample molecules."""
    def _make_orbitals(molecule: str = "h2o", **overrides):
        mol = MOLECULES[molecule]
        n_basis = mol["n_basis"]

        alpha = random_coefficients(n_basis, n_basis, seed=1)
        beta = alpha.copy() if mol["n_alpha"] == mol["n_beta"] else random_coefficients(
            n_basis, n_basis, seed=2
        )

        kwargs = dict(
            alpha_coefficients=alpha,
            beta_coefficients=beta,
            n_alpha=mol["n_alpha"],
            n_beta=mol["n_beta"],
            atom_offsets=list(mol["atom_offsets"]),
            alpha_energies=np.linspace(-20.0, 1.0, n_basis),
            beta_energies=np.linspace(-19.5, 1.5, n_basis),
            restricted=mol["n_alpha"] == mol["n_beta"],
        )
        kwargs.update(overrides)
        return CanonicalOrbitals(**kwargs)

    return _make_orbitals


@pytest.fixture
def make_grid():
    """Create an OrbitalGrid from explicit or random values."""
    def _make_grid(
        orbital_index: int,
        values=None,
        shape=(4, 4, 4),
        spin: Spin = Spin.ALPHA,
        origin=(0.0, 0.0, 0.0),
        spacing=(0.2, 0.2, 0.2),
        seed: int = None,
    ):
        if values is None:
            rng = np.random.default_rng(orbital_index if seed is None else seed)
            values = rng.standard_normal(shape)
        values = np.asarray(values, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(len(values), 1, 1)
        return OrbitalGrid(
            orbital_index=orbital_index,
            spin=spin,
            origin=np.array(origin, dtype=np.float64),
            spacing=np.array(spacing, dtype=np.float64),
            values=values,
        )

    return _make_grid


@pytest.fixture
def make_grids(make_grid):
    """Create one alpha grid per orbital, all on the same geometry."""
    def _make_grids(n_orbitals: int, shape=(4, 4, 4)):
        return [make_grid(i, shape=shape) for i in range(n_orbitals)]

    return _make_grids


class RecordingReporter:
    """Progress reporter that records every call."""

    def __init__(self):
        self.maximum = None
        self.values = []
        self.close_count = 0
        self._lock = threading.Lock()

    def set_maximum(self, maximum: int):
        self.maximum = maximum

    def set_value(self, value: int):
        with self._lock:
            self.values.append(value)

    def close(self):
        with self._lock:
            self.close_count += 1


class GatedReporter(RecordingReporter):
    """Reporter that blocks the worker on its first update until released."""

    def __init__(self):
        super().__init__()
        self.first_update = threading.Event()
        self.release = threading.Event()

    def set_value(self, value: int):
        super().set_value(value)
        if not self.first_update.is_set():
            self.first_update.set()
            self.release.wait(timeout=10.0)


@pytest.fixture
def recording_reporter():
    return RecordingReporter()


@pytest.fixture
def gated_reporter():
    reporter = GatedReporter()
    yield reporter
    reporter.release.set()


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
