"""
Background computation of the first-order density distribution.

The occupied-orbital grids are combined point by point (by default into
the orbital density Σ_i ψ_i(r)²) and the resulting values are binned by
magnitude. The work runs on a worker thread; the caller keeps a
FirstOrderDensityTask that exposes:

- a lossy progress channel (latest value only)
- a one-shot completion channel delivering exactly one TaskOutcome
- cancel(), observed by the worker between chunks of grid points

Only restricted (closed-shell) orbital sets are supported.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

import torch
from torch import Tensor

from ..config import EngineConfig
from ..data.grids import OrbitalGrid, Spin
from ..errors import (
    GeometryMismatchError,
    InsufficientInputDataError,
    UnsupportedConfigurationError,
)
from .histogram import Histogram, HistogramAccumulator
from .progress import ProgressChannel, ProgressReporter

logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    """Terminal state of a first-order density task."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class TaskOutcome:
    """Result delivered once on the completion channel."""
    status: TaskStatus
    histogram: Optional[Histogram] = None  # Only set when completed
    error: Optional[BaseException] = None  # Only set when failed

    @property
    def completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status is TaskStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status is TaskStatus.FAILED


def combine_density(block: Tensor) -> Tensor:
    """Σ_i ψ_i(r)² over orbitals, shape (n_orbitals, n) -> (n,)."""
    return block.pow(2).sum(dim=0)


def combine_product(block: Tensor) -> Tensor:
    """Π_i ψ_i(r) over orbitals, shape (n_orbitals, n) -> (n,)."""
    return block.prod(dim=0)


COMBINERS = {
    "density": combine_density,
    "product": combine_product,
}


class FirstOrderDensityTask:
    """
    Handle on one running first-order density computation.

    Created and started by FirstOrderDensityEngine.start(); not meant to be
    constructed directly.

    Args:
        grids: Validated orbital grids sharing one geometry
        bin_width: Histogram bin width
        config: Engine configuration
        reporter: Optional progress reporter, closed exactly once when the
            task reaches its terminal outcome
    """

    def __init__(
        self,
        grids: Sequence[OrbitalGrid],
        bin_width: float,
        config: EngineConfig,
        reporter: Optional[ProgressReporter] = None,
    ):
        self._grids = list(grids)
        self._config = config
        self._combine = COMBINERS[config.combine]
        self._accumulator = HistogramAccumulator(bin_width)
        self.bin_width = bin_width

        n_points = self._grids[0].n_points if self._grids else 0
        self.progress = ProgressChannel(maximum=n_points)

        self._reporter = reporter
        if reporter is not None:
            reporter.set_maximum(self.progress.maximum)
            self.progress.subscribe(reporter.set_value)

        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._outcome: Optional[TaskOutcome] = None
        self._callbacks: List[Callable[[TaskOutcome], None]] = []

        self._thread = threading.Thread(
            target=self._run, name="first-order-density", daemon=True
        )

    @property
    def total_steps(self) -> int:
        """Number of progress steps (one per grid point)."""
        return self.progress.maximum

    def _start(self):
        self._thread.start()

    def cancel(self) -> bool:
        """
        Request cancellation.

        Returns:
            True if the request was registered before the task finished;
            the outcome will then be CANCELLED. False if already finished.
        """
        with self._lock:
            if self._outcome is not None:
                return False
            self._cancel_event.set()
        logger.info("Cancellation requested for first-order density task")
        return True

    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self._done_event.is_set()

    def running(self) -> bool:
        return self._thread.is_alive() and not self.done()

    def add_done_callback(self, fn: Callable[[TaskOutcome], None]):
        """
        Call ``fn(outcome)`` once the task finishes.

        If the task has already finished, ``fn`` is called immediately.
        """
        with self._lock:
            if self._outcome is None:
                self._callbacks.append(fn)
                return
            outcome = self._outcome
        self._invoke_callback(fn, outcome)

    def result(self, timeout: Optional[float] = None) -> TaskOutcome:
        """
        Wait for the terminal outcome.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            TaskOutcome

        Raises:
            TimeoutError: If the task did not finish in time
        """
        if not self._done_event.wait(timeout):
            raise TimeoutError(f"First-order density task not finished after {timeout}s")
        return self._outcome

    def join(self, timeout: Optional[float] = None):
        """Wait for the worker thread to exit."""
        if timeout is None:
            timeout = self._config.join_timeout
        self._thread.join(timeout)

    def _run(self):
        try:
            histogram = self._compute()
        except Exception as e:
            logger.exception("First-order density computation failed")
            self._finish(TaskOutcome(status=TaskStatus.FAILED, error=e))
            return

        if histogram is None:
            self._finish(TaskOutcome(status=TaskStatus.CANCELLED))
        else:
            self._finish(TaskOutcome(status=TaskStatus.COMPLETED, histogram=histogram))

    def _compute(self) -> Optional[Histogram]:
        values = [grid.get_values_tensor() for grid in self._grids]
        n_points = self.progress.maximum
        chunk_size = self._config.chunk_size

        with torch.no_grad():
            for begin in range(0, n_points, chunk_size):
                if self._cancel_event.is_set():
                    return None

                end = min(begin + chunk_size, n_points)
                block = torch.stack([v[begin:end] for v in values])
                self._accumulator.add(self._combine(block))
                self.progress.publish(end)

        if self._cancel_event.is_set():
            return None
        return self._accumulator.to_histogram()

    def _finish(self, outcome: TaskOutcome):
        with self._lock:
            if self._outcome is not None:
                return
            # A cancel() that returned True always wins
            if outcome.completed and self._cancel_event.is_set():
                outcome = TaskOutcome(status=TaskStatus.CANCELLED)
            self._outcome = outcome
            callbacks = self._callbacks
            self._callbacks = []
            reporter = self._detach_reporter()

        try:
            # Runs unlocked: close() may call back into cancel() or add_done_callback()
            self._close_reporter(reporter)
            self._grids = []
            self._accumulator.clear()

            if outcome.completed:
                logger.info(f"First-order density finished: {len(outcome.histogram)} bins")
            elif outcome.cancelled:
                logger.info("First-order density cancelled")
        finally:
            self._done_event.set()

        for fn in callbacks:
            self._invoke_callback(fn, outcome)

    def _detach_reporter(self) -> Optional[ProgressReporter]:
        reporter, self._reporter = self._reporter, None
        if reporter is not None:
            self.progress.unsubscribe(reporter.set_value)
        return reporter

    def _close_reporter(self, reporter: Optional[ProgressReporter]):
        if reporter is None:
            return
        try:
            reporter.close()
        except Exception:
            logger.exception(f"Exception closing progress reporter {reporter!r}")

    def _invoke_callback(self, fn: Callable[[TaskOutcome], None], outcome: TaskOutcome):
        try:
            fn(outcome)
        except Exception:
            logger.exception(f"Exception calling done callback {fn!r}")


class FirstOrderDensityEngine:
    """
    Starts first-order density computations for a restricted orbital set.

    Args:
        n_alpha: Number of occupied alpha orbitals; exactly this many grids
            must be supplied to start()
        restricted: Whether alpha and beta orbitals are identical.
            Unrestricted sets are not supported.
        config: Engine configuration (defaults if None)
    """

    def __init__(
        self,
        n_alpha: int,
        restricted: bool = True,
        config: Optional[EngineConfig] = None,
    ):
        if not restricted:
            raise UnsupportedConfigurationError(
                "First-order density is only implemented for restricted orbitals"
            )
        if n_alpha < 0:
            raise ValueError(f"n_alpha must be >= 0, got {n_alpha}")

        self.n_alpha = n_alpha
        self.config = config if config is not None else EngineConfig()

    def start(
        self,
        grids: Sequence[OrbitalGrid],
        bin_width: Optional[float] = None,
        progress: Optional[ProgressReporter] = None,
    ) -> FirstOrderDensityTask:
        """
        Validate the grids and start the computation in the background.

        Args:
            grids: One grid per occupied alpha orbital
            bin_width: Histogram bin width (config.bin_width if None)
            progress: Optional progress reporter

        Returns:
            The running FirstOrderDensityTask

        Raises:
            InsufficientInputDataError: If the grids do not cover exactly the
                occupied alpha orbitals
            UnsupportedConfigurationError: If a beta-spin grid is supplied
            GeometryMismatchError: If grids are sampled on different points
            ValueError: If bin_width is not positive or a grid has
                non-finite values
        """
        if bin_width is None:
            bin_width = self.config.bin_width
        if bin_width <= 0:
            raise ValueError(f"bin_width must be positive, got {bin_width}")

        grids = list(grids)
        self._validate(grids)

        task = FirstOrderDensityTask(grids, bin_width, self.config, reporter=progress)
        logger.info(
            f"Starting first-order density: {len(grids)} orbitals, "
            f"{task.total_steps} points, bin width {bin_width}"
        )
        task._start()
        return task

    def _validate(self, grids: List[OrbitalGrid]):
        if len(grids) != self.n_alpha:
            raise InsufficientInputDataError(
                f"Not all orbitals available: expected {self.n_alpha} occupied "
                f"alpha orbital grids, got {len(grids)}"
            )

        indices = sorted(grid.orbital_index for grid in grids)
        if indices != list(range(self.n_alpha)):
            raise InsufficientInputDataError(
                f"Not all orbitals available: expected grids for occupied orbitals "
                f"0..{self.n_alpha - 1}, got {indices}"
            )

        for grid in grids:
            if grid.spin is not Spin.ALPHA:
                raise UnsupportedConfigurationError(
                    f"Only alpha orbital grids are supported, got {grid.spin.value} "
                    f"grid for orbital {grid.orbital_index}"
                )

        if not grids:
            return

        reference = grids[0]
        for grid in grids[1:]:
            if not reference.same_geometry(grid):
                raise GeometryMismatchError(
                    f"Grid for orbital {grid.orbital_index} (shape {grid.shape}) does not "
                    f"match grid for orbital {reference.orbital_index} "
                    f"(shape {reference.shape})"
                )

        for grid in grids:
            if not torch.isfinite(grid.get_values_tensor()).all():
                raise ValueError(f"Grid for orbital {grid.orbital_index} has non-finite values")
