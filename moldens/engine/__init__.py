"""
Asynchronous first-order density computation.

This module provides:
- FirstOrderDensityEngine and the task handle it returns
- Lossy progress channel and the progress-reporter protocol
- Fixed-width histograms of combined grid values
"""

from .histogram import Histogram, HistogramAccumulator
from .progress import ProgressChannel, ProgressReporter
from .first_order import (
    TaskStatus,
    TaskOutcome,
    FirstOrderDensityTask,
    FirstOrderDensityEngine,
    combine_density,
    combine_product,
)

__all__ = [
    "Histogram",
    "HistogramAccumulator",
    "ProgressChannel",
    "ProgressReporter",
    "TaskStatus",
    "TaskOutcome",
    "FirstOrderDensityTask",
    "FirstOrderDensityEngine",
    "combine_density",
    "combine_product",
]
