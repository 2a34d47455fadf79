"""
Utility functions for moldens.

This module provides:
- Matrix comparison metrics
"""

from .metrics import (
    max_absolute_error,
    symmetry_violation,
)

__all__ = [
    "max_absolute_error",
    "symmetry_violation",
]
