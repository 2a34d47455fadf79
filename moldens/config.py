"""
Configuration and logging setup for moldens.

Engine settings live in a dataclass that can be filled from a YAML file:

    engine:
      bin_width: 0.1
      chunk_size: 4096
      combine: density
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

COMBINE_MODES = ("density", "product")


@dataclass
class EngineConfig:
    """Configuration for first-order density computation."""
    bin_width: float = 0.1
    chunk_size: int = 4096  # Points per chunk; cancellation is checked between chunks
    combine: str = "density"  # "density": sum of squares, "product": product over orbitals
    join_timeout: float = 5.0  # Seconds to wait for the worker on shutdown

    def __post_init__(self):
        if self.bin_width <= 0:
            raise ValueError(f"bin_width must be positive, got {self.bin_width}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.combine not in COMBINE_MODES:
            raise ValueError(
                f"Unknown combine mode: {self.combine}. Expected one of {COMBINE_MODES}"
            )

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> "EngineConfig":
        """
        Build an EngineConfig from a plain dictionary.

        Args:
            config: Mapping of field names to values, or None for defaults

        Returns:
            EngineConfig
        """
        if not config:
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown engine config keys: {sorted(unknown)}")

        return cls(**config)


def load_config(path: Union[str, Path]) -> EngineConfig:
    """Load engine configuration from the 'engine' section of a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return EngineConfig.from_dict(raw.get("engine"))


def setup_logging(level: int = logging.INFO):
    """Setup logging configuration."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
