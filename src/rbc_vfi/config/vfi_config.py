# rbc_vfi/config/vfi_config.py
"""
Configuration for the capital grid and the VFI solvers.

This module provides configuration classes and utilities for the grid
specification and the execution settings of the parallel solver, plus a
loader that reads all three sections of a run configuration from JSON.

Example:
    >>> from rbc_vfi.config.vfi_config import load_run_config
    >>> grid_cfg, params, solver_cfg = load_run_config("config/vfi.json")
    >>> print(f"Capital grid points: {grid_cfg.size}")
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
import os
import sys
import logging

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.io.file_utils import load_json_file

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("tensorflow", "threads")

_T = TypeVar("_T")


@dataclass(frozen=True)
class GridConfig:
    """
    Configuration for the capital grid.

    Attributes:
        lower_bound: Smallest admissible capital stock (strictly positive).
        upper_bound: Largest admissible capital stock.
        size: Number of evenly spaced grid points.
    """

    lower_bound: float = 0.001
    upper_bound: float = 10.0
    size: int = 1000


@dataclass(frozen=True)
class SolverConfig:
    """
    Execution settings for the data-parallel solver.

    Attributes:
        backend: ``"tensorflow"`` (device kernels) or ``"threads"``
            (joblib thread pool over grid-index blocks).
        n_workers: Thread count for the ``threads`` backend. None uses
            every available core.
        chunk_size: Tile edge for the ``tensorflow`` backend. None lets
            the tile strategy derive it from ``memory_limit_gb``.
        memory_limit_gb: Memory budget for one sweep on the device.
    """

    backend: str = "tensorflow"
    n_workers: Optional[int] = None
    chunk_size: Optional[int] = None
    memory_limit_gb: float = 2.0

    def __post_init__(self) -> None:
        if self.backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"backend must be one of {SUPPORTED_BACKENDS}, got {self.backend!r}"
            )
        if self.n_workers is not None and self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.chunk_size is not None and self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.memory_limit_gb <= 0:
            raise ValueError(
                f"memory_limit_gb must be positive, got {self.memory_limit_gb}"
            )


def _from_section(cls: Type[_T], data: Dict[str, Any], section: str) -> _T:
    """Build *cls* from ``data[section]``, ignoring unknown keys."""
    if section not in data:
        logger.warning(f"Section '{section}' missing from config. Using defaults.")
        return cls()
    valid_keys = {f.name for f in fields(cls)}
    filtered = {k: v for k, v in data[section].items() if k in valid_keys}
    ignored = set(data[section]) - valid_keys
    if ignored:
        logger.warning(f"Ignoring unknown '{section}' keys: {sorted(ignored)}")
    return cls(**filtered)


def load_run_config(
    filename: str,
) -> Tuple[GridConfig, ModelParameters, SolverConfig]:
    """
    Load grid, model and solver configuration from a JSON file.

    The file holds up to three top-level objects, ``"grid"``, ``"model"``
    and ``"solver"``. A missing section falls back to its defaults.

    Args:
        filename: Path to the JSON configuration file.

    Returns:
        Tuple of (GridConfig, ModelParameters, SolverConfig).

    Raises:
        SystemExit: If the file is unreadable or holds invalid values.
    """
    if not os.path.exists(filename):
        logger.warning(f"Config file '{filename}' not found. Using defaults.")
        return GridConfig(), ModelParameters(), SolverConfig()

    full_data = load_json_file(filename)

    try:
        return (
            _from_section(GridConfig, full_data, "grid"),
            _from_section(ModelParameters, full_data, "model"),
            _from_section(SolverConfig, full_data, "solver"),
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration in {filename}: {e}")
        sys.exit(1)
