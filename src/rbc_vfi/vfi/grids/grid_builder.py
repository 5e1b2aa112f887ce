# rbc_vfi/vfi/grids/grid_builder.py
"""
Grid construction utilities for the VFI state space.

This module builds the capital grid shared by the sequential and parallel
solvers.  Evenly spaced construction is the only supported policy, and
the grid is guaranteed strictly increasing, which the early-exit scan of
the inner maximisation relies on.
"""

import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
import tensorflow as tf

from rbc_vfi.config.vfi_config import GridConfig
from rbc_vfi.core.errors import InvalidRangeError
from rbc_vfi.core.types import NUMPY_DTYPE, TENSORFLOW_DTYPE, Array, Tensor


@dataclass(frozen=True, eq=False)
class Grid:
    """
    Immutable, strictly increasing capital grid.

    Attributes:
        lower_bound: First grid point, strictly positive.
        upper_bound: Last grid point, greater than ``lower_bound``.
        size: Number of points, at least 2.
        points: Read-only array of length ``size``.
    """

    lower_bound: float
    upper_bound: float
    size: int
    points: Array = field(repr=False)

    @property
    def step(self) -> float:
        """Uniform spacing between consecutive points."""
        return (self.upper_bound - self.lower_bound) / (self.size - 1)

    @property
    def bounds(self) -> Tuple[float, float]:
        return self.lower_bound, self.upper_bound

    def as_tensor(self) -> Tensor:
        """Return the points as a fresh TensorFlow tensor."""
        return tf.constant(self.points, dtype=TENSORFLOW_DTYPE)

    def __len__(self) -> int:
        return self.size

    @classmethod
    def from_config(cls, config: GridConfig) -> "Grid":
        return GridBuilder.build(config.lower_bound, config.upper_bound, config.size)


class GridBuilder:
    """
    Utility class for constructing the VFI capital grid.
    """

    @staticmethod
    def build(lower_bound: float, upper_bound: float, size: int) -> Grid:
        """
        Build an evenly spaced capital grid.

        ``points[i] = lower_bound + i * (upper_bound - lower_bound) / (size - 1)``
        with both end points reproduced exactly.

        Args:
            lower_bound: Smallest capital stock, must be > 0.
            upper_bound: Largest capital stock, must exceed ``lower_bound``.
            size: Number of grid points, must be >= 2.

        Returns:
            A read-only :class:`Grid`.

        Raises:
            InvalidRangeError: On non-increasing or non-positive bounds,
                non-finite bounds, or ``size < 2``.
        """
        GridBuilder._validate(lower_bound, upper_bound, size)

        points = GridBuilder._build_linear_grid(lower_bound, upper_bound, int(size))
        if not np.all(np.diff(points) > 0):
            raise InvalidRangeError(
                f"Range [{lower_bound}, {upper_bound}] is too narrow for "
                f"{size} distinct points."
            )
        points.setflags(write=False)

        return Grid(
            lower_bound=float(lower_bound),
            upper_bound=float(upper_bound),
            size=int(size),
            points=points,
        )

    @staticmethod
    def _validate(lower_bound: float, upper_bound: float, size: int) -> None:
        try:
            is_integer = not isinstance(size, bool) and int(size) == size
        except (TypeError, ValueError, OverflowError):
            is_integer = False
        if not is_integer:
            raise InvalidRangeError(f"size must be an integer, got {size!r}.")
        if size < 2:
            raise InvalidRangeError(f"size must be >= 2, got {size}.")
        if not (math.isfinite(lower_bound) and math.isfinite(upper_bound)):
            raise InvalidRangeError(
                f"Bounds must be finite, got ({lower_bound}, {upper_bound})."
            )
        if upper_bound <= lower_bound:
            raise InvalidRangeError(
                f"upper_bound ({upper_bound}) must be greater than "
                f"lower_bound ({lower_bound})."
            )
        # k = 0 leaves no feasible choice at the first grid point
        if lower_bound <= 0.0:
            raise InvalidRangeError(
                f"lower_bound must be positive, got {lower_bound}."
            )

    @staticmethod
    def _build_linear_grid(min_val: float, max_val: float, n_points: int) -> Array:
        """Build a linearly-spaced grid."""
        return np.linspace(min_val, max_val, n_points, dtype=NUMPY_DTYPE)
