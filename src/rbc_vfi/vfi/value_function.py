# rbc_vfi/vfi/value_function.py
"""
Value function container returned by every solver.

A :class:`ValueFunction` is indexed 1:1 with ``grid.points``.  Entries are
finite or ``-inf`` (no feasible choice for that grid point); ``+inf`` and
NaN are rejected at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from rbc_vfi.core.errors import DomainError
from rbc_vfi.core.types import NUMPY_DTYPE, Array, ArrayLike
from rbc_vfi.vfi.grids.grid_builder import Grid


@dataclass(frozen=True, eq=False)
class ValueFunction:
    """Read-only value array plus iteration metadata.

    Attributes
    ----------
    values : np.ndarray
        ``(n_k,)`` value at each grid point.
    iterations : int
        Number of Bellman sweeps that produced *values* (0 for a guess).
    converged : bool
        ``True`` only when early stopping was enabled and the sup-norm
        change fell below the tolerance.
    residuals : tuple of float
        Sup-norm change produced by each sweep, oldest first.
    """

    values: Array = field(repr=False)
    iterations: int = 0
    converged: bool = False
    residuals: Tuple[float, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=NUMPY_DTYPE, copy=True)
        if values.ndim != 1:
            raise ValueError(
                f"values must be one-dimensional, got shape {values.shape}."
            )
        if np.isnan(values).any() or np.isposinf(values).any():
            raise DomainError(
                "Value function contains NaN or +inf; a logarithm of a "
                "non-positive feasible resource was evaluated."
            )
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @classmethod
    def initial(cls, grid: Grid, fill_value: float = 1.0) -> "ValueFunction":
        """All-``fill_value`` initial guess (all ones by default)."""
        return cls(np.full(grid.size, fill_value, dtype=NUMPY_DTYPE))

    @classmethod
    def from_guess(
        cls, grid: Grid, v_init: Optional[ArrayLike] = None
    ) -> "ValueFunction":
        """Coerce an optional user guess into a ValueFunction for *grid*."""
        if v_init is None:
            return cls.initial(grid)
        if isinstance(v_init, ValueFunction):
            v_init = v_init.values
        guess = cls(v_init)
        if guess.size != grid.size:
            raise ValueError(
                f"Initial guess has {guess.size} entries, grid has {grid.size}."
            )
        return guess

    @property
    def size(self) -> int:
        return int(self.values.shape[0])

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index):
        return self.values[index]

    def max_abs_diff(self, other: "ValueFunction") -> float:
        """Sup-norm distance, treating matching ``-inf`` entries as equal."""
        a, b = self.values, other.values
        both_inf = np.isneginf(a) & np.isneginf(b)
        with np.errstate(invalid="ignore"):
            diff = np.where(both_inf, 0.0, np.abs(a - b))
        return float(np.max(diff)) if diff.size else 0.0
