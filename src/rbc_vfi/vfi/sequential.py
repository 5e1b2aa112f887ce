"""Sequential Value Function Iteration on a single host thread.

Every sweep visits the grid points one at a time, and for each point
scans the choice grid upward from the smallest capital stock until the
feasible resource turns non-positive.  This is the correctness baseline:
pure Python floats, no concurrency, bit-for-bit reproducible.
"""

from __future__ import annotations

import functools
import logging
from typing import Optional

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.core.types import ArrayLike
from rbc_vfi.vfi.engine import VFIEngine
from rbc_vfi.vfi.grids.grid_builder import Grid
from rbc_vfi.vfi.kernels.bellman_kernels import bellman_sweep_sequential
from rbc_vfi.vfi.value_function import ValueFunction

logger = logging.getLogger(__name__)


class SequentialSolver:
    """Single-threaded VFI solver for the deterministic RBC model.

    State space : capital K
    Choice      : next-period capital K'
    """

    name = "sequential"

    def solve(
        self,
        grid: Grid,
        params: ModelParameters,
        v_init: Optional[ArrayLike] = None,
    ) -> ValueFunction:
        """Solve the model by value function iteration.

        Parameters
        ----------
        grid : Grid
            Ascending capital grid.
        params : ModelParameters
            alpha, beta, iteration count and stopping mode.
        v_init : array-like, optional
            Initial guess; all ones when omitted.  Never mutated.

        Returns
        -------
        ValueFunction
            Values after ``params.max_iterations`` sweeps (or fewer when
            early stopping is enabled and triggers).
        """
        logger.info(
            "Starting SequentialSolver.solve() — alpha=%.4f, beta=%.4f, "
            "n_k=%d, max_iter=%d",
            params.alpha,
            params.beta,
            grid.size,
            params.max_iterations,
        )
        guess = ValueFunction.from_guess(grid, v_init)

        points = grid.points.tolist()
        resources = [k ** params.alpha for k in points]
        step_fn = functools.partial(
            bellman_sweep_sequential, points, resources, params.beta
        )

        engine = VFIEngine(params, label="SequentialSolver")
        return engine.run(guess, step_fn)
