"""Numerical engine for Value Function Iteration (VFI).

This module provides a generic fixed-point iterator for the Bellman
equation.  It owns the sweep loop and the barrier between sweeps; how a
single sweep is computed (one thread, a thread pool, a device) is
delegated to a step function.

Example::

    >>> engine = VFIEngine(params)
    >>> v_star = engine.run(ValueFunction.initial(grid), step_fn)
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.core.types import NUMPY_DTYPE
from rbc_vfi.vfi.protocols import StepFunction
from rbc_vfi.vfi.value_function import ValueFunction

logger = logging.getLogger(__name__)


class VFIEngine:
    """Fixed-point iterator for the Bellman operator.

    Applies :math:`V_{t+1} = T(V_t)` exactly ``max_iterations`` times.
    When ``params.early_stopping`` is set, stops as soon as
    :math:`\\|V_{t+1} - V_t\\|_\\infty < \\text{tol}`.

    Parameters
    ----------
    params : ModelParameters
        Iteration count, tolerance and stopping mode.
    label : str
        Solver name used in log messages.
    """

    def __init__(self, params: ModelParameters, label: str = "VFIEngine") -> None:
        self.params: ModelParameters = params
        self.label: str = label
        self.residuals: List[float] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, v_init: ValueFunction, step_fn: StepFunction) -> ValueFunction:
        """Iterate *step_fn* starting from *v_init*.

        Each call of *step_fn* receives a read-only copy of the previous
        sweep and must return a complete new array.  The next sweep only
        starts once that array has been returned.

        Parameters
        ----------
        v_init : ValueFunction
            Initial guess.
        step_fn : callable
            One Bellman sweep, ``np.ndarray -> np.ndarray``.

        Returns
        -------
        ValueFunction
            Value function after the last sweep, with the per-sweep
            sup-norm changes in ``residuals``.

        Raises
        ------
        DomainError
            If a sweep produces NaN or ``+inf``.
        """
        self.residuals = []
        v_curr = v_init
        converged = False
        iteration = 0

        for iteration in range(1, self.params.max_iterations + 1):
            v_next = ValueFunction(
                np.asarray(step_fn(v_curr.values), dtype=NUMPY_DTYPE),
                iterations=iteration,
            )
            diff = v_next.max_abs_diff(v_curr)
            self.residuals.append(diff)
            logger.debug("%s sweep %d: diff=%.3e", self.label, iteration, diff)
            v_curr = v_next

            if self.params.early_stopping and diff < self.params.tolerance:
                converged = True
                logger.info(
                    "%s converged in %d iterations (diff=%.2e).",
                    self.label,
                    iteration,
                    diff,
                )
                break
        else:
            if self.params.early_stopping:
                logger.warning(
                    "%s did not converge after %d iterations "
                    "(final diff=%.2e).",
                    self.label,
                    self.params.max_iterations,
                    self.residuals[-1],
                )
            else:
                logger.info(
                    "%s completed %d iterations (final diff=%.2e).",
                    self.label,
                    self.params.max_iterations,
                    self.residuals[-1],
                )

        return ValueFunction(
            v_curr.values,
            iterations=iteration,
            converged=converged,
            residuals=tuple(self.residuals),
        )
