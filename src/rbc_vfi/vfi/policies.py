"""Policy extraction for the VFI solvers.

Maps a solved value function to the optimal next-period capital choice
at every grid point by evaluating the Bellman right-hand side once more
and keeping the arg-max.
"""

from __future__ import annotations

from typing import Tuple, Union

import numpy as np

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.core.types import NUMPY_DTYPE, Array
from rbc_vfi.vfi.grids.grid_builder import Grid
from rbc_vfi.vfi.kernels.bellman_kernels import (
    feasible_prefix_lengths,
    maximize_block,
)
from rbc_vfi.vfi.value_function import ValueFunction


def extract_policy(
    grid: Grid,
    values: Union[ValueFunction, Array],
    params: ModelParameters,
) -> Tuple[Array, Array]:
    """Map a value function to the optimal capital choice.

    Parameters
    ----------
    grid : Grid
        Capital grid, shape ``(n_k,)``.
    values : ValueFunction or np.ndarray
        Continuation values, shape ``(n_k,)``.
    params : ModelParameters
        Supplies alpha and beta.

    Returns
    -------
    policy_idx : np.ndarray
        First arg-max grid index, ``-1`` where no choice is feasible.
    policy_k : np.ndarray
        Chosen K' values, NaN where no choice is feasible.
    """
    if isinstance(values, ValueFunction):
        values = values.values
    values = np.asarray(values, dtype=NUMPY_DTYPE)
    if values.shape != (grid.size,):
        raise ValueError(
            f"values has shape {values.shape}, expected ({grid.size},)."
        )

    points = grid.points
    resources = np.power(points, params.alpha)
    prefix = feasible_prefix_lengths(points, resources)
    _, policy_idx = maximize_block(
        points, resources, prefix, values, params.beta, np.arange(grid.size)
    )

    policy_k = np.where(
        policy_idx >= 0,
        points[np.clip(policy_idx, 0, None)],
        np.nan,
    )
    return policy_idx, policy_k
