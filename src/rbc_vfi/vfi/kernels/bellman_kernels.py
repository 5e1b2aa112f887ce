"""Bellman maximisation kernels shared by the sequential and parallel solvers.

The right-hand side at grid point ``i`` and choice ``j`` is

    ln(k_i ** alpha - k_j) + beta * V_prev[j]

and is only admissible while the feasible resource ``k_i ** alpha - k_j``
is positive.  On an ascending grid the feasible choices form a contiguous
prefix ``j = 0 .. m_i - 1``, so every kernel here stops at ``m_i``.

Contains three families of kernels:
- host scalar scan (``maximize_point``) used by the sequential solver
- host block kernel (``maximize_block``) run by each thread-pool task
- device tile kernel (``bellman_tile_kernel``) compiled with XLA
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np
import tensorflow as tf

from rbc_vfi.core.errors import DomainError
from rbc_vfi.core.types import NUMPY_DTYPE, TENSORFLOW_DTYPE, Array

ACCUM_DTYPE: tf.DType = TENSORFLOW_DTYPE
NEG_INF = float("-inf")


# ----------------------------------------------------------------------
# Host scalar scan
# ----------------------------------------------------------------------

def log_utility(feasible: float) -> float:
    """Return ``ln(feasible)``.

    Raises
    ------
    DomainError
        If *feasible* is not strictly positive.
    """
    if not feasible > 0.0:
        raise DomainError(
            f"Logarithm of non-positive feasible resource {feasible!r}."
        )
    return math.log(feasible)


def feasible_prefix_length(points: Sequence[float], i: int, alpha: float) -> int:
    """Number of choices the early-exit scan visits for grid point *i*.

    Scans ``j`` upward from 0 and stops at the first ``j`` whose feasible
    resource is not positive.
    """
    resource = float(points[i]) ** alpha
    length = 0
    for k_next in points:
        if resource - float(k_next) <= 0.0:
            break
        length += 1
    return length


def maximize_point(
    points: Sequence[float],
    resource: float,
    v_prev: Sequence[float],
    beta: float,
) -> Tuple[float, int]:
    """Maximise the Bellman right-hand side for one grid point.

    Parameters
    ----------
    points : sequence of float
        Ascending capital grid.
    resource : float
        ``k_i ** alpha`` for the grid point being updated.
    v_prev : sequence of float
        Previous sweep's value function (read only).
    beta : float
        Discount factor.

    Returns
    -------
    best : float
        Running maximum, ``-inf`` if no choice is feasible.
    best_j : int
        First arg-max, ``-1`` if no finite candidate was found.
    """
    best = NEG_INF
    best_j = -1
    for j, k_next in enumerate(points):
        feasible = resource - k_next
        if feasible <= 0.0:
            break
        candidate = log_utility(feasible) + beta * v_prev[j]
        if candidate > best:
            best = candidate
            best_j = j
    return best, best_j


def bellman_sweep_sequential(
    points: List[float],
    resources: List[float],
    beta: float,
    v_prev: Array,
) -> Array:
    """One full sweep, grid point by grid point, on a single thread."""
    v_list = v_prev.tolist()
    v_next = [
        maximize_point(points, resource, v_list, beta)[0]
        for resource in resources
    ]
    return np.asarray(v_next, dtype=NUMPY_DTYPE)


# ----------------------------------------------------------------------
# Host block kernel
# ----------------------------------------------------------------------

def feasible_prefix_lengths(points: Array, resources: Array) -> Array:
    """Vectorised :func:`feasible_prefix_length` for every grid point.

    ``resources[i] - points[j] > 0`` holds exactly when
    ``points[j] < resources[i]``, so on an ascending grid the visited
    prefix ends at the left insertion point of ``resources[i]``.
    """
    return np.searchsorted(points, resources, side="left")


def maximize_block(
    points: Array,
    resources: Array,
    prefix: Array,
    v_prev: Array,
    beta: float,
    indices: Array,
) -> Tuple[Array, Array]:
    """Maximise the Bellman right-hand side for a block of grid points.

    Each index only reads *v_prev* and produces its own output slot, so
    blocks may run concurrently.

    Returns
    -------
    values : np.ndarray
        ``(len(indices),)`` maxima, ``-inf`` where nothing is feasible.
    policy_idx : np.ndarray
        ``(len(indices),)`` first arg-max, ``-1`` where nothing is feasible.
    """
    values = np.full(len(indices), NEG_INF, dtype=NUMPY_DTYPE)
    policy_idx = np.full(len(indices), -1, dtype=np.int64)
    for out, i in enumerate(indices):
        m = int(prefix[i])
        if m == 0:
            continue
        feasible = resources[i] - points[:m]
        if np.any(feasible <= 0.0):
            raise DomainError(
                f"Non-positive feasible resource inside the scanned prefix "
                f"of grid point {i}; the grid is not ascending."
            )
        rhs = np.log(feasible) + beta * v_prev[:m]
        best_j = int(np.argmax(rhs))
        values[out] = rhs[best_j]
        if rhs[best_j] > NEG_INF:
            policy_idx[out] = best_j
    return values, policy_idx


# ----------------------------------------------------------------------
# Device tile kernel
# ----------------------------------------------------------------------

def bellman_tile_kernel_core(
    resources: tf.Tensor,
    k_choice: tf.Tensor,
    v_choice: tf.Tensor,
    beta: tf.Tensor,
) -> Tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Evaluate one ``(state block x choice tile)`` slab (undecorated).

    Parameters
    ----------
    resources : tf.Tensor
        ``(cs,)`` ``k_i ** alpha`` for the state block.
    k_choice : tf.Tensor
        ``(cj,)`` capital values of the choice tile.
    v_choice : tf.Tensor
        ``(cj,)`` previous value function on the choice tile.
    beta : tf.Tensor
        Scalar discount factor.

    Returns
    -------
    v_tile : tf.Tensor
        ``(cs,)`` best value within the tile, ``-inf`` if infeasible.
    idx_tile : tf.Tensor
        ``(cs,)`` local arg-max (int32).
    any_feasible : tf.Tensor
        Scalar bool, ``True`` if at least one slab entry is feasible.
    """
    feasible = resources[:, None] - k_choice[None, :]
    admissible = feasible > 0.0
    safe = tf.where(admissible, feasible, tf.ones_like(feasible))
    neg_inf = tf.constant(NEG_INF, dtype=ACCUM_DTYPE)
    rhs = tf.where(
        admissible,
        tf.math.log(safe) + beta * v_choice[None, :],
        neg_inf,
    )
    v_tile = tf.reduce_max(rhs, axis=1)
    idx_tile = tf.argmax(rhs, axis=1, output_type=tf.int32)
    return v_tile, idx_tile, tf.reduce_any(admissible)


@tf.function(jit_compile=True)
def bellman_tile_kernel(
    resources: tf.Tensor,
    k_choice: tf.Tensor,
    v_choice: tf.Tensor,
    beta: tf.Tensor,
) -> Tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Evaluate one ``(state block x choice tile)`` slab (XLA-compiled).

    See :func:`bellman_tile_kernel_core` for parameter documentation.
    """
    return bellman_tile_kernel_core(resources, k_choice, v_choice, beta)
