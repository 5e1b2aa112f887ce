"""Compute tile dimensions from a device memory budget.

One Bellman sweep on the device evaluates an ``(n_k x n_k)`` slab of
candidate values.  When that slab does not fit, the choice axis is split
into tiles that are walked in increasing order.
"""

from __future__ import annotations

import logging
from typing import Tuple

from rbc_vfi.core.errors import ResourceExhaustedError

logger = logging.getLogger(__name__)

BYTES_PER_ELEM = 8 * 3  # float64 x 3 concurrent tensors (feasible, mask, rhs)
MIN_CHOICE_CHUNK = 10
_GB = 1024 ** 3


def value_arrays_bytes(n_k: int) -> int:
    """Bytes held by the previous and next value arrays of one sweep."""
    return 2 * n_k * 8


def check_capacity(n_k: int, memory_limit_gb: float) -> None:
    """Fail early if the two value arrays alone exceed the budget.

    Raises
    ------
    ResourceExhaustedError
        If ``2 * n_k`` float64 values do not fit in *memory_limit_gb*.
    """
    needed = value_arrays_bytes(n_k)
    budget = int(memory_limit_gb * _GB)
    if needed > budget:
        raise ResourceExhaustedError(
            f"Two value arrays of {n_k} points need {needed} bytes, "
            f"budget is {budget} bytes."
        )


def compute_optimal_chunks(
    n_k: int,
    memory_limit_gb: float = 2.0,
) -> Tuple[int, int]:
    """
    Return ``(state_chunk, choice_chunk)`` for the tiled Bellman sweep.

    Strategy
    --------
    1. Estimate the full slab:  n_k × n_k × 8B × 3.
    2. If it fits, use a single tile over both axes.
    3. Otherwise keep the state axis full and derive the widest choice
       tile that fits:  cj = floor(LIMIT / (n_k × 24)), at least 10.
    4. If even that does not fit, halve the state axis until it does.

    Parameters
    ----------
    n_k : int
        Number of capital grid points.
    memory_limit_gb : float, default 2.0
        Memory budget in GB.

    Returns
    -------
    (state_chunk, choice_chunk) : Tuple[int, int]
    """
    if n_k < 1:
        raise ValueError(f"n_k must be positive, got {n_k}.")
    limit = int(memory_limit_gb * _GB)

    full_bytes = n_k * n_k * BYTES_PER_ELEM
    if full_bytes <= limit:
        logger.info(
            f"  Chunks for n_k={n_k}: FULL GRID (1 tile) — "
            f"estimated {full_bytes / 1e9:.3f} GB"
        )
        return n_k, n_k

    state_chunk = n_k
    choice_chunk = max(limit // (state_chunk * BYTES_PER_ELEM), MIN_CHOICE_CHUNK)
    while state_chunk > 1 and state_chunk * choice_chunk * BYTES_PER_ELEM > limit:
        state_chunk = max(state_chunk // 2, 1)
        choice_chunk = max(limit // (state_chunk * BYTES_PER_ELEM), MIN_CHOICE_CHUNK)
    choice_chunk = min(choice_chunk, n_k)

    n_tiles = ((n_k + state_chunk - 1) // state_chunk) * (
        (n_k + choice_chunk - 1) // choice_chunk
    )
    tile_gb = state_chunk * choice_chunk * BYTES_PER_ELEM / 1e9
    logger.info(
        f"  Chunks for n_k={n_k}: state={state_chunk}, choice={choice_chunk} "
        f"— at most {n_tiles} tiles, ~{tile_gb:.3f} GB/tile"
    )
    return state_chunk, choice_chunk
