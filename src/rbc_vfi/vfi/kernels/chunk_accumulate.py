"""Tile-index remapping and running-best accumulation kernel.

Maps local choice-tile indices to global grid indices and tracks the
running best value and policy across the ordered choice tiles.
"""

from __future__ import annotations

from typing import Tuple

import tensorflow as tf


def chunk_accumulate_core(
    v_chunk: tf.Tensor,
    idx_chunk: tf.Tensor,
    v_best: tf.Tensor,
    idx_best: tf.Tensor,
    j_start_t: tf.Tensor,
) -> Tuple[tf.Tensor, tf.Tensor]:
    """Map local tile indices to global indices and accumulate (undecorated).

    The integer offset is passed as a scalar int32 tensor so that XLA
    traces a single generic kernel (no retracing per tile).  Ties keep the
    earlier tile, matching the first arg-max of an ascending scan.

    Parameters
    ----------
    v_chunk, v_best : tf.Tensor
        Per-state values for the current tile and running best.
    idx_chunk, idx_best : tf.Tensor
        Policy indices (local to the tile vs. global).
    j_start_t : tf.Tensor
        Offset of the current tile in the choice grid.

    Returns
    -------
    v_best_new : tf.Tensor
        Updated running-best values.
    idx_best_new : tf.Tensor
        Updated running-best global indices.
    """
    improve = v_chunk > v_best
    v_best_new = tf.where(improve, v_chunk, v_best)
    idx_best_new = tf.where(improve, idx_chunk + j_start_t, idx_best)
    return v_best_new, idx_best_new


@tf.function(jit_compile=True)
def chunk_accumulate(
    v_chunk: tf.Tensor,
    idx_chunk: tf.Tensor,
    v_best: tf.Tensor,
    idx_best: tf.Tensor,
    j_start_t: tf.Tensor,
) -> Tuple[tf.Tensor, tf.Tensor]:
    """Map local tile indices to global indices and accumulate (XLA).

    See :func:`chunk_accumulate_core` for parameter documentation.
    """
    return chunk_accumulate_core(
        v_chunk, idx_chunk,
        v_best, idx_best,
        j_start_t,
    )
