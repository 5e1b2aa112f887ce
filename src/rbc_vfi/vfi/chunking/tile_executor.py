"""Python tiling loop over (state block, choice tile) with kernel delegation.

On an ascending grid the feasible choices of each state form a prefix
``j < m_i``, and ``m_i`` grows with the state.  Every state block therefore
only dispatches choices ``j < max(m_i)`` over the block, walked tile by tile
in increasing order; the block stops early if a kernel reports a tile with
no feasible entry.  With one-row state blocks the entries evaluated are
exactly the feasible prefixes.

The executor receives kernel and accumulator as callables, enabling
substitution with mocks in unit tests.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

import tensorflow as tf

from rbc_vfi.core.types import TENSORFLOW_DTYPE
from rbc_vfi.vfi.kernels.bellman_kernels import feasible_prefix_lengths

ACCUM_DTYPE: tf.DType = TENSORFLOW_DTYPE

# Type aliases for the kernel callables
BellmanKernelFn = Callable[..., Tuple[tf.Tensor, tf.Tensor, tf.Tensor]]
ChunkAccumulateFn = Callable[..., Tuple[tf.Tensor, tf.Tensor]]


def execute_bellman_tiles(
    resources: tf.Tensor,
    k_grid: tf.Tensor,
    v_prev: tf.Tensor,
    beta: tf.Tensor,
    state_chunk_size: int,
    choice_chunk_size: int,
    bellman_kernel: BellmanKernelFn,
    chunk_accumulate_fn: ChunkAccumulateFn,
) -> Tuple[tf.Tensor, tf.Tensor, int]:
    """Compute one Bellman sweep via tiled execution.

    Parameters
    ----------
    resources : tf.Tensor
        ``(nk,)`` ``k ** alpha`` for every grid point.
    k_grid : tf.Tensor
        ``(nk,)`` ascending capital grid.
    v_prev : tf.Tensor
        ``(nk,)`` previous sweep's value function (read only).
    beta : tf.Tensor
        Scalar discount factor.
    state_chunk_size, choice_chunk_size : int
        Tile dimensions along the state and choice axes.
    bellman_kernel : callable
        Tile kernel.  Signature must match ``bellman_tile_kernel``.
    chunk_accumulate_fn : callable
        Accumulator.  Signature must match ``chunk_accumulate``.

    Returns
    -------
    v_next : tf.Tensor
        ``(nk,)`` updated value function.
    policy_idx : tf.Tensor
        ``(nk,)`` global arg-max index (int32), 0 where nothing is feasible.
    n_tiles : int
        Number of tiles actually evaluated.  Tiles never extend past the
        block's feasible prefix.
    """
    nk = int(k_grid.shape[0])
    prefix = feasible_prefix_lengths(k_grid.numpy(), resources.numpy())
    neg_inf = tf.constant(float('-inf'), dtype=ACCUM_DTYPE)

    v_parts: List[tf.Tensor] = []
    policy_parts: List[tf.Tensor] = []
    n_tiles = 0

    for s_start in range(0, nk, state_chunk_size):
        s_end = min(s_start + state_chunk_size, nk)
        resources_block = resources[s_start:s_end]
        j_limit = int(prefix[s_start:s_end].max())

        v_best = tf.fill((s_end - s_start,), neg_inf)
        idx_best = tf.zeros((s_end - s_start,), dtype=tf.int32)

        for j_start in range(0, j_limit, choice_chunk_size):
            j_end = min(j_start + choice_chunk_size, j_limit)

            v_chunk, idx_chunk, any_feasible = bellman_kernel(
                resources_block,
                k_grid[j_start:j_end],
                v_prev[j_start:j_end],
                beta,
            )
            n_tiles += 1
            if not bool(any_feasible):
                break

            v_best, idx_best = chunk_accumulate_fn(
                v_chunk, idx_chunk,
                v_best, idx_best,
                tf.constant(j_start, dtype=tf.int32),
            )

        v_parts.append(v_best)
        policy_parts.append(idx_best)

    v_next = tf.concat(v_parts, axis=0)
    policy_idx = tf.concat(policy_parts, axis=0)
    return v_next, policy_idx, n_tiles
