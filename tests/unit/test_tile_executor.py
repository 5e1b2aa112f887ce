"""Unit tests for tile_executor: execute_bellman_tiles.

Uses mock kernels to verify tiling coverage and the early exit, plus the
real kernels to verify tile-size independence.
"""

from __future__ import annotations

import numpy as np
import tensorflow as tf

tf.config.set_visible_devices([], 'GPU')

import pytest

from rbc_vfi.vfi.chunking.tile_executor import execute_bellman_tiles
from rbc_vfi.vfi.grids.grid_builder import GridBuilder
from rbc_vfi.vfi.kernels.bellman_kernels import (
    bellman_tile_kernel,
    feasible_prefix_lengths,
)
from rbc_vfi.vfi.kernels.chunk_accumulate import chunk_accumulate


def _inputs(n_k: int = 100, alpha: float = 0.5):
    grid = GridBuilder.build(0.001, 10.0, n_k)
    k_grid = grid.as_tensor()
    resources = tf.pow(k_grid, tf.constant(alpha, dtype=tf.float64))
    v_prev = tf.ones(n_k, dtype=tf.float64)
    beta = tf.constant(0.7, dtype=tf.float64)
    return resources, k_grid, v_prev, beta


def _make_counting_kernel(entries):
    """Wrap the real tile kernel and record the slab size of every call."""

    def kernel(resources_block, k_choice, v_choice, beta):
        entries.append(int(resources_block.shape[0]) * int(k_choice.shape[0]))
        return bellman_tile_kernel(resources_block, k_choice, v_choice, beta)

    return kernel


def _make_dummy_accumulate():
    """Return a mock accumulator that takes the max."""

    def accumulate(v_chunk, idx_chunk, v_best, idx_best, j_start):
        improve = v_chunk > v_best
        return (
            tf.where(improve, v_chunk, v_best),
            tf.where(improve, idx_chunk + j_start, idx_best),
        )

    return accumulate


class TestTileExecutor:
    """Tests for execute_bellman_tiles."""

    def test_output_shape(self):
        resources, k_grid, v_prev, beta = _inputs(30)
        v_next, policy, _ = execute_bellman_tiles(
            resources, k_grid, v_prev, beta,
            state_chunk_size=7, choice_chunk_size=4,
            bellman_kernel=bellman_tile_kernel,
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert v_next.shape == (30,)
        assert policy.shape == (30,)

    def test_single_tile(self):
        """With chunk == full grid, exactly one tile is evaluated."""
        resources, k_grid, v_prev, beta = _inputs(20)
        _, _, n_tiles = execute_bellman_tiles(
            resources, k_grid, v_prev, beta, 20, 20,
            bellman_kernel=bellman_tile_kernel,
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert n_tiles == 1

    def test_choice_range_stops_at_feasible_prefix(self):
        """Feasible choices end at j = 31, so tiles [0:10] .. [30:32] are dispatched."""
        resources, k_grid, v_prev, beta = _inputs(100)
        _, _, n_tiles = execute_bellman_tiles(
            resources, k_grid, v_prev, beta, 100, 10,
            bellman_kernel=bellman_tile_kernel,
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert n_tiles == 4

    def test_mock_kernel_exit_per_block(self):
        """An always-infeasible kernel is called once per state block."""
        calls = []

        def kernel(resources_block, k_choice, v_choice, beta):
            calls.append(int(k_choice.shape[0]))
            cs = int(resources_block.shape[0])
            return (
                tf.fill((cs,), tf.constant(float('-inf'), dtype=tf.float64)),
                tf.zeros((cs,), dtype=tf.int32),
                tf.constant(False),
            )

        resources, k_grid, v_prev, beta = _inputs(12)
        v_next, _, n_tiles = execute_bellman_tiles(
            resources, k_grid, v_prev, beta, 5, 4,
            bellman_kernel=kernel,
            chunk_accumulate_fn=_make_dummy_accumulate(),
        )
        assert n_tiles == 3  # blocks [0:5], [5:10], [10:12]
        assert len(calls) == 3
        assert np.all(np.isneginf(v_next.numpy()))

    @pytest.mark.parametrize("state_chunk, choice_chunk", [(1, 1), (7, 3), (13, 50), (100, 100)])
    def test_tile_size_independent(self, state_chunk, choice_chunk):
        """Result does not depend on the tiling."""
        resources, k_grid, _, beta = _inputs(100)
        v_prev = tf.constant(np.linspace(-2.0, 2.0, 100))
        ref_v, ref_idx, _ = execute_bellman_tiles(
            resources, k_grid, v_prev, beta, 100, 100,
            bellman_kernel=bellman_tile_kernel,
            chunk_accumulate_fn=chunk_accumulate,
        )
        v, idx, _ = execute_bellman_tiles(
            resources, k_grid, v_prev, beta, state_chunk, choice_chunk,
            bellman_kernel=bellman_tile_kernel,
            chunk_accumulate_fn=chunk_accumulate,
        )
        np.testing.assert_allclose(v.numpy(), ref_v.numpy(), rtol=1e-12)
        np.testing.assert_array_equal(idx.numpy(), ref_idx.numpy())


class TestFeasiblePrefixDispatch:
    """Only choices inside the feasible prefix reach the kernel."""

    @pytest.mark.parametrize("state_chunk, choice_chunk", [(1000, 1000), (250, 1000), (250, 40)])
    def test_entries_equal_block_prefixes(self, state_chunk, choice_chunk):
        resources, k_grid, v_prev, beta = _inputs(1000)
        prefix = feasible_prefix_lengths(k_grid.numpy(), resources.numpy())
        expected = sum(
            len(prefix[s:s + state_chunk]) * int(prefix[s:s + state_chunk].max())
            for s in range(0, 1000, state_chunk)
        )

        entries = []
        execute_bellman_tiles(
            resources, k_grid, v_prev, beta, state_chunk, choice_chunk,
            bellman_kernel=_make_counting_kernel(entries),
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert sum(entries) == expected
        assert sum(entries) < 1000 * 1000

    def test_one_row_blocks_visit_exact_prefixes(self):
        """With one state per block, each row sees exactly its own prefix."""
        resources, k_grid, v_prev, beta = _inputs(60)
        prefix = feasible_prefix_lengths(k_grid.numpy(), resources.numpy())

        entries = []
        execute_bellman_tiles(
            resources, k_grid, v_prev, beta, 1, 60,
            bellman_kernel=_make_counting_kernel(entries),
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert entries == [int(m) for m in prefix if m > 0]
        assert sum(entries) == int(prefix.sum())

    def test_no_feasible_choice_dispatches_nothing(self):
        grid = GridBuilder.build(2.0, 3.0, 4)
        k_grid = grid.as_tensor()
        resources = tf.sqrt(k_grid)
        entries = []
        v_next, _, n_tiles = execute_bellman_tiles(
            resources, k_grid, tf.ones(4, dtype=tf.float64),
            tf.constant(0.7, dtype=tf.float64), 4, 4,
            bellman_kernel=_make_counting_kernel(entries),
            chunk_accumulate_fn=chunk_accumulate,
        )
        assert n_tiles == 0
        assert entries == []
        assert np.all(np.isneginf(v_next.numpy()))
