"""Unit tests for bellman_kernels: host scan, host block and tile kernels.

All tests run on CPU — no GPU required.
"""

from __future__ import annotations

import math

import numpy as np
import tensorflow as tf

# Force CPU for CI
tf.config.set_visible_devices([], 'GPU')

import pytest

from rbc_vfi.core.errors import DomainError
from rbc_vfi.vfi.grids.grid_builder import GridBuilder
from rbc_vfi.vfi.kernels.bellman_kernels import (
    bellman_sweep_sequential,
    bellman_tile_kernel,
    feasible_prefix_length,
    feasible_prefix_lengths,
    log_utility,
    maximize_block,
    maximize_point,
)


class TestLogUtility:
    """Tests for log_utility."""

    def test_positive(self):
        assert log_utility(math.e) == pytest.approx(1.0)

    @pytest.mark.parametrize("c", [0.0, -1e-12, -3.0])
    def test_non_positive_raises(self, c):
        with pytest.raises(DomainError):
            log_utility(c)


class TestFeasiblePrefix:
    """The early-exit scan visits exactly the feasible prefix."""

    @pytest.mark.parametrize("alpha", [0.2, 0.5, 0.9])
    def test_prefix_is_contiguous(self, alpha):
        """{j : k_i**alpha - k_j > 0} == {0, ..., m_i - 1}."""
        grid = GridBuilder.build(0.001, 10.0, 200)
        points = grid.points.tolist()
        for i in range(0, 200, 7):
            resource = points[i] ** alpha
            feasible = [j for j, k in enumerate(points) if resource - k > 0]
            m = feasible_prefix_length(points, i, alpha)
            assert feasible == list(range(m))

    def test_vectorised_matches_scan(self):
        grid = GridBuilder.build(0.001, 10.0, 300)
        points = grid.points
        resources = np.power(points, 0.5)
        prefix = feasible_prefix_lengths(points, resources)
        expected = [feasible_prefix_length(points.tolist(), i, 0.5) for i in range(300)]
        np.testing.assert_array_equal(prefix, expected)

    def test_empty_prefix_above_one(self):
        """For k >= 1 with lower bound >= 1, k**alpha <= k_0: nothing feasible."""
        points = [2.0, 3.0, 4.0]
        assert feasible_prefix_length(points, 0, 0.5) == 0


class TestMaximizePoint:
    """Tests for the host scalar scan."""

    def test_hand_computed_two_points(self):
        """Degenerate 2-point grid, one sweep from V = 1."""
        points = [0.001, 10.0]
        v_prev = [1.0, 1.0]
        value, j = maximize_point(points, 0.001 ** 0.5, v_prev, 0.7)
        assert value == pytest.approx(math.log(0.001 ** 0.5 - 0.001) + 0.7)
        assert j == 0

    def test_no_feasible_choice(self):
        value, j = maximize_point([2.0, 3.0], 2.0 ** 0.5, [1.0, 1.0], 0.7)
        assert value == float("-inf")
        assert j == -1

    def test_picks_best_over_prefix(self):
        """Continuation value can move the arg-max away from j = 0."""
        points = [0.1, 0.2, 0.3, 5.0]
        v_prev = [0.0, 0.0, 10.0, 100.0]
        value, j = maximize_point(points, 1.0, v_prev, 0.5)
        assert j == 2
        assert value == pytest.approx(math.log(0.7) + 5.0)

    def test_stops_at_first_infeasible(self):
        """Entries after the first infeasible j are never read."""

        class Guard(list):
            def __getitem__(self, idx):
                if idx >= 2:
                    raise AssertionError("scanned past the feasible prefix")
                return super().__getitem__(idx)

        points = [0.1, 0.2, 0.6, 0.05]
        value, j = maximize_point(points, 0.5, Guard([0.0, 0.0, 0.0, 0.0]), 0.9)
        assert j == 0
        assert value == pytest.approx(math.log(0.4))

    def test_sweep_does_not_mutate(self):
        grid = GridBuilder.build(0.001, 10.0, 20)
        points = grid.points.tolist()
        resources = [k ** 0.5 for k in points]
        v_prev = np.ones(20)
        before = v_prev.copy()
        v_next = bellman_sweep_sequential(points, resources, 0.7, v_prev)
        np.testing.assert_array_equal(v_prev, before)
        assert v_next.shape == (20,)


class TestMaximizeBlock:
    """Tests for the host block kernel."""

    def test_matches_scalar_scan(self):
        grid = GridBuilder.build(0.001, 10.0, 120)
        points = grid.points
        rng = np.random.default_rng(0)
        v_prev = rng.normal(size=120)
        resources = np.power(points, 0.5)
        prefix = feasible_prefix_lengths(points, resources)

        values, idx = maximize_block(
            points, resources, prefix, v_prev, 0.7, np.arange(120)
        )
        for i in range(120):
            expected_v, expected_j = maximize_point(
                points.tolist(), float(resources[i]), v_prev.tolist(), 0.7
            )
            assert values[i] == pytest.approx(expected_v, rel=1e-12)
            assert idx[i] == expected_j

    def test_subset_of_indices(self):
        grid = GridBuilder.build(0.001, 10.0, 50)
        points = grid.points
        resources = np.power(points, 0.5)
        prefix = feasible_prefix_lengths(points, resources)
        v_prev = np.ones(50)
        full, _ = maximize_block(points, resources, prefix, v_prev, 0.7, np.arange(50))
        part, _ = maximize_block(points, resources, prefix, v_prev, 0.7, np.array([3, 10, 49]))
        np.testing.assert_array_equal(part, full[[3, 10, 49]])

    def test_unsorted_grid_raises_domain_error(self):
        """A prefix containing a non-positive resource signals an unsorted grid."""
        points = np.array([0.1, 0.9, 0.2])
        resources = np.array([0.5, 0.5, 0.5])
        prefix = np.array([3, 3, 3])
        with pytest.raises(DomainError):
            maximize_block(points, resources, prefix, np.ones(3), 0.7, np.arange(3))


class TestBellmanTileKernel:
    """Tests for the XLA tile kernel."""

    def test_matches_numpy(self):
        grid = GridBuilder.build(0.001, 10.0, 40)
        points = grid.points
        resources = np.power(points, 0.5)
        v_prev = np.linspace(-1.0, 1.0, 40)

        v_tile, idx_tile, any_feasible = bellman_tile_kernel(
            tf.constant(resources), tf.constant(points),
            tf.constant(v_prev), tf.constant(0.7, dtype=tf.float64),
        )
        prefix = feasible_prefix_lengths(points, resources)
        expected_v, expected_idx = maximize_block(
            points, resources, prefix, v_prev, 0.7, np.arange(40)
        )
        np.testing.assert_allclose(v_tile.numpy(), expected_v, rtol=1e-12, atol=1e-12)
        np.testing.assert_array_equal(idx_tile.numpy(), expected_idx)
        assert bool(any_feasible)

    def test_infeasible_tile(self):
        """A tile beyond every resource is all -inf and reports no feasibility."""
        resources = tf.constant([0.5, 0.8], dtype=tf.float64)
        k_choice = tf.constant([1.0, 2.0, 3.0], dtype=tf.float64)
        v_choice = tf.ones(3, dtype=tf.float64)
        v_tile, _, any_feasible = bellman_tile_kernel(
            resources, k_choice, v_choice, tf.constant(0.7, dtype=tf.float64)
        )
        assert np.all(np.isneginf(v_tile.numpy()))
        assert not bool(any_feasible)

    def test_no_nan_with_neg_inf_continuation(self):
        resources = tf.constant([2.0], dtype=tf.float64)
        k_choice = tf.constant([0.5, 1.0, 3.0], dtype=tf.float64)
        v_choice = tf.constant([float("-inf"), 0.0, 0.0], dtype=tf.float64)
        v_tile, idx_tile, _ = bellman_tile_kernel(
            resources, k_choice, v_choice, tf.constant(0.7, dtype=tf.float64)
        )
        assert float(v_tile[0]) == pytest.approx(0.0)
        assert int(idx_tile[0]) == 1
