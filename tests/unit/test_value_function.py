"""Unit tests for value_function.py: ValueFunction container."""

from __future__ import annotations

import numpy as np
import pytest

from rbc_vfi.core.errors import DomainError
from rbc_vfi.vfi.grids.grid_builder import GridBuilder
from rbc_vfi.vfi.value_function import ValueFunction


class TestValueFunction:
    """Tests for construction and invariants."""

    def test_initial_all_ones(self):
        grid = GridBuilder.build(0.001, 10.0, 5)
        guess = ValueFunction.initial(grid)
        np.testing.assert_array_equal(guess.values, np.ones(5))
        assert guess.iterations == 0

    def test_copies_input(self):
        source = np.zeros(3)
        vf = ValueFunction(source)
        source[0] = 9.0
        assert vf[0] == 0.0

    def test_read_only(self):
        vf = ValueFunction(np.zeros(3))
        with pytest.raises(ValueError):
            vf.values[0] = 1.0

    def test_neg_inf_allowed(self):
        vf = ValueFunction([float("-inf"), 0.0])
        assert np.isneginf(vf[0])

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_nan_and_pos_inf_rejected(self, bad):
        with pytest.raises(DomainError):
            ValueFunction([0.0, bad])

    def test_two_dimensional_rejected(self):
        with pytest.raises(ValueError):
            ValueFunction(np.zeros((2, 2)))

    def test_from_guess_size_mismatch(self):
        grid = GridBuilder.build(0.001, 10.0, 5)
        with pytest.raises(ValueError):
            ValueFunction.from_guess(grid, np.ones(4))

    def test_max_abs_diff_matching_neg_inf(self):
        a = ValueFunction([float("-inf"), 1.0])
        b = ValueFunction([float("-inf"), 1.5])
        assert a.max_abs_diff(b) == pytest.approx(0.5)

    def test_max_abs_diff_mismatched_neg_inf(self):
        a = ValueFunction([float("-inf"), 1.0])
        b = ValueFunction([0.0, 1.0])
        assert a.max_abs_diff(b) == float("inf")
