"""Shared test fixtures and helper utilities for VFI unit tests."""

from __future__ import annotations

import numpy as np
import tensorflow as tf

# Force CPU for CI — must be called before any TF ops
tf.config.set_visible_devices([], 'GPU')

import pytest

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.vfi.grids.grid_builder import Grid, GridBuilder


def make_test_params(**overrides) -> ModelParameters:
    """Return ModelParameters for the reference scenario with overrides."""
    defaults = dict(
        alpha=0.5,
        beta=0.7,
        max_iterations=10,
        tolerance=1e-6,
    )
    defaults.update(overrides)
    return ModelParameters(**defaults)


@pytest.fixture
def small_grid() -> Grid:
    return GridBuilder.build(0.001, 10.0, 60)


@pytest.fixture
def params() -> ModelParameters:
    return make_test_params()
