"""Value Function Iteration (VFI) solvers for the deterministic RBC model.

This package provides:

* :class:`SequentialSolver`: single-thread baseline; scans every grid
  point's choices in increasing order with the monotonicity early exit.
* :class:`ParallelSolver`: one independent maximisation per grid point,
  executed on TensorFlow devices or a joblib thread pool.
* :class:`VFIEngine`: generic sweep loop with the barrier between sweeps.

Sub-packages
------------
kernels
    Host scan, host block and XLA tile kernels; chunk accumulation.
chunking
    Memory-aware tiling strategy and tile executor.
grids
    Grid construction.

Modules
-------
protocols
    Protocol definitions for solver components.
policies
    Policy extraction.
engine
    Generic Bellman fixed-point iterator.
"""

from rbc_vfi.vfi.engine import VFIEngine
from rbc_vfi.vfi.grids.grid_builder import Grid, GridBuilder
from rbc_vfi.vfi.parallel import ParallelSolver, make_solver
from rbc_vfi.vfi.sequential import SequentialSolver
from rbc_vfi.vfi.value_function import ValueFunction

__all__ = [
    "Grid",
    "GridBuilder",
    "ParallelSolver",
    "SequentialSolver",
    "VFIEngine",
    "ValueFunction",
    "make_solver",
]
