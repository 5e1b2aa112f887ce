"""Numerical kernels for the VFI solvers.

Device kernels are decorated with ``@tf.function(jit_compile=True)``;
corresponding ``_core`` variants (undecorated) are provided for nesting
inside other XLA scopes.  Host kernels are plain Python / NumPy.

Modules
-------
bellman_kernels
    Host scalar scan, host block kernel and device tile kernel.
chunk_accumulate
    Tile-index remapping and running-best accumulation.
"""

from rbc_vfi.vfi.kernels.bellman_kernels import (
    bellman_sweep_sequential,
    bellman_tile_kernel,
    bellman_tile_kernel_core,
    feasible_prefix_length,
    feasible_prefix_lengths,
    log_utility,
    maximize_block,
    maximize_point,
)
from rbc_vfi.vfi.kernels.chunk_accumulate import (
    chunk_accumulate,
    chunk_accumulate_core,
)

__all__ = [
    "bellman_sweep_sequential",
    "bellman_tile_kernel",
    "bellman_tile_kernel_core",
    "feasible_prefix_length",
    "feasible_prefix_lengths",
    "log_utility",
    "maximize_block",
    "maximize_point",
    "chunk_accumulate",
    "chunk_accumulate_core",
]
