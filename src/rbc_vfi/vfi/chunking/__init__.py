"""Memory-aware tiling strategy and execution for the device sweep.

Modules
-------
tile_strategy
    Compute tile dimensions from a memory budget.
tile_executor
    Ordered Python tiling loop with kernel delegation and early exit.
"""

from rbc_vfi.vfi.chunking.tile_strategy import check_capacity, compute_optimal_chunks
from rbc_vfi.vfi.chunking.tile_executor import execute_bellman_tiles

__all__ = [
    "check_capacity",
    "compute_optimal_chunks",
    "execute_bellman_tiles",
]
