"""Data-parallel Value Function Iteration.

Each grid index's Bellman maximisation is an independent task that reads
the previous sweep's values (shared, read only) and writes exactly one
slot of the next sweep.  Two execution substrates are supported:

* ``tensorflow``: XLA tile kernels on the default TensorFlow device
  (GPU when one is visible).  Each state block only dispatches choices
  inside its feasible prefix, walked tile by tile in increasing order.
* ``threads``: a joblib thread pool; grid indices are partitioned into
  contiguous blocks, one task per block.

Both produce the same values as :class:`~rbc_vfi.vfi.sequential.SequentialSolver`
within floating-point tolerance, for any number of workers or tile size.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
import tensorflow as tf
from joblib import Parallel, cpu_count, delayed

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.config.vfi_config import SUPPORTED_BACKENDS, SolverConfig
from rbc_vfi.core.errors import ResourceExhaustedError
from rbc_vfi.core.types import NUMPY_DTYPE, TENSORFLOW_DTYPE, Array, ArrayLike
from rbc_vfi.vfi.chunking.tile_executor import execute_bellman_tiles
from rbc_vfi.vfi.chunking.tile_strategy import check_capacity, compute_optimal_chunks
from rbc_vfi.vfi.engine import VFIEngine
from rbc_vfi.vfi.grids.grid_builder import Grid
from rbc_vfi.vfi.kernels.bellman_kernels import (
    bellman_tile_kernel,
    feasible_prefix_lengths,
    maximize_block,
)
from rbc_vfi.vfi.kernels.chunk_accumulate import chunk_accumulate
from rbc_vfi.vfi.protocols import Solver, StepFunction
from rbc_vfi.vfi.sequential import SequentialSolver
from rbc_vfi.vfi.value_function import ValueFunction

logger = logging.getLogger(__name__)

# Blocks per worker for the thread backend; >1 evens out the load since
# the feasible prefix (and so the work) grows with the grid index.
BLOCKS_PER_WORKER = 4


def partition_indices(n: int, n_blocks: int) -> List[Array]:
    """Split ``range(n)`` into at most *n_blocks* contiguous, disjoint blocks."""
    n_blocks = max(1, min(n_blocks, n))
    return [block for block in np.array_split(np.arange(n), n_blocks) if block.size]


class ParallelSolver:
    """Data-parallel VFI solver for the deterministic RBC model.

    Parameters
    ----------
    backend : str
        ``"tensorflow"`` or ``"threads"``.
    n_workers : int, optional
        Thread count for the ``threads`` backend.  None uses all cores.
    chunk_size : int, optional
        Tile edge for the ``tensorflow`` backend.  None derives tiles from
        *memory_limit_gb*.
    memory_limit_gb : float
        Budget for one sweep's arrays.
    device : str, optional
        TensorFlow device string, e.g. ``"/GPU:0"``.  None keeps the
        default placement.

    Raises
    ------
    ValueError
        On an unknown backend or invalid worker / chunk counts.
    """

    name = "parallel"

    def __init__(
        self,
        backend: str = "tensorflow",
        n_workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        memory_limit_gb: float = 2.0,
        device: Optional[str] = None,
    ) -> None:
        # SolverConfig carries the validation rules
        config = SolverConfig(
            backend=backend,
            n_workers=n_workers,
            chunk_size=chunk_size,
            memory_limit_gb=memory_limit_gb,
        )
        self.backend: str = config.backend
        self.n_workers: Optional[int] = config.n_workers
        self.chunk_size: Optional[int] = config.chunk_size
        self.memory_limit_gb: float = config.memory_limit_gb
        self.device: Optional[str] = device

    @classmethod
    def from_config(
        cls, config: SolverConfig, device: Optional[str] = None
    ) -> "ParallelSolver":
        return cls(
            backend=config.backend,
            n_workers=config.n_workers,
            chunk_size=config.chunk_size,
            memory_limit_gb=config.memory_limit_gb,
            device=device,
        )

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def solve(
        self,
        grid: Grid,
        params: ModelParameters,
        v_init: Optional[ArrayLike] = None,
    ) -> ValueFunction:
        """Solve the model by value function iteration.

        Parameters
        ----------
        grid : Grid
            Ascending capital grid.
        params : ModelParameters
            alpha, beta, iteration count and stopping mode.
        v_init : array-like, optional
            Initial guess; all ones when omitted.  Never mutated.

        Returns
        -------
        ValueFunction
            Values after ``params.max_iterations`` sweeps (or fewer when
            early stopping is enabled and triggers).

        Raises
        ------
        ResourceExhaustedError
            If the sweep arrays exceed the memory budget or the device
            runs out of memory.
        DomainError
            If a sweep produces NaN or ``+inf``.
        """
        logger.info(
            "Starting ParallelSolver.solve() — backend=%s, alpha=%.4f, "
            "beta=%.4f, n_k=%d, max_iter=%d",
            self.backend,
            params.alpha,
            params.beta,
            grid.size,
            params.max_iterations,
        )
        check_capacity(grid.size, self.memory_limit_gb)
        guess = ValueFunction.from_guess(grid, v_init)
        engine = VFIEngine(params, label=f"ParallelSolver[{self.backend}]")

        try:
            if self.backend == "threads":
                return self._solve_threads(grid, params, guess, engine)
            return self._solve_tensorflow(grid, params, guess, engine)
        except ResourceExhaustedError:
            raise
        except tf.errors.ResourceExhaustedError as e:
            raise ResourceExhaustedError(
                f"Device ran out of memory for n_k={grid.size}: {e.message}"
            ) from e
        except MemoryError as e:
            raise ResourceExhaustedError(
                f"Host ran out of memory for n_k={grid.size}."
            ) from e

    # ------------------------------------------------------------------
    # Thread-pool backend
    # ------------------------------------------------------------------

    def _effective_workers(self) -> int:
        return self.n_workers if self.n_workers is not None else cpu_count()

    def _solve_threads(
        self,
        grid: Grid,
        params: ModelParameters,
        guess: ValueFunction,
        engine: VFIEngine,
    ) -> ValueFunction:
        points = grid.points
        resources = np.power(points, params.alpha)
        prefix = feasible_prefix_lengths(points, resources)
        n_workers = self._effective_workers()
        blocks = partition_indices(grid.size, n_workers * BLOCKS_PER_WORKER)
        logger.info(
            "Thread backend: %d workers, %d blocks", n_workers, len(blocks)
        )

        # Pool is kept alive across the sweeps of this solve only.
        with Parallel(n_jobs=n_workers, prefer="threads") as parallel:

            def step_fn(v_prev: Array) -> Array:
                results = parallel(
                    delayed(maximize_block)(
                        points, resources, prefix, v_prev, params.beta, block
                    )
                    for block in blocks
                )
                v_next = np.empty(grid.size, dtype=NUMPY_DTYPE)
                for block, (values, _) in zip(blocks, results):
                    v_next[block] = values
                return v_next

            return engine.run(guess, step_fn)

    # ------------------------------------------------------------------
    # TensorFlow backend
    # ------------------------------------------------------------------

    def _tile_sizes(self, n_k: int):
        if self.chunk_size is not None:
            chunk = min(self.chunk_size, n_k)
            return chunk, chunk
        return compute_optimal_chunks(n_k, self.memory_limit_gb)

    def _tensorflow_step(
        self, grid: Grid, params: ModelParameters
    ) -> StepFunction:
        k_grid = grid.as_tensor()
        resources = tf.pow(k_grid, tf.cast(params.alpha, TENSORFLOW_DTYPE))
        beta = tf.cast(params.beta, TENSORFLOW_DTYPE)
        state_chunk, choice_chunk = self._tile_sizes(grid.size)

        def step_fn(v_prev: Array) -> Array:
            v_prev_t = tf.constant(v_prev, dtype=TENSORFLOW_DTYPE)
            v_next, _, n_tiles = execute_bellman_tiles(
                resources,
                k_grid,
                v_prev_t,
                beta,
                state_chunk,
                choice_chunk,
                bellman_kernel=bellman_tile_kernel,
                chunk_accumulate_fn=chunk_accumulate,
            )
            logger.debug("Sweep evaluated %d tiles", n_tiles)
            return v_next.numpy()

        return step_fn

    def _solve_tensorflow(
        self,
        grid: Grid,
        params: ModelParameters,
        guess: ValueFunction,
        engine: VFIEngine,
    ) -> ValueFunction:
        if self.device is None:
            return engine.run(guess, self._tensorflow_step(grid, params))
        with tf.device(self.device):
            return engine.run(guess, self._tensorflow_step(grid, params))


def make_solver(
    kind: str,
    config: Optional[SolverConfig] = None,
    device: Optional[str] = None,
) -> Solver:
    """Return a sequential or parallel solver by name."""
    if kind == "sequential":
        return SequentialSolver()
    if kind == "parallel":
        return ParallelSolver.from_config(config or SolverConfig(), device=device)
    raise ValueError(
        f"Unknown solver {kind!r}; expected 'sequential' or 'parallel' "
        f"(parallel backends: {SUPPORTED_BACKENDS})."
    )
