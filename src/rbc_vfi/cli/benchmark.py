# rbc_vfi/cli/benchmark.py
"""
Timing harness comparing the sequential and parallel solvers.

For every requested grid size the same model is solved twice, once per
solver, and the wall-clock durations, speed-up and largest disagreement
between the two value functions are reported.

Example:
    $ python -m rbc_vfi.cli.benchmark --sizes 100 250 500 --max-iter 20
    $ python -m rbc_vfi.cli.benchmark --backend threads --workers 8 --output out/bench.json
"""

import argparse
import dataclasses
import logging
import sys
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rbc_vfi.cli.common import (
    add_run_arguments,
    configure_devices,
    configure_logging,
    resolve_run_config,
)
from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.io.file_utils import save_json_file
from rbc_vfi.vfi.grids.grid_builder import Grid, GridBuilder
from rbc_vfi.vfi.parallel import ParallelSolver
from rbc_vfi.vfi.protocols import Solver
from rbc_vfi.vfi.sequential import SequentialSolver

logger = logging.getLogger(__name__)

DEFAULT_SIZES = (100, 250, 500, 1000)


@dataclass(frozen=True)
class BenchmarkResult:
    """Timings for one grid size."""

    n_k: int
    sequential_seconds: float
    parallel_seconds: float
    max_abs_diff: float

    @property
    def speedup(self) -> float:
        if self.parallel_seconds <= 0.0:
            return float('inf')
        return self.sequential_seconds / self.parallel_seconds

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        data['speedup'] = self.speedup
        return data


def _timed_solve(solver: Solver, grid: Grid, params: ModelParameters):
    start = time.perf_counter()
    result = solver.solve(grid, params)
    return result, time.perf_counter() - start


def run_benchmark(
    grid: Grid,
    params: ModelParameters,
    parallel_solver: Solver,
    sequential_solver: Optional[Solver] = None,
) -> BenchmarkResult:
    """Solve on *grid* with both solvers and time each call."""
    sequential_solver = sequential_solver or SequentialSolver()

    seq_result, seq_seconds = _timed_solve(sequential_solver, grid, params)
    par_result, par_seconds = _timed_solve(parallel_solver, grid, params)

    result = BenchmarkResult(
        n_k=grid.size,
        sequential_seconds=seq_seconds,
        parallel_seconds=par_seconds,
        max_abs_diff=seq_result.max_abs_diff(par_result),
    )
    logger.info(
        f"n_k={result.n_k}: sequential {seq_seconds:.3f}s, "
        f"parallel {par_seconds:.3f}s, speed-up x{result.speedup:.1f}, "
        f"max|diff|={result.max_abs_diff:.2e}"
    )
    return result


def run_benchmarks(
    sizes: Sequence[int],
    lower_bound: float,
    upper_bound: float,
    params: ModelParameters,
    parallel_solver: Solver,
) -> List[BenchmarkResult]:
    return [
        run_benchmark(GridBuilder.build(lower_bound, upper_bound, n), params, parallel_solver)
        for n in sizes
    ]


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the benchmark CLI."""
    parser = argparse.ArgumentParser(description="Time sequential vs. parallel VFI")
    parser.add_argument('--sizes', type=int, nargs='+', default=list(DEFAULT_SIZES),
                        help="Grid sizes to benchmark.")
    parser.add_argument('--output', type=str, default=None,
                        help="Write the timings to this JSON file.")
    add_run_arguments(parser)
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    configure_devices(args.gpu, args.cpu)

    try:
        grid_cfg, params, solver_cfg = resolve_run_config(args)
        parallel_solver = ParallelSolver.from_config(solver_cfg)
        results = run_benchmarks(
            args.sizes, grid_cfg.lower_bound, grid_cfg.upper_bound, params, parallel_solver
        )
    except Exception as e:
        logger.error(f"Benchmark failed: {e}", exc_info=True)
        sys.exit(1)

    if args.output:
        save_json_file(
            {
                'params': dataclasses.asdict(params),
                'backend': solver_cfg.backend,
                'results': [r.to_dict() for r in results],
            },
            args.output,
        )


if __name__ == "__main__":
    main()
