# rbc_vfi/cli/solve_vfi.py
"""
Command-line interface for solving the RBC model using VFI.

Builds the capital grid, runs the chosen solver, prints a truncated view
of the value function and optionally persists the result.

Example:
    $ python -m rbc_vfi.cli.solve_vfi --solver sequential --size 200
    $ python -m rbc_vfi.cli.solve_vfi --solver parallel --backend threads --workers 4
    $ python -m rbc_vfi.cli.solve_vfi --config config/vfi.json --save out/vfi.npz
"""

import argparse
import logging
import sys
import time
from typing import Any, Dict, Optional, Sequence

from rbc_vfi.cli.common import (
    add_run_arguments,
    configure_devices,
    configure_logging,
    resolve_run_config,
)
from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.display.matprint import BOUNDARY_POLICIES, matprint
from rbc_vfi.io.artifacts import save_vfi_results
from rbc_vfi.vfi.grids.grid_builder import Grid
from rbc_vfi.vfi.parallel import make_solver
from rbc_vfi.vfi.policies import extract_policy
from rbc_vfi.vfi.value_function import ValueFunction

logger = logging.getLogger(__name__)


def build_result_dict(
    grid: Grid,
    result: ValueFunction,
    params: ModelParameters,
    solver_name: str,
    elapsed: float,
) -> Dict[str, Any]:
    """Package solver outputs into a serialisable dictionary."""
    policy_idx, policy_k = extract_policy(grid, result, params)
    return {
        # Value function and grid
        "V": result.values,
        "K": grid.points,
        # Policy (both discrete and continuous forms)
        "policy_idx": policy_idx,
        "policy_k_values": policy_k,
        "residuals": list(result.residuals),
        # Metadata
        "alpha": params.alpha,
        "beta": params.beta,
        "iterations": result.iterations,
        "converged": result.converged,
        "solver": solver_name,
        "elapsed_seconds": elapsed,
    }


def solve_model(args: argparse.Namespace) -> ValueFunction:
    """Orchestrate one solve from parsed arguments."""
    grid_cfg, params, solver_cfg = resolve_run_config(args)
    grid = Grid.from_config(grid_cfg)
    solver = make_solver(args.solver, solver_cfg)

    logger.info(
        f"Solving with {args.solver} solver, n_k = {grid.size}, "
        f"k in [{grid.lower_bound}, {grid.upper_bound}]..."
    )
    start = time.perf_counter()
    result = solver.solve(grid, params)
    elapsed = time.perf_counter() - start
    logger.info(
        f"{args.solver} solve finished in {elapsed:.3f}s "
        f"({result.iterations} iterations)"
    )

    matprint(
        result.values,
        max_rows=args.max_rows,
        max_cols=args.max_cols,
        boundary_policy=args.boundary_policy,
    )

    if args.save:
        res = build_result_dict(grid, result, params, args.solver, elapsed)
        save_vfi_results(res, args.save)
        logger.info(f"VFI Results saved to {args.save}")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve the RBC model via VFI")
    parser.add_argument(
        '--solver',
        type=str,
        default='parallel',
        choices=['sequential', 'parallel'],
        help="Solver to run."
    )
    parser.add_argument('--size', type=int, default=None, help="Number of grid points.")
    parser.add_argument('--save', type=str, default=None, help="Write results to this .npz file.")
    parser.add_argument('--max-rows', dest='max_rows', type=int, default=8)
    parser.add_argument('--max-cols', dest='max_cols', type=int, default=8)
    parser.add_argument(
        '--boundary-policy',
        dest='boundary_policy',
        type=str,
        default='legacy',
        choices=BOUNDARY_POLICIES,
        help="Formatting of the last displayed row/column."
    )
    add_run_arguments(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the VFI solver CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    configure_devices(args.gpu, args.cpu)

    try:
        solve_model(args)
    except Exception as e:
        logger.error(f"Solver failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
