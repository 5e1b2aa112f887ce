# rbc_vfi/cli/common.py
"""
Shared helpers for the command-line entry points.

Argument groups for the grid / model / solver settings, merging of CLI
overrides on top of a JSON run configuration, and device pinning.
"""

import argparse
import dataclasses
import logging
import os
from typing import Optional, Tuple

from rbc_vfi.config.model_params import ModelParameters
from rbc_vfi.config.vfi_config import (
    SUPPORTED_BACKENDS,
    GridConfig,
    SolverConfig,
    load_run_config,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )


def add_run_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the grid / model / solver flags shared by every CLI."""
    parser.add_argument('--config', type=str, default=None,
                        help="JSON run configuration with 'grid', 'model' and 'solver' sections.")
    parser.add_argument('--lower', type=float, default=None, help="Grid lower bound.")
    parser.add_argument('--upper', type=float, default=None, help="Grid upper bound.")
    parser.add_argument('--alpha', type=float, default=None, help="Capital curvature in (0, 1).")
    parser.add_argument('--beta', type=float, default=None, help="Discount factor in (0, 1).")
    parser.add_argument('--max-iter', dest='max_iter', type=int, default=None,
                        help="Number of Bellman sweeps.")
    parser.add_argument('--tol', type=float, default=None,
                        help="Sup-norm tolerance (used only with --early-stopping).")
    parser.add_argument('--early-stopping', dest='early_stopping', action='store_true',
                        help="Stop once successive sweeps differ by less than --tol.")
    parser.add_argument('--backend', type=str, default=None, choices=SUPPORTED_BACKENDS,
                        help="Parallel solver backend.")
    parser.add_argument('--workers', type=int, default=None,
                        help="Thread count for the 'threads' backend.")
    parser.add_argument('--chunk-size', dest='chunk_size', type=int, default=None,
                        help="Tile edge for the 'tensorflow' backend.")
    parser.add_argument('--gpu', type=int, default=None,
                        help="GPU device ID to use. If not set, uses TensorFlow's default placement.")
    parser.add_argument('--cpu', action='store_true',
                        help="Hide all GPUs from TensorFlow.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Log every sweep.")


def resolve_run_config(
    args: argparse.Namespace,
) -> Tuple[GridConfig, ModelParameters, SolverConfig]:
    """Load ``args.config`` (or defaults) and apply explicit CLI overrides."""
    if args.config is not None:
        logger.info(f"Loading run configuration from {args.config}...")
        grid_cfg, params, solver_cfg = load_run_config(args.config)
    else:
        grid_cfg, params, solver_cfg = GridConfig(), ModelParameters(), SolverConfig()

    grid_over = {
        'lower_bound': args.lower,
        'upper_bound': args.upper,
        'size': getattr(args, 'size', None),
    }
    model_over = {
        'alpha': args.alpha,
        'beta': args.beta,
        'max_iterations': args.max_iter,
        'tolerance': args.tol,
        'early_stopping': True if args.early_stopping else None,
    }
    solver_over = {
        'backend': args.backend,
        'n_workers': args.workers,
        'chunk_size': args.chunk_size,
    }
    grid_cfg = dataclasses.replace(grid_cfg, **{k: v for k, v in grid_over.items() if v is not None})
    params = dataclasses.replace(params, **{k: v for k, v in model_over.items() if v is not None})
    solver_cfg = dataclasses.replace(solver_cfg, **{k: v for k, v in solver_over.items() if v is not None})
    return grid_cfg, params, solver_cfg


def configure_devices(gpu_id: Optional[int], cpu_only: bool = False) -> None:
    """Pin this process to a single GPU, or hide every GPU."""
    if gpu_id is not None:
        os.environ['CUDA_VISIBLE_DEVICES'] = str(gpu_id)
        logger.info(f"GPU pinned to device {gpu_id}")
    if cpu_only:
        import tensorflow as tf

        tf.config.set_visible_devices([], 'GPU')
        logger.info("GPUs hidden; TensorFlow runs on CPU")
