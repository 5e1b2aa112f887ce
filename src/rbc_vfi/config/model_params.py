# rbc_vfi/config/model_params.py
"""
Model parameter definitions for the deterministic RBC model.

This module defines the parameters that govern a single VFI solve.
Parameters are immutable after initialization to prevent accidental
modification while a solver is running.

Example:
    >>> from rbc_vfi.config.model_params import ModelParameters
    >>> params = ModelParameters(alpha=0.5, beta=0.7, max_iterations=100)
    >>> print(f"Discount factor: {params.beta}")
"""

from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelParameters:
    """
    Immutable container for the parameters of one VFI solve.

    The frozen=True ensures the same parameter set is seen by every
    per-index task of every sweep.

    Attributes:
        alpha: Capital productivity curvature, must be in (0, 1).
        beta: Discount factor, must be in (0, 1).
        max_iterations: Number of Bellman sweeps to perform.
        tolerance: Sup-norm tolerance between sweeps. Only used as a
            stopping rule when ``early_stopping`` is set.
        early_stopping: Stop as soon as ``max|V_next - V_prev| < tolerance``.
            Off by default, which runs exactly ``max_iterations`` sweeps.

    Raises:
        ValueError: If any parameter is outside its valid range.
    """

    alpha: float = 0.5
    beta: float = 0.7
    max_iterations: int = 100
    tolerance: float = 1e-6
    early_stopping: bool = False

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        self._validate_open_unit_interval("alpha", self.alpha)
        self._validate_open_unit_interval("beta", self.beta)
        self._validate_iteration_settings()

    @staticmethod
    def _validate_open_unit_interval(name: str, value: float) -> None:
        if not (0 < value < 1):
            raise ValueError(f"{name} must be in (0, 1), got {value}")

    def _validate_iteration_settings(self) -> None:
        if isinstance(self.max_iterations, bool) or int(self.max_iterations) != self.max_iterations:
            raise ValueError(
                f"max_iterations must be an integer, got {self.max_iterations!r}"
            )
        if self.max_iterations <= 0:
            raise ValueError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")


def default_parameters() -> ModelParameters:
    """Return the reference scenario: alpha=0.5, beta=0.7, 100 sweeps."""
    return ModelParameters()
