"""Core definitions shared by every solver.

Provide the global numeric precision, shared type aliases and the error
taxonomy raised by grid construction and the VFI solvers.
"""

from rbc_vfi.core.types import TENSORFLOW_DTYPE, NUMPY_DTYPE, Tensor, Array
from rbc_vfi.core.errors import (
    VFIError,
    InvalidRangeError,
    DomainError,
    ResourceExhaustedError,
)
