# rbc_vfi/core/errors.py
"""
Exception hierarchy for grid construction and value function iteration.

Every error derives from :class:`VFIError` and from the closest builtin,
so callers that only know ``ValueError`` or ``MemoryError`` still catch
them.  None of these errors is retried internally: the algorithm is
deterministic and a failed ``solve`` call returns no partial result.
"""


class VFIError(Exception):
    """Base class for all errors raised by ``rbc_vfi``."""


class InvalidRangeError(VFIError, ValueError):
    """Grid bounds or size do not describe a valid capital grid.

    Raised when ``upper_bound <= lower_bound``, ``size < 2``, the lower
    bound is not strictly positive, or a bound is not finite.
    """


class DomainError(VFIError, ArithmeticError):
    """Logarithm of a non-positive feasible resource was attempted.

    The inner maximisation guards every logarithm with
    ``feasible > 0``, so this signals a broken invariant (for example an
    unsorted grid feeding the early-exit scan).
    """


class ResourceExhaustedError(VFIError, MemoryError):
    """The data-parallel substrate could not hold or dispatch a sweep.

    Raised by the parallel solver when the previous and next value arrays
    do not fit in the memory budget, or when the device reports an
    out-of-memory condition.
    """
