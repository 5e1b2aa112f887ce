"""Human-readable rendering of solver output."""

from rbc_vfi.display.matprint import format_matrix, matprint

__all__ = ["format_matrix", "matprint"]
