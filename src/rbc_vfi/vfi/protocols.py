"""Protocol definitions for VFI solver components.

Defines ``typing.Protocol`` classes that formalise the interfaces
between the engine, the solvers and their callers.  Contains no
implementation, only type signatures.

In tests, any protocol can be satisfied by a lightweight stub.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

from rbc_vfi.core.types import Array, ArrayLike

if TYPE_CHECKING:
    from rbc_vfi.config.model_params import ModelParameters
    from rbc_vfi.vfi.grids.grid_builder import Grid
    from rbc_vfi.vfi.value_function import ValueFunction

# One Bellman sweep: previous values in, complete new values out.
StepFunction = Callable[[Array], Array]


@runtime_checkable
class Solver(Protocol):
    """Interface shared by the sequential and parallel solvers."""

    name: str

    def solve(
        self,
        grid: "Grid",
        params: "ModelParameters",
        v_init: Optional[ArrayLike] = None,
    ) -> "ValueFunction":
        """Run value function iteration on *grid*."""
        ...
