# rbc_vfi/display/matprint.py
"""
Truncated pretty-printing for value arrays and matrices.

Large grids are shown as a window of at most ``max_rows x max_cols``
cells, followed by an ellipsis row / column when the data was trimmed.

Example:
    >>> import numpy as np
    >>> from rbc_vfi.display.matprint import matprint
    >>> matprint(np.arange(1000.0))
    float64 1-d showing [1:8/1000, 1:1]
    [
        0.000
        1.000
        2.000
        3.000
        4.000
        5.000
        6.000
        7.0
        ...
    ];

Cells are tab-indented in the real output.
"""

import sys
from typing import Any, List, Optional, TextIO, Tuple

import numpy as np

ELLIPSIS = "..."
BOUNDARY_POLICIES = ("legacy", "consistent")


def _as_table(data: Any) -> Tuple[np.ndarray, str]:
    """Return *data* as a 2-D array plus its type label."""
    arr = np.asarray(data)
    if arr.ndim > 2:
        raise ValueError(f"Only 1-D and 2-D data can be printed, got {arr.ndim}-D.")
    label = f"{arr.dtype} {arr.ndim}-d"
    if arr.ndim == 0:
        arr = arr.reshape(1, 1)
    elif arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr, label


def _raw(cell: Any) -> str:
    if isinstance(cell, (float, np.floating)):
        return repr(float(cell))
    if isinstance(cell, (bool, np.bool_)):
        return str(bool(cell))
    if isinstance(cell, (int, np.integer)):
        return str(int(cell))
    return str(cell)


def _fixed(cell: Any) -> str:
    if isinstance(cell, str):
        return cell
    try:
        return "%.3f" % cell
    except TypeError:
        return _raw(cell)


def format_header(n_rows: int, n_cols: int, label: str, max_rows: int, max_cols: int) -> str:
    trim_rows = n_rows > max_rows
    trim_cols = n_cols > max_cols

    header = label + " "
    if trim_rows or trim_cols:
        header += "showing "
    header += f"[1:{min(n_rows, max_rows)}"
    if trim_rows:
        header += f"/{n_rows}"
    header += f", 1:{min(n_cols, max_cols)}"
    if trim_cols:
        header += f"/{n_cols}"
    return header + "]"


def format_matrix(
    data: Any,
    max_rows: int = 8,
    max_cols: int = 8,
    boundary_policy: str = "legacy",
) -> str:
    """
    Render *data* as a truncated, tab-separated table.

    At most ``max_rows + 1`` rows and ``max_cols + 1`` columns are shown;
    when the data is larger, the extra row / column holds ``...``.

    Args:
        data: 1-D or 2-D numeric data. 1-D data is shown as a column.
        max_rows: Row display budget.
        max_cols: Column display budget.
        boundary_policy: ``"legacy"`` formats a cell with three decimals
            only when its 1-based row is below ``max_rows`` and its column
            below ``max_cols``, so the last row / column before the budget
            prints at full precision. ``"consistent"`` formats every
            numeric cell with three decimals.

    Returns:
        The rendered text, without a trailing newline.

    Raises:
        ValueError: On budgets below 1, an unknown policy, or data with
            more than two dimensions.
    """
    if max_rows < 1 or max_cols < 1:
        raise ValueError(
            f"Display budget must be at least 1x1, got {max_rows}x{max_cols}."
        )
    if boundary_policy not in BOUNDARY_POLICIES:
        raise ValueError(
            f"boundary_policy must be one of {BOUNDARY_POLICIES}, "
            f"got {boundary_policy!r}."
        )

    arr, label = _as_table(data)
    n_rows, n_cols = arr.shape
    trim_rows = n_rows > max_rows
    trim_cols = n_cols > max_cols
    shown_rows = min(n_rows, max_rows + 1)
    shown_cols = min(n_cols, max_cols + 1)

    lines: List[str] = [format_header(n_rows, n_cols, label, max_rows, max_cols), "["]
    for i in range(1, shown_rows + 1):
        if i == shown_rows and trim_rows:
            cells: List[Any] = [ELLIPSIS] * shown_cols
        elif shown_cols == 0:
            cells = []
        else:
            row = arr[i - 1]
            cells = list(row[: shown_cols - 1])
            cells.append(ELLIPSIS if trim_cols else row[shown_cols - 1])

        rendered = []
        for j, cell in enumerate(cells, start=1):
            if boundary_policy == "consistent":
                rendered.append(_fixed(cell))
            elif i < max_rows and j < max_cols:
                rendered.append(_fixed(cell))
            else:
                rendered.append(_raw(cell))
        lines.append("".join("\t" + text for text in rendered))
    lines.append("];")
    return "\n".join(lines)


def matprint(
    data: Any,
    max_rows: int = 8,
    max_cols: int = 8,
    boundary_policy: str = "legacy",
    file: Optional[TextIO] = None,
) -> None:
    """Print :func:`format_matrix` output to *file* (stdout by default)."""
    print(
        format_matrix(data, max_rows, max_cols, boundary_policy),
        file=file if file is not None else sys.stdout,
    )
