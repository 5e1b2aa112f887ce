# rbc_vfi/vfi/grids/__init__.py
"""
Grid management for VFI models.

This package provides the immutable capital grid and its builder.
"""

from rbc_vfi.vfi.grids.grid_builder import Grid, GridBuilder

__all__ = [
    'Grid',
    'GridBuilder',
]
