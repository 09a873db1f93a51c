"""Test fixtures and utilities for BSP tree testing.

Organized into logical modules:
- builders: Solid and tree factories (make_lattice, make_tree, flat_solid, crossed_tetrahedra)
- assertions: Custom assertion functions (assert_tree_consistent, assert_locates)
"""

from .builders import (
    make_lattice,
    make_tree,
    flat_solid,
    crossed_tetrahedra,
    boundary_snapshot,
    close_root_handlers,
)
from .assertions import assert_tree_consistent, assert_locates

__all__ = [
    'make_lattice',
    'make_tree',
    'flat_solid',
    'crossed_tetrahedra',
    'boundary_snapshot',
    'close_root_handlers',
    'assert_tree_consistent',
    'assert_locates',
]
