"""Solid and tree factories shared by the unit tests."""

import logging

from bsp_partition.config import BSPConfig
from bsp_partition.core.geometry import ConvexSolid, make_box
from bsp_partition.core.registry import SolidRegistry
from bsp_partition.core.tree import BSPTree


def make_lattice(nx=2, ny=2, nz=2):
    """Registry plus unit cubes of an nx*ny*nz lattice, in identity order."""
    registry = SolidRegistry()
    cubes = registry.lattice(nx, ny, nz)
    return registry, cubes


def make_tree(solids, **config_fields):
    """Build a tree over solids with a BSPConfig overriding config_fields."""
    return BSPTree(solids, BSPConfig(**config_fields))


def flat_solid(solid_id=99):
    """A degenerate solid: the unit square at z=0 bounded by unit box planes."""
    box = make_box((0, 0, 0), 1, solid_id)
    square = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0)]
    return ConvexSolid(solid_id, square, box.planes)


def boundary_snapshot(tree):
    """Pre-order list of (plane, sorted boundary ids) for every internal node."""
    if tree.root is None:
        return []
    return [
        (node.plane, sorted(solid.id for solid in node.boundary))
        for node in tree.root.iter_internal()
    ]


def close_root_handlers():
    """Drop handlers the CLI attached to the root logger."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def crossed_tetrahedra(registry):
    """Two disjoint tetrahedra that no face plane of either separates.

    The lower one has its top edge along x at z=0, the upper one its bottom
    edge along y at z=1/10. Only the plane z=1/20 between the two edges
    separates them.
    """
    lower = registry.hull([(-1, 0, 0), (1, 0, 0), (0, 1, -1), (0, -1, -1)])
    upper = registry.hull([(0, -1, "1/10"), (0, 1, "1/10"), (1, 0, "11/10"), (-1, 0, "11/10")])
    return lower, upper
