"""
Ядро BSP разбиения: геометрия, узлы, построение и изменение дерева
"""
from .errors import (
    BSPError,
    InvalidSolidError,
    IntersectingSolidsError,
    NoSeparatingPlaneError,
    TreeInvariantError
)
from .geometry import (
    Side,
    Plane,
    ConvexSolid,
    classify,
    classify_solid,
    contains,
    is_valid,
    interiors_disjoint,
    convex_hull,
    make_box,
    to_exact
)
from .registry import SolidRegistry
from .structures import Node, InternalNode, LeafNode, BucketNode
from .builder import BSPBuilder, split, try_split, pair_node
from .tree import BSPTree

__all__ = [
    'BSPError', 'InvalidSolidError', 'IntersectingSolidsError',
    'NoSeparatingPlaneError', 'TreeInvariantError',
    'Side', 'Plane', 'ConvexSolid',
    'classify', 'classify_solid', 'contains', 'is_valid', 'interiors_disjoint',
    'convex_hull', 'make_box', 'to_exact',
    'SolidRegistry',
    'Node', 'InternalNode', 'LeafNode', 'BucketNode',
    'BSPBuilder', 'split', 'try_split', 'pair_node',
    'BSPTree'
]
