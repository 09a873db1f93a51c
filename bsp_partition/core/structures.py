from __future__ import annotations
from typing import Iterable, Iterator, List, Optional, Tuple
import numpy as np

from .geometry import ConvexSolid, Plane


class Node:
    """
    Узел BSP дерева

    Attributes:
        parent: Родительский внутренний узел (None для корня)
    """

    def __init__(self, parent: Optional['InternalNode'] = None):
        self.parent = parent

    def is_leaf(self) -> bool:
        """Проверка, является ли узел листом"""
        raise NotImplementedError

    def depth(self) -> int:
        """Глубина поддерева с корнем в данном узле"""
        if self.is_leaf():
            return 0
        return 1 + max(self.left.depth(), self.right.depth())

    def leaf_count(self) -> int:
        """Количество листьев в поддереве"""
        if self.is_leaf():
            return 1
        return self.left.leaf_count() + self.right.leaf_count()

    def node_count(self) -> int:
        """Общее количество узлов в поддереве"""
        if self.is_leaf():
            return 1
        return 1 + self.left.node_count() + self.right.node_count()

    def iter_leaves(self) -> Iterator['LeafNode']:
        """Итератор по листьям слева направо"""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf():
                yield node
            else:
                stack.append(node.right)
                stack.append(node.left)

    def iter_internal(self) -> Iterator['InternalNode']:
        """Итератор по внутренним узлам в прямом порядке"""
        stack = [self]
        while stack:
            node = stack.pop()
            if not node.is_leaf():
                yield node
                stack.append(node.right)
                stack.append(node.left)

    def get_stats(self) -> dict:
        """Статистика поддерева"""
        boundary_sizes = [len(node.boundary) for node in self.iter_internal()]
        leaves = list(self.iter_leaves())
        solids = {solid for leaf in leaves for solid in leaf.solids}
        return {
            'depth': self.depth(),
            'node_count': self.node_count(),
            'leaf_count': len(leaves),
            'bucket_count': sum(1 for leaf in leaves if isinstance(leaf, BucketNode)),
            'solid_count': len(solids),
            'max_boundary_size': max(boundary_sizes) if boundary_sizes else 0,
            'mean_boundary_size': float(np.mean(boundary_sizes)) if boundary_sizes else 0.0,
        }


class InternalNode(Node):
    """
    Внутренний узел: разделяющая плоскость и два поддерева

    Attributes:
        plane: Разделяющая плоскость
        boundary: Тела, касающиеся плоскости
        left: Поддерево отрицательного полупространства
        right: Поддерево положительного полупространства
    """

    def __init__(self,
                 plane: Plane,
                 left: Node,
                 right: Node,
                 boundary: Iterable[ConvexSolid] = (),
                 parent: Optional['InternalNode'] = None):
        super().__init__(parent)
        self.plane = plane
        self.boundary = set(boundary)
        self._left = None
        self._right = None
        self.left = left
        self.right = right

    @property
    def left(self) -> Node:
        return self._left

    @left.setter
    def left(self, node: Node) -> None:
        node.parent = self
        self._left = node

    @property
    def right(self) -> Node:
        return self._right

    @right.setter
    def right(self, node: Node) -> None:
        node.parent = self
        self._right = node

    @property
    def children(self) -> Tuple[Node, Node]:
        return self._left, self._right

    def is_leaf(self) -> bool:
        return False

    def sibling_of(self, child: Node) -> Node:
        if child is self._left:
            return self._right
        if child is self._right:
            return self._left
        raise ValueError(f"{child!r} is not a child of {self!r}")

    def replace_child(self, old: Node, new: Node) -> None:
        """Замена потомка old на new в том же слоте"""
        if old is self._left:
            self.left = new
        elif old is self._right:
            self.right = new
        else:
            raise ValueError(f"{old!r} is not a child of {self!r}")
        if old.parent is self:
            old.parent = None

    def __repr__(self) -> str:
        return f"InternalNode({self.plane!r}, boundary={sorted(s.id for s in self.boundary)})"


class LeafNode(Node):
    """Лист: ровно одно тело"""

    def __init__(self, solid: ConvexSolid, parent: Optional[InternalNode] = None):
        super().__init__(parent)
        self.solid = solid

    @property
    def solids(self) -> Tuple[ConvexSolid, ...]:
        return (self.solid,)

    def is_leaf(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"LeafNode(#{self.solid.id})"


class BucketNode(Node):
    """
    Лист-корзина: несколько тел, которые не делит ни одна их грань

    Тела попарно не пересекаются, но разделить их можно только плоскостью,
    не совпадающей ни с одной гранью. Поиск в корзине линейный.

    Attributes:
        solids: Тела корзины в порядке идентификаторов (не меньше двух)
    """

    def __init__(self, solids: Iterable[ConvexSolid], parent: Optional[InternalNode] = None):
        super().__init__(parent)
        self.solids: List[ConvexSolid] = sorted(set(solids))

    def is_leaf(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"BucketNode({[s.id for s in self.solids]})"
