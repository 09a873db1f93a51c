"""
BSP дерево: поиск точки, вставка и удаление тел
"""
from __future__ import annotations
import logging
import sys
from typing import Iterable, Iterator, List, Optional, Set, TextIO, Tuple, Union

from .builder import BSPBuilder, check_disjoint, pair_node
from .errors import TreeInvariantError
from .geometry import ConvexSolid, Side, classify, classify_solid, contains, is_valid, to_exact
from .structures import BucketNode, InternalNode, LeafNode, Node
from ..config import BSPConfig

logger = logging.getLogger(__name__)

Leaf = Union[LeafNode, BucketNode]


class BSPTree:
    """
    BSP дерево над попарно непересекающимися выпуклыми телами

    Тело, пересекающее плоскость внутреннего узла, хранится листом в каждом
    из полупространств, которых оно касается. Тело, касающееся плоскости,
    записывается в boundary этого узла. Тела, которые не делит ни одна их
    грань, при политике 'bucket' хранятся вместе в BucketNode.

    Attributes:
        root: Корневой узел (None для пустого дерева)
        config: Конфигурация
        build_stats: Статистика последнего построения
    """

    def __init__(self,
                 solids: Optional[Iterable[ConvexSolid]] = None,
                 config: Optional[BSPConfig] = None):
        self.config = config if config is not None else BSPConfig()
        self.root: Optional[Node] = None
        self.build_stats: dict = {}
        if solids is not None:
            builder = BSPBuilder(self.config)
            self.root = builder.build(solids)
            self.build_stats = dict(builder.stats)

    @classmethod
    def from_solids(cls, solids: Iterable[ConvexSolid],
                    config: Optional[BSPConfig] = None) -> 'BSPTree':
        return cls(solids, config)

    # ============ Состояние ============

    @property
    def empty(self) -> bool:
        return self.root is None

    def clear(self) -> None:
        """Удаление всех узлов"""
        self.root = None

    def __iter__(self) -> Iterator[Leaf]:
        if self.root is not None:
            yield from self.root.iter_leaves()

    def solids(self) -> Set[ConvexSolid]:
        """Различные тела, хранящиеся в листьях"""
        return {solid for leaf in self for solid in leaf.solids}

    def __len__(self) -> int:
        return len(self.solids())

    def __contains__(self, solid: ConvexSolid) -> bool:
        return any(solid in leaf.solids for leaf in self)

    def get_stats(self) -> dict:
        if self.root is None:
            return {
                'depth': 0,
                'node_count': 0,
                'leaf_count': 0,
                'bucket_count': 0,
                'solid_count': 0,
                'max_boundary_size': 0,
                'mean_boundary_size': 0.0,
            }
        return self.root.get_stats()

    # ============ Поиск ============

    def locate(self, point) -> Optional[ConvexSolid]:
        """
        Тело, содержащее точку

        Спуск идёт по сторонам плоскостей; если точка лежит на плоскости узла,
        спуск останавливается и проверяются тела из boundary этого узла.
        Тело, пересекающее плоскость без вершин на ней, в boundary не попадает,
        поэтому точка на такой плоскости внутри него не находится.

        Args:
            point: Точка (x, y, z)

        Returns:
            Найденное тело или None (точка вне всех тел)
        """
        if self.root is None:
            return None

        point = to_exact(point)
        if point.shape != (3,):
            raise ValueError(f"Point must have 3 coordinates, got shape {point.shape}")

        node = self.root
        while not node.is_leaf():
            side = classify(node.plane, point)
            if side == Side.NEGATIVE:
                node = node.left
            elif side == Side.POSITIVE:
                node = node.right
            else:
                return self._first_containing(sorted(node.boundary), point)

        return self._first_containing(node.solids, point)

    @staticmethod
    def _first_containing(solids: Iterable[ConvexSolid], point) -> Optional[ConvexSolid]:
        for solid in solids:
            if contains(solid, point):
                return solid
        return None

    # ============ Вставка ============

    def insert(self, solid: ConvexSolid) -> bool:
        """
        Вставка тела

        Вставка транзакционна: сначала без изменений дерева собираются все
        обновления boundary и заменяющие поддеревья, и только затем они
        применяются.

        Returns:
            False для вырожденного тела (дерево не меняется), иначе True

        Raises:
            IntersectingSolidsError: Тело пересекается с одним из тел дерева
            NoSeparatingPlaneError: Грани не отделяют тело от соседа по листу
                при политике 'error'
            В обоих случаях дерево не меняется.
        """
        if not is_valid(solid):
            logger.warning(f"Rejected invalid solid #{solid.id}")
            return False

        if self.root is None:
            self.root = LeafNode(solid)
        else:
            boundary_nodes: List[InternalNode] = []
            replacements: List[Tuple[Node, Node]] = []
            self._plan_insert(self.root, solid, boundary_nodes, replacements)

            for node in boundary_nodes:
                node.boundary.add(solid)
            for old, new in replacements:
                self._replace(old, new)

        logger.debug(f"Inserted solid #{solid.id}")
        return True

    def _plan_insert(self,
                     node: Node,
                     solid: ConvexSolid,
                     boundary_nodes: List[InternalNode],
                     replacements: List[Tuple[Node, Node]]) -> None:
        """
        Сбор изменений для вставки в поддерево node

        Тело, пересекающее плоскость, вставляется в оба поддерева; вставка
        успешна, только если успешны обе.
        """
        while not node.is_leaf():
            side = classify_solid(node.plane, solid)
            if side & Side.BOUNDARY:
                boundary_nodes.append(node)

            if side.spans:
                self._plan_insert(node.left, solid, boundary_nodes, replacements)
                self._plan_insert(node.right, solid, boundary_nodes, replacements)
                return

            if side & Side.NEGATIVE:
                node = node.left
            elif side & Side.POSITIVE:
                node = node.right
            else:
                return

        if isinstance(node, BucketNode):
            check_disjoint([solid] + node.solids)
            replacements.append((node, BucketNode(node.solids + [solid])))
            return

        # Единственный лист-корень делится гранями старого тела первыми
        if node.parent is None:
            first, second = node.solid, solid
        else:
            first, second = solid, node.solid
        replacements.append((node, pair_node(first, second, self.config.no_separator_policy)))

    def _replace(self, old: Node, new: Node) -> None:
        """Замена узла old на new в слоте родителя или в корне"""
        parent = old.parent
        if parent is None:
            new.parent = None
            self.root = new
        else:
            parent.replace_child(old, new)

    # ============ Удаление ============

    def remove(self, solid: ConvexSolid) -> bool:
        """
        Удаление тела по идентификатору

        Удаление строгое: тело удаляется, только если каждый путь, на который
        ведёт его классификация, заканчивается листом с этим телом.
        Иначе дерево не меняется.

        Returns:
            True, если тело было удалено
        """
        if self.root is None:
            return False

        visited: List[InternalNode] = []
        leaves: List[Leaf] = []
        if not self._find_leaves(self.root, solid, visited, leaves):
            logger.debug(f"Solid #{solid.id} not found")
            return False

        for node in visited:
            node.boundary.discard(solid)
        for leaf in leaves:
            if isinstance(leaf, BucketNode):
                self._shrink_bucket(leaf, solid)
            else:
                self._detach(leaf)

        logger.debug(f"Removed solid #{solid.id} ({len(leaves)} leaves)")
        return True

    def _find_leaves(self,
                     node: Node,
                     solid: ConvexSolid,
                     visited: List[InternalNode],
                     leaves: List[Leaf]) -> bool:
        while not node.is_leaf():
            visited.append(node)
            side = classify_solid(node.plane, solid)

            if side.spans:
                return (self._find_leaves(node.left, solid, visited, leaves)
                        and self._find_leaves(node.right, solid, visited, leaves))

            if side & Side.NEGATIVE:
                node = node.left
            elif side & Side.POSITIVE:
                node = node.right
            else:
                return False

        if solid not in node.solids:
            return False
        leaves.append(node)
        return True

    def _shrink_bucket(self, bucket: BucketNode, solid: ConvexSolid) -> None:
        rest = [member for member in bucket.solids if member != solid]
        self._replace(bucket, LeafNode(rest[0]) if len(rest) == 1 else BucketNode(rest))

    def _detach(self, leaf: LeafNode) -> None:
        """Замена родителя листа на его соседа"""
        parent = leaf.parent
        if parent is None:
            if leaf is not self.root:
                raise TreeInvariantError(f"Detached {leaf!r} is not the root")
            self.root = None
            return

        sibling = parent.sibling_of(leaf)
        grandparent = parent.parent
        if grandparent is None:
            sibling.parent = None
            self.root = sibling
        else:
            grandparent.replace_child(parent, sibling)
        leaf.parent = None

    # ============ Печать ============

    def format(self) -> str:
        """
        Прямой обход: id тела каждого листа с отступом, равным глубине

        Тела корзины печатаются подряд с отступом корзины.
        """
        lines: List[str] = []
        if self.root is not None:
            self._format_node(self.root, 0, lines)
        return "\n".join(lines)

    def _format_node(self, node: Node, depth: int, lines: List[str]) -> None:
        if node.is_leaf():
            for solid in node.solids:
                lines.append(f"{self.config.indent_char * depth}{solid.id}")
            return
        self._format_node(node.left, depth + 1, lines)
        self._format_node(node.right, depth + 1, lines)

    def print(self, stream: Optional[TextIO] = None) -> None:
        stream = stream if stream is not None else sys.stdout
        text = self.format()
        if text:
            stream.write(text + "\n")

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        stats = self.get_stats()
        return f"BSPTree(solids={stats['solid_count']}, nodes={stats['node_count']})"

    # ============ Проверка ============

    def check_invariants(self) -> None:
        """
        Проверка инвариантов разделения и связей родитель-потомок

        Raises:
            TreeInvariantError: Описание первого найденного нарушения
        """
        if self.root is None:
            return
        if self.root.parent is not None:
            raise TreeInvariantError("Root has a parent")
        self._check_node(self.root, [])

    def _check_node(self, node: Node, path: List[Tuple[InternalNode, Side]]) -> None:
        if node.is_leaf():
            if isinstance(node, BucketNode) and len(node.solids) < 2:
                raise TreeInvariantError(f"{node!r} holds fewer than two solids")
            for solid in node.solids:
                self._check_path(solid, path)
            return

        for child, branch in ((node.left, Side.NEGATIVE), (node.right, Side.POSITIVE)):
            if child.parent is not node:
                raise TreeInvariantError(f"{child!r} has a wrong parent link")
            self._check_node(child, path + [(node, branch)])

    @staticmethod
    def _check_path(solid: ConvexSolid, path: List[Tuple[InternalNode, Side]]) -> None:
        for ancestor, branch in path:
            side = classify_solid(ancestor.plane, solid)
            if not side & branch:
                raise TreeInvariantError(
                    f"Solid #{solid.id} stored on the {branch.name} side "
                    f"of {ancestor.plane!r} but classified as {side!r}"
                )
            if side & Side.BOUNDARY and solid not in ancestor.boundary:
                raise TreeInvariantError(
                    f"Solid #{solid.id} touches {ancestor.plane!r} "
                    f"but is missing from its boundary set"
                )
