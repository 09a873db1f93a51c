import itertools
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set
import logging

import numpy as np

from .errors import IntersectingSolidsError, InvalidSolidError, NoSeparatingPlaneError
from .geometry import ConvexSolid, Plane, Side, classify_solid, interiors_disjoint
from .structures import BucketNode, InternalNode, LeafNode, Node
from ..config import BSPConfig

logger = logging.getLogger(__name__)


@dataclass
class SplitCandidate:
    """Кандидат на разбиение множества тел гранью одного из них"""
    plane: Plane
    left: List[ConvexSolid] = field(default_factory=list)  # Есть вершины на отрицательной стороне
    right: List[ConvexSolid] = field(default_factory=list)  # Есть вершины на положительной стороне
    boundary: Set[ConvexSolid] = field(default_factory=set)  # Есть вершины на плоскости

    def is_valid(self, total: int) -> bool:
        """Обе группы непусты и строго меньше исходного множества"""
        return 0 < len(self.left) < total and 0 < len(self.right) < total


def _same_side(first: Side, second: Side) -> bool:
    """Классификации совпадают с точностью до флага BOUNDARY"""
    return (first == second
            or first == second | Side.BOUNDARY
            or second == first | Side.BOUNDARY)


def _split_by_faces(owner: ConvexSolid, other: ConvexSolid) -> Optional[InternalNode]:
    for plane in owner.planes:
        owner_side = classify_solid(plane, owner)
        other_side = classify_solid(plane, other)
        if _same_side(owner_side, other_side) or other_side.spans:
            continue

        boundary = {owner}
        if other_side & Side.BOUNDARY:
            boundary.add(other)

        if other_side & Side.NEGATIVE:
            return InternalNode(plane, LeafNode(other), LeafNode(owner), boundary)
        if other_side & Side.POSITIVE:
            return InternalNode(plane, LeafNode(owner), LeafNode(other), boundary)
    return None


def try_split(a: ConvexSolid, b: ConvexSolid) -> Optional[InternalNode]:
    """
    Разделение двух тел одной из их граней

    Сначала перебираются грани a, затем грани b.

    Returns:
        Внутренний узел с двумя листьями или None, если ни одна грань
        не разделяет тела (тела пересекаются)
    """
    node = _split_by_faces(a, b)
    if node is None:
        node = _split_by_faces(b, a)
    if node is not None:
        logger.debug(f"[Split] #{a.id} | #{b.id} by {node.plane!r}")
    return node


def split(a: ConvexSolid, b: ConvexSolid) -> InternalNode:
    """
    То же, что try_split, но с исключением вместо None

    Raises:
        IntersectingSolidsError: Ни одна грань a или b их не разделяет
    """
    node = try_split(a, b)
    if node is None:
        raise IntersectingSolidsError(a, b)
    return node


def check_disjoint(solids: Iterable[ConvexSolid]) -> None:
    """
    Raises:
        IntersectingSolidsError: Первая пара тел с пересекающимися внутренностями
    """
    for a, b in itertools.combinations(solids, 2):
        if not interiors_disjoint(a, b):
            raise IntersectingSolidsError(a, b)


def pair_node(a: ConvexSolid, b: ConvexSolid, policy: str = 'error') -> Node:
    """
    Поддерево для двух тел

    Если ни одна грань не разделяет тела, точная проверка отличает
    пересечение от непересекающихся тел, которые грани не делят.

    Args:
        a, b: Тела (грани a перебираются первыми)
        policy: no_separator_policy из BSPConfig

    Raises:
        IntersectingSolidsError: Тела пересекаются
        NoSeparatingPlaneError: Тела не пересекаются, ни одна грань их
            не делит, политика 'error'
    """
    node = try_split(a, b)
    if node is not None:
        return node

    check_disjoint((a, b))
    if policy != 'bucket':
        raise NoSeparatingPlaneError((a, b))

    logger.warning(f"No face plane separates #{a.id} and #{b.id}, storing them in a bucket")
    return BucketNode((a, b))


class BSPBuilder:
    """Построитель BSP дерева по множеству попарно непересекающихся тел"""

    def __init__(self, config: Optional[BSPConfig] = None):
        """
        Args:
            config: Конфигурация (по умолчанию BSPConfig())
        """
        self.config = config if config is not None else BSPConfig()
        self.rng = np.random.default_rng(self.config.random_seed)

        # Статистика построения
        self.stats = {
            'build_time': 0.0,
            'nodes_created': 0,
            'splits_performed': 0,
            'fallbacks_used': 0
        }

    def build(self, solids: Iterable[ConvexSolid]) -> Optional[Node]:
        """
        Построение BSP дерева

        Args:
            solids: Попарно непересекающиеся выпуклые тела

        Returns:
            Корневой узел или None для пустого входа

        Raises:
            InvalidSolidError: Вырожденное тело (если config.validate_solids)
            IntersectingSolidsError: Пара тел не разделяется ни одной гранью
            NoSeparatingPlaneError: Политика 'error' и нет разделяющей грани
        """
        start_time = time.perf_counter()

        # Дубликаты по идентификатору отбрасываются, порядок сохраняется
        solids = list(dict.fromkeys(solids))

        if self.config.validate_solids:
            invalid = [solid for solid in solids if not solid.is_valid()]
            if invalid:
                raise InvalidSolidError(
                    f"Invalid solids: {', '.join(f'#{s.id}' for s in invalid)}"
                )

        if self.config.shuffle_input and len(solids) > 1:
            order = self.rng.permutation(len(solids))
            solids = [solids[i] for i in order]

        logger.info(f"Building BSP tree for {len(solids)} solids")

        self.stats['nodes_created'] = 0
        self.stats['splits_performed'] = 0
        self.stats['fallbacks_used'] = 0
        root = self._create_node(solids)

        self.stats['build_time'] = time.perf_counter() - start_time

        if root is not None and self.config.log_tree_stats:
            tree_stats = root.get_stats()
            logger.info(
                f"BSP tree built in {self.stats['build_time']:.3f}s: "
                f"{tree_stats['node_count']} nodes, "
                f"{tree_stats['leaf_count']} leaves, "
                f"depth={tree_stats['depth']}"
            )

        return root

    def _create_node(self, solids: List[ConvexSolid]) -> Optional[Node]:
        """
        Рекурсивное построение поддерева

        Args:
            solids: Тела текущей ячейки

        Returns:
            Корень поддерева (None для пустого множества)
        """
        n = len(solids)
        if n == 0:
            return None

        if n == 1:
            self.stats['nodes_created'] += 1
            return LeafNode(solids[0])

        if n == 2:
            node = pair_node(solids[0], solids[1], self.config.no_separator_policy)
            self.stats['nodes_created'] += node.node_count()
            if isinstance(node, BucketNode):
                self.stats['fallbacks_used'] += 1
            else:
                self.stats['splits_performed'] += 1
            return node

        candidate = self._find_divider(solids)
        if candidate is None:
            return self._fallback(solids)

        logger.debug(
            f"[Divider] {candidate.plane!r}: "
            f"left={len(candidate.left)}, right={len(candidate.right)}, "
            f"boundary={len(candidate.boundary)}"
        )

        left = self._create_node(candidate.left)
        right = self._create_node(candidate.right)

        self.stats['nodes_created'] += 1
        self.stats['splits_performed'] += 1
        return InternalNode(candidate.plane, left, right, candidate.boundary)

    def _find_divider(self, solids: List[ConvexSolid]) -> Optional[SplitCandidate]:
        """
        Первая грань, делящая множество нетривиально

        Внешний цикл идёт по телам, внутренний по их граням; стоимость
        разбиения не оценивается.
        """
        n = len(solids)
        for owner in solids:
            for plane in owner.planes:
                candidate = SplitCandidate(plane)
                for solid in solids:
                    side = classify_solid(plane, solid)
                    if side & Side.NEGATIVE:
                        candidate.left.append(solid)
                    if side & Side.POSITIVE:
                        candidate.right.append(solid)
                    if side & Side.BOUNDARY:
                        candidate.boundary.add(solid)

                if candidate.is_valid(n):
                    return candidate
        return None

    def _fallback(self, solids: List[ConvexSolid]) -> Node:
        """
        Поведение, когда ни одна грань не делит множество

        Такое возможно, только если ни одна грань не разделяет ни одну
        пару тел: разделяющая пару грань сама была бы делителем.
        """
        check_disjoint(solids)
        if self.config.no_separator_policy != 'bucket':
            raise NoSeparatingPlaneError(solids)

        logger.warning(f"No face plane partitions {len(solids)} solids, storing them in a bucket")
        self.stats['fallbacks_used'] += 1
        self.stats['nodes_created'] += 1
        return BucketNode(solids)
