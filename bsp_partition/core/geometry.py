"""
Точное геометрическое ядро: плоскости, выпуклые тела и предикаты ориентации

Все координаты хранятся как fractions.Fraction в numpy-массивах с dtype=object,
поэтому сравнения с нулём точные и не требуют эпсилонов.
"""
from __future__ import annotations
import enum
import functools
import itertools
import logging
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..config import MIN_HULL_POINTS
from .errors import InvalidSolidError

logger = logging.getLogger(__name__)


class Side(enum.IntFlag):
    """Положение точки или тела относительно ориентированной плоскости"""
    NEGATIVE = 1
    BOUNDARY = 2
    POSITIVE = 4

    @property
    def spans(self) -> bool:
        """Тело лежит по обе стороны плоскости"""
        return bool(self & Side.NEGATIVE) and bool(self & Side.POSITIVE)

    def strict(self) -> 'Side':
        """Классификация без флага BOUNDARY"""
        return self & (Side.NEGATIVE | Side.POSITIVE)


def _as_fraction(value) -> Fraction:
    if isinstance(value, Fraction):
        return value
    try:
        if isinstance(value, str):
            return Fraction(value.strip())
        return Fraction(value)
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Cannot convert {value!r} to an exact number: {e}")


_to_fraction = np.frompyfunc(_as_fraction, 1, 1)


def to_exact(values) -> np.ndarray:
    """
    Преобразование чисел в точные рациональные

    Args:
        values: Скаляр, последовательность или массив (int, float, str, Fraction)

    Returns:
        numpy-массив dtype=object из Fraction той же формы
    """
    arr = np.asarray(values, dtype=object)
    if arr.size == 0:
        return arr
    return np.asarray(_to_fraction(arr), dtype=object)


def _cross(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    return np.array([
        u[1] * v[2] - u[2] * v[1],
        u[2] * v[0] - u[0] * v[2],
        u[0] * v[1] - u[1] * v[0],
    ], dtype=object)


def _det3(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> Fraction:
    return np.dot(a, _cross(b, c))


def _sides_of(values: np.ndarray) -> Side:
    values = np.atleast_1d(values)
    side = Side(0)
    if (values < 0).any():
        side |= Side.NEGATIVE
    if (values == 0).any():
        side |= Side.BOUNDARY
    if (values > 0).any():
        side |= Side.POSITIVE
    return side


class Plane:
    """
    Ориентированная плоскость a*x + b*y + c*z + d = 0

    Отрицательная сторона: a*x + b*y + c*z + d < 0.

    Attributes:
        normal: Нормаль (a, b, c), массив Fraction
        offset: Свободный член d
    """
    __slots__ = ('normal', 'offset')

    def __init__(self, a, b, c, d):
        self.normal = to_exact([a, b, c])
        self.offset = _as_fraction(d)
        if not any(self.normal):
            raise ValueError("Plane normal must be non-zero")

    @classmethod
    def through(cls, p, q, r) -> Optional['Plane']:
        """Плоскость через три точки; None для коллинеарных точек"""
        p, q, r = to_exact(p), to_exact(q), to_exact(r)
        normal = _cross(q - p, r - p)
        if not any(normal):
            return None
        return cls(normal[0], normal[1], normal[2], -np.dot(normal, p))

    def evaluate(self, points) -> np.ndarray:
        """Значение уравнения плоскости в точке (N x 3 -> N, 3 -> скаляр)"""
        return np.dot(points, self.normal) + self.offset

    def side_of(self, point) -> Side:
        """Классификация одной точки"""
        value = self.evaluate(to_exact(point))
        if value < 0:
            return Side.NEGATIVE
        if value > 0:
            return Side.POSITIVE
        return Side.BOUNDARY

    def side_of_points(self, points: np.ndarray) -> Side:
        """Объединение классификаций всех точек"""
        if len(points) == 0:
            return Side(0)
        return _sides_of(self.evaluate(points))

    def flipped(self) -> 'Plane':
        """Та же плоскость с противоположной ориентацией"""
        return Plane(-self.normal[0], -self.normal[1], -self.normal[2], -self.offset)

    def canonical(self) -> Tuple[Fraction, ...]:
        """Ключ, не зависящий от положительного множителя коэффициентов"""
        scale = next(abs(c) for c in self.normal if c != 0)
        return tuple(c / scale for c in self.normal) + (self.offset / scale,)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Plane):
            return NotImplemented
        return self.canonical() == other.canonical()

    def __hash__(self) -> int:
        return hash(self.canonical())

    def __repr__(self) -> str:
        a, b, c = (str(v) for v in self.normal)
        return f"Plane({a}, {b}, {c}, {self.offset})"


@functools.total_ordering
class ConvexSolid:
    """
    Выпуклое тело с уникальным идентификатором

    Равенство, хеш и порядок определяются только идентификатором.
    Грани ориентированы наружу: тело лежит на отрицательной стороне
    каждой своей плоскости.

    Attributes:
        id: Идентификатор, выданный SolidRegistry
        vertices: Вершины (N x 3), массив Fraction
        planes: Ограничивающие плоскости
    """

    def __init__(self, solid_id: int, vertices, planes: Iterable[Plane]):
        self._id = int(solid_id)
        vertices = to_exact(vertices)
        if vertices.size == 0:
            vertices = vertices.reshape(0, 3)
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise InvalidSolidError(
                f"Solid vertices must have shape (N, 3), got {vertices.shape}"
            )
        self.vertices = vertices
        self.planes: Tuple[Plane, ...] = tuple(planes)
        self._plane_sides: Optional[List[Side]] = None
        self._edge_directions: Optional[List[np.ndarray]] = None

    @property
    def id(self) -> int:
        return self._id

    def side_of(self, plane: Plane) -> Side:
        """Классификация тела относительно плоскости (по вершинам)"""
        return plane.side_of_points(self.vertices)

    def contains(self, point) -> bool:
        """Точка лежит в замыкании тела"""
        point = to_exact(point)
        if self._plane_sides is None:
            self._plane_sides = [self.side_of(plane).strict() for plane in self.planes]

        for plane, solid_side in zip(self.planes, self._plane_sides):
            side = plane.side_of(point)
            if side == Side.BOUNDARY:
                continue
            if solid_side | side != side:
                return False
        return True

    def is_valid(self) -> bool:
        """Проверка невырожденности: замкнутое тело ненулевого объёма"""
        if len(self.vertices) < MIN_HULL_POINTS or len(self.planes) < MIN_HULL_POINTS:
            return False

        for plane in self.planes:
            values = plane.evaluate(self.vertices)
            if (values > 0).any():
                return False
            if np.count_nonzero(values == 0) < 3:
                return False
            if not (values < 0).any():
                return False
        return True

    def edge_directions(self) -> List[np.ndarray]:
        """Направления рёбер: пары вершин, лежащие вместе на двух гранях"""
        if self._edge_directions is None:
            on_plane = [plane.evaluate(self.vertices) == 0 for plane in self.planes]
            directions = []
            for i, j in itertools.combinations(range(len(self.vertices)), 2):
                shared = sum(1 for mask in on_plane if mask[i] and mask[j])
                if shared >= 2:
                    directions.append(self.vertices[j] - self.vertices[i])
            self._edge_directions = directions
        return self._edge_directions

    def faces(self) -> List[List[int]]:
        """
        Индексы вершин каждой грани в порядке плоскостей

        Вершины грани упорядочены против часовой стрелки, если смотреть
        снаружи тела; сравнение углов точное, через знак смешанного
        произведения.
        """
        result = []
        for plane in self.planes:
            indices = [int(i) for i in np.flatnonzero(plane.evaluate(self.vertices) == 0)]
            center = self.vertices[indices].sum(axis=0) / len(indices)
            ref = self.vertices[indices[0]] - center

            def half(w, ref=ref, normal=plane.normal):
                turn = np.dot(_cross(ref, w), normal)
                return 0 if turn > 0 or (turn == 0 and np.dot(ref, w) > 0) else 1

            def compare(i, j, center=center, normal=plane.normal):
                wi, wj = self.vertices[i] - center, self.vertices[j] - center
                hi, hj = half(wi), half(wj)
                if hi != hj:
                    return hi - hj
                turn = np.dot(_cross(wi, wj), normal)
                return -1 if turn > 0 else (1 if turn < 0 else 0)

            result.append(sorted(indices, key=functools.cmp_to_key(compare)))
        return result

    def centroid(self) -> np.ndarray:
        """Среднее вершин; строго внутренняя точка для валидного тела"""
        return self.vertices.sum(axis=0) / len(self.vertices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConvexSolid):
            return NotImplemented
        return self._id == other._id

    def __lt__(self, other) -> bool:
        if not isinstance(other, ConvexSolid):
            return NotImplemented
        return self._id < other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"ConvexSolid#{self._id}(vertices={len(self.vertices)}, planes={len(self.planes)})"


# ============ Предикаты ядра ============

def classify(plane: Plane, point) -> Side:
    return plane.side_of(point)


def classify_solid(plane: Plane, solid: ConvexSolid) -> Side:
    return solid.side_of(plane)


def contains(solid: ConvexSolid, point) -> bool:
    return solid.contains(point)


def is_valid(solid: ConvexSolid) -> bool:
    return solid.is_valid()


def _separates(axis: np.ndarray, a: ConvexSolid, b: ConvexSolid) -> bool:
    proj_a = np.dot(a.vertices, axis)
    proj_b = np.dot(b.vertices, axis)
    return proj_a.max() <= proj_b.min() or proj_b.max() <= proj_a.min()


def interiors_disjoint(a: ConvexSolid, b: ConvexSolid) -> bool:
    """
    Точная проверка по теореме о разделяющей оси

    Кандидаты в оси: нормали граней обоих тел и векторные произведения
    пар рёбер (ребро a x ребро b). Касание по грани, ребру или вершине
    пересечением не считается.

    Returns:
        True, если внутренности тел не пересекаются
    """
    for plane in itertools.chain(a.planes, b.planes):
        if _separates(plane.normal, a, b):
            return True

    for u in a.edge_directions():
        for v in b.edge_directions():
            axis = _cross(u, v)
            if any(axis) and _separates(axis, a, b):
                return True
    return False


# ============ Построение тел ============

def make_box(corner: Sequence, size, solid_id: int) -> ConvexSolid:
    """
    Параллелепипед, выровненный по осям

    Args:
        corner: Минимальный угол (x, y, z)
        size: Длина ребра (скаляр) или размеры по осям
        solid_id: Идентификатор тела
    """
    lo = to_exact(corner).reshape(3)
    sizes = to_exact(size if np.ndim(size) else [size] * 3).reshape(3)
    if any(s <= 0 for s in sizes):
        raise InvalidSolidError(f"Box size must be positive, got {[str(s) for s in sizes]}")
    hi = lo + sizes

    vertices = [
        (x, y, z)
        for x in (lo[0], hi[0])
        for y in (lo[1], hi[1])
        for z in (lo[2], hi[2])
    ]

    planes = []
    for axis in range(3):
        normal = [0, 0, 0]
        normal[axis] = -1
        planes.append(Plane(*normal, lo[axis]))
        normal[axis] = 1
        planes.append(Plane(*normal, -hi[axis]))

    return ConvexSolid(solid_id, vertices, planes)


def _unique_points(points: np.ndarray) -> np.ndarray:
    unique = list(dict.fromkeys(tuple(p) for p in points))
    if not unique:
        return np.empty((0, 3), dtype=object)
    return np.array(unique, dtype=object)


def _is_extreme(point: np.ndarray, planes: Sequence[Plane]) -> bool:
    normals = [plane.normal for plane in planes if plane.evaluate(point) == 0]
    return any(_det3(a, b, c) != 0 for a, b, c in itertools.combinations(normals, 3))


def convex_hull(points, solid_id: int) -> ConvexSolid:
    """
    Точная выпуклая оболочка перебором троек точек

    Грань принимается, если все точки лежат по одну сторону её плоскости.
    Вершинами оболочки становятся только крайние точки.

    Args:
        points: Точки (N x 3)
        solid_id: Идентификатор тела

    Raises:
        InvalidSolidError: Меньше MIN_HULL_POINTS различных точек,
            либо все точки коллинеарны или компланарны
    """
    pts = to_exact(points)
    if pts.size == 0:
        pts = pts.reshape(0, 3)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise InvalidSolidError(f"Points must have shape (N, 3), got {pts.shape}")

    pts = _unique_points(pts)
    n = len(pts)
    if n < MIN_HULL_POINTS:
        raise InvalidSolidError(f"Convex hull needs at least {MIN_HULL_POINTS} distinct points, got {n}")

    faces: Dict[Tuple[Fraction, ...], Plane] = {}
    for i, j, k in itertools.combinations(range(n), 3):
        plane = Plane.through(pts[i], pts[j], pts[k])
        if plane is None:
            continue

        values = plane.evaluate(pts)
        below = bool((values < 0).any())
        above = bool((values > 0).any())

        if not below and not above:
            raise InvalidSolidError(f"All {n} points are coplanar")
        if below and above:
            continue
        if above:
            plane = plane.flipped()
        faces.setdefault(plane.canonical(), plane)

    if not faces:
        raise InvalidSolidError(f"All {n} points are collinear")

    planes = tuple(faces.values())
    vertices = [p for p in pts if _is_extreme(p, planes)]

    logger.debug(f"Convex hull #{solid_id}: {n} points -> {len(vertices)} vertices, {len(planes)} faces")
    return ConvexSolid(solid_id, vertices, planes)
