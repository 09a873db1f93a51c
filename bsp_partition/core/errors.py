"""
Исключения BSP дерева
"""
from __future__ import annotations
from typing import Any, Optional


class BSPError(Exception):
    """Базовое исключение пакета"""


class InvalidSolidError(BSPError, ValueError):
    """Вырожденное (плоское или незамкнутое) выпуклое тело"""


class IntersectingSolidsError(BSPError, ValueError):
    """
    Ни одна грань двух тел их не разделяет

    Attributes:
        first, second: Пара тел, для которой не нашлось разделяющей плоскости
    """

    def __init__(self, first: Any, second: Any, message: Optional[str] = None):
        self.first = first
        self.second = second
        if message is None:
            message = f"Intersecting solids: #{first.id} and #{second.id}"
        super().__init__(message)


class NoSeparatingPlaneError(BSPError, ValueError):
    """Ни одна грань подмножества тел не делит его нетривиально"""

    def __init__(self, solids: Any):
        self.solids = tuple(solids)
        ids = ", ".join(f"#{solid.id}" for solid in self.solids)
        super().__init__(
            f"No face plane partitions {len(self.solids)} solids ({ids})"
        )


class TreeInvariantError(BSPError, AssertionError):
    """Нарушен инвариант разделения или связи родитель-потомок"""
