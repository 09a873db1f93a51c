"""
Реестр тел: выдача уникальных идентификаторов и поиск тела по id
"""
from __future__ import annotations
import itertools
import logging
from typing import Dict, Iterator, List, Optional, Sequence

from ..config import LATTICE_CELL_SIZE
from .geometry import ConvexSolid, convex_hull, make_box

logger = logging.getLogger(__name__)


class SolidRegistry:
    """
    Явный распределитель идентификаторов тел

    Идентификаторы монотонно растут начиная со start и никогда не
    переиспользуются, даже после forget().
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._solids: Dict[int, ConvexSolid] = {}

    def allocate(self) -> int:
        """Следующий свободный идентификатор"""
        return next(self._counter)

    def register(self, solid: ConvexSolid) -> ConvexSolid:
        if solid.id in self._solids and self._solids[solid.id] is not solid:
            raise ValueError(f"Solid id {solid.id} is already registered")
        self._solids[solid.id] = solid
        return solid

    def box(self, corner: Sequence, size=LATTICE_CELL_SIZE) -> ConvexSolid:
        return self.register(make_box(corner, size, self.allocate()))

    def hull(self, points) -> ConvexSolid:
        return self.register(convex_hull(points, self.allocate()))

    def lattice(self, nx: int, ny: int, nz: int, size=LATTICE_CELL_SIZE) -> List[ConvexSolid]:
        """
        Решётка кубов nx*ny*nz

        Args:
            nx, ny, nz: Число кубов по осям
            size: Ребро куба

        Returns:
            Кубы с минимальными углами (i*size, j*size, k*size), 0 <= i < nx и т.д.
        """
        if min(nx, ny, nz) < 0:
            raise ValueError(f"Lattice dimensions must be non-negative, got {(nx, ny, nz)}")

        cubes = [
            self.box((x * size, y * size, z * size), size)
            for x in range(nx)
            for y in range(ny)
            for z in range(nz)
        ]
        logger.debug(f"Created lattice {nx}x{ny}x{nz}: {len(cubes)} cubes")
        return cubes

    def get(self, solid_id: int) -> Optional[ConvexSolid]:
        return self._solids.get(solid_id)

    def forget(self, solid_id: int) -> Optional[ConvexSolid]:
        return self._solids.pop(solid_id, None)

    def clear(self) -> None:
        """Забыть все тела (счётчик идентификаторов не сбрасывается)"""
        self._solids.clear()

    def __contains__(self, solid_id: int) -> bool:
        return solid_id in self._solids

    def __len__(self) -> int:
        return len(self._solids)

    def __iter__(self) -> Iterator[ConvexSolid]:
        for solid_id in sorted(self._solids):
            yield self._solids[solid_id]
