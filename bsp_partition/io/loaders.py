"""
Загрузчики точек для построения выпуклых оболочек
"""
import numpy as np
from pathlib import Path
import logging

from ..config import MIN_HULL_POINTS
from ..core.geometry import to_exact

logger = logging.getLogger(__name__)

TEXT_FORMATS = ('.txt', '.xyz', '.pts')


def load_points(file_path: str) -> np.ndarray:
    """
    Загрузка точек из текстового файла

    Args:
        file_path: Путь к файлу (первые 3 столбца - X Y Z)

    Returns:
        Массив N×3 точных координат (Fraction, dtype=object)

    Числа читаются как строки, поэтому "0.1" превращается ровно в 1/10,
    а не в ближайшее двоичное приближение.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Файл не найден: {path}")

    ext = path.suffix.lower()
    if ext not in TEXT_FORMATS:
        raise ValueError(f"Неподдерживаемый формат: {ext}")

    try:
        arr = np.loadtxt(path.as_posix(), dtype=str, ndmin=2)
    except Exception as e:
        raise ValueError(f"Ошибка чтения текстового файла {path}: {e}")

    if arr.size == 0:
        raise ValueError(f"В файле {path} нет точек")

    if arr.shape[1] < 3:
        raise ValueError(f"В файле {path} меньше 3 столбцов (x y z)")

    if arr.shape[1] > 3:
        logger.debug(f"Ignoring {arr.shape[1] - 3} extra columns in {path.name}")

    points = to_exact(arr[:, :3])
    logger.info(f"Loaded {points.shape[0]:,} points from {path.name}")
    return points


def validate_points(points: np.ndarray, min_points: int = MIN_HULL_POINTS) -> None:
    """
    Валидация загруженных точек

    Args:
        points: Массив координат
        min_points: Минимальное количество различных точек

    Raises:
        ValueError: Если данные не соответствуют требованиям
    """
    if not isinstance(points, np.ndarray):
        raise TypeError("Expected numpy.ndarray")

    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Points must have shape (N, 3), got {points.shape}")

    n_unique = len({tuple(p) for p in points})
    if n_unique < min_points:
        raise ValueError(f"Too few distinct points: {n_unique} < {min_points}")
