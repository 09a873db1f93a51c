import json
from fractions import Fraction
import numpy as np
from pathlib import Path
from typing import Optional, Any
from dataclasses import asdict
import logging

from ..core.geometry import ConvexSolid
from ..core.tree import BSPTree

logger = logging.getLogger(__name__)


def export_tree_text(tree: BSPTree, output_file: Path) -> None:
    """
    Сохранение текстового дампа дерева (формат BSPTree.format)

    Args:
        tree: Дерево
        output_file: Путь к выходному файлу
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        tree.print(f)

    logger.info(f"Exported tree dump to {output_file}")


def export_solid_off(solid: ConvexSolid, output_file: Path) -> None:
    """
    Сохранение тела в ASCII OFF

    Целые координаты пишутся как есть, дробные приближаются float.

    Args:
        solid: Тело
        output_file: Путь к .off файлу
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='ascii') as f:
        f.write(format_off(solid))

    logger.info(f"Exported solid #{solid.id} to {output_file}")


def format_off(solid: ConvexSolid) -> str:
    faces = solid.faces()
    lines = ["OFF", f"{len(solid.vertices)} {len(faces)} 0"]
    for vertex in solid.vertices:
        lines.append(" ".join(_off_number(v) for v in vertex))
    for face in faces:
        lines.append(f"{len(face)} " + " ".join(str(i) for i in face))
    return "\n".join(lines) + "\n"


def _off_number(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return repr(float(value))


def export_statistics(tree: BSPTree,
                      output_file: Path,
                      build_time: Optional[float] = None,
                      peak_memory_mb: Optional[float] = None,
                      cpu_time_sec: Optional[float] = None,
                      config: Optional[Any] = None) -> None:
    """
    Экспорт статистики построения дерева

    Args:
        tree: Дерево
        output_file: Путь к выходному JSON файлу
        build_time: Время построения (секунды)
        peak_memory_mb: Память процесса после построения (МБ)
        cpu_time_sec: Процессорное время построения (секунды)
        config: Конфигурация построителя
    """
    stats = tree.get_stats()

    # Глубина каждого листа
    leaf_depths = []
    for leaf in tree:
        depth = 0
        node = leaf.parent
        while node is not None:
            depth += 1
            node = node.parent
        leaf_depths.append(depth)

    result = {
        'tree': {
            'depth': stats['depth'],
            'total_nodes': stats['node_count'],
            'leaf_nodes': stats['leaf_count'],
            'internal_nodes': stats['node_count'] - stats['leaf_count'],
            'buckets': stats['bucket_count'],
            'solids': stats['solid_count']
        },
        'leaves': {
            'min_depth': min(leaf_depths) if leaf_depths else 0,
            'max_depth': max(leaf_depths) if leaf_depths else 0,
            'mean_depth': float(np.mean(leaf_depths)) if leaf_depths else 0,
            'median_depth': float(np.median(leaf_depths)) if leaf_depths else 0
        },
        'boundary': {
            'max_size': stats['max_boundary_size'],
            'mean_size': stats['mean_boundary_size']
        }
    }

    if build_time is not None:
        n_solids = stats['solid_count']
        result['performance'] = {
            'build_time_wall_sec': build_time,
            'build_time_cpu_sec': cpu_time_sec,
            'peak_memory_mb': peak_memory_mb,
            'solids_per_sec_wall': n_solids / build_time if build_time > 0 else 0,
            'solids_per_sec_cpu': n_solids / cpu_time_sec if cpu_time_sec else 0
        }

    if config is not None:
        result['config'] = asdict(config)

    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(result, f, ensure_ascii=False, indent=2)

    logger.info(f"Exported statistics to {output_file}")
