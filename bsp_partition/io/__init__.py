"""
Модуль ввода-вывода для BSP дерева
"""
from .loaders import (
    load_points,
    validate_points
)
from .exporters import (
    export_tree_text,
    export_solid_off,
    format_off,
    export_statistics
)

__all__ = [
    'load_points',
    'validate_points',
    'export_tree_text',
    'export_solid_off',
    'format_off',
    'export_statistics'
]
