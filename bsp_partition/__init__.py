from __future__ import annotations
from typing import Any

# 1) Версия пакета
try:
    from importlib.metadata import version as _pkg_version, PackageNotFoundError
    __version__ = _pkg_version("bsp-partition")
except PackageNotFoundError:
    # в editable/develop-режиме пакет может быть не «установлен»
    __version__ = "0.1.0"

__all__ = ["__version__", "BSPTree", "BSPBuilder", "BSPConfig", "SolidRegistry"]

# 2) Ленивый экспорт для публичного API (избегаем ранних импортов)
def __getattr__(name: str) -> Any:
    if name == "BSPTree":
        from .core.tree import BSPTree  # локальный импорт, не создаёт цикл
        return BSPTree
    if name == "BSPBuilder":
        from .core.builder import BSPBuilder
        return BSPBuilder
    if name == "BSPConfig":
        from .config import BSPConfig
        return BSPConfig
    if name == "SolidRegistry":
        from .core.registry import SolidRegistry
        return SolidRegistry
    raise AttributeError(name)
