"""
Конфигурация и константы для BSP дерева
"""
from dataclasses import dataclass
from typing import Literal
import json
from pathlib import Path

# ============ КОНСТАНТЫ ============

# Печать дерева
DEFAULT_INDENT_CHAR = '+'  # Символ отступа для глубины листа

# Геометрия
LATTICE_CELL_SIZE = 1  # Ребро куба решётки по умолчанию
MIN_HULL_POINTS = 4  # Минимум различных точек для объёмной оболочки

# Политики на случай, когда ни одна грань не делит множество тел
NO_SEPARATOR_POLICIES = ('error', 'bucket')


@dataclass
class BSPConfig:
    """Конфигурация построителя BSP дерева"""

    # ======== Построение ========
    no_separator_policy: Literal['error', 'bucket'] = 'error'
    validate_solids: bool = True  # Проверять is_valid у входных тел

    # ======== Перемешивание входа ========
    shuffle_input: bool = False
    random_seed: int = 42  # Seed для воспроизводимости

    # ======== Вывод ========
    indent_char: str = DEFAULT_INDENT_CHAR
    log_tree_stats: bool = True  # Логировать статистику после построения

    def validate(self) -> None:
        """Проверка корректности конфигурации"""
        if self.no_separator_policy not in NO_SEPARATOR_POLICIES:
            raise ValueError(
                f"no_separator_policy должна быть одной из {NO_SEPARATOR_POLICIES}, "
                f"получено: {self.no_separator_policy!r}"
            )

        if not isinstance(self.indent_char, str) or len(self.indent_char) != 1:
            raise ValueError(
                f"indent_char должен быть одним символом, получено: {self.indent_char!r}"
            )

        if self.random_seed < 0:
            raise ValueError(f"random_seed должен быть >= 0, получено: {self.random_seed}")

    def save(self, path: Path) -> None:
        """Сохранение конфигурации в JSON"""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.__dict__, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Path) -> 'BSPConfig':
        """Загрузка конфигурации из JSON"""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def from_args(cls, args, base: 'BSPConfig' = None) -> 'BSPConfig':
        """Создание конфигурации из аргументов командной строки"""
        config = base if base is not None else cls()

        if getattr(args, 'no_separator_policy', None) is not None:
            config.no_separator_policy = args.no_separator_policy
        if getattr(args, 'shuffle', False):
            config.shuffle_input = True
        if getattr(args, 'random_seed', None) is not None:
            config.random_seed = args.random_seed
        if getattr(args, 'indent_char', None) is not None:
            config.indent_char = args.indent_char
        if getattr(args, 'no_validate', False):
            config.validate_solids = False

        config.validate()
        return config
