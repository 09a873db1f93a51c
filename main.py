#!/usr/bin/env python
"""
BSP Partition - Точка входа для CLI

Построение BSP дерева над выпуклыми телами, поиск точек, вставка и удаление
"""
import psutil
import os
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

def setup_logging(log_path: Path, verbose: bool, quiet: bool = False):
    """Настраивает раздельное логирование в файл и консоль."""
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Уровень для файла всегда DEBUG, для консоли - в зависимости от флагов
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO
    file_level = logging.DEBUG

    # Создаем главный логгер
    logger = logging.getLogger() # Получаем корневой логгер
    logger.setLevel(logging.DEBUG) # Устанавливаем минимальный уровень обработки

    # Убираем все предыдущие обработчики, чтобы избежать дублирования
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    # Обработчик для файла (всегда пишет DEBUG)
    file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
    file_handler.setLevel(file_level)
    file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Обработчик для консоли
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

# Импорты модулей проекта
from bsp_partition import __version__
from bsp_partition.config import BSPConfig, NO_SEPARATOR_POLICIES
from bsp_partition.core.errors import BSPError
from bsp_partition.core.registry import SolidRegistry
from bsp_partition.core.tree import BSPTree
from bsp_partition.io.loaders import load_points, validate_points
from bsp_partition.io.exporters import export_tree_text, export_solid_off, export_statistics


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Парсинг аргументов командной строки"""
    parser = argparse.ArgumentParser(
        description='BSP Partition - BSP дерево над выпуклыми телами',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Примеры использования:
    %(prog)s --lattice 2 2 2 --locate 0.5 0.5 0.5 --print
    %(prog)s --lattice 3 3 3 --remove 0 13 --locate 1/2 1/2 1/2
    %(prog)s --lattice 2 2 2 --locate 1.5 0.5 0.5 --locate-off located
    %(prog)s --solids a.xyz b.xyz --add c.xyz --stats
            """
    )

    parser.add_argument('--output', '-o', default='output', type=str,
                       help='Выходная директория (по умолчанию: output)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    # Исходные тела
    group_input = parser.add_argument_group('Исходные тела')
    source = group_input.add_mutually_exclusive_group()
    source.add_argument('--lattice', nargs=3, type=int, metavar=('NX', 'NY', 'NZ'),
                        help='Решётка единичных кубов NX×NY×NZ')
    source.add_argument('--solids', nargs='+', metavar='FILE',
                        help='Файлы точек; по выпуклой оболочке на файл')

    # Операции над деревом
    group_ops = parser.add_argument_group('Операции')
    group_ops.add_argument('--add', nargs='+', metavar='FILE', default=[],
                           help='Вставить выпуклые оболочки точек из файлов')
    group_ops.add_argument('--remove', nargs='+', type=int, metavar='ID', default=[],
                           help='Удалить тела по идентификатору')
    group_ops.add_argument('--locate', nargs=3, action='append', metavar=('X', 'Y', 'Z'),
                           default=[],
                           help='Найти тело, содержащее точку (можно несколько раз)')
    group_ops.add_argument('--locate-off', type=str, metavar='DIR',
                           help='Сохранить каждое найденное тело в DIR/solid_<id>.off')
    group_ops.add_argument('--print', action='store_true', dest='print_tree',
                           help='Напечатать дерево')
    group_ops.add_argument('--print-file', type=str,
                           help='Сохранить дамп дерева в файл')

    # Параметры построения
    group_build = parser.add_argument_group('Параметры построения')
    group_build.add_argument('--no-separator-policy', choices=NO_SEPARATOR_POLICIES,
                             help='Что делать, если ни одна грань не делит тела')
    group_build.add_argument('--shuffle', action='store_true',
                             help='Перемешать тела перед построением')
    group_build.add_argument('--random-seed', type=int,
                             help='Seed для перемешивания (по умолчанию: 42)')
    group_build.add_argument('--indent-char', type=str,
                             help='Символ отступа при печати (по умолчанию: +)')
    group_build.add_argument('--no-validate', action='store_true',
                             help='Не проверять вырожденность входных тел')

    # Отладка
    group_debug = parser.add_argument_group('Отладка')
    group_debug.add_argument('--stats', action='store_true',
                            help='Экспортировать статистику построения')
    group_debug.add_argument('--verbose', '-v', action='store_true',
                            help='Подробный вывод')
    group_debug.add_argument('--quiet', '-q', action='store_true',
                            help='Минимальный вывод')

    # Дополнительные опции
    parser.add_argument('--config', type=str,
                       help='Путь к файлу конфигурации JSON')
    parser.add_argument('--save-config', type=str,
                       help='Сохранить текущую конфигурацию в файл')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Основная функция"""
    args = parse_arguments(argv)
    output_dir = Path(args.output)
    log_file_path = output_dir / 'build_log.txt'
    setup_logging(log_file_path, args.verbose, args.quiet)
    logger.info(f"Detailed logs are being saved to {log_file_path}")
    process = psutil.Process(os.getpid())
    try:
        # ============ 1. Загрузка конфигурации ============
        base = None
        if args.config:
            logger.info(f"Loading config from {args.config}")
            base = BSPConfig.load(Path(args.config))
        config = BSPConfig.from_args(args, base)

        if args.save_config:
            config.save(Path(args.save_config))
            logger.info(f"Config saved to {args.save_config}")

        # ============ 2. Исходные тела ============
        registry = SolidRegistry()
        if args.lattice:
            nx, ny, nz = args.lattice
            solids = registry.lattice(nx, ny, nz)
            logger.info(f"Created {len(solids)} cubes")
        elif args.solids:
            solids = [_hull_from_file(registry, path) for path in args.solids]
        else:
            solids = []

        # ============ 3. Построение BSP дерева ============
        cpu_time_before = process.cpu_times()
        start_time = time.perf_counter()
        tree = BSPTree(solids, config)
        build_time = time.perf_counter() - start_time
        cpu_time_after = process.cpu_times()

        # Вычисляем использованное процессорное время
        cpu_time_sec = (cpu_time_after.user - cpu_time_before.user) + (cpu_time_after.system - cpu_time_before.system)
        peak_memory_mb = process.memory_info().rss / (1024 * 1024)

        # ============ 4. Вставка и удаление ============
        failures = 0
        for path in args.add:
            solid = _hull_from_file(registry, path)
            logger.info(f"Adding solid #{solid.id}...")
            if tree.insert(solid):
                logger.info(f"Solid #{solid.id} added")
            else:
                registry.forget(solid.id)
                logger.error(f"Cannot add solid #{solid.id}: invalid geometry")
                failures += 1

        for solid_id in args.remove:
            solid = registry.get(solid_id)
            if solid is None:
                logger.error(f"Cannot find id={solid_id}")
                failures += 1
                continue
            if tree.remove(solid):
                registry.forget(solid_id)
                logger.info(f"Solid #{solid_id} removed")
            else:
                logger.error(f"Cannot remove solid #{solid_id}")
                failures += 1

        # ============ 5. Поиск точек ============
        for coords in args.locate:
            solid = tree.locate(coords)
            if solid is None:
                print(f"{' '.join(coords)}: location failed")
            else:
                print(f"{' '.join(coords)}: solid #{solid.id}")
                if args.locate_off:
                    export_solid_off(solid, Path(args.locate_off) / f"solid_{solid.id}.off")

        # ============ 6. Вывод ============
        if args.print_tree:
            tree.print(sys.stdout)
        if args.print_file:
            export_tree_text(tree, Path(args.print_file))

        if args.stats:
            tree_stats = tree.get_stats()
            logger.info(
                f"Tree: {tree_stats['solid_count']} solids, "
                f"{tree_stats['node_count']} nodes, "
                f"{tree_stats['leaf_count']} leaves, "
                f"depth={tree_stats['depth']}"
            )
            stats_file = output_dir / 'statistics.json'
            export_statistics(
                tree, stats_file,
                build_time, peak_memory_mb, cpu_time_sec, config
            )

        return 2 if failures else 0

    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 130

    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1

    except (BSPError, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        return 2

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 255


def _hull_from_file(registry: SolidRegistry, path: str):
    points = load_points(path)
    validate_points(points)
    solid = registry.hull(points)
    logger.info(f"Convex hull #{solid.id} of {Path(path).name}: {len(solid.vertices)} vertices")
    return solid


if __name__ == '__main__':
    sys.exit(main())
