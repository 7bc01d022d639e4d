"""
Точка входа: преобразование DXF-чертежа в SVG.

Использование:
    python main.py <dxf_file> [--output OUTPUT] [--config CONFIG]

Пример:
    python main.py "plan.dxf"                          # → plan.svg
    python main.py "plan.dxf" -o "out/plan.svg" -v
    python main.py "plan.dxf" --config project.cadsvg.json
    python main.py --init-config                       # создать .cadsvg.json
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Обеспечить поддержку Unicode на Windows-консоли
if sys.stdout.encoding and sys.stdout.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
if sys.stderr.encoding and sys.stderr.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

from cad_svg.conversion.document import convert_file
from cad_svg.io.dxf_loader import DXFLoadError
from cad_svg.logging_config import setup_logging
from cad_svg.project_config import (
    CONFIG_FILENAME,
    ProjectConfig,
    create_sample_config,
    load_config,
    merge_configs,
)

logger = logging.getLogger("cad_svg.main")


# ---------------------------------------------------------------------------
# Конфигурация из аргументов
# ---------------------------------------------------------------------------

def config_from_args(args: argparse.Namespace) -> ProjectConfig:
    """Конфигурация: файл .cadsvg.json, поверх него — ключи командной строки."""
    config = load_config(dxf_path=args.dxf_file, explicit_config=args.config)

    overrides = ProjectConfig()
    if args.no_reverse_y:
        overrides.conversion.reverse_y = False
    if args.concentrate_inserts:
        overrides.conversion.concentrate_inserts = True
    if args.no_viewbox:
        overrides.conversion.create_viewbox_from_model_space_extent = False
    if args.free_group:
        overrides.conversion.create_extra_group_for_free_elements = True
    if args.debug_points:
        overrides.conversion.create_debug_points = True
    if args.precision is not None:
        overrides.output.precision = args.precision
    return merge_configs(config, overrides)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Преобразование DXF-чертежа в SVG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "dxf_file",
        nargs="?",
        help="Путь к входному DXF-файлу.",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Путь к выходному SVG-файлу (по умолчанию: рядом с DXF, расширение .svg).",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Путь к конфигурационному файлу {CONFIG_FILENAME}.",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        dest="init_config",
        help=f"Создать пример {CONFIG_FILENAME} в текущем каталоге и выйти.",
    )
    parser.add_argument(
        "--recover",
        action="store_true",
        help="Читать повреждённый DXF через ezdxf.recover.",
    )
    parser.add_argument(
        "--no-reverse-y",
        action="store_true",
        dest="no_reverse_y",
        help="Не отражать рисунок по оси Y.",
    )
    parser.add_argument(
        "--concentrate-inserts",
        action="store_true",
        dest="concentrate_inserts",
        help="Переместить вставки блоков в конец основной группы.",
    )
    parser.add_argument(
        "--no-viewbox",
        action="store_true",
        dest="no_viewbox",
        help="Не задавать viewBox по границам пространства модели.",
    )
    parser.add_argument(
        "--free-group",
        action="store_true",
        dest="free_group",
        help="Вынести объекты пространства модели в отдельный блок _free.",
    )
    parser.add_argument(
        "--debug-points",
        action="store_true",
        dest="debug_points",
        help="Отмечать точки текста размеров красными точками.",
    )
    parser.add_argument(
        "--model-space-rect",
        action="store_true",
        dest="model_space_rect",
        help="Нарисовать красный прямоугольник границ пространства модели.",
    )
    parser.add_argument(
        "--precision",
        type=int,
        default=None,
        help="Число знаков после запятой в координатах.",
    )
    parser.add_argument(
        "--log-json",
        default=None,
        dest="log_json",
        help="Писать журнал в JSON-файл (одна запись в строке).",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Подробный журнал (DEBUG).",
    )
    args = parser.parse_args(argv)
    if not args.init_config and not args.dxf_file:
        parser.error("требуется путь к DXF-файлу")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_file=args.log_json,
        console=True,
    )

    if args.init_config:
        create_sample_config(CONFIG_FILENAME)
        return 0

    try:
        config = config_from_args(args)
        output_path, ctx = convert_file(
            args.dxf_file,
            args.output,
            config=config,
            use_recover=args.recover,
            model_space_rect=args.model_space_rect,
        )
    except DXFLoadError as exc:
        logger.critical("Ошибка загрузки DXF: %s", exc)
        return 1
    except ValueError as exc:
        logger.critical("Ошибка конфигурации: %s", exc)
        return 1
    except Exception as exc:
        logger.critical("Неожиданная ошибка: %s", exc, exc_info=True)
        return 2

    info = ctx.info
    if info.failed_entity_conversions:
        logger.warning(
            "Не преобразовано объектов: %d (см. журнал)", info.failed_entity_conversions,
        )
    print(f"{Path(output_path)}: {info.summary()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
