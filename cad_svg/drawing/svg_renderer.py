"""
SVG-примитивы конвертера (интерфейс построения элементов).

Содержит:
- format_number / points_to_path_data — запись координат с заданной точностью
- create_path            — ломаная / полилиния (path)
- create_line            — отрезок (path из двух точек)
- create_arrow           — стрелка (заполненный треугольник)
- create_tick_marker     — засечка 45° (_ARCHTICK, _OBLIQUE)
- create_dot_marker      — точка (_DOT)
- arrow_style_for_block  — форма стрелки по имени блока DIMBLK
- render_arrow_by_style  — dispatch формы стрелки
- create_text            — надпись с поворотом (с компенсацией ReverseY)
- create_text_background — белый фон под надписью
- create_use             — вставка блока (use)
- create_debug_point     — отладочная точка
- make_element_id        — допустимый XML id из имени DXF

Координаты передаются в системе чертежа DXF (ось Y вверх); отражение
всего рисунка выполняет документ (ConversionOptions.reverse_y).
"""

import math
import re
from typing import Iterable, Optional, Sequence

import numpy as np
import svgwrite

from cad_svg.config import (
    DIM_ARROW_WIDTH_RATIO,
    DIM_DOT_RATIO,
    SVG_DEBUG_POINT_RADIUS,
    SVG_PRECISION,
)

Point = Sequence[float]

# Имена стандартных стрелок DXF → форма маркера
ARROW_STYLE_BY_BLOCK = {
    '': 'filled',
    '_CLOSEDFILLED': 'filled',
    '_CLOSED': 'filled',
    '_CLOSEDBLANK': 'filled',
    '_ARCHTICK': 'tick',
    '_OBLIQUE': 'tick',
    '_DOT': 'dot',
    '_DOTSMALL': 'dot',
    '_DOTBLANK': 'dot',
    '_NONE': 'none',
}


def _filter_svg_attrs(style_dict: dict) -> dict:
    """Filter out internal metadata keys (starting with _) and unset values.

    svgwrite converts underscores to hyphens, making '_layer' become
    '-layer' which is invalid XML.
    """
    return {
        k: v for k, v in style_dict.items()
        if not k.startswith('_') and v is not None
    }


# ---------------------------------------------------------------------------
# Форматирование координат
# ---------------------------------------------------------------------------

def format_number(value: float, precision: int = SVG_PRECISION) -> str:
    """Число без хвостовых нулей: 1.5000 → "1.5", -0.0 → "0"."""
    rounded = float(np.round(float(value), precision)) + 0.0
    return np.format_float_positional(rounded, precision=precision, trim='-')


def points_to_path_data(
    points: Iterable[Point],
    closed: bool = False,
    precision: int = SVG_PRECISION,
) -> str:
    """Записать точки в атрибут d элемента path.

    Args:
        points: точки (x, y[, z]); z отбрасывается.
        closed: добавить Z.
        precision: знаков после запятой.

    Returns:
        "M x,y L x,y ..." или "" для пустого списка.

    Raises:
        ValueError: среди координат есть NaN/inf.
    """
    arr = np.asarray([(float(p[0]), float(p[1])) for p in points], dtype=np.float64)
    if arr.size == 0:
        return ""
    if not np.isfinite(arr).all():
        raise ValueError("Координаты пути содержат NaN или бесконечность")

    arr = np.round(arr, precision) + 0.0
    parts = []
    for i, (x, y) in enumerate(arr):
        cmd = 'M' if i == 0 else 'L'
        parts.append(f"{cmd} {format_number(x, precision)},{format_number(y, precision)}")
    if closed:
        parts.append('Z')
    return ' '.join(parts)


# ---------------------------------------------------------------------------
# Линии
# ---------------------------------------------------------------------------

def create_path(
    dwg: svgwrite.Drawing,
    points: Iterable[Point],
    closed: bool = False,
    precision: int = SVG_PRECISION,
    **attrs,
) -> svgwrite.path.Path:
    """Создать path по точкам (полилиния, дуга после аппроксимации)."""
    return dwg.path(d=points_to_path_data(points, closed, precision), **_filter_svg_attrs(attrs))


def create_line(
    dwg: svgwrite.Drawing,
    start: Point,
    end: Point,
    line_type: Optional[str] = None,
    precision: int = SVG_PRECISION,
    **attrs,
) -> svgwrite.path.Path:
    """Создать отрезок.

    Args:
        dwg: SVG-документ.
        start, end: концы отрезка.
        line_type: значение data-line-type ('extension', 'dimension', 'leader', ...).
        precision: знаков после запятой.
    """
    line = create_path(dwg, (start, end), precision=precision, **attrs)
    if line_type:
        line['data-line-type'] = line_type
    return line


# ---------------------------------------------------------------------------
# Стрелки
# ---------------------------------------------------------------------------

def create_arrow(
    dwg: svgwrite.Drawing,
    position: Point,
    angle_deg: float,
    length: float,
    width: Optional[float] = None,
    precision: int = SVG_PRECISION,
) -> svgwrite.path.Path:
    """Создать стрелку (заполненный треугольник).

    Вершина — в position, остриё смотрит в направлении angle_deg.

    Args:
        dwg: SVG-документ.
        position: вершина стрелки.
        angle_deg: направление острия (градусы, 0 = →, против часовой).
        length: длина стрелки (DIMASZ).
        width: ширина основания; по умолчанию length / 3.
    """
    if width is None:
        width = length * DIM_ARROW_WIDTH_RATIO
    half_w = width / 2.0
    length_s = format_number(length, precision)
    half_s = format_number(half_w, precision)

    # Треугольник: вершина в (0,0), основание назад
    d = f"M 0,0 L -{length_s},{half_s} L -{length_s},-{half_s} Z"

    x, y = position[0], position[1]
    return dwg.path(
        d=d,
        fill='currentColor',
        stroke='none',
        transform=(
            f"translate({format_number(x, precision)},{format_number(y, precision)}) "
            f"rotate({format_number(angle_deg, 2)})"
        ),
    )


def create_tick_marker(
    dwg: svgwrite.Drawing,
    position: Point,
    angle_deg: float,
    length: float,
    precision: int = SVG_PRECISION,
) -> svgwrite.path.Path:
    """Создать засечку под 45° к размерной линии."""
    half = length / 2.0
    tick_angle = math.radians(angle_deg + 45.0)
    dx = half * math.cos(tick_angle)
    dy = half * math.sin(tick_angle)

    x, y = position[0], position[1]
    tick = create_line(dwg, (x - dx, y - dy), (x + dx, y + dy), 'tick', precision)
    return tick


def create_dot_marker(
    dwg: svgwrite.Drawing,
    position: Point,
    length: float,
) -> svgwrite.shapes.Circle:
    """Создать точку-маркер радиусом length * DIM_DOT_RATIO."""
    return dwg.circle(
        center=(position[0], position[1]),
        r=length * DIM_DOT_RATIO,
        fill='currentColor',
        stroke='none',
    )


def arrow_style_for_block(block_name: str, in_defs: bool = False) -> str:
    """Форма стрелки по имени блока DIMBLK.

    Returns:
        'filled', 'tick', 'dot', 'none' или 'block' (пользовательский блок
        из defs).
    """
    key = (block_name or '').upper()
    # ezdxf отдаёт стандартные стрелки без подчёркивания ("ARCHTICK")
    if key and not key.startswith('_') and '_' + key in ARROW_STYLE_BY_BLOCK:
        key = '_' + key
    if key in ARROW_STYLE_BY_BLOCK:
        return ARROW_STYLE_BY_BLOCK[key]
    if in_defs:
        return 'block'
    return 'filled'


def render_arrow_by_style(
    dwg: svgwrite.Drawing,
    group: svgwrite.container.Group,
    position: Point,
    angle_deg: float,
    style: str,
    length: float,
    block_id: Optional[str] = None,
    precision: int = SVG_PRECISION,
) -> None:
    """Dispatch: отрисовать стрелку/засечку/точку/блок по стилю.

    Args:
        dwg: SVG-документ.
        group: SVG-группа размера (добавить элемент).
        position: вершина стрелки.
        angle_deg: направление острия (градусы).
        style: 'filled', 'tick', 'dot', 'none', 'block'.
        length: длина стрелки.
        block_id: id блока в defs для стиля 'block'.
    """
    if style == 'none':
        return
    elif style == 'dot':
        group.add(create_dot_marker(dwg, position, length))
    elif style == 'tick':
        group.add(create_tick_marker(dwg, position, angle_deg, length, precision))
    elif style == 'block' and block_id:
        # Блок стрелки DXF построен для единичной длины, остриё смотрит вправо
        group.add(create_use(dwg, block_id, position, angle_deg, length, length, precision))
    else:
        group.add(create_arrow(dwg, position, angle_deg, length, precision=precision))


# ---------------------------------------------------------------------------
# Текст
# ---------------------------------------------------------------------------

def _text_transform(
    position: Point,
    angle_deg: float,
    reverse_y: bool,
    precision: int,
) -> str:
    x, y = position[0], position[1]
    transform = f"translate({format_number(x, precision)},{format_number(y, precision)})"
    if abs(angle_deg) > 0.01:
        transform += f" rotate({format_number(angle_deg, 2)})"
    if reverse_y:
        # Весь рисунок отражён по Y: надпись отражаем обратно
        transform += " scale(1,-1)"
    return transform


def create_text(
    dwg: svgwrite.Drawing,
    text: str,
    position: Point,
    angle_deg: float,
    height: float,
    font_family: str,
    reverse_y: bool = True,
    anchor: str = 'middle',
    centered: bool = True,
    precision: int = SVG_PRECISION,
) -> svgwrite.text.Text:
    """Создать надпись.

    Смещение baseline задаётся явно (cap-height ≈ 0.7em → центр ≈ 0.35em),
    вместо ненадёжного dominant-baseline.

    Args:
        dwg: SVG-документ.
        text: строка.
        position: точка вставки (центр при centered=True, иначе начало базовой линии).
        angle_deg: поворот (градусы, против часовой в системе DXF).
        height: высота шрифта.
        font_family: семейство шрифта.
        reverse_y: рисунок отражён по Y (надпись нужно отразить обратно).
        anchor: text-anchor ('start', 'middle', 'end').
        centered: центрировать по вертикали относительно position.
    """
    y_bl = height * 0.35 if centered else 0.0
    return dwg.text(
        text,
        insert=(0, format_number(y_bl, precision)),
        font_family=font_family,
        font_size=format_number(height, precision),
        text_anchor=anchor,
        fill='currentColor',
        stroke='none',
        transform=_text_transform(position, angle_deg, reverse_y, precision),
    )


def create_text_background(
    dwg: svgwrite.Drawing,
    text_length: float,
    position: Point,
    angle_deg: float,
    height: float,
    reverse_y: bool = True,
    precision: int = SVG_PRECISION,
) -> svgwrite.shapes.Rect:
    """Создать белый прямоугольник-фон за размерной надписью.

    Предотвращает визуальное наложение размерной линии на текст.
    """
    text_h = height * 1.3
    padding = height * 0.1

    rect = dwg.rect(
        insert=(
            format_number(-text_length / 2 - padding, precision),
            format_number(-text_h / 2 - padding, precision),
        ),
        size=(
            format_number(text_length + 2 * padding, precision),
            format_number(text_h + 2 * padding, precision),
        ),
        fill='white',
        stroke='none',
        transform=_text_transform(position, angle_deg, reverse_y, precision),
    )
    return rect


# ---------------------------------------------------------------------------
# Блоки и отладка
# ---------------------------------------------------------------------------

def create_use(
    dwg: svgwrite.Drawing,
    block_id: str,
    insert: Point,
    rotation_deg: float = 0.0,
    xscale: float = 1.0,
    yscale: float = 1.0,
    precision: int = SVG_PRECISION,
) -> svgwrite.container.Use:
    """Создать вставку блока из defs."""
    x, y = insert[0], insert[1]
    transform = f"translate({format_number(x, precision)},{format_number(y, precision)})"
    if abs(rotation_deg) > 1e-9:
        transform += f" rotate({format_number(rotation_deg, 4)})"
    if xscale != 1.0 or yscale != 1.0:
        transform += f" scale({format_number(xscale, precision)},{format_number(yscale, precision)})"
    use = dwg.use(f"#{block_id}")
    if transform != "translate(0,0)":
        use['transform'] = transform
    return use


def create_debug_point(
    dwg: svgwrite.Drawing,
    position: Point,
    color: str = 'red',
    radius: float = SVG_DEBUG_POINT_RADIUS,
) -> svgwrite.shapes.Circle:
    """Отладочная точка (например, исходная точка текста размера)."""
    circle = dwg.circle(center=(position[0], position[1]), r=radius, fill=color, stroke='none')
    circle['class'] = 'debug-point'
    return circle


_ID_INVALID_CHARS = re.compile(r'[^A-Za-z0-9_.\-]')


def make_element_id(name: str) -> str:
    """Допустимый XML id из имени блока/слоя DXF ("*U12" → "_U12")."""
    result = _ID_INVALID_CHARS.sub('_', name or '')
    if not result or not (result[0].isalpha() or result[0] == '_'):
        result = '_' + result
    return result
