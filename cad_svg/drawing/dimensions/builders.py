"""
Строители элементов линейного размера.

  - build_extension_line   — выносная линия (отступ от точки + вылет)
  - arrows_outside         — помещаются ли стрелки между выносными
  - place_arrows           — вершины и направления двух стрелок
  - build_dimension_line   — основная размерная линия (вылет / укорочение)
  - build_stub             — продолжение размерной линии под внешнюю
                             стрелку или вынесенный текст
  - build_stubs            — оба продолжения размера

Все функции чистые: получают готовые векторы и флаги, возвращают
неизменяемые отрезки из geometry.
"""

from typing import Optional, Tuple

from ezdxf.math import Vec2

from cad_svg.config import GEOMETRY_EPSILON
from cad_svg.drawing.dimensions.geometry import (
    ArrowPlacement,
    DimensionFrame,
    LineSegment,
    TextLayout,
)
from cad_svg.drawing.dimensions.solver import unit


# ---------------------------------------------------------------------------
# Выносные линии
# ---------------------------------------------------------------------------

def build_extension_line(
    measured_point: Vec2,
    dim_point: Vec2,
    extension: float,
    offset: float,
) -> LineSegment:
    """Построить выносную линию от измеряемой точки к размерной линии.

    Линия начинается на расстоянии `offset` от измеряемой точки и
    выходит за размерную линию на `extension`.

    Args:
        measured_point: измеряемая точка (p1 или p2).
        dim_point: соответствующий конец размерной линии (dp1 или dp2).
        extension: DIMEXE.
        offset: DIMEXO.

    Raises:
        DegenerateGeometryError: измеряемая точка лежит на размерной линии.
    """
    ext = dim_point - measured_point
    direction = unit(ext, "dim_point - measured_point")
    end = measured_point + direction * (ext.magnitude + extension)
    start = measured_point + direction * offset
    return LineSegment(start=start, end=end)


# ---------------------------------------------------------------------------
# Стрелки
# ---------------------------------------------------------------------------

def arrows_outside(measurement: float, arrow_size: float, text_length: float = 0.0) -> bool:
    """Нужно ли выносить стрелки за выносные линии.

    Между выносными должны поместиться обе стрелки и, если текст
    стоит на размерной линии, сам текст.

    Args:
        measurement: значение размера (длина dp1-dp2).
        arrow_size: длина стрелки.
        text_length: длина текста на линии (0 при выноске).
    """
    return abs(measurement) < 2.0 * arrow_size + text_length


def place_arrows(
    frame: DimensionFrame,
    first_outside: bool,
    second_outside: bool,
    block1: str = "",
    block2: str = "",
) -> Tuple[ArrowPlacement, ArrowPlacement]:
    """Вершины и направления стрелок.

    Внутренняя стрелка у dp1 смотрит вдоль dim_dir (к выносной линии),
    у dp2 — против dim_dir. Внешняя стрелка развёрнута.
    """
    d = frame.dim_dir
    first = ArrowPlacement(
        anchor=frame.dp1,
        direction=-d if first_outside else d,
        outside=first_outside,
        block=block1,
    )
    second = ArrowPlacement(
        anchor=frame.dp2,
        direction=d if second_outside else -d,
        outside=second_outside,
        block=block2,
    )
    return first, second


# ---------------------------------------------------------------------------
# Размерная линия
# ---------------------------------------------------------------------------

def build_dimension_line(
    frame: DimensionFrame,
    dimension_line_extension: float,
    arrow_size: float,
    first_outside: bool,
    second_outside: bool,
) -> LineSegment:
    """Построить основную размерную линию.

    - DIMDLE > 0: линия выходит за оба конца на DIMDLE;
    - иначе концы на вершинах стрелок, а при внутренней стрелке
      линия укорачивается на длину стрелки (не проходит сквозь неё).
    """
    d = frame.dim_dir
    if dimension_line_extension > 0:
        dl1 = frame.dp1 + d * dimension_line_extension
        dl2 = frame.dp2 - d * dimension_line_extension
    else:
        dl1 = frame.dp1 if first_outside else frame.dp1 - d * arrow_size
        dl2 = frame.dp2 if second_outside else frame.dp2 + d * arrow_size
    return LineSegment(start=dl1, end=dl2)


def build_stub(
    start: Vec2,
    end: Vec2,
    direction: Vec2,
    arrow_size: float,
    text_outside: bool,
    arrow_outside: bool,
    text_length: float,
) -> Optional[LineSegment]:
    """Построить продолжение размерной линии за выносную.

    Args:
        start: конец размерной линии (dp1 или dp2).
        end: цель продолжения (точка текста на размерной линии).
        direction: единичное направление наружу.
        arrow_size: длина стрелки.
        text_outside: текст стоит на линии за этой выносной.
        arrow_outside: стрелка у этого конца внешняя.
        text_length: длина текста на линии; продолжение обрывается
            перед текстом на половину этой длины.

    Returns:
        Отрезок или None, если продолжение не нужно.
    """
    host_length = 2.0 * arrow_size if arrow_outside else 0.0

    if text_outside:
        to_text = (end - start).dot(direction) - text_length / 2.0
        length = max(to_text, host_length)
    elif arrow_outside:
        length = host_length
    else:
        return None

    if length < GEOMETRY_EPSILON:
        return None
    return LineSegment(start=start, end=start + direction * length)


def build_stubs(
    frame: DimensionFrame,
    text: TextLayout,
    arrow_size: float,
    first_outside: bool,
    second_outside: bool,
) -> Tuple[Optional[LineSegment], Optional[LineSegment]]:
    """Оба продолжения: у dp1 — только под стрелку, у dp2 — ещё и к тексту."""
    d = frame.dim_dir
    first = build_stub(
        frame.dp1, frame.dp1 + d * 2.0 * arrow_size, d,
        arrow_size, False, first_outside, 0.0,
    )
    second = build_stub(
        frame.dp2, text.text_on_dim_line, -d,
        arrow_size, not text.text_inside, second_outside, text.text_length,
    )
    return first, second
