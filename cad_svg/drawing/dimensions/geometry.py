"""
Геометрия линейного размера: неизменяемые результаты раскладки.

Типы:
  - LineSegment          — отрезок (start, end)
  - DimensionFrame       — ориентация и концы размерной линии (решатель)
  - ArrowPlacement       — стрелка: вершина, направление, внутри/снаружи
  - TextLayout           — позиция и поворот текста, выноска
  - LinearDimensionLayout — полная раскладка одного размера

Ошибки:
  - DimensionError            — базовая ошибка построения размера
  - DegenerateGeometryError   — нулевой вектор там, где нужна нормализация
  - InvalidStyleError         — значение стиля вне допустимой области

Все координаты — ezdxf.math.Vec2 в мировой системе чертежа.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from ezdxf.math import Vec2


# ---------------------------------------------------------------------------
# Ошибки
# ---------------------------------------------------------------------------

class DimensionError(Exception):
    """Построение одного размера невозможно (остальные не затрагиваются)."""


class DegenerateGeometryError(DimensionError):
    """Вектор нулевой длины там, где требуется направление."""


class InvalidStyleError(DimensionError):
    """Параметр размерного стиля вне допустимой области."""


# ---------------------------------------------------------------------------
# Примитивы
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineSegment:
    """Отрезок в мировых координатах.

    Attributes:
        start: начальная точка.
        end: конечная точка.
    """
    start: Vec2
    end: Vec2

    @property
    def length(self) -> float:
        return self.start.distance(self.end)


@dataclass(frozen=True)
class DimensionFrame:
    """Результат решателя: ориентация и концы размерной линии.

    Attributes:
        ccw: True, если definition_point лежит слева от p1→p2.
        dim_dir: единичное направление размерной линии (от dp2 к dp1).
        dp1: конец размерной линии со стороны первой точки.
        dp2: конец размерной линии со стороны второй точки
            (совпадает с definition_point).
    """
    ccw: bool
    dim_dir: Vec2
    dp1: Vec2
    dp2: Vec2

    @property
    def midpoint(self) -> Vec2:
        return self.dp1.lerp(self.dp2)


@dataclass(frozen=True)
class ArrowPlacement:
    """Стрелка на конце размерной линии.

    Attributes:
        anchor: вершина стрелки (dp1 или dp2).
        direction: единичный вектор, куда смотрит остриё.
        outside: стрелка вынесена за выносную линию.
        block: ссылка на форму стрелки (DIMBLK1/DIMBLK2), не интерпретируется.
    """
    anchor: Vec2
    direction: Vec2
    outside: bool
    block: str = ""

    @property
    def angle_deg(self) -> float:
        return self.direction.angle_deg


@dataclass(frozen=True)
class TextLayout:
    """Размещение размерной надписи.

    Attributes:
        anchor: центр текста.
        rotation_deg: поворот текста (градусы, текст читается снизу/справа).
        text_length: длина текста на размерной линии (0 при выноске).
        text_on_dim_line: проекция точки текста на размерную линию.
        text_inside: проекция текста не дальше dp2 от dp1.
        leader: линия-выноска от середины размерной линии к тексту.
    """
    anchor: Vec2
    rotation_deg: float
    text_length: float
    text_on_dim_line: Vec2
    text_inside: bool
    leader: Optional[LineSegment] = None

    @property
    def with_leader(self) -> bool:
        return self.leader is not None


# ---------------------------------------------------------------------------
# Главная структура
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinearDimensionLayout:
    """Полная раскладка линейного размера.

    Attributes:
        frame: ориентация и концы размерной линии.
        extension_lines: две выносные линии (первая, вторая).
        dimension_line: основная размерная линия.
        stubs: продолжения размерной линии под внешние стрелки / текст;
            None — продолжение не рисуется.
        arrows: стрелки у dp1 и dp2.
        text: размещение надписи.
        text_value: текст надписи.
        text_height: высота шрифта надписи.
        text_middle_point: исходная точка текста из определения размера.
    """
    frame: DimensionFrame
    extension_lines: Tuple[LineSegment, LineSegment]
    dimension_line: LineSegment
    stubs: Tuple[Optional[LineSegment], Optional[LineSegment]]
    arrows: Tuple[ArrowPlacement, ArrowPlacement]
    text: TextLayout
    text_value: str
    text_height: float
    text_middle_point: Vec2

    def segments(self) -> List[LineSegment]:
        """Все отрезки размера в порядке отрисовки (без стрелок и текста)."""
        result = list(self.extension_lines)
        result.append(self.dimension_line)
        result.extend(s for s in self.stubs if s is not None)
        if self.text.leader is not None:
            result.append(self.text.leader)
        return result

    def bounding_box(self) -> Tuple[float, float, float, float]:
        """Ограничивающий прямоугольник (x_min, y_min, x_max, y_max).

        Учитывает отрезки, вершины стрелок и центр текста.
        """
        points: List[Vec2] = []
        for seg in self.segments():
            points.extend((seg.start, seg.end))
        points.extend(a.anchor for a in self.arrows)
        points.append(self.text.anchor)

        arr = np.array([(p.x, p.y) for p in points], dtype=np.float64)
        mins = arr.min(axis=0)
        maxs = arr.max(axis=0)
        return (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))
