"""
Решатель геометрии линейного размера.

По двум измеряемым точкам, точке определения и значению размера
находит ориентацию (ccw), направление размерной линии и её концы.

Ориентация определяется только знаком z векторного произведения
(p2 - p1) × (dp - p1); угловая формула не используется.
"""

import math

from ezdxf.math import Vec2

from cad_svg.config import GEOMETRY_EPSILON
from cad_svg.drawing.dimensions.geometry import DegenerateGeometryError, DimensionFrame


def unit(vector: Vec2, what: str) -> Vec2:
    """Нормализовать вектор; нулевой вектор — DegenerateGeometryError.

    Args:
        vector: исходный вектор.
        what: название вектора для сообщения об ошибке.
    """
    length = vector.magnitude
    if not math.isfinite(length) or length < GEOMETRY_EPSILON:
        raise DegenerateGeometryError(f"Вектор '{what}' имеет нулевую длину")
    return vector / length


def is_ccw(first_point: Vec2, second_point: Vec2, definition_point: Vec2) -> bool:
    """Точка определения лежит слева от направления p1→p2 (площадь > 0)."""
    return (second_point - first_point).det(definition_point - first_point) > 0


def solve_dimension_frame(
    first_point: Vec2,
    second_point: Vec2,
    definition_point: Vec2,
    measurement: float,
) -> DimensionFrame:
    """Вычислить ориентацию и концы размерной линии.

    Алгоритм:
      1. d2 = dp - p2 задаёт направление второй выносной линии.
      2. ccw — знак z-компоненты (p2 - p1) × (dp - p1).
      3. dim_dir = normalize(d2), повёрнутый на +90° при ccw, иначе на -90°.
      4. dp2 = dp; dp1 = dp2 + dim_dir * measurement.

    Returns:
        DimensionFrame.

    Raises:
        DegenerateGeometryError: dp совпадает с p2 или значение не конечно.
    """
    if not math.isfinite(measurement):
        raise DegenerateGeometryError(f"Значение размера не конечно: {measurement!r}")

    ext_dir = unit(definition_point - second_point, "definition_point - second_point")
    ccw = is_ccw(first_point, second_point, definition_point)
    dim_dir = ext_dir.orthogonal(ccw)

    dp2 = definition_point
    dp1 = dp2 + dim_dir * measurement
    return DimensionFrame(ccw=ccw, dim_dir=dim_dir, dp1=dp1, dp2=dp2)
