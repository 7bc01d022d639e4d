"""
Размещение размерной надписи и линии-выноски.

Текст либо стоит на размерной линии (в проекции своей точки на неё),
либо, если он сдвинут дальше порога и DIMTMOVE = 1, остаётся на месте
и соединяется выноской с серединой размерной линии.
"""

from typing import Optional

from ezdxf.math import Vec2

from cad_svg.config import DIM_LEADER_FACTOR, DIM_TEXT_SIZE_FACTOR, DIM_TEXT_WIDTH_FACTOR
from cad_svg.drawing.dimensions.definition import TextMovement
from cad_svg.drawing.dimensions.geometry import DimensionFrame, LineSegment, TextLayout
from cad_svg.drawing.text_metrics import estimate_text_length, text_size


def readable_rotation(dim_dir: Vec2, extra_deg: float = 0.0) -> float:
    """Угол текста вдоль размерной линии, приведённый к (-90°, 90°], плюс поворот."""
    angle = dim_dir.angle_deg
    while angle > 90.0:
        angle -= 180.0
    while angle <= -90.0:
        angle += 180.0
    return angle + extra_deg


def project_on_dimension_line(frame: DimensionFrame, point: Vec2) -> Vec2:
    """Ближайшая к point точка прямой размерной линии."""
    d = frame.dim_dir
    return frame.dp1 + d * d.dot(point - frame.dp1)


def needs_leader(
    displacement: float,
    text_height: float,
    text_movement: TextMovement,
) -> bool:
    """Выноска нужна, если текст сдвинут дальше 1.4 * textSize и DIMTMOVE = 1."""
    threshold = DIM_LEADER_FACTOR * text_size(text_height) * DIM_TEXT_SIZE_FACTOR
    return (
        displacement > threshold
        and text_movement == TextMovement.ADD_LEADER_WHEN_TEXT_MOVED
    )


def place_text(
    frame: DimensionFrame,
    text_middle_point: Optional[Vec2],
    text_value: str,
    text_height: float,
    text_rotation: float = 0.0,
    text_movement: TextMovement = TextMovement.MOVE_DIM_LINE_WITH_TEXT,
    width_factor: float = DIM_TEXT_WIDTH_FACTOR,
) -> TextLayout:
    """Разместить надпись размера.

    Args:
        frame: результат решателя.
        text_middle_point: точка текста из определения; None — середина линии.
        text_value: строка надписи (для оценки длины).
        text_height: высота шрифта.
        text_rotation: дополнительный поворот, градусы.
        text_movement: политика DIMTMOVE.
        width_factor: ширина символа в долях высоты.

    Returns:
        TextLayout; при выноске text_length = 0.
    """
    dim_mid = frame.midpoint
    text_mid = text_middle_point if text_middle_point is not None else dim_mid
    text_on_line = project_on_dimension_line(frame, text_mid)
    rotation = readable_rotation(frame.dim_dir, text_rotation)

    span = (frame.dp2 - frame.dp1).magnitude
    text_inside = span > (text_on_line - frame.dp1).magnitude

    displacement = (text_mid - text_on_line).magnitude
    if needs_leader(displacement, text_height, text_movement):
        return TextLayout(
            anchor=text_mid,
            rotation_deg=rotation,
            text_length=0.0,
            text_on_dim_line=text_on_line,
            text_inside=text_inside,
            leader=LineSegment(start=dim_mid, end=text_mid),
        )

    return TextLayout(
        anchor=text_on_line,
        rotation_deg=rotation,
        text_length=estimate_text_length(text_value, text_height, width_factor),
        text_on_dim_line=text_on_line,
        text_inside=text_inside,
    )
