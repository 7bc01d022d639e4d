"""
Раскладка линейного размера: от определения и стиля к полной геометрии.

Порядок шагов фиксирован:
  1. решатель (ccw, dim_dir, dp1, dp2);
  2. надпись и выноска (от неё зависит длина текста на линии);
  3. флаги внешних стрелок;
  4. выносные линии, размерная линия, продолжения, стрелки.

Функция чистая: повторный вызов с теми же данными даёт тот же результат.
"""

import logging

from cad_svg.config import DIM_TEXT_WIDTH_FACTOR
from cad_svg.drawing.dimensions.builders import (
    arrows_outside,
    build_dimension_line,
    build_extension_line,
    build_stubs,
    place_arrows,
)
from cad_svg.drawing.dimensions.definition import (
    DimensionDefinition,
    DimensionStyleProperties,
)
from cad_svg.drawing.dimensions.geometry import LinearDimensionLayout
from cad_svg.drawing.dimensions.solver import solve_dimension_frame
from cad_svg.drawing.dimensions.text_placement import place_text

logger = logging.getLogger(__name__)


def layout_linear_dimension(
    definition: DimensionDefinition,
    style: DimensionStyleProperties,
    width_factor: float = DIM_TEXT_WIDTH_FACTOR,
) -> LinearDimensionLayout:
    """Вычислить все точки, длины и флаги линейного размера.

    Args:
        definition: определение размера.
        style: разрешённый размерный стиль.
        width_factor: ширина символа в долях высоты (оценка длины текста).

    Returns:
        LinearDimensionLayout.

    Raises:
        InvalidStyleError: стиль вне допустимой области.
        DegenerateGeometryError: вырожденное расположение точек.
    """
    style.validate()

    frame = solve_dimension_frame(
        definition.first_point,
        definition.second_point,
        definition.definition_point,
        definition.measurement,
    )

    text = place_text(
        frame,
        definition.text_middle_point,
        definition.text,
        style.text_height,
        definition.text_rotation,
        style.text_movement,
        width_factor,
    )

    # Обе стрелки выносятся вместе: порог общий для размера
    outside = arrows_outside(definition.measurement, style.arrow_size, text.text_length)

    extension_lines = (
        build_extension_line(
            definition.first_point, frame.dp1,
            style.extension_line_extension, style.extension_line_offset,
        ),
        build_extension_line(
            definition.second_point, frame.dp2,
            style.extension_line_extension, style.extension_line_offset,
        ),
    )
    dimension_line = build_dimension_line(
        frame, style.dimension_line_extension, style.arrow_size, outside, outside,
    )
    stubs = build_stubs(frame, text, style.arrow_size, outside, outside)
    arrows = place_arrows(
        frame, outside, outside, style.arrow_head_block1, style.arrow_head_block2,
    )

    logger.debug(
        "Размер %s: ccw=%s, стрелки %s, выноска=%s",
        definition.text or "<пусто>", frame.ccw,
        "снаружи" if outside else "внутри", text.with_leader,
    )

    return LinearDimensionLayout(
        frame=frame,
        extension_lines=extension_lines,
        dimension_line=dimension_line,
        stubs=stubs,
        arrows=arrows,
        text=text,
        text_value=definition.text,
        text_height=style.text_height,
        text_middle_point=(
            definition.text_middle_point
            if definition.text_middle_point is not None else frame.midpoint
        ),
    )
