"""
SVG-сборка линейного размера.

Содержит:
- render_linear_dimension — раскладка → SVG-группа <g class="dimension">

Порядок элементов в группе фиксирован: выносные линии, размерная
линия, продолжения, стрелки, выноска, фон и текст, отладочная точка.
"""

import logging
from typing import Optional

import svgwrite

from cad_svg.drawing.dimensions.geometry import ArrowPlacement, LinearDimensionLayout
from cad_svg.drawing.svg_renderer import (
    arrow_style_for_block,
    create_debug_point,
    create_line,
    create_text,
    create_text_background,
    make_element_id,
    render_arrow_by_style,
)

logger = logging.getLogger(__name__)


def render_linear_dimension(
    dwg: svgwrite.Drawing,
    layout: LinearDimensionLayout,
    ctx,
    arrow_size: float,
    element_id: Optional[str] = None,
) -> svgwrite.container.Group:
    """Собрать SVG-группу одного линейного размера.

    Args:
        dwg: SVG-документ.
        layout: результат layout_linear_dimension.
        ctx: ConversionContext (опции, шрифт, defs, точность).
        arrow_size: длина стрелки из разрешённого стиля.
        element_id: id группы (handle размера).

    Returns:
        Группа <g class="dimension">.
    """
    precision = ctx.precision
    group = dwg.g(class_='dimension')
    if element_id:
        group['id'] = element_id
    group['data-dim-value'] = layout.text_value

    # Выносные линии
    for seg in layout.extension_lines:
        group.add(create_line(dwg, seg.start, seg.end, 'extension', precision))

    # Размерная линия
    dim_line = layout.dimension_line
    group.add(create_line(dwg, dim_line.start, dim_line.end, 'dimension', precision))

    # Продолжения под внешние стрелки / вынесенный текст
    for stub in layout.stubs:
        if stub is not None:
            group.add(create_line(dwg, stub.start, stub.end, 'stub', precision))

    # Стрелки
    for arrow in layout.arrows:
        _render_arrow(dwg, group, arrow, arrow_size, ctx)

    text = layout.text
    if text.leader is not None:
        group.add(create_line(dwg, text.leader.start, text.leader.end, 'leader', precision))

    if layout.text_value:
        reverse_y = ctx.options.reverse_y
        if not text.with_leader and text.text_length > 0:
            group.add(create_text_background(
                dwg, text.text_length, text.anchor, text.rotation_deg,
                layout.text_height, reverse_y, precision,
            ))
        group.add(create_text(
            dwg, layout.text_value, text.anchor, text.rotation_deg,
            layout.text_height, ctx.dimensions.font_family, reverse_y,
            precision=precision,
        ))

    if ctx.options.create_debug_points:
        group.add(create_debug_point(dwg, layout.text_middle_point))

    return group


def _render_arrow(
    dwg: svgwrite.Drawing,
    group: svgwrite.container.Group,
    arrow: ArrowPlacement,
    arrow_size: float,
    ctx,
) -> None:
    block_id = make_element_id(arrow.block) if arrow.block else None
    in_defs = block_id is not None and block_id in ctx.defs
    style = arrow_style_for_block(arrow.block, in_defs)
    logger.debug("Стрелка %r → %s", arrow.block, style)
    render_arrow_by_style(
        dwg, group, arrow.anchor, arrow.angle_deg, style, arrow_size,
        block_id=block_id, precision=ctx.precision,
    )
