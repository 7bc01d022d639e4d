"""
Conversion of DXF block definitions into <defs> groups.

Every block that is not a layout and not an anonymous dimension block
(*D...) becomes <g id="..." class="block-record"> in the defs
collection. The block base point is applied as translate(-x,-y), so an
INSERT can reference the group with its own insert point.
"""

import logging

import svgwrite

from cad_svg.conversion.context import ConversionContext
from cad_svg.conversion.entities import convert_entities
from cad_svg.drawing.svg_renderer import format_number, make_element_id

logger = logging.getLogger(__name__)

# Anonymous blocks holding the rendered geometry of dimensions; the
# dimensions themselves are laid out again from their definition.
DIMENSION_BLOCK_PREFIX = '*D'


def is_convertible_block(block_layout) -> bool:
    """True for blocks that go into defs."""
    if block_layout.is_any_layout:
        return False
    return not block_layout.name.upper().startswith(DIMENSION_BLOCK_PREFIX)


def convert_block(block_layout, dwg: svgwrite.Drawing, ctx: ConversionContext):
    """Convert one block definition into a group (not added anywhere)."""
    block_id = make_element_id(block_layout.name)
    group = dwg.g(id=block_id, class_='block-record')

    base = block_layout.block.dxf.get('base_point', (0.0, 0.0, 0.0))
    if base[0] or base[1]:
        group['transform'] = (
            f"translate({format_number(-base[0], ctx.precision)},"
            f"{format_number(-base[1], ctx.precision)})"
        )

    for _, element in convert_entities(block_layout, dwg, ctx):
        group.add(element)
    return group


def convert_blocks(doc, dwg: svgwrite.Drawing, ctx: ConversionContext) -> int:
    """Convert all block definitions of a document into ctx.defs.

    Returns:
        Number of blocks added to defs.
    """
    added = 0
    for block_layout in doc.blocks:
        if not is_convertible_block(block_layout):
            continue
        group = convert_block(block_layout, dwg, ctx)
        if ctx.defs.add(group['id'], group):
            added += 1
    ctx.info.log(f"Block count: {added}")
    return added
