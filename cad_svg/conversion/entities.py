"""
Conversion of single DXF entities into SVG elements.

Every supported DXF type has one EntityConverter in the registry;
convert_entity() is the only dispatch point. A converter returns an
svgwrite element, or None when the entity yields no output (e.g. an
unsupported POLYLINE variant). Counting and error reporting happen in
convert_entity(), never in the converters.

Supported types: LINE, CIRCLE, ARC, ELLIPSE, LWPOLYLINE, POLYLINE,
POINT, TEXT, MTEXT, INSERT, DIMENSION (linear only).
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

import svgwrite
from ezdxf import colors
from ezdxf.math import Vec2
from ezdxf.path import make_path

from cad_svg.config import (
    ELLIPSE_SEGMENTS,
    FLATTENING_DISTANCE,
    MTEXT_LINE_SPACING,
    SVG_POINT_RADIUS,
)
from cad_svg.conversion.context import ConversionContext
from cad_svg.drawing.dimensions.definition import (
    LINEAR_DIMTYPES,
    DimensionDefinition,
    DimensionStyleProperties,
)
from cad_svg.drawing.dimensions.geometry import DimensionError
from cad_svg.drawing.dimensions.layout import layout_linear_dimension
from cad_svg.drawing.dimensions.renderer import render_linear_dimension
from cad_svg.drawing.svg_renderer import (
    create_path,
    create_text,
    create_use,
    format_number,
    make_element_id,
)

logger = logging.getLogger(__name__)

# ACI 0 = BYBLOCK, 256 = BYLAYER, 7 = black/white (default stroke)
_INHERITED_COLORS = (0, 7, 256)

# TEXT halign → text-anchor
_TEXT_ANCHORS = {0: 'start', 1: 'middle', 2: 'end', 3: 'start', 4: 'middle', 5: 'start'}


def entity_stroke(entity) -> Optional[str]:
    """Stroke colour of an entity, or None if it inherits the document stroke."""
    if entity.dxf.hasattr('true_color'):
        r, g, b = entity.rgb
        return f"#{r:02x}{g:02x}{b:02x}"
    aci = entity.dxf.get('color', 256)
    if aci in _INHERITED_COLORS:
        return None
    r, g, b = colors.aci2rgb(aci)
    return f"#{r:02x}{g:02x}{b:02x}"


def _apply_standard_attributes(element, entity) -> None:
    """id = handle, class = layer, stroke = entity colour."""
    handle = entity.dxf.get('handle')
    if handle:
        element['id'] = make_element_id(handle)
    element['class'] = make_element_id(entity.dxf.get('layer', '0'))
    stroke = entity_stroke(entity)
    if stroke:
        element['stroke'] = stroke


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------

class EntityConverter(ABC):
    """Converts one DXF entity type into an SVG element."""

    @abstractmethod
    def convert(self, entity, dwg: svgwrite.Drawing, ctx: ConversionContext):
        """Return an svgwrite element or None if the entity yields no output.

        Raises:
            DimensionError: a dimension cannot be laid out.
            ValueError: the entity has non-finite coordinates.
        """


class LineConverter(EntityConverter):

    def convert(self, entity, dwg, ctx):
        return create_path(dwg, (entity.dxf.start, entity.dxf.end), precision=ctx.precision)


class CircleConverter(EntityConverter):

    def convert(self, entity, dwg, ctx):
        center = entity.dxf.center
        return dwg.circle(
            center=(format_number(center[0], ctx.precision), format_number(center[1], ctx.precision)),
            r=format_number(entity.dxf.radius, ctx.precision),
        )


class ArcConverter(EntityConverter):
    """ARC as an SVG elliptical arc command (counter-clockwise in DXF)."""

    def convert(self, entity, dwg, ctx):
        p = ctx.precision
        start = entity.start_point
        end = entity.end_point
        radius = format_number(entity.dxf.radius, p)
        span = (entity.dxf.end_angle - entity.dxf.start_angle) % 360.0
        large_arc = 1 if span > 180.0 else 0
        d = (
            f"M {format_number(start.x, p)},{format_number(start.y, p)} "
            f"A {radius},{radius} 0 {large_arc} 1 "
            f"{format_number(end.x, p)},{format_number(end.y, p)}"
        )
        return dwg.path(d=d)


class EllipseConverter(EntityConverter):

    def convert(self, entity, dwg, ctx):
        points = list(entity.flattening(FLATTENING_DISTANCE, segments=ELLIPSE_SEGMENTS))
        closed = math.isclose(
            (entity.dxf.end_param - entity.dxf.start_param) % math.tau, 0.0, abs_tol=1e-9,
        )
        if closed and len(points) > 1:
            points = points[:-1]
        return create_path(dwg, points, closed=closed, precision=ctx.precision)


class PolylineConverter(EntityConverter):
    """LWPOLYLINE and 2D/3D POLYLINE; bulges are flattened."""

    def convert(self, entity, dwg, ctx):
        if entity.dxftype() == 'POLYLINE':
            if not (entity.is_2d_polyline or entity.is_3d_polyline):
                logger.debug("POLYLINE %s is a mesh, skipped", entity.dxf.handle)
                return None
            closed = entity.is_closed
        else:
            closed = entity.closed

        points = list(make_path(entity).flattening(FLATTENING_DISTANCE))
        if not points:
            return None
        if closed and len(points) > 1 and points[0].isclose(points[-1]):
            points = points[:-1]
        return create_path(dwg, points, closed=closed, precision=ctx.precision)


class PointConverter(EntityConverter):

    def convert(self, entity, dwg, ctx):
        location = entity.dxf.location
        return dwg.circle(
            center=(format_number(location[0], ctx.precision), format_number(location[1], ctx.precision)),
            r=SVG_POINT_RADIUS,
            fill='currentColor',
        )


class TextConverter(EntityConverter):

    def convert(self, entity, dwg, ctx):
        halign = entity.dxf.get('halign', 0)
        position = entity.dxf.insert
        if halign and entity.dxf.hasattr('align_point'):
            position = entity.dxf.align_point
        return create_text(
            dwg,
            entity.plain_text(),
            position,
            entity.dxf.get('rotation', 0.0),
            entity.dxf.get('height', 1.0),
            ctx.dimensions.font_family,
            ctx.options.reverse_y,
            anchor=_TEXT_ANCHORS.get(halign, 'start'),
            centered=False,
            precision=ctx.precision,
        )


class MTextConverter(EntityConverter):
    """MTEXT as one <text> per line; formatting codes are dropped."""

    def convert(self, entity, dwg, ctx):
        lines = entity.plain_text(split=True)
        if not lines:
            return None

        height = entity.dxf.get('char_height', 1.0)
        rotation = entity.get_rotation()
        attachment = entity.dxf.get('attachment_point', 1)
        anchor = ('start', 'middle', 'end')[(attachment - 1) % 3]
        spacing = height * MTEXT_LINE_SPACING
        total = (len(lines) - 1) * spacing

        # Baseline of the first line relative to the insert point (Y-up)
        row = (attachment - 1) // 3
        if row == 0:
            first_baseline = -height
        elif row == 1:
            first_baseline = total / 2.0 - height / 2.0
        else:
            first_baseline = total

        insert = Vec2(entity.dxf.insert)
        down = Vec2.from_deg_angle(rotation - 90.0)
        up = -down

        group = dwg.g()
        for i, line in enumerate(lines):
            position = insert + up * first_baseline + down * (i * spacing)
            group.add(create_text(
                dwg, line, position, rotation, height,
                ctx.dimensions.font_family, ctx.options.reverse_y,
                anchor=anchor, centered=False, precision=ctx.precision,
            ))
        return group


class InsertConverter(EntityConverter):
    """INSERT as <use> of the block group in defs."""

    def convert(self, entity, dwg, ctx):
        name = entity.dxf.name
        block_id = make_element_id(name)
        if entity.block() is None:
            logger.warning("INSERT %s references missing block %r", entity.dxf.handle, name)
            return None
        return create_use(
            dwg, block_id, entity.dxf.insert,
            entity.dxf.get('rotation', 0.0),
            entity.dxf.get('xscale', 1.0),
            entity.dxf.get('yscale', 1.0),
            ctx.precision,
        )


class DimensionConverter(EntityConverter):
    """Linear DIMENSION laid out by the dimension engine.

    Other dimension types are not supported and produce no output.
    """

    def convert(self, entity, dwg, ctx):
        if entity.dimtype not in LINEAR_DIMTYPES:
            logger.debug("DIMENSION %s of type %d skipped", entity.dxf.handle, entity.dimtype)
            return None

        style = DimensionStyleProperties.from_entity(entity, ctx.default_dimension_style())
        definition = DimensionDefinition.from_entity(entity, style.decimals)
        layout = layout_linear_dimension(definition, style, ctx.dimensions.text_width_factor)
        return render_linear_dimension(dwg, layout, ctx, style.arrow_size)


# Registry: DXF type → converter
_REGISTRY = {
    'LINE': LineConverter(),
    'CIRCLE': CircleConverter(),
    'ARC': ArcConverter(),
    'ELLIPSE': EllipseConverter(),
    'LWPOLYLINE': PolylineConverter(),
    'POLYLINE': PolylineConverter(),
    'POINT': PointConverter(),
    'TEXT': TextConverter(),
    'MTEXT': MTextConverter(),
    'INSERT': InsertConverter(),
    'DIMENSION': DimensionConverter(),
}


def supported_types() -> Tuple[str, ...]:
    return tuple(_REGISTRY)


def convert_entity(entity, dwg: svgwrite.Drawing, ctx: ConversionContext):
    """Convert one entity and update the conversion counters.

    A failure of one entity is logged and counted; it never aborts the
    conversion of the document.

    Returns:
        svgwrite element or None.
    """
    dxftype = entity.dxftype()
    converter = _REGISTRY.get(dxftype)
    if converter is None:
        logger.debug("No converter for %s, skipped", dxftype)
        ctx.info.count_skipped(dxftype)
        return None

    try:
        element = converter.convert(entity, dwg, ctx)
    except (DimensionError, ValueError) as e:
        logger.warning("%s %s not converted: %s", dxftype, entity.dxf.get('handle', '?'), e)
        ctx.info.count_failure()
        return None

    if element is None:
        ctx.info.count_skipped(dxftype)
        return None

    if dxftype == 'DIMENSION':
        # Dimension group carries its own id; class marks the layer
        element['id'] = make_element_id(entity.dxf.get('handle', ''))
        element['class'] = f"dimension {make_element_id(entity.dxf.get('layer', '0'))}"
        stroke = entity_stroke(entity)
        if stroke:
            element['stroke'] = stroke
    else:
        _apply_standard_attributes(element, entity)
    ctx.info.count_success()
    return element


def convert_entities(
    entities: Iterable,
    dwg: svgwrite.Drawing,
    ctx: ConversionContext,
) -> List[Tuple[str, object]]:
    """Convert a sequence of entities (layout or block content).

    Returns:
        List of (dxftype, element) in the original order; entities
        without output are left out.
    """
    converted = []
    for entity in entities:
        element = convert_entity(entity, dwg, ctx)
        if element is not None:
            converted.append((entity.dxftype(), element))
    return converted
