"""
Conversion of a complete DXF document into an SVG drawing.

Pipeline:
1. viewBox from the model space extent ($EXTMIN/$EXTMAX), falling back
   to the bounding box of the model space entities
2. block definitions → <defs>
3. model space entities → main group (optionally inserts last, or all
   free entities in a "_free" block)
4. main group flipped with scale(1,-1) when reverse_y is set
"""

import logging
import math
from pathlib import Path
from typing import Optional, Tuple, Union

import svgwrite
from ezdxf import bbox

from cad_svg.conversion.blocks import convert_blocks
from cad_svg.conversion.context import ConversionContext
from cad_svg.conversion.entities import convert_entities
from cad_svg.drawing.svg_renderer import create_use, format_number
from cad_svg.io.dxf_loader import load_dxf
from cad_svg.logging_config import LogContext, log_timing
from cad_svg.project_config import OutputConfig, ProjectConfig

logger = logging.getLogger(__name__)

FREE_ELEMENTS_ID = '_free'


def header_extents(doc) -> Optional[Tuple[float, float, float, float]]:
    """Model space extent from the header, or None if it is not set.

    New documents carry $EXTMIN = (1e20, ...) and $EXTMAX = (-1e20, ...),
    which counts as not set.
    """
    ext_min = doc.header.get('$EXTMIN')
    ext_max = doc.header.get('$EXTMAX')
    if ext_min is None or ext_max is None:
        return None
    values = (ext_min[0], ext_min[1], ext_max[0], ext_max[1])
    if not all(math.isfinite(v) and abs(v) < 1e19 for v in values):
        return None
    return values


def model_space_extents(doc) -> Optional[Tuple[float, float, float, float]]:
    """Extent of the model space: header values, else computed from entities."""
    extents = header_extents(doc)
    if extents is not None:
        return extents
    box = bbox.extents(doc.modelspace(), fast=True)
    if not box.has_data:
        return None
    logger.debug("Header extent not set, using entity bounding box")
    return (box.extmin.x, box.extmin.y, box.extmax.x, box.extmax.y)


def create_viewbox_from_model_space_extent(doc, ctx: ConversionContext) -> bool:
    """Fill ctx.viewbox from the model space extent; False if it is empty."""
    extents = model_space_extents(doc)
    if extents is None:
        logger.warning("Model space extent is empty, no viewBox created")
        return False
    ctx.viewbox.set_extents(*extents)
    if ctx.viewbox.is_empty:
        ctx.viewbox.enabled = False
        logger.warning("Model space extent has zero width or height, no viewBox created")
        return False
    return True


def create_svg(ctx: ConversionContext) -> svgwrite.Drawing:
    """Create the <svg> element with viewBox, stroke, stroke-width and fill."""
    dwg = svgwrite.Drawing(size=('100%', '100%'), debug=False)
    dwg['id'] = 'svg-element'

    if ctx.viewbox.enabled:
        min_x, min_y, width, height = ctx.viewbox.as_svg_viewbox(ctx.options.reverse_y)
        p = ctx.precision
        dwg.viewbox(
            format_number(min_x, p), format_number(min_y, p),
            format_number(width, p), format_number(height, p),
        )

    attrs = ctx.attributes
    if attrs.stroke is not None:
        dwg['stroke'] = attrs.stroke
    if attrs.stroke_width is not None:
        dwg['stroke-width'] = attrs.stroke_width
    if attrs.fill is not None:
        dwg['fill'] = attrs.fill
    return dwg


def model_space_rectangle(doc, dwg: svgwrite.Drawing, ctx: ConversionContext):
    """Red rectangle of the header model space extent.

    Returns:
        rect (inside a flipping group when reverse_y is set), or None
        when the extent has zero width or height.
    """
    extents = header_extents(doc)
    if extents is None:
        return None
    min_x, min_y, max_x, max_y = extents
    width = max_x - min_x
    height = max_y - min_y
    if width <= 0 or height <= 0:
        return None

    rect = dwg.rect(
        insert=(min_x, min_y),
        size=(width, height),
        stroke='red',
        stroke_width=(width + height) / 25000,
        fill='none',
    )
    if not ctx.options.reverse_y:
        return rect

    group = dwg.g(transform='scale(1,-1)')
    group.add(rect)
    return group


def convert_document(doc, ctx: Optional[ConversionContext] = None) -> svgwrite.Drawing:
    """Convert an ezdxf document into an svgwrite drawing.

    Args:
        doc: ezdxf document.
        ctx: conversion context; a default one is created if None.
            The context collects the conversion log and counters.

    Returns:
        svgwrite.Drawing ready to be saved.
    """
    if ctx is None:
        ctx = ConversionContext()
    options = ctx.options

    ctx.info.log(f"Layer count: {len(doc.layers)}")

    if options.create_viewbox_from_model_space_extent:
        create_viewbox_from_model_space_extent(doc, ctx)

    dwg = create_svg(ctx)

    convert_blocks(doc, dwg, ctx)

    converted = convert_entities(doc.modelspace(), dwg, ctx)
    entities = [element for _, element in converted]
    inserts = []
    if options.concentrate_inserts:
        entities = [element for dxftype, element in converted if dxftype != 'INSERT']
        inserts = [element for dxftype, element in converted if dxftype == 'INSERT']

    main = dwg.g(id='main', class_='main-group')

    if not entities and not inserts and len(ctx.defs) > 0:
        block_id = ctx.defs.first_id()
        inserts.append(create_use(dwg, block_id, (0.0, 0.0)))
        ctx.info.log(f"Dummy use of first block {block_id} added.")

    if entities and options.create_extra_group_for_free_elements:
        free = dwg.g(id=FREE_ELEMENTS_ID, class_='block-record')
        for element in entities:
            free.add(element)
        ctx.defs.add(FREE_ELEMENTS_ID, free)
        main.add(create_use(dwg, FREE_ELEMENTS_ID, (0.0, 0.0)))
    else:
        for element in entities:
            main.add(element)
    for element in inserts:
        main.add(element)

    if options.reverse_y:
        main['transform'] = 'scale(1,-1)'

    for _, element in ctx.defs:
        dwg.defs.add(element)
    dwg.add(main)

    ctx.info.log("Loading finished")
    ctx.info.log(ctx.info.summary())
    if ctx.info.skipped_by_type:
        logger.debug("Skipped entities by type: %s", dict(ctx.info.skipped_by_type))
    return dwg


def make_output_path(
    input_path: Union[str, Path],
    output: Optional[OutputConfig] = None,
) -> Path:
    """Output SVG path: <output_dir>/<prefix><stem><suffix>.svg."""
    input_path = Path(input_path)
    output = output or OutputConfig()
    directory = Path(output.output_dir) if output.output_dir else input_path.parent
    if not directory.is_absolute() and output.output_dir:
        directory = input_path.parent / directory
    return directory / f"{output.prefix}{input_path.stem}{output.suffix}.svg"


def convert_file(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[ProjectConfig] = None,
    use_recover: bool = False,
    model_space_rect: bool = False,
) -> Tuple[Path, ConversionContext]:
    """Convert a DXF file into an SVG file.

    Args:
        input_path: DXF file.
        output_path: SVG file; derived from the output config if None.
        config: project configuration (defaults if None).
        use_recover: read the DXF with ezdxf.recover.
        model_space_rect: add a red rectangle of the model space extent.

    Returns:
        (output path, conversion context with log and counters)

    Raises:
        DXFLoadError: the input cannot be loaded.
    """
    config = config or ProjectConfig()
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else make_output_path(input_path, config.output)

    with LogContext(source=input_path.name):
        with log_timing(logger, f"Converting {input_path.name}", level=logging.INFO):
            doc, _ = load_dxf(str(input_path), use_recover=use_recover)
            ctx = ConversionContext.from_config(config)
            dwg = convert_document(doc, ctx)
            if model_space_rect:
                rect = model_space_rectangle(doc, dwg, ctx)
                if rect is not None:
                    dwg.add(rect)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            dwg.saveas(str(output_path), pretty=True)

    logger.info("Saved: %s", output_path)
    return output_path, ctx
