"""
DXF document → SVG drawing conversion.

Modules:
  - context:  conversion options, log, defs collection, viewBox
  - entities: per-entity converters and the single dispatch point
  - blocks:   block definitions → <defs>
  - document: whole document and file conversion
"""

from cad_svg.conversion.context import (
    ConversionContext,
    ConversionInfo,
    ConversionOptions,
    DefsCollection,
    ViewboxData,
)
from cad_svg.conversion.document import (
    convert_document,
    convert_file,
    create_svg,
    model_space_rectangle,
)
from cad_svg.conversion.entities import convert_entity

__all__ = [
    'ConversionContext',
    'ConversionInfo',
    'ConversionOptions',
    'DefsCollection',
    'ViewboxData',
    'convert_document',
    'convert_file',
    'convert_entity',
    'create_svg',
    'model_space_rectangle',
]
