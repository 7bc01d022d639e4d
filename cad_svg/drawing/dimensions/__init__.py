"""
Пакет раскладки линейных размеров DXF.

Модули:
  - definition:     определение размера и размерный стиль
  - geometry:       неизменяемые результаты раскладки и ошибки
  - solver:         ориентация и концы размерной линии
  - builders:       выносные, размерная линия, продолжения, стрелки
  - text_placement: надпись и выноска
  - layout:         полная раскладка одного размера
  - renderer:       SVG-сборка размера
"""

from cad_svg.drawing.dimensions.definition import (
    DimensionDefinition,
    DimensionStyleProperties,
    TextMovement,
)
from cad_svg.drawing.dimensions.geometry import (
    ArrowPlacement,
    DegenerateGeometryError,
    DimensionError,
    DimensionFrame,
    InvalidStyleError,
    LinearDimensionLayout,
    LineSegment,
    TextLayout,
)
from cad_svg.drawing.dimensions.layout import layout_linear_dimension
from cad_svg.drawing.dimensions.renderer import render_linear_dimension
from cad_svg.drawing.dimensions.solver import solve_dimension_frame

__all__ = [
    'layout_linear_dimension',
    'render_linear_dimension',
    'solve_dimension_frame',
    'DimensionDefinition',
    'DimensionStyleProperties',
    'TextMovement',
    'DimensionFrame',
    'LineSegment',
    'ArrowPlacement',
    'TextLayout',
    'LinearDimensionLayout',
    'DimensionError',
    'DegenerateGeometryError',
    'InvalidStyleError',
]
