"""
Pytest configuration and fixtures for the DXF to SVG converter.

Provides:
- Dimension definitions/styles of the reference scenarios
- In-memory DXF documents built with ezdxf.new()
- DXF files written to temporary directories
- Conversion context and SVG drawing fixtures
"""

import logging
from pathlib import Path

import ezdxf
import pytest
import svgwrite
from ezdxf.math import Vec2

from cad_svg.conversion.context import ConversionContext
from cad_svg.drawing.dimensions.definition import (
    DimensionDefinition,
    DimensionStyleProperties,
    TextMovement,
)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() side effects so caplog sees package records."""
    yield
    logger = logging.getLogger("cad_svg")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ============================================================================
# Dimension Fixtures - Reference Scenarios
# ============================================================================

@pytest.fixture
def example_definition() -> DimensionDefinition:
    """10 units measured along X, dimension line 5 units above."""
    return DimensionDefinition(
        first_point=Vec2(0, 0),
        second_point=Vec2(10, 0),
        definition_point=Vec2(10, 5),
        measurement=10.0,
        text="10",
    )


@pytest.fixture
def example_style() -> DimensionStyleProperties:
    """Small style: extension 1, offset 0.5, arrow 1, text height 1."""
    return DimensionStyleProperties(
        extension_line_extension=1.0,
        extension_line_offset=0.5,
        dimension_line_extension=0.0,
        arrow_size=1.0,
        text_height=1.0,
    )


@pytest.fixture
def leader_style(example_style) -> DimensionStyleProperties:
    """Same style with a leader drawn for moved text."""
    return DimensionStyleProperties(
        extension_line_extension=example_style.extension_line_extension,
        extension_line_offset=example_style.extension_line_offset,
        dimension_line_extension=example_style.dimension_line_extension,
        arrow_size=example_style.arrow_size,
        text_height=example_style.text_height,
        text_movement=TextMovement.ADD_LEADER_WHEN_TEXT_MOVED,
    )


def _make_definition(p1, p2, dp, measurement=None, text_mid=None, text="") -> DimensionDefinition:
    """Aligned dimension definition from plain tuples."""
    p1, p2 = Vec2(p1), Vec2(p2)
    return DimensionDefinition(
        first_point=p1,
        second_point=p2,
        definition_point=Vec2(dp),
        measurement=p1.distance(p2) if measurement is None else measurement,
        text_middle_point=Vec2(text_mid) if text_mid is not None else None,
        text=text,
    )


@pytest.fixture
def make_definition():
    """Factory: make_definition(p1, p2, dp, measurement=None, text_mid=None, text="")."""
    return _make_definition


# ============================================================================
# Conversion Fixtures
# ============================================================================

@pytest.fixture
def ctx() -> ConversionContext:
    """Fresh conversion context with default options."""
    return ConversionContext()


@pytest.fixture
def dwg() -> svgwrite.Drawing:
    """Empty SVG drawing used as element factory."""
    return svgwrite.Drawing(debug=False)


# ============================================================================
# DXF Document Fixtures
# ============================================================================

@pytest.fixture
def empty_doc():
    """New R2010 document with the standard EZDXF dimension style."""
    return ezdxf.new('R2010', setup=True)


@pytest.fixture
def aligned_dimension(empty_doc):
    """Rendered aligned dimension from (0,0) to (10,0), 5 units above."""
    msp = empty_doc.modelspace()
    override = msp.add_aligned_dim(p1=(0, 0), p2=(10, 0), distance=5, dimstyle='EZDXF')
    override.render()
    return override.dimension


@pytest.fixture
def rotated_dimension(empty_doc):
    """Rendered horizontal dimension from (0,0) to (10,10), line at y=15."""
    msp = empty_doc.modelspace()
    override = msp.add_linear_dim(base=(0, 15), p1=(0, 0), p2=(10, 10), angle=0, dimstyle='EZDXF')
    override.render()
    return override.dimension


@pytest.fixture
def sample_doc():
    """Document with one entity of every supported type and a block."""
    doc = ezdxf.new('R2010', setup=True)
    msp = doc.modelspace()

    block = doc.blocks.new('MARK', base_point=(1, 1))
    block.add_line((0, 0), (2, 2))
    block.add_circle((1, 1), radius=1)

    msp.add_line((0, 0), (100, 0))
    msp.add_circle((50, 25), radius=10, dxfattribs={'color': 1})
    msp.add_arc((20, 20), radius=5, start_angle=0, end_angle=90)
    msp.add_ellipse((70, 30), major_axis=(10, 0), ratio=0.5)
    msp.add_lwpolyline([(0, 40), (10, 40), (10, 50)], close=True)
    msp.add_polyline3d([(0, 0, 0), (5, 5, 1), (10, 0, 2)])
    msp.add_point((90, 45))
    msp.add_text('TITLE', dxfattribs={'insert': (5, 5), 'height': 2.5})
    msp.add_mtext('line one\\Pline two', dxfattribs={'insert': (40, 45), 'char_height': 2})
    msp.add_blockref('MARK', (60, 10))
    msp.add_aligned_dim(p1=(0, 0), p2=(100, 0), distance=-10, dimstyle='EZDXF').render()

    doc.header['$EXTMIN'] = (0, -20, 0)
    doc.header['$EXTMAX'] = (100, 50, 0)
    return doc


@pytest.fixture
def sample_dxf_path(tmp_path: Path, sample_doc) -> Path:
    """sample_doc written to a temporary DXF file."""
    path = tmp_path / "sample.dxf"
    sample_doc.saveas(path)
    return path


@pytest.fixture
def tmp_svg_path(tmp_path: Path) -> Path:
    """Temporary path for SVG output."""
    return tmp_path / "output.svg"
