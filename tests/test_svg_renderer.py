"""
Unit tests for cad_svg.drawing.svg_renderer module.

Tests:
- Number and path data formatting
- Lines, arrows, tick and dot markers
- Arrow style lookup by DIMBLK name
- Text and text background transforms
- Block references and element ids
"""

import pytest
from ezdxf.math import Vec2

from cad_svg.drawing.svg_renderer import (
    arrow_style_for_block,
    create_arrow,
    create_debug_point,
    create_dot_marker,
    create_line,
    create_path,
    create_text,
    create_text_background,
    create_tick_marker,
    create_use,
    format_number,
    make_element_id,
    points_to_path_data,
    render_arrow_by_style,
)


class TestFormatNumber:
    """Tests for format_number function."""

    @pytest.mark.parametrize("value,expected", [
        (1.5, "1.5"),
        (2.0, "2"),
        (-0.0, "0"),
        (1.23456, "1.2346"),
        (-3.25, "-3.25"),
        (1e-6, "0"),
    ])
    def test_format(self, value, expected):
        """Test trailing zeros and negative zero are removed."""
        assert format_number(value) == expected

    def test_precision(self):
        """Test custom precision."""
        assert format_number(3.14159, 2) == "3.14"


class TestPointsToPathData:
    """Tests for points_to_path_data function."""

    def test_open_path(self):
        """Test M/L commands for an open polyline."""
        assert points_to_path_data([(0, 0), (10, 0), (10, 5.5)]) == "M 0,0 L 10,0 L 10,5.5"

    def test_closed_path(self):
        """Test Z for a closed polyline."""
        assert points_to_path_data([(0, 0), (1, 1)], closed=True) == "M 0,0 L 1,1 Z"

    def test_vec2_and_3d_points(self):
        """Test Vec2 input and dropped z coordinate."""
        assert points_to_path_data([Vec2(1, 2), (3, 4, 5)]) == "M 1,2 L 3,4"

    def test_empty(self):
        """Test that no points give empty path data."""
        assert points_to_path_data([]) == ""

    def test_nan_raises(self):
        """Test that NaN coordinates are rejected."""
        with pytest.raises(ValueError):
            points_to_path_data([(0, 0), (float('nan'), 1)])


class TestLines:
    """Tests for create_path and create_line functions."""

    def test_path_attributes(self, dwg):
        """Test that internal keys and None values are dropped."""
        path = create_path(dwg, [(0, 0), (1, 0)], _layer='A', stroke='red', fill=None)

        assert path['d'] == "M 0,0 L 1,0"
        assert path['stroke'] == 'red'
        assert 'fill' not in path.attribs
        assert '-layer' not in path.attribs

    def test_line_type(self, dwg):
        """Test data-line-type attribute."""
        line = create_line(dwg, Vec2(0, 5), Vec2(10, 5), 'dimension')

        assert line['d'] == "M 0,5 L 10,5"
        assert line['data-line-type'] == 'dimension'


class TestArrows:
    """Tests for arrow and marker factories."""

    def test_filled_arrow(self, dwg):
        """Test triangle shape and transform."""
        arrow = create_arrow(dwg, Vec2(10, 5), 0.0, 3.0)

        assert arrow['d'] == "M 0,0 L -3,0.5 L -3,-0.5 Z"
        assert arrow['fill'] == 'currentColor'
        assert arrow['transform'] == "translate(10,5) rotate(0)"

    def test_filled_arrow_rotated(self, dwg):
        """Test rotation of an arrow pointing left."""
        arrow = create_arrow(dwg, (0, 5), 180.0, 1.0, width=0.5)

        assert arrow['d'] == "M 0,0 L -1,0.25 L -1,-0.25 Z"
        assert arrow['transform'] == "translate(0,5) rotate(180)"

    def test_tick_marker(self, dwg):
        """Test 45 degree tick centred on the position."""
        tick = create_tick_marker(dwg, (0, 0), 0.0, 2.0)

        d = tick['d']
        assert d.startswith("M -0.7071,-0.7071")
        assert d.endswith("L 0.7071,0.7071")
        assert tick['data-line-type'] == 'tick'

    def test_dot_marker(self, dwg):
        """Test dot radius is a quarter of the arrow length."""
        dot = create_dot_marker(dwg, (1, 2), 2.0)
        assert dot['r'] == 0.5
        assert dot['cx'] == 1
        assert dot['cy'] == 2


class TestArrowStyleForBlock:
    """Tests for arrow_style_for_block function."""

    @pytest.mark.parametrize("name,expected", [
        ('', 'filled'),
        (None, 'filled'),
        ('_CLOSEDFILLED', 'filled'),
        ('_ArchTick', 'tick'),
        ('ARCHTICK', 'tick'),
        ('_OBLIQUE', 'tick'),
        ('_DOT', 'dot'),
        ('DOTSMALL', 'dot'),
        ('_NONE', 'none'),
        ('MY_ARROW', 'filled'),
    ])
    def test_standard_names(self, name, expected):
        """Test mapping of standard DXF arrow names."""
        assert arrow_style_for_block(name) == expected

    def test_custom_block_in_defs(self):
        """Test that a user block present in defs is referenced."""
        assert arrow_style_for_block('MY_ARROW', in_defs=True) == 'block'

    def test_standard_name_wins_over_defs(self):
        """Test that standard names are drawn natively even if defined."""
        assert arrow_style_for_block('_DOT', in_defs=True) == 'dot'


class TestRenderArrowByStyle:
    """Tests for render_arrow_by_style function."""

    @pytest.mark.parametrize("style,tag", [
        ('filled', 'path'),
        ('tick', 'path'),
        ('dot', 'circle'),
        ('block', 'use'),
    ])
    def test_dispatch(self, dwg, style, tag):
        """Test one element of the expected kind per style."""
        group = dwg.g()
        render_arrow_by_style(dwg, group, (0, 0), 0.0, style, 1.0, block_id='ARROW')

        assert len(group.elements) == 1
        assert group.elements[0].elementname == tag

    def test_none_draws_nothing(self, dwg):
        """Test that _NONE arrows produce no element."""
        group = dwg.g()
        render_arrow_by_style(dwg, group, (0, 0), 0.0, 'none', 1.0)
        assert group.elements == []

    def test_block_without_id_falls_back(self, dwg):
        """Test that a block style without id draws a filled arrow."""
        group = dwg.g()
        render_arrow_by_style(dwg, group, (0, 0), 0.0, 'block', 1.0)
        assert group.elements[0]['fill'] == 'currentColor'


class TestText:
    """Tests for create_text and create_text_background functions."""

    def test_text_reverse_y(self, dwg):
        """Test that text is flipped back when the drawing is flipped."""
        text = create_text(dwg, "10", Vec2(5, 5), 0.0, 2.0, "Arial")

        assert text['transform'] == "translate(5,5) scale(1,-1)"
        assert text['font-size'] == "2"
        assert text['text-anchor'] == 'middle'
        assert text['y'] == "0.7"

    def test_text_rotation_no_flip(self, dwg):
        """Test rotation without Y flip."""
        text = create_text(dwg, "10", (0, 0), 90.0, 1.0, "Arial", reverse_y=False)
        assert text['transform'] == "translate(0,0) rotate(90)"

    def test_text_not_centered(self, dwg):
        """Test baseline insertion without vertical centering."""
        text = create_text(dwg, "A", (0, 0), 0.0, 1.0, "Arial", anchor='start', centered=False)

        assert text['y'] == "0"
        assert text['text-anchor'] == 'start'

    def test_background(self, dwg):
        """Test white background sized around the text."""
        rect = create_text_background(dwg, 1.2, (5, 5), 0.0, 1.0)

        assert rect['fill'] == 'white'
        assert rect['x'] == "-0.7"
        assert rect['width'] == "1.4"
        assert rect['height'] == "1.5"
        assert rect['transform'] == "translate(5,5) scale(1,-1)"


class TestUseAndIds:
    """Tests for create_use, create_debug_point and make_element_id."""

    def test_use_plain(self, dwg):
        """Test reference at the origin has no transform."""
        use = create_use(dwg, 'MARK', (0, 0))

        assert use['xlink:href'] == '#MARK'
        assert 'transform' not in use.attribs

    def test_use_transform(self, dwg):
        """Test translate, rotate and scale of a block reference."""
        use = create_use(dwg, 'MARK', (60, 10), 90.0, 2.0, 2.0)
        assert use['transform'] == "translate(60,10) rotate(90) scale(2,2)"

    def test_debug_point(self, dwg):
        """Test red debug point with its class."""
        point = create_debug_point(dwg, Vec2(5, 10))

        assert point['class'] == 'debug-point'
        assert point['fill'] == 'red'

    @pytest.mark.parametrize("name,expected", [
        ('MARK', 'MARK'),
        ('*U12', '_U12'),
        ('1F', '_1F'),
        ('A B', 'A_B'),
        ('', '_'),
    ])
    def test_make_element_id(self, name, expected):
        """Test XML id sanitizing."""
        assert make_element_id(name) == expected
