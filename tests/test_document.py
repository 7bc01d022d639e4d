"""
Unit tests for cad_svg.conversion.document and cad_svg.conversion.blocks.

Tests:
- Block definitions in <defs>
- Main group, Y flip and insert handling
- viewBox from header extents and the bounding box fallback
- Model space rectangle
- Output paths and file conversion
"""

import re
import xml.etree.ElementTree as ET

import pytest

from cad_svg.conversion.blocks import convert_blocks, is_convertible_block
from cad_svg.conversion.context import ConversionContext, ConversionOptions
from cad_svg.conversion.document import (
    FREE_ELEMENTS_ID,
    convert_document,
    convert_file,
    header_extents,
    make_output_path,
    model_space_extents,
    model_space_rectangle,
)
from cad_svg.project_config import OutputConfig, ProjectConfig

SVG_NS = '{http://www.w3.org/2000/svg}'


def _main_group(dwg):
    return next(e for e in dwg.elements if e.attribs.get('id') == 'main')


def _viewbox(dwg):
    return [float(v) for v in re.split(r'[ ,]+', dwg['viewBox'].strip())]


class TestBlocks:
    """Tests for block conversion."""

    def test_user_block_in_defs(self, sample_doc, dwg, ctx):
        """Test that the MARK block becomes a block-record group."""
        convert_blocks(sample_doc, dwg, ctx)

        group = ctx.defs.get('MARK')
        assert group['class'] == 'block-record'
        assert group['transform'] == 'translate(-1,-1)'
        assert len(group.elements) == 2

    def test_layouts_and_dimension_blocks_excluded(self, sample_doc, dwg, ctx):
        """Test that layouts and *D blocks are not converted."""
        convert_blocks(sample_doc, dwg, ctx)

        ids = ctx.defs.ids()
        assert not any(re.fullmatch(r'_D\d+', i) for i in ids)
        assert '_Model_Space' not in ids
        assert not is_convertible_block(sample_doc.blocks.get('*Model_Space'))

    def test_block_count_logged(self, sample_doc, dwg, ctx):
        """Test block count message."""
        added = convert_blocks(sample_doc, dwg, ctx)
        assert f"Block count: {added}" in ctx.info.messages


class TestExtents:
    """Tests for header_extents and model_space_extents functions."""

    def test_header_extents(self, sample_doc):
        """Test extents read from $EXTMIN/$EXTMAX."""
        assert header_extents(sample_doc) == (0, -20, 100, 50)

    def test_unset_header(self, empty_doc):
        """Test that the new-document placeholder counts as not set."""
        assert header_extents(empty_doc) is None

    def test_bounding_box_fallback(self, empty_doc):
        """Test extents computed from entities when the header is not set."""
        empty_doc.modelspace().add_line((0, 0), (10, 5))
        assert model_space_extents(empty_doc) == pytest.approx((0, 0, 10, 5))

    def test_empty_model_space(self, empty_doc):
        """Test no extents for an empty drawing."""
        assert model_space_extents(empty_doc) is None


class TestConvertDocument:
    """Tests for convert_document function."""

    def test_main_group_flipped(self, sample_doc):
        """Test main group with Y flip and converted entities."""
        ctx = ConversionContext()
        dwg = convert_document(sample_doc, ctx)
        main = _main_group(dwg)

        assert main['class'] == 'main-group'
        assert main['transform'] == 'scale(1,-1)'
        assert len(main.elements) == 11
        assert ctx.info.failed_entity_conversions == 0

    def test_no_flip(self, sample_doc):
        """Test that reverse_y=False leaves the main group untransformed."""
        ctx = ConversionContext(options=ConversionOptions(reverse_y=False))
        main = _main_group(convert_document(sample_doc, ctx))
        assert 'transform' not in main.attribs

    def test_viewbox_flipped(self, sample_doc):
        """Test viewBox y of a flipped drawing is -max_y."""
        dwg = convert_document(sample_doc, ConversionContext())
        assert _viewbox(dwg) == [0, -50, 100, 70]

    def test_viewbox_not_flipped(self, sample_doc):
        """Test viewBox y without flip is min_y."""
        ctx = ConversionContext(options=ConversionOptions(reverse_y=False))
        assert _viewbox(convert_document(sample_doc, ctx)) == [0, -20, 100, 70]

    def test_viewbox_from_bounding_box(self, empty_doc):
        """Test viewBox of a document without header extents."""
        empty_doc.modelspace().add_line((0, 0), (10, 5))
        dwg = convert_document(empty_doc, ConversionContext())
        assert _viewbox(dwg) == pytest.approx([0, -5, 10, 5])

    def test_viewbox_disabled(self, sample_doc):
        """Test that no viewBox is written when switched off."""
        ctx = ConversionContext(options=ConversionOptions(create_viewbox_from_model_space_extent=False))
        dwg = convert_document(sample_doc, ctx)
        assert 'viewBox' not in dwg.attribs

    def test_presentation_attributes(self, sample_doc):
        """Test stroke, stroke-width and fill on the svg element."""
        dwg = convert_document(sample_doc, ConversionContext())

        assert dwg['id'] == 'svg-element'
        assert dwg['stroke'] == 'black'
        assert dwg['stroke-width'] == 0.1
        assert dwg['fill'] == 'none'

    def test_defs_written(self, sample_doc):
        """Test that block groups end up in <defs>."""
        dwg = convert_document(sample_doc, ConversionContext())
        ids = [e.attribs.get('id') for e in dwg.defs.elements]
        assert 'MARK' in ids

    def test_concentrate_inserts(self, sample_doc):
        """Test that INSERT references are moved to the end."""
        ctx = ConversionContext(options=ConversionOptions(concentrate_inserts=True))
        main = _main_group(convert_document(sample_doc, ctx))

        assert main.elements[-1].elementname == 'use'
        assert all(e.elementname != 'use' for e in main.elements[:-1])

    def test_free_elements_group(self, sample_doc):
        """Test that free entities go into a referenced _free block."""
        ctx = ConversionContext(options=ConversionOptions(create_extra_group_for_free_elements=True))
        dwg = convert_document(sample_doc, ctx)
        main = _main_group(dwg)

        assert FREE_ELEMENTS_ID in ctx.defs
        assert main.elements[0]['xlink:href'] == f'#{FREE_ELEMENTS_ID}'
        assert len(ctx.defs.get(FREE_ELEMENTS_ID).elements) == 11

    def test_dummy_use_for_block_only_document(self, empty_doc):
        """Test that a document with only blocks references its first block."""
        empty_doc.blocks.new('ONLY').add_line((0, 0), (1, 1))
        ctx = ConversionContext()
        main = _main_group(convert_document(empty_doc, ctx))

        first = ctx.defs.first_id()
        assert main.elements[-1]['xlink:href'] == f'#{first}'
        assert f"Dummy use of first block {first} added." in ctx.info.messages

    def test_conversion_log(self, sample_doc):
        """Test layer count, finish message and summary in the log."""
        ctx = ConversionContext()
        convert_document(sample_doc, ctx)
        messages = ctx.info.messages

        assert messages[0].startswith("Layer count:")
        assert "Loading finished" in messages
        assert messages[-1] == ctx.info.summary()


class TestModelSpaceRectangle:
    """Tests for model_space_rectangle function."""

    def test_flipped_rectangle(self, sample_doc, dwg):
        """Test red rectangle inside a flipping group."""
        group = model_space_rectangle(sample_doc, dwg, ConversionContext())
        rect = group.elements[0]

        assert group['transform'] == 'scale(1,-1)'
        assert rect['stroke'] == 'red'
        assert rect['width'] == 100
        assert rect['height'] == 70
        assert rect['stroke-width'] == pytest.approx(170 / 25000)

    def test_plain_rectangle(self, sample_doc, dwg):
        """Test rectangle without flip."""
        ctx = ConversionContext(options=ConversionOptions(reverse_y=False))
        assert model_space_rectangle(sample_doc, dwg, ctx).elementname == 'rect'

    def test_no_extents(self, empty_doc, dwg, ctx):
        """Test that nothing is drawn without header extents."""
        assert model_space_rectangle(empty_doc, dwg, ctx) is None


class TestMakeOutputPath:
    """Tests for make_output_path function."""

    def test_default(self, tmp_path):
        """Test SVG next to the DXF file."""
        assert make_output_path(tmp_path / 'plan.dxf') == tmp_path / 'plan.svg'

    def test_prefix_suffix(self, tmp_path):
        """Test prefix and suffix around the stem."""
        output = OutputConfig(prefix='p_', suffix='_v1')
        assert make_output_path(tmp_path / 'plan.dxf', output) == tmp_path / 'p_plan_v1.svg'

    def test_relative_output_dir(self, tmp_path):
        """Test output directory relative to the input file."""
        output = OutputConfig(output_dir='svg')
        assert make_output_path(tmp_path / 'plan.dxf', output) == tmp_path / 'svg' / 'plan.svg'


class TestConvertFile:
    """Tests for convert_file function."""

    def test_writes_svg(self, sample_dxf_path, tmp_svg_path):
        """Test that a valid SVG document is written."""
        output, ctx = convert_file(sample_dxf_path, tmp_svg_path)

        assert output == tmp_svg_path
        root = ET.parse(output).getroot()
        assert root.tag == f'{SVG_NS}svg'
        assert root.find(f".//{SVG_NS}g[@id='main']") is not None
        assert root.findall(f".//{SVG_NS}g[@data-dim-value]")
        assert ctx.info.successful_entity_conversions > 0

    def test_default_output_path(self, sample_dxf_path):
        """Test output path derived from the configuration."""
        config = ProjectConfig()
        config.output.suffix = '_out'

        output, _ = convert_file(sample_dxf_path, config=config)

        assert output == sample_dxf_path.with_name('sample_out.svg')
        assert output.exists()

    def test_model_space_rect_added(self, sample_dxf_path, tmp_svg_path):
        """Test optional model space rectangle in the output."""
        output, _ = convert_file(sample_dxf_path, tmp_svg_path, model_space_rect=True)
        root = ET.parse(output).getroot()
        assert root.find(f".//{SVG_NS}rect[@stroke='red']") is not None
