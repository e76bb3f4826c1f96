"""Tests for the chat text compositor.

Tests tellraw_render:
    - TellrawRenderer layout (canvas size, line spacing)
    - color lookup and alpha blending
    - italic shear
    - shear_image
"""

import math

import numpy as np
import pytest

from tellraw_config import RenderConfig
from tellraw_format import FMT_BOLD, FMT_ITALIC
from tellraw_render import TellrawRenderer, render, shear_image

from conftest import StubGlyphs


class TestLayout:
    """Canvas geometry."""

    def test_single_glyph(self, renderer):
        img = renderer.render("A")
        assert img.mode == "RGBA"
        assert img.size == (6, 31)

    def test_bold_glyph(self, renderer):
        img = renderer.render("§lA§r")
        assert img.size == (8, 31)
        pixels = np.array(img)
        assert tuple(pixels[0, 0]) == (255, 255, 255, 255)
        assert tuple(pixels[0, 6]) == (255, 255, 255, 255)

    def test_multiline_height(self, renderer):
        img = renderer.render("A\nAA")
        assert img.size == (14, 31 * 2 + 6)

    def test_second_line_offset(self, renderer):
        pixels = renderer.render_array("A\nA")
        assert pixels[36, 0, 3] == 0
        assert pixels[37, 0, 3] == 255

    def test_char_padding_gap(self, renderer):
        pixels = renderer.render_array("AA")
        assert (pixels[:, 6:8, 3] == 0).all()
        assert (pixels[:, 8:14, 3] == 255).all()

    def test_empty_text(self, renderer):
        img = renderer.render("")
        assert img.size == (0, 31)

    def test_line_width_matches_stub(self):
        stub = StubGlyphs({"i": 2, "W": 10})
        renderer = TellrawRenderer(stub, RenderConfig())
        assert renderer.get_line_width(["i", "W"], [0, 0]) == 14
        assert renderer.get_line_width(["i"], [FMT_ITALIC]) == 4
        assert renderer.get_line_width([], []) == 0

    def test_glyph_lookup_excludes_color(self):
        stub = StubGlyphs()
        renderer = TellrawRenderer(stub, RenderConfig())
        renderer.render("§l§cA")
        assert set(stub.calls) == {("A", FMT_BOLD)}

    def test_render_is_repeatable(self, renderer):
        first = renderer.render_array("§oHi §lthere\n§cA§kB")
        second = renderer.render_array("§oHi §lthere\n§cA§kB")
        assert np.array_equal(first, second)


class TestColor:
    """Color selection and blending."""

    def test_default_white(self, renderer):
        assert renderer.get_color(0) == (255, 255, 255, 255)

    def test_color_code(self, renderer):
        assert renderer.get_color(ord("c")) == (255, 85, 85, 255)

    def test_unmapped_code_is_white(self, renderer):
        assert renderer.get_color(ord("k")) == (255, 255, 255, 255)

    def test_colored_text(self, renderer):
        pixels = renderer.render_array("§cA")
        assert tuple(pixels[10, 3]) == (255, 85, 85, 255)

    def test_alpha_scales_all_channels(self, renderer):
        pixels = renderer.render_array("§cB")
        expected = [255 * 128 / 255, 85 * 128 / 255, 85 * 128 / 255, 255 * 128 / 255]
        assert np.allclose(pixels[0, 0].astype(float), expected, atol=1)

    def test_colored_glyph_copied_verbatim(self, renderer):
        pixels = renderer.render_array("§a\u0100")
        assert tuple(pixels[0, 0]) == (255, 0, 0, 255)

    def test_obfuscated_recolored(self, renderer):
        pixels = renderer.render_array("§k§aA")
        assert tuple(pixels[0, 0]) == (85, 255, 85, 255)


class TestItalic:
    """Italic shear of finished runs."""

    def test_italic_leans_right(self, renderer):
        pixels = renderer.render_array("§oA")
        assert pixels.shape[1] == 8
        # Bottom row barely moves, top row is pushed past the canvas edge
        assert pixels[30, 0, 3] == 0
        assert pixels[30, 1, 3] == 255
        assert not pixels[0, :, 3].any()

    def test_italic_differs_from_plain(self, renderer):
        plain = renderer.render_array("AA§r")
        italic = renderer.render_array("§oAA§r")
        assert not np.array_equal(plain[:, :14], italic[:, :14])

    def test_non_italic_neighbours_untouched(self, renderer):
        pixels = renderer.render_array("A§oA§rAAAAA")
        assert (pixels[:, 0:6, 3] == 255).all()


class TestShear:
    """Tests for shear_image."""

    def test_zero_shear_is_identity(self):
        pixels = np.random.RandomState(0).randint(0, 255, (5, 7, 4)).astype(np.uint8)
        assert np.array_equal(shear_image(pixels, 0.0), pixels)

    def test_width_grows(self):
        pixels = np.zeros((31, 6, 4), dtype=np.uint8)
        k = math.tan(math.radians(15))
        assert shear_image(pixels, k).shape == (31, math.ceil(6 + k * 31), 4)

    def test_rows_shift(self):
        pixels = np.zeros((3, 1, 4), dtype=np.uint8)
        pixels[:, 0] = 255
        out = shear_image(pixels, 1.0)
        # offset 3: row y keeps source column 0 at x = 3 - y
        assert out[0, 3, 3] == 255
        assert out[1, 2, 3] == 255
        assert out[2, 1, 3] == 255
        assert out[..., 3].sum() == 3 * 255


class TestModuleRender:
    """Tests for the one-shot render function."""

    def test_render_from_directory(self, atlas_dir):
        img = render(atlas_dir, "AB", RenderConfig())
        assert img.size == (14, 31)

    def test_stats(self, renderer):
        assert renderer.get_stats() == {'status': 'No renders yet'}
        renderer.render("A")
        stats = renderer.get_stats()
        assert stats['renders_completed'] == 1
        assert 'glyph_cache' in stats

    def test_render_history_is_capped(self):
        renderer = TellrawRenderer(StubGlyphs(), RenderConfig(), history_size=2)
        for _ in range(3):
            renderer.render("A")
        assert len(renderer.render_times) == 2
        assert renderer.get_stats()['renders_completed'] == 3

    def test_invalid_options(self, atlas):
        with pytest.raises(ValueError):
            TellrawRenderer(atlas, RenderConfig(italic_angle=90.0))
