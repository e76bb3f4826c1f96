"""Unit tests for the glyph atlas cache.

Tests tellraw_glyph.GlyphAtlas against the synthetic atlas in conftest:
    - codepoint decomposition and page naming
    - cropping, bold and obfuscated synthesis
    - colored pages, missing pages, unreadable pages, fallbacks
    - memoization and statistics
"""

import numpy as np
import pytest

from tellraw_config import GlyphConfig
from tellraw_format import FMT_BOLD, FMT_ITALIC, FMT_OBFUSCATED
from tellraw_glyph import GlyphAtlas, is_grayscale


class TestCodepoints:
    """Tests for rune_to_idx and page_path."""

    def test_ascii(self):
        assert GlyphAtlas.rune_to_idx("A") == (0, 4, 1)

    def test_cjk(self):
        assert GlyphAtlas.rune_to_idx("你") == (0x4F, 6, 0)

    def test_page_path(self, atlas, atlas_dir):
        assert atlas.page_path(0x4F) == atlas_dir / "glyph_4F.png"


class TestExtraction:
    """Tests for glyph cropping."""

    def test_tight_crop(self, atlas):
        glyph = atlas.get("A")
        assert (glyph.width, glyph.height) == (6, 31)
        assert not glyph.colored
        assert (glyph.pixels[..., 3] == 255).all()

    def test_transparent_cell_is_space_width(self, atlas):
        glyph = atlas.get(" ")
        assert glyph.width == 4
        assert not glyph.pixels.any()

    def test_partial_alpha_preserved(self, atlas):
        glyph = atlas.get("B")
        assert glyph.width == 6
        assert (glyph.pixels[..., 3] == 128).all()

    def test_pixels_read_only(self, atlas):
        glyph = atlas.get("A")
        with pytest.raises(ValueError):
            glyph.pixels[0, 0, 0] = 0

    def test_page_normalized_to_full_size(self, atlas):
        glyph = atlas.get("\u0341")
        assert glyph.width == 6


class TestSynthesis:
    """Tests for bold and obfuscated synthesis."""

    def test_bold_widens_by_pad(self, atlas):
        assert atlas.get("A", FMT_BOLD).width == atlas.get("A").width + 2

    def test_bold_thickens(self, atlas):
        alpha = atlas.get("A", FMT_BOLD).pixels[..., 3]
        assert (alpha[:, :7] == 255).all()

    def test_bold_keeps_coverage(self, atlas):
        alpha = atlas.get("B", FMT_BOLD).pixels[..., 3]
        assert set(np.unique(alpha)) <= {0, 128}

    def test_obfuscated_silhouette(self, atlas):
        glyph = atlas.get("A", FMT_OBFUSCATED)
        assert (glyph.pixels[..., :3] == 1).all()
        assert (glyph.pixels[..., 3] == 255).all()
        assert glyph.width == 6

    def test_italic_not_synthesized(self, atlas):
        assert atlas.get("A", FMT_ITALIC).same_pixels(atlas.get("A"))

    def test_colored_page_never_synthesized(self, atlas):
        plain = atlas.get("\u0100")
        bold = atlas.get("\u0100", FMT_BOLD | FMT_OBFUSCATED)
        assert plain.colored
        assert plain.width == 10
        assert bold.same_pixels(plain)
        assert tuple(plain.pixels[0, 0]) == (255, 0, 0, 255)


class TestFailures:
    """Tests for missing pages, unreadable pages and fallbacks."""

    def test_missing_page_is_blank(self, atlas):
        glyph = atlas.get("你")
        assert glyph.width == 4
        assert not glyph.pixels.any()
        assert atlas.get_stats()['pages_missing'] == 1

    def test_unreadable_page_falls_back_to_space(self, atlas):
        glyph = atlas.get("\u0200")
        assert glyph.same_pixels(atlas.get(" "))
        stats = atlas.get_stats()
        assert stats['page_errors'] == 1
        assert stats['fallbacks'] == 1

    def test_empty_char_falls_back_to_space(self, atlas):
        assert atlas.get("").same_pixels(atlas.get(" "))

    def test_missing_directory(self, tmp_path):
        atlas = GlyphAtlas(tmp_path / "nowhere", GlyphConfig())
        glyph = atlas.get("A", FMT_BOLD)
        assert glyph.width == 6

    def test_invalid_config_rejected(self, atlas_dir):
        with pytest.raises(ValueError):
            GlyphAtlas(atlas_dir, GlyphConfig(page_size=500))


class TestCache:
    """Tests for memoization."""

    def test_same_object_returned(self, atlas):
        assert atlas.get("A") is atlas.get("A")

    def test_key_includes_format(self, atlas):
        assert atlas.get("A") is not atlas.get("A", FMT_BOLD)

    def test_stats(self, atlas):
        atlas.get("A")
        atlas.get("A")
        atlas.get("B")
        stats = atlas.get_stats()
        assert stats['glyph_hits'] == 1
        assert stats['glyph_misses'] == 2
        assert stats['cached_pages'] == 1
        assert stats['page_loads'] == 1


class TestGrayscale:
    """Tests for is_grayscale."""

    def test_gray(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[0, 0] = (7, 7, 7, 255)
        assert is_grayscale(pixels)

    def test_colored(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[1, 1] = (7, 8, 7, 255)
        assert not is_grayscale(pixels)
