"""Shared pytest fixtures for the tellraw renderer test suite.

Fixtures:
    atlas_dir: Directory of synthetic glyph atlas pages built with Pillow
    atlas: GlyphAtlas over atlas_dir
    renderer: TellrawRenderer over atlas
    stub_glyphs: In-memory glyph provider with fixed widths
    calculator: WidthCalculator with default metrics

Synthetic atlas layout:
    glyph_00.png: 'A' opaque white, 6 px wide; 'B' white at alpha 128,
                  6 px wide; space fully transparent
    glyph_01.png: colored page, U+0100 opaque red, 10 px wide
    glyph_02.png: not a PNG file
    glyph_03.png: 256x256 page, U+0341 3 px wide (6 px after normalizing)
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tellraw_config import GlyphConfig, RenderConfig, WidthConfig  # noqa: E402
from tellraw_glyph import Glyph, GlyphAtlas  # noqa: E402
from tellraw_render import TellrawRenderer  # noqa: E402
from tellraw_width import WidthCalculator  # noqa: E402

CELL = 32
GLYPH_H = 31

WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)


def paint_cell(page: np.ndarray, code: int, x: int, width: int, rgba, cell: int = CELL, height: int = GLYPH_H):
    """Fill columns [x, x + width) of the cell holding `code`."""
    row, col = (code & 0xF0) >> 4, code & 0xF
    y0, x0 = row * cell, col * cell
    page[y0:y0 + height, x0 + x:x0 + x + width] = rgba


@pytest.fixture
def atlas_dir(tmp_path):
    """Directory holding the synthetic atlas pages."""
    page = np.zeros((512, 512, 4), dtype=np.uint8)
    paint_cell(page, ord('A'), 1, 6, WHITE)
    paint_cell(page, ord('B'), 0, 6, (255, 255, 255, 128))
    Image.fromarray(page, 'RGBA').save(tmp_path / 'glyph_00.png')

    colored = np.zeros((512, 512, 4), dtype=np.uint8)
    paint_cell(colored, 0x00, 0, 10, RED)
    Image.fromarray(colored, 'RGBA').save(tmp_path / 'glyph_01.png')

    (tmp_path / 'glyph_02.png').write_bytes(b'not a png file')

    small = np.zeros((256, 256, 4), dtype=np.uint8)
    paint_cell(small, 0x41, 0, 3, WHITE, cell=16, height=16)
    Image.fromarray(small, 'RGBA').save(tmp_path / 'glyph_03.png')

    return tmp_path


@pytest.fixture
def atlas(atlas_dir):
    return GlyphAtlas(atlas_dir, GlyphConfig())


@pytest.fixture
def renderer(atlas):
    return TellrawRenderer(atlas, RenderConfig())


class StubGlyphs:
    """Glyph provider returning solid white glyphs of fixed widths."""

    def __init__(self, widths=None, default=6):
        self.widths = widths or {}
        self.default = default
        self.calls = []

    def get(self, char, fmt=0):
        self.calls.append((char, fmt))
        width = self.widths.get(char, self.default)
        pixels = np.full((GLYPH_H, width, 4), 255, dtype=np.uint8)
        return Glyph(pixels, False)


@pytest.fixture
def stub_glyphs():
    return StubGlyphs()


@pytest.fixture
def calculator():
    return WidthCalculator(WidthConfig())
