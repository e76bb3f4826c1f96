#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Chat Text Compositor
===============================================
Copyright (c) 2025 PNGN-Tec LLC

Chat Text Rendering System
==========================
Draws marked-up chat text onto a transparent RGBA canvas using glyphs
from the atlas cache, matching the game's bitmap font rendering.

Core Features
=============
- Multi-line layout with fixed line height and line padding
- Per-character color from the format word's color code
- Coverage-mask drawing for grayscale glyphs, verbatim copy for colored ones
- Bold and obfuscated glyphs synthesized by the atlas cache
- Italic runs synthesized by shearing the finished strip

Technical Implementation
========================
- numpy RGBA canvas, converted to a PIL image at the end
- Glyph format keys exclude color bits; color is applied while drawing
- Canvas width is the widest laid-out line
- Italic shear: x_src = x_dst + tan(angle) * row - offset, rounded half
  away from zero, pasted back shifted left by a fixed margin

Module Interface
================
- TellrawRenderer: Main compositor class
  - render(): Render text to a PIL RGBA image
  - render_array(): Render text to a numpy RGBA buffer
  - get_line_width(): Pixel width of one tokenized line
  - get_stats(): Render statistics
- create_renderer(): Factory building a renderer over an atlas directory
- render(): One-shot render with a fresh atlas

Example Usage
=============
```python
from tellraw_render import create_renderer

renderer = create_renderer("font_png")
image = renderer.render("§lHello§r, §cworld")
image.save("output.png")
```

Dependencies
============
- numpy: Canvas and glyph buffers
- Pillow: Output images
- tellraw_glyph: Glyph atlas cache
- tellraw_format: Format tokenizer
"""

import math
import time
import logging
from collections import deque
from pathlib import Path
from typing import Dict, List, Optional, Any, Union

import numpy as np
from PIL import Image

from tellraw_config import RenderConfig, RGBAColor, get_render_config
from tellraw_format import (
    FMT_COLOR_MASK,
    FMT_ITALIC,
    FMT_STYLE_MASK,
    split_format_and_text,
)
from tellraw_glyph import Glyph, GlyphAtlas, GlyphProvider

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

logger = logging.getLogger('tellraw_render')


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def shear_image(pixels: np.ndarray, k: float) -> np.ndarray:
    """
    Horizontally shear an RGBA buffer.

    Row y of the output samples source column x + k*y - offset, where
    offset widens the canvas enough to hold the whole sheared strip.

    Args:
        pixels: Array of shape (height, width, 4)
        k: Shear factor (tan of the lean angle)

    Returns:
        New array of shape (height, new_width, 4)
    """
    height, width = pixels.shape[:2]
    new_width = int(math.ceil(width + abs(k) * height))
    offset = new_width - width

    out = np.zeros((height, new_width, 4), dtype=pixels.dtype)
    if height == 0 or width == 0:
        return out

    rows = np.arange(height, dtype=np.float64)[:, None]
    cols = np.arange(new_width, dtype=np.float64)[None, :]
    src = cols + k * rows - offset
    src = np.where(src >= 0, np.floor(src + 0.5), -np.floor(0.5 - src)).astype(np.int64)

    valid = (src >= 0) & (src < width)
    row_idx = np.broadcast_to(np.arange(height)[:, None], src.shape)
    out[valid] = pixels[row_idx[valid], src[valid]]
    return out


# ============================================================================
# RENDERER
# ============================================================================

class TellrawRenderer:
    """
    Chat text compositor.

    Owns (or is handed) a glyph provider and lays out tokenized lines on
    a transparent canvas. Not safe for concurrent use: the glyph cache is
    mutated during lookups.
    """

    def __init__(self,
                 glyphs: Optional[GlyphProvider] = None,
                 options: Optional[RenderConfig] = None,
                 history_size: int = 1000):
        """
        Initialize the renderer.

        Args:
            glyphs: Glyph provider (file-backed atlas from config if None)
            options: Compositor configuration (uses global config if None)
            history_size: Number of recent render times kept for stats
        """
        self.glyphs = glyphs if glyphs is not None else GlyphAtlas()
        self.options = options or get_render_config()
        self.options.validate()

        self.italic_k = math.tan(math.radians(self.options.italic_angle))

        # Performance tracking
        self.render_times = deque(maxlen=history_size)
        self.renders_completed = 0

        logger.info(f"TellrawRenderer initialized (line_padding={self.options.line_padding}, "
                    f"italic_angle={self.options.italic_angle})")

    # ------------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------------

    def get_color(self, fmt: int) -> RGBAColor:
        """Draw color for a format word."""
        code = fmt & FMT_COLOR_MASK
        if not code:
            return self.options.default_color
        return self.options.get_color(chr(code))

    def get_glyph(self, char: str, fmt: int) -> Glyph:
        """Glyph for a character, keyed without color bits."""
        return self.glyphs.get(char, fmt & FMT_STYLE_MASK)

    def get_line_width(self, chars: List[str], fmts: List[int]) -> int:
        """
        Pixel width of one tokenized line.

        Args:
            chars: Characters of the line
            fmts: Format word per character

        Returns:
            Sum of glyph widths, inter-character padding and italic pad
        """
        total = 0
        last_fmt = 0
        for char, fmt in zip(chars, fmts):
            total += self.get_glyph(char, fmt).width
            last_fmt = fmt

        if last_fmt & FMT_ITALIC:
            total += self.options.italic_padding

        return total + max(len(chars) - 1, 0) * self.options.char_padding

    # ------------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------------

    @staticmethod
    def draw(canvas: np.ndarray, glyph: Glyph, x: int, y: int, color: RGBAColor):
        """
        Draw a glyph at (x, y), clipped to the canvas.

        Grayscale glyphs act as coverage masks: every channel of the color
        is scaled by the glyph's alpha. Colored glyphs are copied as-is.
        """
        height = min(glyph.height, canvas.shape[0] - y)
        width = min(glyph.width, canvas.shape[1] - x)
        if height <= 0 or width <= 0:
            return

        patch = glyph.pixels[:height, :width]
        if glyph.colored:
            canvas[y:y + height, x:x + width] = patch
            return

        alpha = patch[..., 3:4].astype(np.float32) / np.float32(255.0)
        tint = np.asarray(color, dtype=np.float32)
        canvas[y:y + height, x:x + width] = (tint * alpha).astype(np.uint8)

    def _italicize(self, canvas: np.ndarray, start_x: int, end_x: int, start_y: int):
        """Replace the strip [start_x, end_x) of a line by its sheared copy."""
        glyph_height = self.options.glyph_height
        x0 = max(start_x, 0)
        if end_x <= x0:
            return

        strip = canvas[start_y:start_y + glyph_height, x0:end_x].copy()
        sheared = shear_image(strip, self.italic_k)
        canvas[start_y:start_y + glyph_height, x0:end_x] = 0

        paste_x = max(start_x - self.options.italic_margin, 0)
        height = min(sheared.shape[0], canvas.shape[0] - start_y)
        width = min(sheared.shape[1], canvas.shape[1] - paste_x)
        if height <= 0 or width <= 0:
            return

        target = canvas[start_y:start_y + height, paste_x:paste_x + width]
        source = sheared[:height, :width]
        visible = source[..., 3] > 0
        target[visible] = source[visible]

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------

    def render_array(self, text: str) -> np.ndarray:
        """
        Render marked-up text to an RGBA buffer.

        Args:
            text: Marked-up text, newlines separate lines

        Returns:
            uint8 array of shape (height, width, 4)
        """
        lines, fmts = split_format_and_text(text)
        glyph_height = self.options.glyph_height
        line_padding = self.options.line_padding
        char_padding = self.options.char_padding

        max_width = max(self.get_line_width(line, fmt) for line, fmt in zip(lines, fmts))
        height = len(lines) * glyph_height + max(len(lines) - 1, 0) * line_padding
        canvas = np.zeros((height, max_width, 4), dtype=np.uint8)

        for line_i, (line, fmt) in enumerate(zip(lines, fmts)):
            start_y = line_i * (glyph_height + line_padding)
            start_x = 0
            italic_start_x = -1

            for i, (char, f) in enumerate(zip(line, fmt)):
                glyph = self.get_glyph(char, f)
                self.draw(canvas, glyph, start_x, start_y, self.get_color(f))

                if f & FMT_ITALIC and italic_start_x == -1:
                    italic_start_x = start_x

                start_x += glyph.width + char_padding

                if italic_start_x == -1:
                    continue
                if i != len(line) - 1 and fmt[i + 1] & FMT_ITALIC:
                    continue

                self._italicize(canvas, italic_start_x, start_x - char_padding, start_y)
                italic_start_x = -1

        return canvas

    def render(self, text: str) -> Image.Image:
        """
        Render marked-up text to a PIL image.

        Args:
            text: Marked-up text, newlines separate lines

        Returns:
            PIL Image in RGBA mode
        """
        start_time = time.time()

        canvas = self.render_array(text)
        if canvas.shape[1] == 0:
            img = Image.new('RGBA', (0, canvas.shape[0]))
        else:
            img = Image.fromarray(canvas, 'RGBA')

        render_time = (time.time() - start_time) * 1000
        self.render_times.append(render_time)
        self.renders_completed += 1
        logger.debug(f"Rendered {img.size[0]}x{img.size[1]} in {render_time:.1f}ms")

        return img

    # ============================================================================
    # STATISTICS
    # ============================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get render statistics, including the atlas's when available"""
        if not self.render_times:
            return {'status': 'No renders yet'}

        stats = {
            'avg_render_time': sum(self.render_times) / len(self.render_times),
            'min_render_time': min(self.render_times),
            'max_render_time': max(self.render_times),
            'renders_completed': self.renders_completed,
        }

        if hasattr(self.glyphs, 'get_stats'):
            stats['glyph_cache'] = self.glyphs.get_stats()

        return stats


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_renderer(font_dir: Optional[Union[str, Path]] = None,
                    options: Optional[RenderConfig] = None) -> TellrawRenderer:
    """Factory function for renderer creation over an atlas directory"""
    return TellrawRenderer(GlyphAtlas(font_dir), options)


def render(font_dir: Union[str, Path], text: str,
           options: Optional[RenderConfig] = None) -> Image.Image:
    """Render text with a fresh atlas cache."""
    return create_renderer(font_dir, options).render(text)
