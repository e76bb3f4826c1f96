#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Glyph Atlas Module
=============================================
Copyright (c) 2025 PNGN-Tec LLC

Glyph Atlas Cache
=================
Loads glyph bitmaps from fixed-layout atlas pages and memoizes the
cropped, optionally synthesized result per (character, format) key.

Atlas Layout
============
- One page per codepoint group (high byte): glyph_<GG>.png
- Pages are normalized to 512x512 on load
- 16x16 grid of 32x31 cells on a 32 pixel pitch
- Cell row is bits 4-7 of the low byte, column is bits 0-3

Glyph Synthesis
===============
Applied only to grayscale (non-colored) pages:
- Obfuscated: RGB forced to (1, 1, 1), alpha kept, producing a silhouette
- Bold: canvas widened by the bold pad, each column smeared rightwards

Colored pages carry their own pixel colors and are never synthesized.

Failure Handling
================
- Missing page file: blank transparent page, cached, never surfaced
- Unreadable page file: logged, glyph falls back to the space glyph
- Empty character: falls back to the space glyph
- Space itself unresolvable: blank space-width glyph

Module Interface
================
- Glyph: Immutable bitmap plus colored flag
- GlyphProvider: Protocol the compositor depends on
- GlyphAtlas: File-backed provider with page and glyph caches

Caches are owned by one atlas instance and have no locking; give each
concurrent renderer its own atlas.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Any, Union, Protocol
from dataclasses import dataclass

import numpy as np
from PIL import Image

from tellraw_config import GlyphConfig, get_glyph_config, ALGORITHM_MAP
from tellraw_format import FMT_BOLD, FMT_OBFUSCATED

# Configure logging
logger = logging.getLogger('tellraw_glyph')


# ============================================================================
# DATA TYPES
# ============================================================================

@dataclass(frozen=True, eq=False)
class Glyph:
    """
    Immutable glyph bitmap.

    Attributes:
        pixels: Read-only uint8 array of shape (height, width, 4), RGBA
        colored: True if the source page holds non-grayscale pixels
    """
    pixels: np.ndarray
    colored: bool = False

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def same_pixels(self, other: 'Glyph') -> bool:
        """Content equality of bitmap and colored flag."""
        return self.colored == other.colored and np.array_equal(self.pixels, other.pixels)


@dataclass(frozen=True, eq=False)
class AtlasPage:
    """Decoded atlas page for one codepoint group."""
    pixels: np.ndarray
    colored: bool = False


class GlyphProvider(Protocol):
    """Anything that can hand out glyphs by character and format word."""

    def get(self, char: str, fmt: int = 0) -> Glyph:
        ...


def _freeze(pixels: np.ndarray) -> np.ndarray:
    pixels.setflags(write=False)
    return pixels


def is_grayscale(pixels: np.ndarray) -> bool:
    """True if every pixel has equal R, G and B."""
    return bool(np.array_equal(pixels[..., 0], pixels[..., 1]) and
                np.array_equal(pixels[..., 1], pixels[..., 2]))


# ============================================================================
# GLYPH ATLAS
# ============================================================================

class GlyphAtlas:
    """
    File-backed glyph cache.

    Pages are loaded lazily per codepoint group and kept for the lifetime
    of the atlas; glyphs are memoized per (character, format) key with no
    eviction.

    Attributes:
        root_dir: Directory holding glyph_XX.png pages
        config: Atlas layout configuration
        stats: Dictionary containing cache statistics
    """

    def __init__(self,
                 root_dir: Optional[Union[str, Path]] = None,
                 config: Optional[GlyphConfig] = None):
        """
        Initialize the atlas.

        Args:
            root_dir: Atlas directory (uses config font_dir if None)
            config: Glyph configuration (uses global config if None)
        """
        self.config = config or get_glyph_config()
        self.config.validate()
        self.root_dir = Path(root_dir if root_dir is not None else self.config.font_dir)

        self._pages: Dict[int, Optional[AtlasPage]] = {}
        self._glyphs: Dict[Tuple[str, int], Glyph] = {}

        # Statistics
        self.stats = {
            'page_loads': 0,
            'pages_missing': 0,
            'page_errors': 0,
            'glyph_hits': 0,
            'glyph_misses': 0,
            'fallbacks': 0,
        }

        if not self.root_dir.is_dir():
            logger.warning(f"Atlas directory not found: {self.root_dir}")

        logger.info(f"GlyphAtlas initialized with root_dir={self.root_dir}")

    @staticmethod
    def rune_to_idx(char: str) -> Tuple[int, int, int]:
        """
        Decompose a character's codepoint into (group, row, col).

        Example:
            >>> GlyphAtlas.rune_to_idx("A")
            (0, 4, 1)
        """
        code = ord(char[0])
        return code >> 8, (code & 0xF0) >> 4, code & 0xF

    def page_path(self, group: int) -> Path:
        """Path of the atlas page for a codepoint group."""
        return self.root_dir / f"glyph_{group:02X}.png"

    # ------------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------------

    def get_page(self, group: int) -> Optional[AtlasPage]:
        """
        Get an atlas page, loading it on first use.

        Returns:
            The page, or None if its file exists but cannot be decoded
        """
        if group in self._pages:
            return self._pages[group]

        page = self._load_page(group)
        self._pages[group] = page
        return page

    def _load_page(self, group: int) -> Optional[AtlasPage]:
        """Decode and normalize one page file."""
        size = self.config.page_size
        path = self.page_path(group)

        if not path.exists():
            logger.debug(f"Atlas page missing, using blank page: {path.name}")
            self.stats['pages_missing'] += 1
            return AtlasPage(_freeze(np.zeros((size, size, 4), dtype=np.uint8)), False)

        try:
            with Image.open(path) as img:
                rgba = img.convert('RGBA')
                if rgba.size != (size, size):
                    logger.debug(f"Resizing {path.name} from {rgba.size} to {size}x{size}")
                    rgba = rgba.resize((size, size), ALGORITHM_MAP[self.config.resize_algorithm])
                pixels = np.array(rgba, dtype=np.uint8)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load atlas page {path}: {e}")
            self.stats['page_errors'] += 1
            return None

        colored = not is_grayscale(pixels)
        self.stats['page_loads'] += 1
        logger.debug(f"Loaded atlas page {path.name} (colored={colored})")
        return AtlasPage(_freeze(pixels), colored)

    # ------------------------------------------------------------------------
    # Glyphs
    # ------------------------------------------------------------------------

    def get(self, char: str, fmt: int = 0) -> Glyph:
        """
        Get the glyph for a character under a format word.

        Args:
            char: Character to look up
            fmt: Format word; only style bits affect synthesis

        Returns:
            Cached Glyph (read-only)
        """
        key = (char, fmt)
        cached = self._glyphs.get(key)
        if cached is not None:
            self.stats['glyph_hits'] += 1
            return cached

        self.stats['glyph_misses'] += 1

        glyph = None
        for candidate in dict.fromkeys((char, ' ')):
            glyph = self._extract(candidate, fmt)
            if glyph is not None:
                break
            self.stats['fallbacks'] += 1
            logger.debug(f"Glyph {candidate!r} unresolvable, falling back to space")

        if glyph is None:
            glyph = self._synthesize(self._blank_glyph(), fmt)

        self._glyphs[key] = glyph
        return glyph

    def _extract(self, char: str, fmt: int) -> Optional[Glyph]:
        """Crop, tighten and synthesize one glyph; None if unresolvable."""
        if not char:
            return None

        group, row, col = self.rune_to_idx(char)
        page = self.get_page(group)
        if page is None:
            return None

        stride = self.config.cell_stride
        x0, y0 = col * stride, row * stride
        cell = page.pixels[y0:y0 + self.config.glyph_height, x0:x0 + self.config.glyph_width]

        glyph = Glyph(_freeze(self._tight_crop(cell)), page.colored)
        return self._synthesize(glyph, fmt)

    def _tight_crop(self, cell: np.ndarray) -> np.ndarray:
        """Crop a cell to the horizontal extent of its visible pixels."""
        columns = np.flatnonzero(cell[..., 3].any(axis=0))
        if columns.size:
            x1, x2 = int(columns[0]), int(columns[-1]) + 1
        else:
            x1, x2 = 0, self.config.space_width
        return cell[:, x1:x2].copy()

    def _blank_glyph(self) -> Glyph:
        pixels = np.zeros((self.config.glyph_height, self.config.space_width, 4), dtype=np.uint8)
        return Glyph(_freeze(pixels), False)

    def _synthesize(self, glyph: Glyph, fmt: int) -> Glyph:
        """Apply obfuscation and bold to a grayscale glyph."""
        if glyph.colored or not fmt & (FMT_OBFUSCATED | FMT_BOLD):
            return glyph

        pixels = glyph.pixels.copy()

        if fmt & FMT_OBFUSCATED:
            pixels[..., :3] = self.config.obfuscated_rgb

        if fmt & FMT_BOLD:
            pad = self.config.bold_pad
            height, width = pixels.shape[:2]
            widened = np.zeros((height, width + pad, 4), dtype=np.uint8)
            visible = pixels[..., 3] > 0
            for offset in range(pad):
                region = widened[:, offset:offset + width]
                region[visible] = pixels[visible]
            pixels = widened

        return Glyph(_freeze(pixels), False)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get atlas statistics.

        Returns:
            Dictionary including page/glyph counters and cache sizes
        """
        stats = self.stats.copy()
        total = stats['glyph_hits'] + stats['glyph_misses']
        stats['glyph_hit_rate'] = stats['glyph_hits'] / total if total else 0.0
        stats['cached_pages'] = len(self._pages)
        stats['cached_glyphs'] = len(self._glyphs)
        return stats
