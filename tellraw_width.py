#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Width Calculation Module
===================================================
Copyright (c) 2025 PNGN-Tec LLC

Pixel Width Calculation System
==============================
Exact pixel width measurement for chat text drawn with the bitmap glyph
atlas, providing the foundation for alignment and padding.

Core Features
=============
- Static per-codepoint width table (measured ASCII, fixed default elsewhere)
- Bold widening and italic trailing pad
- Format-marker aware line measurement
- LRU cache of measured lines
- Width-based chunking of long text

Width Rules
===========
- A glyph's width comes from the table; bold adds a fixed pad
- Consecutive glyphs are separated by a fixed padding
- A line whose trailing state is italic gets one extra italic pad
- Markers themselves take no space

Module Interface
================
- WidthCalculator: Main class with table, cache and statistics
- get_char_width(): Width of a single character
- get_line_width(): Width of one marked-up line
- get_lines_width(): Widest of several lines
- cut_by_length(): Split text into chunks of a given space count

Example Usage
=============
```python
from tellraw_width import get_line_width

get_line_width("AB")      # Returns 14 (6 + 2 + 6)
get_line_width("§lAB")    # Returns 18 (8 + 2 + 8)
```
"""

import threading
import logging
from typing import Optional, List, Dict, Iterator, Tuple, Union
from collections import OrderedDict

from tellraw_config import WidthConfig, get_width_config, register_config_callback
from tellraw_format import EventKind, scan_events

# Configure logging
logger = logging.getLogger('tellraw_width')


class MultiLineError(ValueError):
    """A single-line measurement was given text containing a newline."""


def round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)


class WidthCalculator:
    """
    Pixel width calculator for marked-up chat text.

    Holds the width table and padding constants from a WidthConfig and
    memoizes line measurements.

    Attributes:
        config: Width configuration in use
        stats: Dictionary containing calculation statistics
    """

    def __init__(self,
                 config: Optional[WidthConfig] = None,
                 cache_size: int = 1000,
                 enable_cache: bool = True):
        """
        Initialize width calculator.

        Args:
            config: Width configuration (uses global config if None)
            cache_size: Maximum number of cached line widths
            enable_cache: Whether to cache line widths
        """
        self.config = config or get_width_config()
        self.config.validate()

        self._table = dict(self.config.ascii_widths)
        self._line_cache = OrderedDict()
        self._cache_size = cache_size
        self._cache_enabled = enable_cache
        self._lock = threading.Lock()

        # Statistics
        self.stats = {
            'cache_hits': 0,
            'cache_misses': 0,
            'lines_measured': 0,
            'cache_evictions': 0,
        }

        logger.info(f"WidthCalculator initialized with cache_size={cache_size}, "
                    f"default_width={self.config.default_width}, cache_enabled={enable_cache}")

    @property
    def char_padding(self) -> int:
        return self.config.char_padding

    def get_char_width(self, char: str, bold: bool = False) -> int:
        """
        Width of a single character.

        Args:
            char: Character (only the first codepoint is used)
            bold: Whether the character is bold

        Returns:
            Width in pixels (0 for empty input)
        """
        if not char:
            return 0
        width = self._table.get(ord(char[0]), self.config.default_width)
        if bold:
            width += self.config.bold_pad
        return width

    def get_line_width(self, line: str) -> int:
        """
        Width of a single marked-up line.

        Args:
            line: Text without newlines

        Returns:
            Width in pixels

        Raises:
            MultiLineError: If the line contains a newline
        """
        if '\n' in line:
            raise MultiLineError("Line contains newline; use get_lines_width instead")

        cached = self._get_cached(line)
        if cached is not None:
            return cached

        width = 0
        length = 0
        bold = False
        italic = False

        for event in scan_events(line):
            kind = event.kind
            if kind is EventKind.LITERAL:
                length += 1
                width += self.get_char_width(event.value, bold)
            elif kind is EventKind.BOLD:
                bold = True
            elif kind is EventKind.ITALIC:
                italic = True
            elif kind is EventKind.RESET:
                bold = False
                italic = False

        width += max(length - 1, 0) * self.config.char_padding
        if italic:
            width += self.config.italic_padding

        self.stats['lines_measured'] += 1
        self._cache_result(line, width)
        return width

    def get_lines_width(self, lines: List[str]) -> int:
        """Widest line of several, 0 when empty."""
        return max((self.get_line_width(line) for line in lines), default=0)

    def get_line_widths(self, lines: List[str]) -> List[int]:
        """Width of each line."""
        return [self.get_line_width(line) for line in lines]

    def cut_by_length(self, text: str, spaces: int) -> List[str]:
        """
        Split text into chunks at least `spaces` space-widths wide.

        Newlines always close a chunk. Markers stay in the chunk in which
        they appear and carry bold state across chunk boundaries for
        measurement purposes. A trailing whitespace-only chunk is dropped.

        Args:
            text: Marked-up text, newlines allowed
            spaces: Chunk width in units of the plain space width

        Returns:
            List of chunk strings
        """
        limit = spaces * self.config.space_width + max(spaces - 1, 0) * self.config.char_padding
        outputs: List[str] = []
        cached: List[str] = []
        width = 0
        bold = False

        for event in scan_events(text):
            is_newline = event.is_literal and event.raw == '\n'
            if width >= limit or is_newline:
                outputs.append(''.join(cached))
                cached = []
                width = 0
                if is_newline:
                    continue

            kind = event.kind
            if kind is EventKind.LITERAL:
                width += self.get_char_width(event.value, bold) + self.config.char_padding
            elif kind is EventKind.BOLD:
                bold = True
            elif kind is EventKind.RESET:
                bold = False
            cached.append(event.raw)

        tail = ''.join(cached)
        if tail.strip():
            outputs.append(tail)
        return outputs

    def iter_char_offsets(self, line: str) -> Iterator[Tuple[str, int]]:
        """
        Yield each token of a line with the running width after it.

        Markers are yielded too, with an unchanged width.
        """
        width = 0
        bold = False
        for event in scan_events(line):
            kind = event.kind
            if kind is EventKind.LITERAL:
                width += self.get_char_width(event.value, bold) + self.config.char_padding
            elif kind is EventKind.BOLD:
                bold = True
            elif kind is EventKind.RESET:
                bold = False
            yield event.raw, width

    def _get_cached(self, line: str) -> Optional[int]:
        """Get cached width if available."""
        if not self._cache_enabled:
            return None

        with self._lock:
            if line in self._line_cache:
                self._line_cache.move_to_end(line)
                self.stats['cache_hits'] += 1
                return self._line_cache[line]

        self.stats['cache_misses'] += 1
        return None

    def _cache_result(self, line: str, width: int):
        """Cache a line measurement, evicting the oldest entries."""
        if not self._cache_enabled:
            return

        with self._lock:
            while self._line_cache and len(self._line_cache) >= self._cache_size:
                self._line_cache.popitem(last=False)
                self.stats['cache_evictions'] += 1
            self._line_cache[line] = width

    def clear_cache(self):
        """Clear all cached widths."""
        with self._lock:
            self._line_cache.clear()

    def get_stats(self) -> Dict[str, Union[int, float]]:
        """
        Get calculator statistics.

        Returns:
            Dictionary of statistics including cache hit rate and size
        """
        stats = self.stats.copy()

        total_requests = stats['cache_hits'] + stats['cache_misses']
        if total_requests > 0:
            stats['cache_hit_rate'] = stats['cache_hits'] / total_requests
        else:
            stats['cache_hit_rate'] = 0.0

        with self._lock:
            stats['cache_entries'] = len(self._line_cache)
            stats['cache_enabled'] = self._cache_enabled

        return stats


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_calculator = None
_calculator_lock = threading.Lock()

def get_default_calculator() -> WidthCalculator:
    """Shared calculator built from the global configuration."""
    global _default_calculator

    if _default_calculator is None:
        with _calculator_lock:
            if _default_calculator is None:
                _default_calculator = WidthCalculator()

    return _default_calculator


def reset_default_calculator():
    """Drop the shared calculator so the next call picks up new config."""
    global _default_calculator

    with _calculator_lock:
        _default_calculator = None


register_config_callback(lambda old_config, new_config: reset_default_calculator())


def get_char_width(char: str, bold: bool = False) -> int:
    """
    Width of a single character using the default calculator.

    Example:
        >>> get_char_width("A")
        6
        >>> get_char_width("A", bold=True)
        8
        >>> get_char_width("你")
        12
    """
    return get_default_calculator().get_char_width(char, bold)


def get_line_width(line: str) -> int:
    """
    Width of one marked-up line using the default calculator.

    Example:
        >>> get_line_width("Hi!")
        18
    """
    return get_default_calculator().get_line_width(line)


def get_lines_width(lines: List[str]) -> int:
    """Widest of several lines using the default calculator."""
    return get_default_calculator().get_lines_width(lines)


def cut_by_length(text: str, spaces: int) -> List[str]:
    """Split text into chunks using the default calculator."""
    return get_default_calculator().cut_by_length(text, spaces)


def clear_default_cache():
    """
    Clear the default calculator's cache.
    """
    if _default_calculator is not None:
        _default_calculator.clear_cache()
