#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Format Tokenizer Module
==================================================
Copyright (c) 2025 PNGN-Tec LLC

Inline Format Marker Parsing
============================
Chat text carries inline formatting as two-character markers introduced
by the section sign sentinel:

- §r  reset all flags and color
- §l  bold
- §o  italic
- §k  obfuscated
- §0-§9, §a-§u  color selection

Any other character after the sentinel is kept as literal text and the
sentinel is dropped; a doubled sentinel (§§) is a literal section sign.

Both the width model and the compositor consume the same event stream
produced by scan_events(). The width model only tracks bold/italic
locally per line, while the compositor folds events into a persistent
format word that carries across newlines.

Format Word Layout
==================
- bits 0-6: color code character (0 when no color is active)
- bit 8:    obfuscated
- bit 9:    bold
- bit 10:   italic
"""

import logging
from typing import Iterator, List, Tuple
from dataclasses import dataclass
from enum import Enum

# Configure logging
logger = logging.getLogger('tellraw_format')

# ============================================================================
# FORMAT CONSTANTS
# ============================================================================

SENTINEL = '§'

FMT_OBFUSCATED = 1 << 8
FMT_BOLD = 1 << 9
FMT_ITALIC = 1 << 10

FMT_COLOR_MASK = 0x7F
FMT_STYLE_MASK = 0xFF80

COLOR_CODE_CHARS = frozenset('0123456789abcdefghijklmnopqrstu')


class EventKind(Enum):
    """Kinds of tokens produced by the scanner"""
    RESET = "reset"
    BOLD = "bold"
    ITALIC = "italic"
    OBFUSCATED = "obfuscated"
    COLOR = "color"
    LITERAL = "literal"


MARKER_KINDS = {
    'r': EventKind.RESET,
    'l': EventKind.BOLD,
    'o': EventKind.ITALIC,
    'k': EventKind.OBFUSCATED,
}


@dataclass(frozen=True)
class FormatEvent:
    """
    Single scanner token.

    Attributes:
        kind: Token kind
        value: Literal character or color code ('' for flag markers)
        raw: Exact source text the token was read from
    """
    kind: EventKind
    value: str = ''
    raw: str = ''

    @property
    def is_literal(self) -> bool:
        return self.kind is EventKind.LITERAL


def scan_events(text: str) -> Iterator[FormatEvent]:
    """
    Scan text into format events.

    Newlines are not special here and come out as literal events; callers
    that care about lines split first.

    Args:
        text: Marked-up text

    Yields:
        FormatEvent per marker or visible character
    """
    pending = False
    for char in text:
        if not pending:
            if char == SENTINEL:
                pending = True
            else:
                yield FormatEvent(EventKind.LITERAL, char, char)
            continue

        pending = False
        raw = SENTINEL + char
        if char in MARKER_KINDS:
            yield FormatEvent(MARKER_KINDS[char], '', raw)
        elif char in COLOR_CODE_CHARS:
            yield FormatEvent(EventKind.COLOR, char, raw)
        else:
            # Unknown marker letter (or §§) falls through as literal text
            yield FormatEvent(EventKind.LITERAL, char, raw)


class FormatState:
    """Persistent format word updated by scanner events."""

    def __init__(self, fmt: int = 0):
        self.fmt = fmt

    def apply(self, event: FormatEvent) -> bool:
        """
        Fold one event into the format word.

        Returns:
            True if the event is a literal character to emit
        """
        kind = event.kind
        if kind is EventKind.LITERAL:
            return True
        if kind is EventKind.RESET:
            self.fmt = 0
        elif kind is EventKind.BOLD:
            self.fmt |= FMT_BOLD
        elif kind is EventKind.ITALIC:
            self.fmt |= FMT_ITALIC
        elif kind is EventKind.OBFUSCATED:
            self.fmt |= FMT_OBFUSCATED
        elif kind is EventKind.COLOR:
            self.fmt = (self.fmt & FMT_STYLE_MASK) | ord(event.value)
        return False

    @property
    def bold(self) -> bool:
        return bool(self.fmt & FMT_BOLD)

    @property
    def italic(self) -> bool:
        return bool(self.fmt & FMT_ITALIC)

    @property
    def obfuscated(self) -> bool:
        return bool(self.fmt & FMT_OBFUSCATED)

    @property
    def color_code(self) -> str:
        code = self.fmt & FMT_COLOR_MASK
        return chr(code) if code else ''


def split_format_and_text(text: str) -> Tuple[List[List[str]], List[List[int]]]:
    """
    Tokenize multi-line text into per-line characters and format words.

    Format state is not reset at line boundaries.

    Args:
        text: Marked-up text, possibly with newlines

    Returns:
        (lines_of_chars, lines_of_formats), same shape
    """
    state = FormatState()
    out_text: List[List[str]] = []
    out_fmt: List[List[int]] = []

    for line in text.split('\n'):
        chars: List[str] = []
        fmts: List[int] = []
        for event in scan_events(line):
            if state.apply(event):
                chars.append(event.value)
                fmts.append(state.fmt)
        out_text.append(chars)
        out_fmt.append(fmts)

    return out_text, out_fmt


def strip_format(text: str) -> str:
    """Remove all format markers, keeping literal text."""
    return ''.join(event.value for event in scan_events(text) if event.is_literal)
