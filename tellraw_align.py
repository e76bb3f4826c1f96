#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Approximate Alignment Module
=======================================================
Copyright (c) 2025 PNGN-Tec LLC

Single-Field Alignment
======================
Pads text to approximately a target width using only two discrete
space widths: a plain space and a bold space. Both include the
inter-character padding they add to a non-empty line.

    plain unit = space_width + char_padding            (6 by default)
    bold unit  = space_width + bold_pad + char_padding (8 by default)

The best combination x*plain + y*bold for a target rarely hits it
exactly. The signed residual is returned so a sequence of aligned fields
on one row can feed it into the next field and keep the row from
drifting.

Module Interface
================
- find_closest(): Best (x, y) combinations for a target width
- get_specific_length_spaces(): Space string for a pixel width
- align_left() / align_right() / align_center(): Column alignment
- align_simple(): Row of mixed plain and aligned fields
"""

import logging
import math
from typing import List, Optional, Tuple
from dataclasses import dataclass

from tellraw_format import SENTINEL
from tellraw_width import WidthCalculator, get_default_calculator, round_half_away

# Configure logging
logger = logging.getLogger('tellraw_align')

BOLD_ON = SENTINEL + 'l'
RESET = SENTINEL + 'r'


def find_closest(a: int, b: int, target: int) -> Tuple[List[Tuple[int, int, int]], int]:
    """
    Find x >= 1, y >= 0 minimizing |x*a + y*b - target|.

    For each x up to ((target + max(a, b)) // a) + 2 the candidate y
    values are 0 and the floor, ceiling and rounding of the real-valued
    ideal, each clamped to zero.

    Args:
        a: Plain unit width
        b: Bold unit width
        target: Width to approximate

    Returns:
        (solutions, diff) where solutions lists every (x, y, total) tied
        for the smallest error in search order, and diff is the signed
        residual total - target of the first one

    Raises:
        ValueError: If a or b is not positive
    """
    if a <= 0 or b <= 0:
        raise ValueError("a and b must be greater than 0")

    min_error = math.inf
    final_diff = 0
    solutions: List[Tuple[int, int, int]] = []

    x_max = max(1, (target + max(a, b)) // a + 2)

    for x in range(1, x_max + 1):
        x_a = x * a
        y_ideal = (target - x_a) / b

        candidates = (
            0,
            max(math.floor(y_ideal), 0),
            max(math.ceil(y_ideal), 0),
            max(round_half_away(y_ideal), 0),
        )
        for y in candidates:
            total = x_a + y * b
            error = abs(total - target)

            if error < min_error:
                min_error = error
                final_diff = total - target
                solutions = [(x, y, total)]
            elif error == min_error:
                solutions.append((x, y, total))

    return solutions, final_diff


# ============================================================================
# ALIGNER
# ============================================================================

class Aligner:
    """
    Approximate aligner over a width calculator.

    Widths passed as `spaces` are in units of the plain space width.
    """

    def __init__(self, calculator: Optional[WidthCalculator] = None):
        self.calculator = calculator or get_default_calculator()

    @property
    def space_width(self) -> int:
        return self.calculator.config.space_width

    def get_specific_length_spaces_and_diff(self, length: int, prev_diff: int = 0) -> Tuple[str, int]:
        """
        Space string approximating a pixel length.

        Args:
            length: Pixel width to fill
            prev_diff: Correction carried from the previous field

        Returns:
            (spaces, diff): bold spaces wrapped in markers followed by
            plain spaces, and the signed residual
        """
        config = self.calculator.config
        solutions, diff = find_closest(
            config.plain_space_unit,
            config.bold_space_unit,
            length + prev_diff,
        )
        plain, bold, _ = solutions[0]
        return f"{BOLD_ON}{' ' * bold}{RESET}{' ' * plain}", diff

    def get_specific_length_spaces(self, length: int) -> str:
        return self.get_specific_length_spaces_and_diff(length, 0)[0]

    def align_any_and_get_diff(self, text: str, spaces: int, prev_diff: int = 0) -> Tuple[str, int]:
        """
        Padding that brings text to `spaces` space-widths.

        Returns an empty pad and the negative overflow when the text is
        already wider than the target.
        """
        spaces_left = spaces * self.space_width - self.calculator.get_line_width(text)
        if spaces_left < 0:
            return '', spaces_left
        return self.get_specific_length_spaces_and_diff(spaces_left, prev_diff)

    def align_any(self, text: str, spaces: int) -> str:
        return self.align_any_and_get_diff(text, spaces, 0)[0]

    def align_left_and_get_diff(self, text: str, spaces: int, prev_diff: int = 0) -> Tuple[str, int]:
        pad, diff = self.align_any_and_get_diff(text, spaces, prev_diff)
        return text + pad, diff

    def align_left(self, text: str, spaces: int) -> str:
        return self.align_left_and_get_diff(text, spaces)[0]

    def align_right_and_get_diff(self, text: str, spaces: int, prev_diff: int = 0) -> Tuple[str, int]:
        pad, diff = self.align_any_and_get_diff(text, spaces, prev_diff)
        return pad + text, diff

    def align_right(self, text: str, spaces: int) -> str:
        return self.align_right_and_get_diff(text, spaces)[0]

    def align_center(self, text: str, spaces: int) -> str:
        """Split the remaining width around the text, extra half on the right."""
        rest = spaces * self.space_width - self.calculator.get_line_width(text)
        left = self.get_specific_length_spaces(int(rest / 2))
        right = self.get_specific_length_spaces(round_half_away(rest / 2))
        return left + text + right

    def align_simple(self, args: List['AlignArg']) -> str:
        """
        Concatenate a row of fields, carrying the rounding residual.

        Each aligned field receives the previous aligned field's residual
        negated, so overshoot on one field is taken back on the next.
        """
        parts: List[str] = []
        diff = 0
        for arg in args:
            if arg.kind == AlignArg.TEXT:
                parts.append(arg.text)
            elif arg.kind == AlignArg.LEFT:
                out, diff = self.align_left_and_get_diff(arg.text, arg.spaces, -diff)
                parts.append(out)
            elif arg.kind == AlignArg.RIGHT:
                out, diff = self.align_right_and_get_diff(arg.text, arg.spaces, -diff)
                parts.append(out)
            else:
                raise ValueError(f"Unknown alignment kind: {arg.kind}")
        return ''.join(parts)


@dataclass(frozen=True)
class AlignArg:
    """One field of an align_simple row."""

    TEXT = 'text'
    LEFT = 'left'
    RIGHT = 'right'

    kind: str
    text: str
    spaces: int = 0

    @classmethod
    def plain(cls, text: str) -> 'AlignArg':
        return cls(cls.TEXT, text)

    @classmethod
    def left(cls, text: str, spaces: int) -> 'AlignArg':
        return cls(cls.LEFT, text, spaces)

    @classmethod
    def right(cls, text: str, spaces: int) -> 'AlignArg':
        return cls(cls.RIGHT, text, spaces)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def _default_aligner() -> Aligner:
    return Aligner(get_default_calculator())


def get_specific_length_spaces(length: int) -> str:
    return _default_aligner().get_specific_length_spaces(length)


def get_specific_length_spaces_and_diff(length: int, prev_diff: int = 0) -> Tuple[str, int]:
    return _default_aligner().get_specific_length_spaces_and_diff(length, prev_diff)


def align_left(text: str, spaces: int) -> str:
    return _default_aligner().align_left(text, spaces)


def align_right(text: str, spaces: int) -> str:
    return _default_aligner().align_right(text, spaces)


def align_center(text: str, spaces: int) -> str:
    return _default_aligner().align_center(text, spaces)


def align_simple(args: List[AlignArg]) -> str:
    """
    Align a row of fields with the default calculator.

    Example:
        >>> align_simple([AlignArg.left("Name", 20), AlignArg.right("42", 8)])
    """
    return _default_aligner().align_simple(args)
