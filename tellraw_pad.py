#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Exact Padding Module
===============================================
Copyright (c) 2025 PNGN-Tec LLC

Multi-Field Exact Alignment
===========================
Pads a batch of texts with literal spaces so that all of them render to
one common pixel width, exactly. Only two space widths are available:

    plain unit = space_width + char_padding            (6 by default)
    bold unit  = space_width + bold_pad + char_padding (8 by default)

Both units are even with the default metrics, so a width difference can
only be closed when it is even: every text in a batch must share the
same width parity. The common target starts at the widest text and
grows by 2 until every difference decomposes into non-negative counts.

Padding Templates
=================
Multi-line text may carry sequential markers "(pad1)", "(pad2)", ...
For each index in turn, every line containing the marker contributes
its text up to the marker to one batch, which is padded together.
Lines keep their accumulated output across indices, so columns built
by later markers line up as well:

    Name(pad1)Score(pad2)|
    Steve(pad1)12(pad2)|

Module Interface
================
- check_same_parity(): Parity precondition of a batch
- solve_xy(): Non-negative decomposition of one width difference
- resolve(): Common target and decompositions for a batch
- pad(): Pad a batch of texts to equal width
- Padder / pad_with_format(): Resolve a padding template
- pad_with_length(): Repeat a filler character over a pixel length
"""

import math
import logging
from typing import Callable, List, Optional, Tuple

from tellraw_config import PadConfig, get_pad_config
from tellraw_format import SENTINEL, strip_format
from tellraw_width import WidthCalculator, get_default_calculator, round_half_away

# Configure logging
logger = logging.getLogger('tellraw_pad')

BOLD_ON = SENTINEL + 'l'
RESET = SENTINEL + 'r'

PadFunction = Callable[[List[str]], List[str]]


class ParityError(ValueError):
    """Texts in one exact-alignment batch have mixed width parity."""


# ============================================================================
# SOLVER
# ============================================================================

def check_same_parity(widths: List[int]) -> bool:
    """True if all widths are even or all are odd."""
    return len({w % 2 for w in widths}) <= 1


def _extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """Return (g, x, y) with a*x + b*y == g == gcd(a, b)."""
    if b == 0:
        return a, 1, 0
    g, x, y = _extended_gcd(b, a % b)
    return g, y, x - (a // b) * y


def solve_xy(plain_unit: int, bold_unit: int, width: int) -> Optional[Tuple[int, int]]:
    """
    Solve plain_unit*x + bold_unit*y == width for non-negative integers.

    The coefficients are divided by their common factor (halved for the
    default units), a particular solution is taken from the extended
    Euclidean algorithm, and the general solution

        x = x0 + b*t,  y = y0 - a*t

    is restricted to the range of t keeping both non-negative. The
    smallest feasible t wins, favouring bold spaces.

    Args:
        plain_unit: Width of one plain space
        bold_unit: Width of one bold space
        width: Width to decompose

    Returns:
        (x, y) plain and bold counts, or None if no decomposition exists
    """
    g, u, v = _extended_gcd(plain_unit, bold_unit)
    if width % g:
        return None

    a, b, m = plain_unit // g, bold_unit // g, width // g
    x0, y0 = u * m, v * m

    t_low = -(x0 // b)          # ceil(-x0 / b)
    t_high = y0 // a            # floor(y0 / a)
    if t_low > t_high:
        return None

    return x0 + b * t_low, y0 - a * t_low


def resolve(widths: List[int],
            plain_unit: Optional[int] = None,
            bold_unit: Optional[int] = None) -> Optional[Tuple[int, List[Tuple[int, int]]]]:
    """
    Find a common target width and a decomposition for every input width.

    Args:
        widths: Measured widths of the batch
        plain_unit: Plain space unit (default from width config)
        bold_unit: Bold space unit (default from width config)

    Returns:
        (target, [(x, y), ...]) with plain_unit*x + bold_unit*y equal to
        target - width for each width, or None for an empty batch or
        mixed parity

    Raises:
        ValueError: If the units cannot close every even gap
    """
    if not widths or not check_same_parity(widths):
        return None

    if plain_unit is None or bold_unit is None:
        config = get_default_calculator().config
        plain_unit = config.plain_space_unit if plain_unit is None else plain_unit
        bold_unit = config.bold_space_unit if bold_unit is None else bold_unit

    if plain_unit <= 0 or bold_unit <= 0:
        raise ValueError("Space units must be positive")
    if 2 % math.gcd(plain_unit, bold_unit):
        raise ValueError(f"Space units {plain_unit} and {bold_unit} cannot close even gaps")

    target = max(widths)
    attempts = 0
    while True:
        attempts += 1
        solutions = []
        for width in widths:
            solution = solve_xy(plain_unit, bold_unit, target - width)
            if solution is None:
                break
            solutions.append(solution)
        else:
            logger.debug(f"Resolved {len(widths)} widths to target {target} "
                         f"after {attempts} attempt(s)")
            return target, solutions
        target += 2


# ============================================================================
# PADDING
# ============================================================================

def _pad_string(plain: int, bold: int) -> str:
    """Reset, plain spaces, then bold spaces wrapped in markers."""
    out = RESET + ' ' * plain
    if bold:
        out += BOLD_ON + ' ' * bold + RESET
    return out


def measure_for_pad(text: str, calculator: Optional[WidthCalculator] = None) -> int:
    """
    Width of a text as it will render in front of its pad.

    The pad starts with a reset, so a trailing italic state does not
    count. Text with no visible characters measures -char_padding: the
    first pad space then lands at offset 0.
    """
    calculator = calculator or get_default_calculator()
    if not strip_format(text):
        return -calculator.char_padding
    return calculator.get_line_width(text + RESET)


def pad(texts: List[str], calculator: Optional[WidthCalculator] = None) -> List[str]:
    """
    Pad texts with spaces so that they all render to the same width.

    Args:
        texts: Single-line texts
        calculator: Width calculator (default calculator if None)

    Returns:
        Each text followed by its padding

    Raises:
        ParityError: If the texts' widths do not share parity
    """
    if not texts:
        return []

    calculator = calculator or get_default_calculator()
    widths = [measure_for_pad(text, calculator) for text in texts]

    result = resolve(widths,
                     calculator.config.plain_space_unit,
                     calculator.config.bold_space_unit)
    if result is None:
        raise ParityError(f"Cannot align widths of mixed parity: {widths}")

    _, solutions = result
    return [text + _pad_string(x, y) for text, (x, y) in zip(texts, solutions)]


def pad_with_length(length: int,
                    padder: str = ' ',
                    round_up: bool = False,
                    calculator: Optional[WidthCalculator] = None) -> str:
    """
    Repeat a filler character to cover a pixel length.

    Example:
        >>> pad_with_length(22, "-")
        '---'
    """
    calculator = calculator or get_default_calculator()
    step = calculator.get_char_width(padder) + calculator.char_padding
    count = (length + calculator.char_padding) / step
    count = round_half_away(count) if round_up else math.floor(count)
    return padder * max(count, 0)


# ============================================================================
# TEMPLATES
# ============================================================================

class Padder:
    """
    Padding template resolver.

    Attributes:
        pending: Unprocessed remainder of each line
        padded: Accumulated output of each line
    """

    def __init__(self,
                 text: str,
                 pad_fn: PadFunction = pad,
                 config: Optional[PadConfig] = None):
        self.pad_fn = pad_fn
        self.config = config or get_pad_config()
        self.config.validate()

        self.pending = [line.rstrip('\r') for line in text.split('\n')]
        if len(self.pending) > 1 and not self.pending[-1]:
            self.pending.pop()
        self.padded = [''] * len(self.pending)

    def _contains(self, mark: str) -> bool:
        return any(mark in line for line in self.pending)

    def step(self, mark: str):
        """Pad one batch: every line's text up to its next `mark`."""
        indices = []
        batch = []
        remainders = []
        for i, line in enumerate(self.pending):
            if mark not in line:
                continue
            pre, rest = line.split(mark, 1)
            indices.append(i)
            batch.append(self.padded[i] + pre)
            remainders.append(rest)

        # Lines stay untouched if the pad function raises
        outputs = self.pad_fn(batch)
        for i, out, rest in zip(indices, outputs, remainders):
            self.padded[i] = out
            self.pending[i] = rest

    def execute(self) -> str:
        """Resolve every marker index in order and join the lines."""
        index = self.config.first_index
        mark = self.config.mark(index)

        while self._contains(mark):
            while self._contains(mark):
                self.step(mark)
            logger.debug(f"Resolved pad mark {mark}")
            index += 1
            mark = self.config.mark(index)

        return '\n'.join(p + rest for p, rest in zip(self.padded, self.pending))


def pad_with_format(text: str, config: Optional[PadConfig] = None) -> str:
    """
    Resolve a padding template with exact alignment.

    Example:
        >>> pad_with_format("x(pad1)\\nyy(pad1)")
        'x§r§l §r\\nyy§r'
    """
    return Padder(text, pad, config).execute()
