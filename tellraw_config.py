#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Configuration Module
===============================================
Copyright (c) 2025 PNGN-Tec LLC

Centralized Configuration System
=================================
Complete configuration for chat text rendering including:
- Glyph widths and inter-character padding
- Glyph atlas layout (page size, cell grid, resampling)
- Compositor settings (line spacing, italic shear)
- Padding template markers
- Color code table (standard 16 codes plus extended material codes)

Configuration Overview
======================
Every component takes an explicit config object in its constructor and
falls back to the process-wide configuration when none is given. The
process-wide configuration lives in a singleton manager that reads
environment overrides at startup and can be reloaded at runtime.

Environment Overrides
=====================
- TELLRAW_FONT_DIR: Directory containing glyph_XX.png atlas pages
- TELLRAW_LINE_PADDING: Vertical pixels between rendered lines
- TELLRAW_ITALIC_ANGLE: Italic shear angle in degrees
- TELLRAW_PAD_MARK: Padding marker template (must contain "{}")
- TELLRAW_DEBUG: Enable debug mode ("true", "1", "yes")
- TELLRAW_LOG_LEVEL: Logging level name

Color System
============
Color codes are single characters following the format sentinel.
Codes 0-9 and a-f are the classic chat palette; g-v are the extended
material colors. Absent or unknown codes render opaque white.
"""

import threading
import logging
import os
from typing import Tuple, Dict, Optional, Callable
from dataclasses import dataclass, field
from enum import Enum

from PIL import Image

# Configure logging
logger = logging.getLogger('tellraw_config')

# Type alias for RGBA colors
RGBAColor = Tuple[int, int, int, int]

# ============================================================================
# GLYPH METRICS
# ============================================================================

SPACE_WIDTH = 4                   # Width of a plain space
BOLD_PAD = 2                      # Extra width of a bold glyph
CHAR_HORIZON_PADDING = 2          # Gap between consecutive glyphs
ITALIC_CHAR_HORIZON_PADDING = 2   # Extra width when a line ends in italic
DEFAULT_CHAR_WIDTH = 12           # Width of any non-ASCII codepoint

# ============================================================================
# ATLAS LAYOUT
# ============================================================================

ATLAS_PAGE_SIZE = 512    # Pages are normalized to 512x512
ATLAS_GRID = 16          # 16x16 cells per page
CELL_STRIDE = 32         # Cell pitch in both directions
GLYPH_WIDTH = 32         # Source cell width
GLYPH_HEIGHT = 31        # Source cell height (and rendered line height)

# ============================================================================
# COMPOSITOR SETTINGS
# ============================================================================

LINE_PADDING = 6         # Vertical gap between lines
ITALIC_ANGLE = 15.0      # Shear angle in degrees
ITALIC_MARGIN = 4        # Left extension of a sheared italic strip

DEFAULT_FONT_DIR = "font_png"
DEFAULT_PAD_MARK = "(pad{})"

# Printable ASCII widths that differ from the uppercase/lowercase default
ASCII_WIDTHS = {
    ' ': 4, '!': 2, '"': 5, '#': 6, '$': 6, '%': 6, '&': 6, "'": 2,
    '(': 4, ')': 4, '*': 5, '+': 6, ',': 2, '-': 6, '.': 2, '/': 6,
    ':': 2, ';': 2, '<': 5, '=': 6, '>': 5, '?': 6, '@': 7,
    '[': 4, '\\': 6, ']': 4, '^': 6, '_': 6, '`': 3,
    '{': 4, '|': 2, '}': 4, '~': 7,
}

# Width of every other ASCII codepoint (letters, digits, controls)
ASCII_FALLBACK_WIDTH = 6


def _build_ascii_table() -> Dict[int, int]:
    """Build the full 0-127 width table."""
    table = {code: ASCII_FALLBACK_WIDTH for code in range(128)}
    for char, width in ASCII_WIDTHS.items():
        table[ord(char)] = width
    return table


# ============================================================================
# CONFIGURATION ENUMS
# ============================================================================

class ScalingAlgorithm(Enum):
    """Image scaling algorithms"""
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


# PIL algorithm mapping
ALGORITHM_MAP = {
    ScalingAlgorithm.NEAREST: Image.NEAREST,
    ScalingAlgorithm.BILINEAR: Image.BILINEAR,
    ScalingAlgorithm.BICUBIC: Image.BICUBIC,
    ScalingAlgorithm.LANCZOS: Image.LANCZOS,
    'nearest': Image.NEAREST,
    'bilinear': Image.BILINEAR,
    'bicubic': Image.BICUBIC,
    'lanczos': Image.LANCZOS
}


# ============================================================================
# COLOR CODE TABLE
# ============================================================================

COLOR_CODES = {
    # CLASSIC PALETTE (0-f)
    '0': {'name': 'Black', 'rgba': (0, 0, 0, 255)},
    '1': {'name': 'Dark Blue', 'rgba': (0, 0, 170, 255)},
    '2': {'name': 'Dark Green', 'rgba': (0, 170, 0, 255)},
    '3': {'name': 'Dark Aqua', 'rgba': (0, 170, 170, 255)},
    '4': {'name': 'Dark Red', 'rgba': (170, 0, 0, 255)},
    '5': {'name': 'Dark Purple', 'rgba': (170, 0, 170, 255)},
    '6': {'name': 'Gold', 'rgba': (255, 170, 0, 255)},
    '7': {'name': 'Gray', 'rgba': (170, 170, 170, 255)},
    '8': {'name': 'Dark Gray', 'rgba': (85, 85, 85, 255)},
    '9': {'name': 'Blue', 'rgba': (85, 85, 255, 255)},
    'a': {'name': 'Green', 'rgba': (85, 255, 85, 255)},
    'b': {'name': 'Aqua', 'rgba': (85, 255, 255, 255)},
    'c': {'name': 'Red', 'rgba': (255, 85, 85, 255)},
    'd': {'name': 'Light Purple', 'rgba': (255, 85, 255, 255)},
    'e': {'name': 'Yellow', 'rgba': (255, 255, 85, 255)},
    'f': {'name': 'White', 'rgba': (255, 255, 255, 255)},

    # EXTENDED MATERIAL PALETTE (g-v)
    'g': {'name': 'Minecoin Gold', 'rgba': (221, 214, 5, 255)},
    'h': {'name': 'Material Quartz', 'rgba': (222, 214, 5, 255)},
    'i': {'name': 'Material Iron', 'rgba': (227, 212, 209, 255)},
    'j': {'name': 'Material Netherite', 'rgba': (68, 58, 59, 255)},
    'm': {'name': 'Material Redstone', 'rgba': (151, 22, 7, 255)},
    'n': {'name': 'Material Copper', 'rgba': (180, 104, 77, 255)},
    'p': {'name': 'Material Gold', 'rgba': (222, 177, 45, 255)},
    'q': {'name': 'Material Emerald', 'rgba': (17, 160, 54, 255)},
    's': {'name': 'Material Diamond', 'rgba': (44, 186, 168, 255)},
    't': {'name': 'Material Lapis', 'rgba': (33, 73, 123, 255)},
    'u': {'name': 'Material Amethyst', 'rgba': (154, 92, 198, 255)},
    'v': {'name': 'Material Resin', 'rgba': (235, 114, 20, 255)},
}

DEFAULT_COLOR: RGBAColor = (255, 255, 255, 255)


def default_color_mapping() -> Dict[str, RGBAColor]:
    """Code to RGBA mapping built from COLOR_CODES"""
    return {code: entry['rgba'] for code, entry in COLOR_CODES.items()}


# ============================================================================
# WIDTH CONFIGURATION
# ============================================================================

@dataclass
class WidthConfig:
    """
    Width model parameters.

    Attributes:
        ascii_widths: Width per ASCII codepoint (0-127)
        default_width: Width of every codepoint outside the table
        space_width: Width of a plain space, the alignment unit
        bold_pad: Width added to a bold glyph
        char_padding: Gap between consecutive glyphs
        italic_padding: Extra width when a line ends in italic
    """

    ascii_widths: Dict[int, int] = field(default_factory=_build_ascii_table)
    default_width: int = DEFAULT_CHAR_WIDTH
    space_width: int = SPACE_WIDTH
    bold_pad: int = BOLD_PAD
    char_padding: int = CHAR_HORIZON_PADDING
    italic_padding: int = ITALIC_CHAR_HORIZON_PADDING

    @property
    def plain_space_unit(self) -> int:
        """Width one plain space adds to a non-empty line"""
        return self.space_width + self.char_padding

    @property
    def bold_space_unit(self) -> int:
        """Width one bold space adds to a non-empty line"""
        return self.space_width + self.bold_pad + self.char_padding

    def validate(self) -> bool:
        """Validate width configuration"""
        if self.default_width < 0 or any(w < 0 for w in self.ascii_widths.values()):
            raise ValueError("Glyph widths must be non-negative")
        if self.space_width <= 0:
            raise ValueError("Space width must be positive")
        if self.bold_pad < 0 or self.char_padding < 0 or self.italic_padding < 0:
            raise ValueError("Paddings must be non-negative")
        return True


# ============================================================================
# GLYPH ATLAS CONFIGURATION
# ============================================================================

@dataclass
class GlyphConfig:
    """Glyph atlas layout and synthesis parameters"""

    font_dir: str = DEFAULT_FONT_DIR

    # Page layout
    page_size: int = ATLAS_PAGE_SIZE
    grid: int = ATLAS_GRID
    cell_stride: int = CELL_STRIDE
    glyph_width: int = GLYPH_WIDTH
    glyph_height: int = GLYPH_HEIGHT

    # Synthesis
    space_width: int = SPACE_WIDTH
    bold_pad: int = BOLD_PAD
    obfuscated_rgb: Tuple[int, int, int] = (1, 1, 1)

    # Page normalization
    resize_algorithm: ScalingAlgorithm = ScalingAlgorithm.NEAREST

    def validate(self) -> bool:
        """Validate glyph configuration"""
        if self.page_size != self.grid * self.cell_stride:
            raise ValueError("Page size must equal grid * cell stride")
        if self.glyph_width > self.cell_stride or self.glyph_height > self.cell_stride:
            raise ValueError("Glyph cell cannot exceed the cell stride")
        if self.space_width <= 0 or self.bold_pad < 0:
            raise ValueError("Space width must be positive and bold pad non-negative")
        return True


# ============================================================================
# RENDERING CONFIGURATION
# ============================================================================

@dataclass
class RenderConfig:
    """Compositor configuration"""

    line_padding: int = LINE_PADDING
    char_padding: int = CHAR_HORIZON_PADDING
    italic_padding: int = ITALIC_CHAR_HORIZON_PADDING
    glyph_height: int = GLYPH_HEIGHT

    # Italic synthesis
    italic_angle: float = ITALIC_ANGLE
    italic_margin: int = ITALIC_MARGIN

    # Colors
    default_color: RGBAColor = DEFAULT_COLOR
    color_mapping: Dict[str, RGBAColor] = field(default_factory=default_color_mapping)

    def get_color(self, code: str) -> RGBAColor:
        """Color for a single-character code, default when unknown"""
        return self.color_mapping.get(code, self.default_color)

    def validate(self) -> bool:
        """Validate rendering configuration"""
        if self.line_padding < 0 or self.char_padding < 0 or self.italic_padding < 0:
            raise ValueError("Paddings must be non-negative")
        if self.glyph_height <= 0:
            raise ValueError("Glyph height must be positive")
        if not 0.0 <= self.italic_angle < 90.0:
            raise ValueError("Italic angle must be in [0, 90) degrees")
        for code, rgba in self.color_mapping.items():
            if len(code) != 1:
                raise ValueError(f"Color code must be a single character: {code!r}")
            if len(rgba) != 4 or any(not 0 <= c <= 255 for c in rgba):
                raise ValueError(f"Invalid RGBA value for code {code!r}: {rgba}")
        return True


# ============================================================================
# PADDING CONFIGURATION
# ============================================================================

@dataclass
class PadConfig:
    """Padding template configuration"""

    pad_mark: str = DEFAULT_PAD_MARK
    first_index: int = 1

    def mark(self, index: int) -> str:
        """Marker text for a pad index"""
        return self.pad_mark.format(index)

    def validate(self) -> bool:
        """Validate padding configuration"""
        if '{}' not in self.pad_mark:
            raise ValueError("Pad mark must contain a '{}' placeholder")
        if self.first_index < 0:
            raise ValueError("First pad index must be non-negative")
        return True


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

@dataclass
class TellrawSystemConfig:
    """Complete system configuration"""

    # Sub-configurations
    width: WidthConfig = field(default_factory=WidthConfig)
    glyph: GlyphConfig = field(default_factory=GlyphConfig)
    rendering: RenderConfig = field(default_factory=RenderConfig)
    pad: PadConfig = field(default_factory=PadConfig)

    # System-wide settings
    debug_mode: bool = False
    log_level: str = "INFO"

    def validate(self) -> bool:
        """Validate entire configuration"""
        self.width.validate()
        self.glyph.validate()
        self.rendering.validate()
        self.pad.validate()
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return True


# ============================================================================
# CONFIGURATION MANAGER (SINGLETON)
# ============================================================================

class ConfigurationManager:
    """
    Singleton configuration manager with runtime reloading.
    Thread-safe management of global configuration with change notifications.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = TellrawSystemConfig()
        self._callbacks = []
        self._config_lock = threading.RLock()
        self._load_environment_overrides(self._config)

        self._initialized = True
        logger.info("Configuration manager initialized")

    @staticmethod
    def _load_environment_overrides(config: TellrawSystemConfig):
        """Load configuration overrides from environment variables"""

        # Atlas settings
        if 'TELLRAW_FONT_DIR' in os.environ:
            config.glyph.font_dir = os.environ['TELLRAW_FONT_DIR']

        # Rendering settings
        if 'TELLRAW_LINE_PADDING' in os.environ:
            config.rendering.line_padding = int(os.environ['TELLRAW_LINE_PADDING'])
        if 'TELLRAW_ITALIC_ANGLE' in os.environ:
            config.rendering.italic_angle = float(os.environ['TELLRAW_ITALIC_ANGLE'])

        # Padding settings
        if 'TELLRAW_PAD_MARK' in os.environ:
            config.pad.pad_mark = os.environ['TELLRAW_PAD_MARK']

        # Debug mode
        if 'TELLRAW_DEBUG' in os.environ:
            config.debug_mode = os.environ['TELLRAW_DEBUG'].lower() in ('true', '1', 'yes')
        if 'TELLRAW_LOG_LEVEL' in os.environ:
            config.log_level = os.environ['TELLRAW_LOG_LEVEL'].upper()

    @property
    def config(self) -> TellrawSystemConfig:
        """Get current configuration"""
        with self._config_lock:
            return self._config

    def reload(self, new_config: Optional[TellrawSystemConfig] = None) -> bool:
        """
        Reload configuration and notify callbacks.

        Args:
            new_config: New configuration to apply (rebuilds from env if None)

        Returns:
            True if reload successful
        """
        with self._config_lock:
            old_config = self._config

            try:
                if new_config is None:
                    new_config = TellrawSystemConfig()
                    self._load_environment_overrides(new_config)
                new_config.validate()
                self._config = new_config

                self._notify_callbacks(old_config, self._config)

                logger.info("Configuration reloaded successfully")
                return True

            except ValueError as e:
                logger.error(f"Configuration reload failed: {e}")
                self._config = old_config
                return False

    def register_callback(self, callback: Callable[[TellrawSystemConfig, TellrawSystemConfig], None]):
        """
        Register callback for configuration changes.

        Args:
            callback: Function called with (old_config, new_config)
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable):
        """Remove a registered callback"""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, old_config: TellrawSystemConfig, new_config: TellrawSystemConfig):
        """Notify all registered callbacks of configuration change"""
        for callback in self._callbacks:
            try:
                callback(old_config, new_config)
            except Exception as e:
                logger.error(f"Callback notification failed: {e}")


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

_manager = ConfigurationManager()

def get_config() -> TellrawSystemConfig:
    """Get current system configuration"""
    return _manager.config

def reload_config(new_config: Optional[TellrawSystemConfig] = None) -> bool:
    """Reload system configuration"""
    return _manager.reload(new_config)

def register_config_callback(callback: Callable[[TellrawSystemConfig, TellrawSystemConfig], None]):
    """Register for configuration change notifications"""
    _manager.register_callback(callback)

def unregister_config_callback(callback: Callable):
    """Unregister a configuration change callback"""
    _manager.unregister_callback(callback)

def get_width_config() -> WidthConfig:
    """Get width model configuration"""
    return _manager.config.width

def get_glyph_config() -> GlyphConfig:
    """Get glyph atlas configuration"""
    return _manager.config.glyph

def get_render_config() -> RenderConfig:
    """Get compositor configuration"""
    return _manager.config.rendering

def get_pad_config() -> PadConfig:
    """Get padding template configuration"""
    return _manager.config.pad
