#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Configuration Module
=========================================
Copyright (c) 2025 PNGN-Tec LLC

Centralized Configuration System
=================================
Complete configuration for tile-map rendering including:
- Glyph block size (sub-cell resolution)
- Wall, edge, corner, floor and void glyph sets
- Viewport extent and panning step
- Map ingestion (wall marker colour, tolerance, text map characters)
- Cache sizing for the tile renderer and width calculator

Configuration Overview
======================
Module-level constants hold the reference glyph set. The dataclass
sections below copy those constants as their defaults, validate
themselves, and are owned by a thread-safe singleton manager that applies
``PNGN_*`` environment overrides at startup and notifies registered
callbacks on reload.

Glyph System
============
Each world cell is drawn as a BLOCK_SIZE x BLOCK_SIZE block of glyphs:
- Solid cells: interior fill (∷) with edge lines (─ │) on open sides
- Wall junctions: rounded (╭ ╮ ╰ ╯) or heavy (┏ ┓ ┗ ┛) corners
- Open cells: blank floor
- Outside the map: void fill (≋)

Every glyph must occupy exactly one terminal column, otherwise the
block grid drifts. GlyphConfig.validate() enforces this.
"""

import threading
import logging
import os
from typing import Tuple, Optional, Callable
from dataclasses import dataclass, field

# Configure logging
logger = logging.getLogger('pngn_config')

# Type aliases
RGBColor = Tuple[int, int, int]
CornerTable = Tuple[Tuple[str, str], Tuple[str, str]]

# ============================================================================
# BLOCK GEOMETRY
# ============================================================================

BLOCK_SIZE = 3           # Glyphs per cell side (sub-cell resolution)
MIN_BLOCK_SIZE = 2       # Corners need distinct first and last sub-rows

# ============================================================================
# GLYPH SETS
# ============================================================================

CHAR_UNKNOWN = '≋'       # Outside the map
CHAR_SOLID = '∷'         # Wall interior
CHAR_WALL_H = '─'        # North/south wall edge
CHAR_WALL_V = '│'        # East/west wall edge
CHAR_FLOOR = ' '         # Open cell
CHAR_PLAYER = '\ufb4a'  # Player marker, Hebrew tav with dagesh

# Corner tables are indexed [row][column]: top-left, top-right / bottom-left, bottom-right
ROUNDED_CORNERS: CornerTable = (('╭', '╮'), ('╰', '╯'))
HEAVY_CORNERS: CornerTable = (('┏', '┓'), ('┗', '┛'))

CORNER_STYLES = {
    'rounded': ROUNDED_CORNERS,
    'heavy': HEAVY_CORNERS,
}

# ============================================================================
# VIEWPORT SETTINGS
# ============================================================================

DEFAULT_VIEW_WIDTH = 20   # Cells
DEFAULT_VIEW_HEIGHT = 10  # Cells
DEFAULT_PAN_STEP = 1      # Sub-cells per key press

# ============================================================================
# MAP INGESTION
# ============================================================================

WALL_COLOR: RGBColor = (255, 0, 0)   # Pure red pixels are walls
DEFAULT_MAP_PATH = 'testimg.png'
TEXT_SOLID_CHARS = '#'


# ============================================================================
# GLYPH CONFIGURATION
# ============================================================================

@dataclass
class GlyphConfig:
    """
    Glyph set and block geometry.

    Attributes:
        block_size: Glyphs per cell side (N)
        solid: Wall interior fill
        wall_h: Horizontal edge line (north/south sides)
        wall_v: Vertical edge line (east/west sides)
        floor: Open cell fill
        unknown: Fill for coordinates outside the map
        player: Marker drawn at the viewport centre
        corner_style: Key into CORNER_STYLES
    """

    block_size: int = BLOCK_SIZE
    solid: str = CHAR_SOLID
    wall_h: str = CHAR_WALL_H
    wall_v: str = CHAR_WALL_V
    floor: str = CHAR_FLOOR
    unknown: str = CHAR_UNKNOWN
    player: str = CHAR_PLAYER
    corner_style: str = 'rounded'

    def corners(self) -> CornerTable:
        """Get the 2x2 corner table for the configured style"""
        if self.corner_style not in CORNER_STYLES:
            raise ValueError(f"Unknown corner style: {self.corner_style}")
        return CORNER_STYLES[self.corner_style]

    def glyphs(self) -> Tuple[str, ...]:
        """Every glyph this configuration can emit"""
        table = self.corners()
        return (self.solid, self.wall_h, self.wall_v, self.floor,
                self.unknown, self.player) + table[0] + table[1]

    def validate(self) -> bool:
        """Validate glyph configuration"""
        # Imported here: pngn_width reads its cache size from this module
        from pngn_width import find_wide_glyphs

        if self.block_size < MIN_BLOCK_SIZE:
            raise ValueError(f"Block size must be at least {MIN_BLOCK_SIZE}")
        if self.corner_style not in CORNER_STYLES:
            raise ValueError(f"Unknown corner style: {self.corner_style}")
        if not all(self.glyphs()):
            raise ValueError("Glyphs must not be empty")
        wide = find_wide_glyphs(self.glyphs())
        if wide:
            raise ValueError(f"Glyphs {wide!r} are not one terminal column wide")
        return True


# ============================================================================
# VIEWPORT CONFIGURATION
# ============================================================================

@dataclass
class ViewportConfig:
    """Viewport extent (whole cells) and panning step (sub-cells)"""

    visible_width: int = DEFAULT_VIEW_WIDTH
    visible_height: int = DEFAULT_VIEW_HEIGHT
    pan_step: int = DEFAULT_PAN_STEP

    def validate(self) -> bool:
        """Validate viewport configuration"""
        if self.visible_width <= 0 or self.visible_height <= 0:
            raise ValueError("Viewport dimensions must be positive")
        if self.pan_step <= 0:
            raise ValueError("Pan step must be positive")
        return True


# ============================================================================
# INGESTION CONFIGURATION
# ============================================================================

@dataclass
class IngestConfig:
    """
    Map classification parameters.

    A pixel is a wall when every channel is within ``tolerance`` of
    ``wall_color``. Tolerance 0 is an exact match.
    """

    wall_color: RGBColor = WALL_COLOR
    tolerance: int = 0
    text_solid_chars: str = TEXT_SOLID_CHARS

    def validate(self) -> bool:
        """Validate ingestion configuration"""
        if len(self.wall_color) != 3:
            raise ValueError("Wall colour must have three channels")
        if any(not 0 <= channel <= 255 for channel in self.wall_color):
            raise ValueError("Wall colour channels must be in 0..255")
        if not 0 <= self.tolerance <= 255:
            raise ValueError("Tolerance must be in 0..255")
        if not self.text_solid_chars:
            raise ValueError("At least one text solid character is required")
        return True


# ============================================================================
# CACHE CONFIGURATION
# ============================================================================

@dataclass
class CacheConfig:
    """
    Cache configuration parameters.

    Attributes:
        enable_caching: Master switch for all caches
        block_cache_size: Neighbourhoods memoised by the tile renderer
        width_cache_size: Strings memoised by the width calculator
    """

    enable_caching: bool = True
    block_cache_size: int = 512
    width_cache_size: int = 256

    def validate(self) -> bool:
        """Validate cache configuration"""
        if self.block_cache_size <= 0:
            raise ValueError("Block cache size must be positive")
        if self.width_cache_size <= 0:
            raise ValueError("Width cache size must be positive")
        return True


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

@dataclass
class ShellSystemConfig:
    """Complete system configuration"""

    # Sub-configurations
    glyphs: GlyphConfig = field(default_factory=GlyphConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    # System-wide settings
    debug_mode: bool = False
    log_level: str = "WARNING"
    map_path: str = DEFAULT_MAP_PATH

    def validate(self) -> bool:
        """Validate entire configuration"""
        self.glyphs.validate()
        self.viewport.validate()
        self.ingest.validate()
        self.cache.validate()
        return True


def parse_color(text: str) -> RGBColor:
    """Parse an ``"r,g,b"`` string into an RGB tuple"""
    parts = [part.strip() for part in text.split(',')]
    if len(parts) != 3:
        raise ValueError(f"Expected 'r,g,b', got {text!r}")
    r, g, b = (int(part) for part in parts)
    return (r, g, b)


def _parse_flag(text: str) -> bool:
    return text.lower() in ('true', '1', 'yes')


# (variable, section or None for top level, attribute, parser)
ENV_OVERRIDES = (
    ('PNGN_BLOCK_SIZE', 'glyphs', 'block_size', int),
    ('PNGN_CORNER_STYLE', 'glyphs', 'corner_style', str.lower),
    ('PNGN_VIEW_WIDTH', 'viewport', 'visible_width', int),
    ('PNGN_VIEW_HEIGHT', 'viewport', 'visible_height', int),
    ('PNGN_PAN_STEP', 'viewport', 'pan_step', int),
    ('PNGN_WALL_COLOR', 'ingest', 'wall_color', parse_color),
    ('PNGN_WALL_TOLERANCE', 'ingest', 'tolerance', int),
    ('PNGN_CACHE_SIZE', 'cache', 'block_cache_size', int),
    ('PNGN_MAP', None, 'map_path', str),
    ('PNGN_LOG_LEVEL', None, 'log_level', str.upper),
    ('PNGN_DEBUG', None, 'debug_mode', _parse_flag),
)


# ============================================================================
# CONFIGURATION MANAGER (SINGLETON)
# ============================================================================

class ConfigurationManager:
    """
    Process-wide owner of the active ShellSystemConfig.

    Created once on import with environment overrides applied. reload()
    swaps in a new configuration only if it validates, then tells every
    registered callback (old, new).
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

        self._config_lock = threading.RLock()
        self._callbacks = []
        self._config = ShellSystemConfig()
        self._load_environment_overrides(self._config)

        self._initialized = True
        logger.info(f"Configuration ready (block_size={self._config.glyphs.block_size}, "
                    f"map={self._config.map_path})")

    def _load_environment_overrides(self, config: ShellSystemConfig):
        """Apply PNGN_* variables; unparsable values are logged and skipped"""
        for variable, section, attribute, parse in ENV_OVERRIDES:
            raw = os.environ.get(variable)
            if raw is None:
                continue
            try:
                value = parse(raw)
            except ValueError as e:
                logger.warning(f"Ignoring {variable}={raw!r}: {e}")
                continue
            target = getattr(config, section) if section else config
            setattr(target, attribute, value)
            logger.debug(f"{variable} -> {section or 'system'}.{attribute} = {value!r}")

    @property
    def config(self) -> ShellSystemConfig:
        with self._config_lock:
            return self._config

    def reload(self, new_config: Optional[ShellSystemConfig] = None) -> bool:
        """
        Replace the active configuration.

        Args:
            new_config: Configuration to install; None rebuilds defaults
                plus environment overrides

        Returns:
            False (and the previous configuration kept) if validation fails
        """
        with self._config_lock:
            previous = self._config

            if new_config is None:
                new_config = ShellSystemConfig()
                self._load_environment_overrides(new_config)

            try:
                new_config.validate()
            except (ValueError, TypeError) as e:
                logger.error(f"Configuration rejected, keeping current one: {e}")
                return False

            self._config = new_config
            self._notify_callbacks(previous, new_config)
            logger.info("Configuration reloaded")
            return True

    def register_callback(self, callback: Callable[[ShellSystemConfig, ShellSystemConfig], None]):
        """callback(old_config, new_config) runs after every successful reload"""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, old_config: ShellSystemConfig, new_config: ShellSystemConfig):
        for callback in list(self._callbacks):
            try:
                callback(old_config, new_config)
            except Exception as e:
                logger.error(f"Config callback {callback!r} failed: {e}")


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

_manager = ConfigurationManager()

def get_config() -> ShellSystemConfig:
    return _manager.config

def reload_config(new_config: Optional[ShellSystemConfig] = None) -> bool:
    return _manager.reload(new_config)

def register_config_callback(callback: Callable[[ShellSystemConfig, ShellSystemConfig], None]):
    _manager.register_callback(callback)

def unregister_config_callback(callback: Callable):
    _manager.unregister_callback(callback)

def get_glyph_config() -> GlyphConfig:
    return _manager.config.glyphs

def get_viewport_config() -> ViewportConfig:
    return _manager.config.viewport

def get_ingest_config() -> IngestConfig:
    return _manager.config.ingest

def get_cache_config() -> CacheConfig:
    """Cache sizing used by the tile renderer and width calculator"""
    return _manager.config.cache
