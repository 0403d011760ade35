#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Cell Grid Module
=====================================
Copyright (c) 2025 PNGN-Tec LLC

World Model
===========
An immutable, row-major grid of cell states with bounds-safe lookup.
Coordinates outside the grid never fail: they read as OUT_OF_BOUNDS,
which the tile renderer draws as void.

Map Ingestion
=============
Grids are classified from one of two sources:
- Images (any format Pillow decodes): a pixel matching the configured
  wall colour is SOLID, everything else is OPEN. Classification is a
  single vectorised numpy comparison over the RGB buffer.
- Text maps (.txt / .map): configured solid characters (default '#')
  are SOLID, everything else is OPEN. Rows must be the same length.

Load failures raise GridLoadError with the offending path attached.

Module Interface
================
- CellState: OPEN, SOLID, OUT_OF_BOUNDS
- CellGrid: width, height, cells, tile_at(), count(), from_rows()
- classify_pixels(): RGB array -> CellGrid
- load_image_grid() / load_text_grid() / load_grid()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from pngn_config import IngestConfig, RGBColor, get_ingest_config

# Configure logging
logger = logging.getLogger('pngn_grid')

PathLike = Union[str, Path]

TEXT_MAP_SUFFIXES = ('.txt', '.map')


class CellState(Enum):
    """Classification of one world cell"""
    OPEN = "open"
    SOLID = "solid"
    OUT_OF_BOUNDS = "out_of_bounds"  # Computed on lookup, never stored


class GridLoadError(Exception):
    """Raised when a map source cannot be read or classified."""

    def __init__(self, path: PathLike, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot load map '{self.path}': {reason}")


@dataclass(frozen=True)
class CellGrid:
    """
    Immutable world grid.

    Attributes:
        width: Cells per row
        height: Number of rows
        cells: Row-major states, index = y * width + x
    """

    width: int
    height: int
    cells: Tuple[CellState, ...]

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError("Grid dimensions must not be negative")
        # Accept any sequence but store a tuple so the grid stays immutable
        if not isinstance(self.cells, tuple):
            object.__setattr__(self, 'cells', tuple(self.cells))
        if len(self.cells) != self.width * self.height:
            raise ValueError(
                f"Expected {self.width * self.height} cells for a "
                f"{self.width}x{self.height} grid, got {len(self.cells)}"
            )
        if CellState.OUT_OF_BOUNDS in self.cells:
            raise ValueError("OUT_OF_BOUNDS cannot be stored in a grid")

    def tile_at(self, x: int, y: int) -> CellState:
        """State of cell (x, y); OUT_OF_BOUNDS outside the grid."""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return CellState.OUT_OF_BOUNDS
        return self.cells[y * self.width + x]

    def count(self, state: CellState) -> int:
        """Number of stored cells in the given state"""
        return self.cells.count(state)

    @classmethod
    def from_rows(cls, rows: Sequence[str], solid_chars: str = '#') -> 'CellGrid':
        """
        Build a grid from text rows.

        Args:
            rows: Equal-length strings, one per grid row
            solid_chars: Characters classified as SOLID

        Returns:
            CellGrid with every other character classified as OPEN
        """
        rows = list(rows)
        width = len(rows[0]) if rows else 0
        for index, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {index} has length {len(row)}, expected {width}")

        cells = [
            CellState.SOLID if char in solid_chars else CellState.OPEN
            for row in rows
            for char in row
        ]
        return cls(width, len(rows), tuple(cells))


# ============================================================================
# PIXEL CLASSIFICATION
# ============================================================================

def classify_pixels(pixels: np.ndarray,
                    wall_color: RGBColor = (255, 0, 0),
                    tolerance: int = 0) -> CellGrid:
    """
    Classify an RGB pixel buffer into a CellGrid.

    Args:
        pixels: Array of shape (height, width, 3)
        wall_color: Colour that marks a wall
        tolerance: Per-channel absolute difference still counted as the wall colour

    Returns:
        CellGrid with one cell per pixel
    """
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an HxWx3 RGB array, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    rgb = pixels[:, :, :3].astype(np.int16)
    target = np.array(wall_color, dtype=np.int16)

    walls = np.all(np.abs(rgb - target) <= tolerance, axis=2)

    cells = tuple(
        CellState.SOLID if is_wall else CellState.OPEN
        for is_wall in walls.ravel()
    )
    return CellGrid(width, height, cells)


# ============================================================================
# LOADERS
# ============================================================================

def load_image_grid(path: PathLike, ingest_config: Optional[IngestConfig] = None) -> CellGrid:
    """Decode an image file and classify its pixels."""
    config = ingest_config or get_ingest_config()
    path = Path(path)

    try:
        with Image.open(path) as img:
            pixels = np.asarray(img.convert('RGB'), dtype=np.uint8)
    except FileNotFoundError as e:
        raise GridLoadError(path, "file not found") from e
    except UnidentifiedImageError as e:
        raise GridLoadError(path, "not a decodable image") from e
    except OSError as e:
        raise GridLoadError(path, f"read failed ({e})") from e

    grid = classify_pixels(pixels, config.wall_color, config.tolerance)
    _log_grid(path, grid)
    return grid


def load_text_grid(path: PathLike, ingest_config: Optional[IngestConfig] = None) -> CellGrid:
    """Read a text map; blank trailing lines are ignored."""
    config = ingest_config or get_ingest_config()
    path = Path(path)

    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError as e:
        raise GridLoadError(path, "file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise GridLoadError(path, f"read failed ({e})") from e

    rows = _strip_trailing_blank(text.splitlines())
    if not rows:
        raise GridLoadError(path, "text map is empty")

    try:
        grid = CellGrid.from_rows(rows, config.text_solid_chars)
    except ValueError as e:
        raise GridLoadError(path, str(e)) from e

    _log_grid(path, grid)
    return grid


def load_grid(path: PathLike, ingest_config: Optional[IngestConfig] = None) -> CellGrid:
    """Load a map, choosing the text or image loader by file suffix."""
    if Path(path).suffix.lower() in TEXT_MAP_SUFFIXES:
        return load_text_grid(path, ingest_config)
    return load_image_grid(path, ingest_config)


def _strip_trailing_blank(lines: Iterable[str]) -> list:
    rows = list(lines)
    while rows and not rows[-1].strip():
        rows.pop()
    return rows


def _log_grid(path: Path, grid: CellGrid):
    logger.info(f"Loaded {grid.width}x{grid.height} map from {path} "
                f"({grid.count(CellState.SOLID)} solid cells)")
