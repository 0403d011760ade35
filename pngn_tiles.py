#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Tile Renderer
==================================
Copyright (c) 2025 PNGN-Tec LLC

Pattern-Matching Glyph Selection
================================
Turns one cell's 3x3 neighbourhood into the N x N glyph block drawn at
that cell's screen position (N = block size, 3 by default).

Solid cells are painted in three layers, later writes winning:

1. Base: every sub-position gets the wall interior glyph.
2. Edges: for each axis neighbour that is OPEN, the sub-row (north/south)
   or sub-column (east/west) touching that side becomes an edge line.
   Any combination of the four sides may be drawn.
3. Corners: each quadrant (a, b) in {0,1}x{0,1} owns the sub-position
   (a*(N-1), b*(N-1)). With xs = 2a-1 and ys = 2b-1 the quadrant tests

       bit0 = tile(x+xs, y)    is OPEN
       bit1 = tile(x, y+ys)    is OPEN
       bit2 = tile(x+xs, y+ys) is OPEN

   and combines pattern = bit0 + 2*bit1 + 4*bit2.

   - pattern 4: only the diagonal is open. Draw the outer corner from
     the mirrored quadrant, CORNERS[1-b][1-a].
   - pattern 3 or 7: both axis neighbours open. Draw CORNERS[b][a].
   - anything else: no corner; the edge layer already decided.

Open cells are a full floor block. Cells outside the grid are a full
void block. Neither has transparent positions.

Output
======
render_cell() returns GlyphWrite records in paint order. Output depends
only on the neighbourhood, so blocks are memoised per neighbourhood in a
bounded LRU.
"""

import threading
import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from pngn_config import GlyphConfig, MIN_BLOCK_SIZE, get_glyph_config, get_cache_config
from pngn_grid import CellGrid, CellState

# Configure logging
logger = logging.getLogger('pngn_tiles')

# Rows of optional glyphs; None is transparent
Block = Tuple[Tuple[Optional[str], ...], ...]
Neighbourhood = Tuple[CellState, ...]

OUTER_CORNER_PATTERN = 4
INNER_CORNER_PATTERNS = (3, 7)


@dataclass(frozen=True)
class GlyphWrite:
    """One glyph at offset (dx, dy) inside a cell's block"""
    dx: int
    dy: int
    glyph: str


class Side(Enum):
    """Axis-aligned neighbours, in edge paint order"""
    NORTH = (0, -1)
    SOUTH = (0, 1)
    EAST = (1, 0)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


# ============================================================================
# BLOCK TEMPLATES
# ============================================================================

def fill_block(glyph: str, size: int) -> Block:
    """Block with every sub-position set to glyph"""
    return tuple(tuple(glyph for _ in range(size)) for _ in range(size))


def edge_block(side: Side, glyph: str, size: int) -> Block:
    """Block whose only opaque sub-positions are the row or column touching side."""
    last = size - 1

    def opaque(col: int, row: int) -> bool:
        if side is Side.NORTH:
            return row == 0
        if side is Side.SOUTH:
            return row == last
        if side is Side.EAST:
            return col == last
        return col == 0

    return tuple(
        tuple(glyph if opaque(col, row) else None for col in range(size))
        for row in range(size)
    )


def block_writes(block: Block) -> List[GlyphWrite]:
    """Opaque sub-positions of a block as writes, row by row"""
    return [
        GlyphWrite(dx, dy, glyph)
        for dy, row in enumerate(block)
        for dx, glyph in enumerate(row)
        if glyph is not None
    ]


def compose_block(writes: Sequence[GlyphWrite], size: int) -> List[List[Optional[str]]]:
    """
    Flatten paint-ordered writes into the final block.

    Args:
        writes: Output of TileRenderer.render_cell()
        size: Block size the writes were produced for

    Returns:
        size rows of glyphs, None where nothing was written
    """
    rows: List[List[Optional[str]]] = [[None] * size for _ in range(size)]
    for write in writes:
        rows[write.dy][write.dx] = write.glyph
    return rows


# ============================================================================
# CORNER PATTERNS
# ============================================================================

def _pattern(lookup: Callable[[int, int], CellState], a: int, b: int) -> int:
    xs = 2 * a - 1
    ys = 2 * b - 1
    bit0 = lookup(xs, 0) == CellState.OPEN
    bit1 = lookup(0, ys) == CellState.OPEN
    bit2 = lookup(xs, ys) == CellState.OPEN
    return int(bit0) + 2 * int(bit1) + 4 * int(bit2)


def corner_pattern(grid: CellGrid, x: int, y: int, a: int, b: int) -> int:
    """3-bit openness pattern for quadrant (a, b) of cell (x, y)"""
    return _pattern(lambda dx, dy: grid.tile_at(x + dx, y + dy), a, b)


# ============================================================================
# RENDERER
# ============================================================================

class TileRenderer:
    """
    Glyph block producer for single cells.

    Templates are built once per renderer from the glyph configuration;
    per-cell work is a neighbourhood lookup plus, on a cache miss, the
    three-layer paint described in the module docstring.

    Attributes:
        block_size: Glyphs per cell side (N)
        glyphs: Glyph configuration in use
        stats: Render and cache counters
    """

    def __init__(self,
                 glyph_config: Optional[GlyphConfig] = None,
                 cache_size: Optional[int] = None,
                 enable_cache: Optional[bool] = None):
        """
        Initialize tile renderer.

        Args:
            glyph_config: Glyph set and block size (uses config if None)
            cache_size: Maximum memoised neighbourhoods (uses config if None)
            enable_cache: Whether to memoise blocks (uses config if None)
        """
        self.glyphs = glyph_config or get_glyph_config()
        size = self.glyphs.block_size
        if size < MIN_BLOCK_SIZE:
            raise ValueError(f"Block size must be at least {MIN_BLOCK_SIZE}, got {size}")
        self.block_size = size

        self._solid_writes = block_writes(fill_block(self.glyphs.solid, size))
        self._floor_writes = tuple(block_writes(fill_block(self.glyphs.floor, size)))
        self._void_writes = tuple(block_writes(fill_block(self.glyphs.unknown, size)))
        self._edge_writes: Dict[Side, List[GlyphWrite]] = {
            side: block_writes(edge_block(
                side,
                self.glyphs.wall_h if side in (Side.NORTH, Side.SOUTH) else self.glyphs.wall_v,
                size,
            ))
            for side in Side
        }
        self._corners = self.glyphs.corners()

        cache_config = get_cache_config()
        self._cache_size = cache_size if cache_size is not None else cache_config.block_cache_size
        self._cache_enabled = cache_config.enable_caching if enable_cache is None else enable_cache
        self._cache: "OrderedDict[Neighbourhood, Tuple[GlyphWrite, ...]]" = OrderedDict()
        self._lock = threading.Lock()

        self.stats = {
            'cells_rendered': 0,
            'cache_hits': 0,
            'cache_misses': 0,
            'cache_evictions': 0,
        }

        logger.info(f"TileRenderer initialized with block_size={size}, "
                    f"corner_style={self.glyphs.corner_style}, cache_size={self._cache_size}")

    @staticmethod
    def neighbourhood(grid: CellGrid, x: int, y: int) -> Neighbourhood:
        """States of the 3x3 neighbourhood around (x, y), row-major from the north-west."""
        return tuple(
            grid.tile_at(x + dx, y + dy)
            for dy in (-1, 0, 1)
            for dx in (-1, 0, 1)
        )

    def render_cell(self, grid: CellGrid, x: int, y: int) -> Tuple[GlyphWrite, ...]:
        """
        Glyph writes for cell (x, y) in paint order.

        Args:
            grid: World grid
            x, y: Cell coordinates, may be outside the grid

        Returns:
            Writes with dx, dy in [0, block_size); later writes at the
            same offset replace earlier ones
        """
        self.stats['cells_rendered'] += 1
        hood = self.neighbourhood(grid, x, y)

        if self._cache_enabled:
            with self._lock:
                cached = self._cache.get(hood)
                if cached is not None:
                    self._cache.move_to_end(hood)
                    self.stats['cache_hits'] += 1
                    return cached
                self.stats['cache_misses'] += 1

        writes = self._paint(hood)

        if self._cache_enabled:
            with self._lock:
                while self._cache and len(self._cache) >= self._cache_size:
                    self._cache.popitem(last=False)
                    self.stats['cache_evictions'] += 1
                self._cache[hood] = writes

        return writes

    def render_block(self, grid: CellGrid, x: int, y: int) -> List[List[Optional[str]]]:
        """Final composed block for cell (x, y)"""
        return compose_block(self.render_cell(grid, x, y), self.block_size)

    def _paint(self, hood: Neighbourhood) -> Tuple[GlyphWrite, ...]:
        def lookup(dx: int, dy: int) -> CellState:
            return hood[(dy + 1) * 3 + (dx + 1)]

        centre = lookup(0, 0)
        if centre == CellState.OPEN:
            return self._floor_writes
        if centre == CellState.OUT_OF_BOUNDS:
            return self._void_writes

        writes = list(self._solid_writes)

        for side in Side:
            if lookup(side.dx, side.dy) == CellState.OPEN:
                writes.extend(self._edge_writes[side])

        last = self.block_size - 1
        for a in (0, 1):
            for b in (0, 1):
                pattern = _pattern(lookup, a, b)
                if pattern == OUTER_CORNER_PATTERN:
                    writes.append(GlyphWrite(a * last, b * last, self._corners[1 - b][1 - a]))
                elif pattern in INNER_CORNER_PATTERNS:
                    writes.append(GlyphWrite(a * last, b * last, self._corners[b][a]))

        return tuple(writes)

    def clear_cache(self):
        """Drop all memoised blocks"""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Union[int, float, bool]]:
        """Render counters plus cache_hit_rate, cache_entries and cache_enabled"""
        stats = self.stats.copy()

        total_requests = stats['cache_hits'] + stats['cache_misses']
        if total_requests > 0:
            stats['cache_hit_rate'] = stats['cache_hits'] / total_requests
        else:
            stats['cache_hit_rate'] = 0.0

        with self._lock:
            stats['cache_entries'] = len(self._cache)
            stats['cache_enabled'] = self._cache_enabled

        return stats


# ============================================================================
# FACTORY FUNCTION
# ============================================================================

def create_renderer(glyph_config: Optional[GlyphConfig] = None) -> TileRenderer:
    """Factory function for renderer creation"""
    return TileRenderer(glyph_config)
