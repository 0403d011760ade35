#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Viewport
=============================
Copyright (c) 2025 PNGN-Tec LLC

Scroll and Screen Transform
===========================
The viewport holds a scroll position in sub-cell units (1/N of a cell)
and an extent in whole cells. Each frame it:

1. Splits the scroll position with floored division:
   cell = scroll // N, sub = scroll % N. Python's operators floor, so
   sub stays in [0, N) for negative scroll and panning across the origin
   does not jitter.
2. Centres a (visible_width*N) x (visible_height*N) glyph area inside the
   extent reported by the display.
3. Asks the tile renderer for cells (cx + cell_x, cy + cell_y) with cx in
   [0, visible_width] and cy in [0, visible_height]. The extra column and
   row cover a cell that is partially scrolled into view.
4. Shifts each glyph by its block offset minus the sub-cell offset and
   keeps it only when the viewport-local position satisfies
   0 < col < visible_width*N and 0 < row < visible_height*N. The outer
   ring absorbs partial-scroll overdraw without touching surrounding UI.
5. Writes the player marker at the centre of the glyph area and hides
   the cursor.

Panning is unclamped: scrolling past the map edge shows void glyphs.
"""

import time
import logging
from collections import deque
from typing import Any, Dict, Optional, Tuple

from pngn_config import ViewportConfig, get_viewport_config
from pngn_display import DisplaySink
from pngn_grid import CellGrid
from pngn_tiles import TileRenderer, create_renderer

# Configure logging
logger = logging.getLogger('pngn_viewport')

# Frame timings kept for get_stats()
RENDER_TIME_HISTORY = 240


class Viewport:
    """
    Sub-cell scrolling window onto a CellGrid.

    Attributes:
        scroll_x, scroll_y: Scroll position in sub-cell units
        visible_width, visible_height: Extent in whole cells
        renderer: Tile renderer supplying glyph blocks
        block_size: Glyphs per cell side, taken from the renderer
    """

    def __init__(self,
                 visible_width: int,
                 visible_height: int,
                 renderer: Optional[TileRenderer] = None,
                 scroll_x: int = 0,
                 scroll_y: int = 0):
        if visible_width <= 0 or visible_height <= 0:
            raise ValueError(
                f"Viewport extent must be positive, got {visible_width}x{visible_height}"
            )
        self.visible_width = visible_width
        self.visible_height = visible_height
        self.renderer = renderer or create_renderer()
        self.block_size = self.renderer.block_size
        self.scroll_x = scroll_x
        self.scroll_y = scroll_y

        # Performance tracking
        self.render_times = deque(maxlen=RENDER_TIME_HISTORY)
        self.frames_rendered = 0
        self.last_write_count = 0

    @property
    def glyph_extent(self) -> Tuple[int, int]:
        """(rows, cols) of the glyph area"""
        return self.visible_height * self.block_size, self.visible_width * self.block_size

    @property
    def sub_offset(self) -> Tuple[int, int]:
        """Sub-cell part of the scroll position, each in [0, N)"""
        return self.scroll_x % self.block_size, self.scroll_y % self.block_size

    @property
    def cell_origin(self) -> Tuple[int, int]:
        """World cell at the top-left of the glyph area"""
        return self.scroll_x // self.block_size, self.scroll_y // self.block_size

    def screen_origin(self, display_extent: Tuple[int, int]) -> Tuple[int, int]:
        """(row, col) that centres the glyph area in a display of the given extent"""
        display_rows, display_cols = display_extent
        rows, cols = self.glyph_extent
        return display_rows // 2 - rows // 2, display_cols // 2 - cols // 2

    def marker_position(self, display_extent: Tuple[int, int]) -> Tuple[int, int]:
        """(row, col) of the player marker: the centre of the glyph area"""
        origin_row, origin_col = self.screen_origin(display_extent)
        rows, cols = self.glyph_extent
        return origin_row + rows // 2, origin_col + cols // 2

    def render(self, grid: CellGrid, display: DisplaySink) -> int:
        """
        Draw one frame.

        Args:
            grid: World grid
            display: Sink receiving glyph writes

        Returns:
            Number of world glyph writes emitted (the marker excluded)
        """
        start_time = time.time()

        n = self.block_size
        sub_x, sub_y = self.sub_offset
        cell_x, cell_y = self.cell_origin
        rows, cols = self.glyph_extent
        display_extent = display.query_display_extent()
        origin_row, origin_col = self.screen_origin(display_extent)

        written = 0
        for cx in range(self.visible_width + 1):
            for cy in range(self.visible_height + 1):
                for write in self.renderer.render_cell(grid, cx + cell_x, cy + cell_y):
                    local_col = cx * n + write.dx - sub_x
                    local_row = cy * n + write.dy - sub_y
                    if 0 < local_col < cols and 0 < local_row < rows:
                        display.write_glyph(origin_row + local_row, origin_col + local_col, write.glyph)
                        written += 1

        marker_row, marker_col = self.marker_position(display_extent)
        display.write_glyph(marker_row, marker_col, self.renderer.glyphs.player)
        display.hide_cursor()

        self.last_write_count = written
        self.frames_rendered += 1
        render_time = (time.time() - start_time) * 1000
        self.render_times.append(render_time)
        logger.debug(f"Frame at scroll ({self.scroll_x}, {self.scroll_y}): "
                     f"{written} glyphs in {render_time:.2f}ms")
        return written

    def move_by(self, dx: int, dy: int):
        """Pan by (dx, dy) sub-cells; no clamping"""
        self.scroll_x += dx
        self.scroll_y += dy

    def get_stats(self) -> Dict[str, Any]:
        """Get render statistics"""
        if not self.render_times:
            return {'status': 'No renders yet'}

        return {
            'frames_rendered': self.frames_rendered,
            'last_write_count': self.last_write_count,
            'avg_render_time': sum(self.render_times) / len(self.render_times),
            'min_render_time': min(self.render_times),
            'max_render_time': max(self.render_times),
            'scroll': (self.scroll_x, self.scroll_y),
            'renderer': self.renderer.get_stats(),
        }


# ============================================================================
# FACTORY FUNCTION
# ============================================================================

def create_viewport(viewport_config: Optional[ViewportConfig] = None,
                    renderer: Optional[TileRenderer] = None) -> Viewport:
    """Factory function for viewport creation"""
    config = viewport_config or get_viewport_config()
    return Viewport(config.visible_width, config.visible_height, renderer)
