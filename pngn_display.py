#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Display Sinks
==================================
Copyright (c) 2025 PNGN-Tec LLC

Display Collaborators
=====================
The viewport talks to a display through three calls:

- write_glyph(row, col, glyph)
- query_display_extent() -> (rows, cols)
- hide_cursor()

Two sinks implement them:

CursesDisplay
    Wraps a curses window. Terminal mode (raw, keypad, noecho) is set in
    setup(); the process-wide terminal state is owned by curses.wrapper in
    the shell so it is restored on every exit path. Writes that land off
    the physical screen raise curses.error, which is ignored: the terminal
    clips them.

BufferDisplay
    In-memory screen used for headless snapshots and tests. Records every
    write, tracks cursor visibility, and renders to text or to a Pillow
    image with a monospace font.
"""

import curses
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from PIL import Image, ImageDraw, ImageFont

# Configure logging
logger = logging.getLogger('pngn_display')

# Snapshot colours (RGB)
SNAPSHOT_BACKGROUND = (15, 15, 35)
SNAPSHOT_FOREGROUND = (230, 230, 230)
SNAPSHOT_FONT_SIZE = 14

MENU_LINES = (
    "Menu: ",
    "Q to quit",
    "F1 to exit menu",
)


class DisplaySink(Protocol):
    """Operations the viewport needs from a display"""

    def write_glyph(self, row: int, col: int, glyph: str) -> None: ...

    def query_display_extent(self) -> Tuple[int, int]: ...

    def hide_cursor(self) -> None: ...


# ============================================================================
# CURSES DISPLAY
# ============================================================================

class CursesDisplay:
    """Display sink backed by a curses window"""

    def __init__(self, stdscr):
        self.stdscr = stdscr

    def setup(self):
        """Raw input, function keys and no echo"""
        curses.raw()
        curses.noecho()
        self.stdscr.keypad(True)
        logger.debug("Curses display configured")

    def write_glyph(self, row: int, col: int, glyph: str):
        try:
            self.stdscr.addstr(row, col, glyph)
        except curses.error:
            # Off-screen or bottom-right corner write
            pass

    def query_display_extent(self) -> Tuple[int, int]:
        rows, cols = self.stdscr.getmaxyx()
        return rows, cols

    def hide_cursor(self):
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal does not support cursor visibility changes")

    def clear(self):
        self.stdscr.clear()

    def refresh(self):
        self.stdscr.refresh()

    def read_key(self) -> int:
        """Block until a key is pressed"""
        return self.stdscr.getch()

    def show_menu(self):
        """Replace the screen with the pause menu text"""
        self.stdscr.clear()
        for line in MENU_LINES:
            try:
                self.stdscr.addstr(line + "\n")
            except curses.error:
                break
        self.stdscr.refresh()


# ============================================================================
# BUFFER DISPLAY
# ============================================================================

class BufferDisplay:
    """
    In-memory display of fixed size.

    Attributes:
        rows, cols: Screen extent reported to the viewport
        writes: Every (row, col, glyph) received, in order, including
            writes outside the buffer
        cursor_visible: False once hide_cursor() has been called
    """

    def __init__(self, rows: int, cols: int, fill: str = ' '):
        if rows <= 0 or cols <= 0:
            raise ValueError("Display dimensions must be positive")
        self.rows = rows
        self.cols = cols
        self.fill = fill
        self.writes: List[Tuple[int, int, str]] = []
        self.cursor_visible = True
        self._cells = [[fill] * cols for _ in range(rows)]

    def write_glyph(self, row: int, col: int, glyph: str):
        self.writes.append((row, col, glyph))
        if 0 <= row < self.rows and 0 <= col < self.cols:
            self._cells[row][col] = glyph

    def query_display_extent(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def hide_cursor(self):
        self.cursor_visible = False

    def clear(self):
        """Reset every cell to the fill glyph and forget recorded writes"""
        self._cells = [[self.fill] * self.cols for _ in range(self.rows)]
        self.writes = []

    def glyph_at(self, row: int, col: int) -> str:
        return self._cells[row][col]

    def to_lines(self) -> List[str]:
        return [''.join(row) for row in self._cells]

    def to_text(self) -> str:
        return '\n'.join(self.to_lines())

    def to_image(self,
                 font: Optional[ImageFont.ImageFont] = None,
                 background: Tuple[int, int, int] = SNAPSHOT_BACKGROUND,
                 foreground: Tuple[int, int, int] = SNAPSHOT_FOREGROUND) -> Image.Image:
        """
        Render the buffer to an image, one glyph per character cell.

        Args:
            font: Monospace font (loads one if None)
            background: Fill colour
            foreground: Glyph colour

        Returns:
            RGB image of cols*cell_width x rows*cell_height pixels
        """
        if font is None:
            font = load_font()['font']

        cell_width, cell_height = _cell_size(font)
        img = Image.new('RGB', (self.cols * cell_width, self.rows * cell_height), background)
        draw = ImageDraw.Draw(img)

        for row, cells in enumerate(self._cells):
            for col, glyph in enumerate(cells):
                if glyph.strip():
                    draw.text((col * cell_width, row * cell_height), glyph, font=font, fill=foreground)

        return img


# ============================================================================
# FONT LOADING
# ============================================================================

def load_font(size: int = SNAPSHOT_FONT_SIZE) -> Dict[str, Any]:
    """Load monospace font and return both font object and path"""
    # Priority 1: Local fonts directory
    local_fonts_dir = Path(__file__).parent / 'fonts'
    candidates = [
        local_fonts_dir / 'DejaVuSansMono.ttf',
        local_fonts_dir / 'unifont.ttf',
        # Priority 2: Common Linux system paths
        Path('/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf'),
        Path('/usr/share/fonts/dejavu/DejaVuSansMono.ttf'),
        Path('/usr/share/fonts/TTF/DejaVuSansMono.ttf'),
        # Priority 3: Termux system
        Path('/data/data/com.termux/files/usr/share/fonts/TTF/DejaVuSansMono.ttf'),
    ]

    for font_path in candidates:
        if font_path.exists():
            try:
                font = ImageFont.truetype(str(font_path), size)
            except OSError as e:
                logger.warning(f"Could not load font {font_path}: {e}")
                continue
            logger.info(f"Loaded font from {font_path}")
            return {'font': font, 'path': str(font_path)}

    # Ultimate fallback
    logger.warning("No monospace font found - using Pillow default")
    return {'font': ImageFont.load_default(), 'path': None}


def _cell_size(font: ImageFont.ImageFont) -> Tuple[int, int]:
    """Pixel size of one character cell, measured from a full block and a wide letter"""
    width = 1
    height = 1
    for probe in ("█", "M"):
        left, _top, right, bottom = font.getbbox(probe)
        width = max(width, right - left, int(round(font.getlength(probe))))
        height = max(height, bottom)
    return width, height

