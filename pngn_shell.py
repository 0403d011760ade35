#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Interactive Map Viewer
===========================================
Copyright (c) 2025 PNGN-Tec LLC

Loads a map image (or text map), then lets you pan around it in the
terminal with sub-cell precision.

Controls
========
- Arrow keys: pan one sub-cell (PNGN_PAN_STEP) in that direction
- F1: pause menu; in the menu Q quits and F1 returns to the map

Headless Snapshots
==================
``--snapshot out.png`` renders a single frame into an in-memory display
and saves it as an image; any other path (or ``-`` for stdout) gets the
frame as text. No terminal is touched in snapshot mode.

Example Usage
=============
```bash
python pngn_shell.py testimg.png --width 30 --height 12
python pngn_shell.py maps/cave.txt --snapshot cave.png --start 4,-2
python pngn_shell.py testimg.png --start=-6,-3   # negative X needs the = form
```
"""

import argparse
import curses
import locale
import logging
import sys
from enum import Enum
from typing import List, Optional, Tuple

from pngn_config import ViewportConfig, get_config
from pngn_display import BufferDisplay, CursesDisplay
from pngn_grid import CellGrid, GridLoadError, load_grid
from pngn_tiles import create_renderer
from pngn_viewport import Viewport, create_viewport

__version__ = "0.1.0"

logger = logging.getLogger('pngn_shell')


class Intent(Enum):
    """Discrete actions delivered by the keyboard"""
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    PAN_UP = "pan_up"
    PAN_DOWN = "pan_down"
    MENU = "menu"


class MenuAction(Enum):
    QUIT = "quit"
    CLOSE = "close"


PAN_VECTORS = {
    Intent.PAN_LEFT: (-1, 0),
    Intent.PAN_RIGHT: (1, 0),
    Intent.PAN_UP: (0, -1),
    Intent.PAN_DOWN: (0, 1),
}

KEY_BINDINGS = {
    curses.KEY_LEFT: Intent.PAN_LEFT,
    curses.KEY_RIGHT: Intent.PAN_RIGHT,
    curses.KEY_UP: Intent.PAN_UP,
    curses.KEY_DOWN: Intent.PAN_DOWN,
    curses.KEY_F1: Intent.MENU,
}

MENU_BINDINGS = {
    ord('q'): MenuAction.QUIT,
    curses.KEY_F1: MenuAction.CLOSE,
}


def translate_key(key: int) -> Optional[Intent]:
    """Map a curses key code to an intent; unbound keys give None"""
    return KEY_BINDINGS.get(key)


def translate_menu_key(key: int) -> Optional[MenuAction]:
    return MENU_BINDINGS.get(key)


def apply_intent(viewport: Viewport, intent: Intent, pan_step: int = 1):
    """Pan the viewport for a directional intent; other intents are ignored"""
    vector = PAN_VECTORS.get(intent)
    if vector is not None:
        viewport.move_by(vector[0] * pan_step, vector[1] * pan_step)


# ============================================================================
# INTERACTIVE LOOP
# ============================================================================

def run_menu(display) -> MenuAction:
    """Show the pause menu and wait for Q or F1"""
    display.show_menu()
    while True:
        action = translate_menu_key(display.read_key())
        if action is not None:
            logger.debug(f"Menu action: {action.value}")
            return action


def run_loop(display, grid: CellGrid, viewport: Viewport, pan_step: int = 1):
    """
    Render, read one key, act; until the menu's quit action.

    Args:
        display: Sink with refresh(), read_key(), show_menu() and clear()
            in addition to the viewport's display calls
        grid: World grid
        viewport: Viewport to render and pan
        pan_step: Sub-cells moved per arrow key
    """
    while True:
        viewport.render(grid, display)
        display.refresh()

        intent = translate_key(display.read_key())
        if intent is None:
            continue
        if intent is Intent.MENU:
            if run_menu(display) is MenuAction.QUIT:
                logger.info("Quit from menu")
                return
            display.clear()
            continue
        apply_intent(viewport, intent, pan_step)


def _curses_main(stdscr, grid: CellGrid, viewport: Viewport, pan_step: int):
    display = CursesDisplay(stdscr)
    display.setup()
    run_loop(display, grid, viewport, pan_step)


# ============================================================================
# SNAPSHOTS
# ============================================================================

def render_snapshot(grid: CellGrid, viewport: Viewport,
                    rows: Optional[int] = None, cols: Optional[int] = None) -> BufferDisplay:
    """Render one frame into a BufferDisplay sized to the viewport unless given"""
    glyph_rows, glyph_cols = viewport.glyph_extent
    display = BufferDisplay(glyph_rows if rows is None else rows,
                            glyph_cols if cols is None else cols)
    viewport.render(grid, display)
    return display


def write_snapshot(display: BufferDisplay, output: str):
    """Save a rendered frame: PNG for '.png' paths, text otherwise, '-' for stdout"""
    if output == '-':
        sys.stdout.write(display.to_text() + '\n')
    elif output.lower().endswith('.png'):
        display.to_image().save(output, format='PNG')
    else:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(display.to_text() + '\n')
    logger.info(f"Snapshot written to {output}")


# ============================================================================
# COMMAND LINE
# ============================================================================

def parse_point(text: str) -> Tuple[int, int]:
    """argparse type for 'X,Y' integer pairs"""
    try:
        x_text, y_text = text.split(',')
        return int(x_text), int(y_text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y integers, got {text!r}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='pngn-shell',
        description='PNGN Tile Shell - pan around a wall map in the terminal',
    )
    parser.add_argument('map', nargs='?', default=None,
                        help='Map image or .txt/.map text map (default: env PNGN_MAP or testimg.png)')
    parser.add_argument('--width', type=int, default=None,
                        help='Viewport width in cells')
    parser.add_argument('--height', type=int, default=None,
                        help='Viewport height in cells')
    parser.add_argument('--start', type=parse_point, default=(0, 0), metavar='X,Y',
                        help="Initial scroll position in sub-cell units; "
                             "write --start=X,Y when X is negative")
    parser.add_argument('--snapshot', metavar='OUT', default=None,
                        help="Render one frame headlessly to OUT (.png image, '-' for stdout, text otherwise)")
    parser.add_argument('--rows', type=int, default=None,
                        help='Snapshot display rows (default: viewport glyph height)')
    parser.add_argument('--cols', type=int, default=None,
                        help='Snapshot display columns (default: viewport glyph width)')
    parser.add_argument('--log-file', default=None,
                        help='Write log output to this file')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: env PNGN_LOG_LEVEL or WARNING)')
    parser.add_argument('--version', action='version',
                        version=f'PNGN Tile Shell {__version__}')
    return parser.parse_args(argv)


def configure_logging(level: str, log_file: Optional[str] = None, interactive: bool = True):
    """Route log records to a file, or to stderr when curses does not own the screen"""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if log_file:
        logging.basicConfig(filename=log_file, level=numeric_level,
                            format='%(asctime)s %(name)s %(levelname)s %(message)s')
    elif interactive:
        root = logging.getLogger()
        root.addHandler(logging.NullHandler())
        root.setLevel(numeric_level)
    else:
        logging.basicConfig(stream=sys.stderr, level=numeric_level,
                            format='%(name)s %(levelname)s %(message)s')


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = get_config()
    configure_logging(args.log_level or config.log_level, args.log_file,
                      interactive=args.snapshot is None)

    viewport_config = ViewportConfig(
        visible_width=args.width if args.width is not None else config.viewport.visible_width,
        visible_height=args.height if args.height is not None else config.viewport.visible_height,
        pan_step=config.viewport.pan_step,
    )
    try:
        config.validate()
        viewport_config.validate()
        for name in ('rows', 'cols'):
            value = getattr(args, name)
            if value is not None and value <= 0:
                raise ValueError(f"--{name} must be positive, got {value}")
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"pngn-shell: invalid configuration: {e}", file=sys.stderr)
        return 1

    map_path = args.map or config.map_path
    try:
        grid = load_grid(map_path, config.ingest)
    except GridLoadError as e:
        logger.error(str(e))
        print(f"pngn-shell: {e}", file=sys.stderr)
        return 1

    viewport = create_viewport(viewport_config, create_renderer(config.glyphs))
    viewport.move_by(*args.start)

    if args.snapshot is not None:
        display = render_snapshot(grid, viewport, args.rows, args.cols)
        write_snapshot(display, args.snapshot)
        return 0

    locale.setlocale(locale.LC_ALL, '')
    try:
        curses.wrapper(_curses_main, grid, viewport, viewport_config.pan_step)
    except curses.error as e:
        logger.error(f"Display initialisation failed: {e}")
        print(f"pngn-shell: cannot start terminal display: {e}", file=sys.stderr)
        return 1

    if config.debug_mode:
        logger.info(f"Session stats: {viewport.get_stats()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
