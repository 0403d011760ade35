#!/usr/bin/env python3
"""
🧊 PNGN Tile Shell - Panning Tour Example
=========================================
Copyright (c) 2025 PNGN-Tec LLC
"""

import argparse
from typing import List, Tuple

from PIL import Image

from pngn_config import WALL_COLOR
from pngn_display import load_font
from pngn_grid import CellGrid
from pngn_shell import render_snapshot
from pngn_tiles import create_renderer
from pngn_viewport import Viewport

DEMO_MAP = [
    "########################",
    "#......#.........#.....#",
    "#.####.#.#######.#.###.#",
    "#.#..#...#.....#...#.#.#",
    "#.#..#####.###.#####.#.#",
    "#.#........#.#.......#.#",
    "#.##########.#########.#",
    "#......................#",
    "###.######.####.######.#",
    "#...#....#....#......#.#",
    "#.###.##.####.#.####.#.#",
    "#.....#.......#....#...#",
    "########################",
]

VIEW_WIDTH = 10
VIEW_HEIGHT = 6
FRAME_DURATION_MS = 83  # 12 FPS

# Sub-cell moves making up the tour: right, down, left, up
TOUR_LEGS = [
    ((1, 0), 36),
    ((0, 1), 18),
    ((-1, 0), 36),
    ((0, -1), 18),
]


def tour_steps() -> List[Tuple[int, int]]:
    steps = []
    for vector, count in TOUR_LEGS:
        steps.extend([vector] * count)
    return steps


def save_map_image(grid_rows: List[str], output: str):
    """Write a text map as a wall-coloured PNG the shell can load"""
    height = len(grid_rows)
    width = len(grid_rows[0])
    img = Image.new('RGB', (width, height), (255, 255, 255))
    for y, row in enumerate(grid_rows):
        for x, char in enumerate(row):
            if char == '#':
                img.putpixel((x, y), WALL_COLOR)
    img.save(output)


def main():
    parser = argparse.ArgumentParser(description='PNGN Tile Shell panning tour')
    parser.add_argument('--output', default='pngn_pan_tour.gif')
    parser.add_argument('--save-map', default=None,
                        help='Also write the demo map as a PNG (e.g. testimg.png)')
    args = parser.parse_args()

    grid = CellGrid.from_rows(DEMO_MAP)
    viewport = Viewport(VIEW_WIDTH, VIEW_HEIGHT, create_renderer(), scroll_x=-3, scroll_y=-3)
    font = load_font()['font']

    print("🧊 PNGN Tile Shell Panning Tour")
    print("=" * 60)
    print(f"Map: {grid.width}x{grid.height} cells")
    print(f"Viewport: {VIEW_WIDTH}x{VIEW_HEIGHT} cells")

    steps = tour_steps()
    frames = []
    for index, (dx, dy) in enumerate(steps):
        display = render_snapshot(grid, viewport)
        frames.append(display.to_image(font=font))
        viewport.move_by(dx, dy)

        if (index + 1) % 12 == 0:
            print(f"  Frame {index + 1}/{len(steps)} scroll=({viewport.scroll_x}, {viewport.scroll_y})")

    frames[0].save(
        args.output,
        format='GIF',
        save_all=True,
        append_images=frames[1:],
        duration=FRAME_DURATION_MS,
        loop=0,
        optimize=False
    )
    print(f"\n✓ Saved {args.output}")

    if args.save_map:
        save_map_image(DEMO_MAP, args.save_map)
        print(f"✓ Saved map image {args.save_map}")


if __name__ == "__main__":
    main()
