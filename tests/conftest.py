import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from pngn_config import GlyphConfig  # noqa: E402
from pngn_display import BufferDisplay  # noqa: E402
from pngn_grid import CellGrid  # noqa: E402
from pngn_tiles import TileRenderer  # noqa: E402


@pytest.fixture
def glyphs():
    return GlyphConfig()


@pytest.fixture
def renderer(glyphs):
    """Uncached renderer with the reference glyph set"""
    return TileRenderer(glyphs, enable_cache=False)


@pytest.fixture
def grid_from():
    """Build a CellGrid from text rows: '#' solid, anything else open."""

    def build(*rows):
        return CellGrid.from_rows(rows)

    return build


@pytest.fixture
def display_for():
    """BufferDisplay exactly the size of a viewport's glyph area (screen origin 0,0)."""

    def build(viewport):
        rows, cols = viewport.glyph_extent
        return BufferDisplay(rows, cols)

    return build
