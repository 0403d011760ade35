import numpy as np
import pytest
from PIL import Image

from pngn_config import IngestConfig
from pngn_grid import (
    CellGrid,
    CellState,
    GridLoadError,
    classify_pixels,
    load_grid,
    load_image_grid,
    load_text_grid,
)

RED = (255, 0, 0)
WHITE = (255, 255, 255)


@pytest.mark.parametrize('x,y', [(-1, 0), (0, -1), (3, 0), (0, 2), (-7, -7), (100, 1), (2, 2)])
def test_tile_at_outside_grid_is_out_of_bounds(grid_from, x, y):
    grid = grid_from('#.#', '...')
    assert grid.tile_at(x, y) == CellState.OUT_OF_BOUNDS


def test_tile_at_is_row_major(grid_from):
    grid = grid_from('#..', '..#')
    assert grid.tile_at(0, 0) == CellState.SOLID
    assert grid.tile_at(1, 0) == CellState.OPEN
    assert grid.tile_at(2, 1) == CellState.SOLID
    assert grid.tile_at(0, 1) == CellState.OPEN
    assert grid.width == 3 and grid.height == 2


def test_cell_count_must_match_dimensions():
    with pytest.raises(ValueError):
        CellGrid(2, 2, (CellState.OPEN,) * 3)


def test_out_of_bounds_is_never_stored():
    with pytest.raises(ValueError):
        CellGrid(1, 1, (CellState.OUT_OF_BOUNDS,))


def test_cells_are_stored_as_tuple():
    grid = CellGrid(2, 1, [CellState.SOLID, CellState.OPEN])
    assert isinstance(grid.cells, tuple)
    with pytest.raises(AttributeError):
        grid.width = 5


def test_from_rows_rejects_ragged_rows():
    with pytest.raises(ValueError):
        CellGrid.from_rows(['###', '##'])


def test_from_rows_custom_solid_chars():
    grid = CellGrid.from_rows(['WX.'], solid_chars='WX')
    assert grid.tile_at(0, 0) == CellState.SOLID
    assert grid.tile_at(1, 0) == CellState.SOLID
    assert grid.tile_at(2, 0) == CellState.OPEN


def test_count(grid_from):
    grid = grid_from('##.', '.#.')
    assert grid.count(CellState.SOLID) == 3
    assert grid.count(CellState.OPEN) == 3


def test_classify_pixels_marks_wall_colour_solid():
    pixels = np.zeros((2, 3, 3), dtype=np.uint8)
    pixels[0, 2] = RED
    pixels[1, 0] = RED
    pixels[1, 1] = (255, 0, 1)
    grid = classify_pixels(pixels, RED)
    assert (grid.width, grid.height) == (3, 2)
    assert grid.tile_at(2, 0) == CellState.SOLID
    assert grid.tile_at(0, 1) == CellState.SOLID
    assert grid.tile_at(1, 1) == CellState.OPEN
    assert grid.count(CellState.SOLID) == 2


def test_classify_pixels_tolerance():
    pixels = np.array([[[250, 4, 0], [200, 0, 0]]], dtype=np.uint8)
    exact = classify_pixels(pixels, RED, tolerance=0)
    loose = classify_pixels(pixels, RED, tolerance=5)
    assert exact.tile_at(0, 0) == CellState.OPEN
    assert loose.tile_at(0, 0) == CellState.SOLID
    assert loose.tile_at(1, 0) == CellState.OPEN


def test_classify_pixels_rejects_non_rgb_shape():
    with pytest.raises(ValueError):
        classify_pixels(np.zeros((4, 4), dtype=np.uint8))


def test_load_image_grid(tmp_path):
    img = Image.new('RGB', (4, 3), WHITE)
    img.putpixel((1, 0), RED)
    img.putpixel((3, 2), RED)
    path = tmp_path / 'map.png'
    img.save(path)

    grid = load_image_grid(path, IngestConfig())
    assert (grid.width, grid.height) == (4, 3)
    assert grid.tile_at(1, 0) == CellState.SOLID
    assert grid.tile_at(3, 2) == CellState.SOLID
    assert grid.count(CellState.SOLID) == 2


def test_load_image_grid_converts_palette_images(tmp_path):
    img = Image.new('RGB', (2, 1), WHITE)
    img.putpixel((0, 0), RED)
    path = tmp_path / 'map.gif'
    img.convert('P').save(path)

    grid = load_grid(path, IngestConfig())
    assert grid.tile_at(0, 0) == CellState.SOLID
    assert grid.tile_at(1, 0) == CellState.OPEN


def test_load_text_grid_ignores_trailing_blank_lines(tmp_path):
    path = tmp_path / 'cave.txt'
    path.write_text('###\n#.#\n###\n\n', encoding='utf-8')
    grid = load_text_grid(path, IngestConfig())
    assert (grid.width, grid.height) == (3, 3)
    assert grid.tile_at(1, 1) == CellState.OPEN


def test_load_grid_dispatches_text_suffix(tmp_path):
    path = tmp_path / 'room.map'
    path.write_text('#.\n.#\n', encoding='utf-8')
    grid = load_grid(path, IngestConfig())
    assert grid.tile_at(0, 0) == CellState.SOLID
    assert grid.tile_at(1, 1) == CellState.SOLID


def test_missing_file_raises_grid_load_error(tmp_path):
    missing = tmp_path / 'nope.png'
    with pytest.raises(GridLoadError) as excinfo:
        load_grid(missing, IngestConfig())
    assert excinfo.value.path == str(missing)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_undecodable_image_raises_grid_load_error(tmp_path):
    path = tmp_path / 'broken.png'
    path.write_bytes(b'definitely not a png')
    with pytest.raises(GridLoadError):
        load_grid(path, IngestConfig())


@pytest.mark.parametrize('content', ['', '\n\n', '##\n#\n'])
def test_bad_text_maps_raise_grid_load_error(tmp_path, content):
    path = tmp_path / 'bad.txt'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(GridLoadError):
        load_grid(path, IngestConfig())
