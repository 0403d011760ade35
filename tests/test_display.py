import curses

import pytest
from PIL import ImageFont

from pngn_display import (
    MENU_LINES,
    SNAPSHOT_BACKGROUND,
    BufferDisplay,
    CursesDisplay,
    load_font,
)


class FakeWindow:
    """Minimal stand-in for a curses window"""

    def __init__(self, rows=5, cols=10, keys=()):
        self.rows = rows
        self.cols = cols
        self.keys = list(keys)
        self.lines = []
        self.cleared = 0
        self.refreshed = 0
        self.keypad_enabled = False

    def addstr(self, *args):
        if len(args) == 3:
            row, col, text = args
            if not (0 <= row < self.rows and 0 <= col < self.cols):
                raise curses.error('addwstr() returned ERR')
            self.lines.append((row, col, text))
        else:
            self.lines.append(args[0])

    def getmaxyx(self):
        return self.rows, self.cols

    def getch(self):
        return self.keys.pop(0)

    def clear(self):
        self.cleared += 1

    def refresh(self):
        self.refreshed += 1

    def keypad(self, flag):
        self.keypad_enabled = flag


def test_buffer_records_writes_in_order():
    display = BufferDisplay(2, 3)
    display.write_glyph(0, 1, 'a')
    display.write_glyph(1, 2, 'b')
    display.write_glyph(0, 1, 'c')
    assert display.writes == [(0, 1, 'a'), (1, 2, 'b'), (0, 1, 'c')]
    assert display.to_lines() == [' c ', '  b']
    assert display.to_text() == ' c \n  b'


@pytest.mark.parametrize('row,col', [(-1, 0), (0, -1), (2, 0), (0, 3)])
def test_buffer_keeps_out_of_range_writes_in_log_only(row, col):
    display = BufferDisplay(2, 3)
    display.write_glyph(row, col, 'x')
    assert display.writes == [(row, col, 'x')]
    assert display.to_lines() == ['   ', '   ']


def test_buffer_extent_cursor_and_clear():
    display = BufferDisplay(4, 7, fill='.')
    assert display.query_display_extent() == (4, 7)
    assert display.cursor_visible
    display.hide_cursor()
    assert not display.cursor_visible

    display.write_glyph(3, 6, '#')
    assert display.glyph_at(3, 6) == '#'
    display.clear()
    assert display.glyph_at(3, 6) == '.'
    assert display.writes == []


@pytest.mark.parametrize('rows,cols', [(0, 3), (3, 0), (-2, 2)])
def test_buffer_rejects_non_positive_size(rows, cols):
    with pytest.raises(ValueError):
        BufferDisplay(rows, cols)


def test_to_image_draws_glyphs_on_background():
    font = ImageFont.load_default()
    display = BufferDisplay(2, 4)
    blank = display.to_image(font=font)
    assert blank.mode == 'RGB'
    assert blank.width % 4 == 0
    assert blank.height % 2 == 0
    assert blank.getcolors() == [(blank.width * blank.height, SNAPSHOT_BACKGROUND)]

    display.write_glyph(0, 0, '#')
    drawn = display.to_image(font=font)
    assert drawn.size == blank.size
    assert len(drawn.getcolors(maxcolors=4096)) > 1


def test_load_font_always_returns_a_font():
    loaded = load_font()
    assert loaded['font'] is not None
    assert loaded['path'] is None or loaded['path'].endswith('.ttf')


def test_curses_write_ignores_off_screen_errors():
    window = FakeWindow(rows=3, cols=3)
    display = CursesDisplay(window)
    display.write_glyph(1, 1, '∷')
    display.write_glyph(9, 9, '∷')
    assert window.lines == [(1, 1, '∷')]


def test_curses_extent_and_keys():
    window = FakeWindow(rows=24, cols=80, keys=[curses.KEY_LEFT, ord('q')])
    display = CursesDisplay(window)
    assert display.query_display_extent() == (24, 80)
    assert display.read_key() == curses.KEY_LEFT
    assert display.read_key() == ord('q')

    display.clear()
    display.refresh()
    assert window.cleared == 1
    assert window.refreshed == 1


def test_curses_show_menu_replaces_screen():
    window = FakeWindow()
    display = CursesDisplay(window)
    display.show_menu()
    assert window.cleared == 1
    assert window.lines == [line + "\n" for line in MENU_LINES]
    assert window.refreshed == 1


def test_curses_hide_cursor(monkeypatch):
    calls = []
    monkeypatch.setattr(curses, 'curs_set', lambda visibility: calls.append(visibility))
    CursesDisplay(FakeWindow()).hide_cursor()
    assert calls == [0]


def test_curses_hide_cursor_tolerates_unsupported_terminal(monkeypatch):
    def refuse(visibility):
        raise curses.error('curs_set() returned ERR')

    monkeypatch.setattr(curses, 'curs_set', refuse)
    CursesDisplay(FakeWindow()).hide_cursor()


def test_curses_setup(monkeypatch):
    calls = []
    monkeypatch.setattr(curses, 'raw', lambda: calls.append('raw'))
    monkeypatch.setattr(curses, 'noecho', lambda: calls.append('noecho'))
    window = FakeWindow()
    CursesDisplay(window).setup()
    assert calls == ['raw', 'noecho']
    assert window.keypad_enabled
