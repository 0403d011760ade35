import pytest

from pngn_config import (
    HEAVY_CORNERS,
    ROUNDED_CORNERS,
    CacheConfig,
    ConfigurationManager,
    GlyphConfig,
    IngestConfig,
    ShellSystemConfig,
    ViewportConfig,
    get_config,
    parse_color,
    register_config_callback,
    reload_config,
    unregister_config_callback,
)


def test_defaults_validate():
    assert ShellSystemConfig().validate()


def test_corner_tables():
    assert GlyphConfig().corners() == ROUNDED_CORNERS
    assert GlyphConfig(corner_style='heavy').corners() == HEAVY_CORNERS


@pytest.mark.parametrize('config', [
    GlyphConfig(block_size=1),
    GlyphConfig(corner_style='dotted'),
    GlyphConfig(solid='你'),
    GlyphConfig(wall_h=''),
    GlyphConfig(player='ab'),
])
def test_invalid_glyph_config(config):
    with pytest.raises(ValueError):
        config.validate()


@pytest.mark.parametrize('config', [
    ViewportConfig(visible_width=0),
    ViewportConfig(visible_height=-2),
    ViewportConfig(pan_step=0),
])
def test_invalid_viewport_config(config):
    with pytest.raises(ValueError):
        config.validate()


@pytest.mark.parametrize('config', [
    IngestConfig(wall_color=(255, 0)),
    IngestConfig(wall_color=(256, 0, 0)),
    IngestConfig(tolerance=-1),
    IngestConfig(text_solid_chars=''),
])
def test_invalid_ingest_config(config):
    with pytest.raises(ValueError):
        config.validate()


def test_invalid_cache_config():
    with pytest.raises(ValueError):
        CacheConfig(block_cache_size=0).validate()


def test_parse_color():
    assert parse_color('255,0,0') == (255, 0, 0)
    assert parse_color(' 10, 20 ,30 ') == (10, 20, 30)
    with pytest.raises(ValueError):
        parse_color('1,2')
    with pytest.raises(ValueError):
        parse_color('red,0,0')


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('PNGN_BLOCK_SIZE', '4')
    monkeypatch.setenv('PNGN_CORNER_STYLE', 'HEAVY')
    monkeypatch.setenv('PNGN_VIEW_WIDTH', '12')
    monkeypatch.setenv('PNGN_VIEW_HEIGHT', '7')
    monkeypatch.setenv('PNGN_PAN_STEP', '2')
    monkeypatch.setenv('PNGN_WALL_COLOR', '0,0,255')
    monkeypatch.setenv('PNGN_WALL_TOLERANCE', '8')
    monkeypatch.setenv('PNGN_CACHE_SIZE', '64')
    monkeypatch.setenv('PNGN_MAP', 'cave.txt')
    monkeypatch.setenv('PNGN_LOG_LEVEL', 'debug')
    monkeypatch.setenv('PNGN_DEBUG', 'yes')

    config = ShellSystemConfig()
    ConfigurationManager()._load_environment_overrides(config)

    assert config.glyphs.block_size == 4
    assert config.glyphs.corner_style == 'heavy'
    assert (config.viewport.visible_width, config.viewport.visible_height) == (12, 7)
    assert config.viewport.pan_step == 2
    assert config.ingest.wall_color == (0, 0, 255)
    assert config.ingest.tolerance == 8
    assert config.cache.block_cache_size == 64
    assert config.map_path == 'cave.txt'
    assert config.log_level == 'DEBUG'
    assert config.debug_mode is True
    assert config.validate()


def test_manager_is_singleton():
    assert ConfigurationManager() is ConfigurationManager()


def test_reload_notifies_callbacks_and_rolls_back():
    previous = get_config()
    seen = []

    def on_change(old, new):
        seen.append((old, new))

    register_config_callback(on_change)
    try:
        replacement = ShellSystemConfig(viewport=ViewportConfig(visible_width=8))
        assert reload_config(replacement)
        assert get_config() is replacement
        assert seen == [(previous, replacement)]

        broken = ShellSystemConfig(glyphs=GlyphConfig(block_size=0))
        assert not reload_config(broken)
        assert get_config() is replacement
        assert len(seen) == 1
    finally:
        unregister_config_callback(on_change)
        reload_config(previous)

    assert get_config() is previous


def test_unparsable_environment_value_is_skipped(monkeypatch):
    monkeypatch.setenv('PNGN_VIEW_WIDTH', 'wide')
    monkeypatch.setenv('PNGN_WALL_COLOR', 'red')
    monkeypatch.setenv('PNGN_PAN_STEP', '3')

    config = ShellSystemConfig()
    ConfigurationManager()._load_environment_overrides(config)

    assert config.viewport.visible_width == ViewportConfig().visible_width
    assert config.ingest.wall_color == IngestConfig().wall_color
    assert config.viewport.pan_step == 3


def test_wide_glyph_error_names_the_glyph():
    with pytest.raises(ValueError, match='你'):
        GlyphConfig(unknown='你').validate()


def test_corners_rejects_unknown_style():
    with pytest.raises(ValueError):
        GlyphConfig(corner_style='bogus').corners()
