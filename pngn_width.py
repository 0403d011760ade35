#!/usr/bin/env python3
"""
🐧 PNGN Tile Shell - Glyph Width Module
=======================================
Copyright (c) 2025 PNGN-Tec LLC

Terminal Column Measurement
===========================
A glyph block only lines up when every glyph advances the cursor by
exactly one column. East Asian wide characters take two, combining marks
and control characters take none. Widths come from wcwidth; the
configuration layer runs every configured glyph through here before a
renderer is built.

Measurements are memoised in a bounded LRU (size from CacheConfig).
Strings wcwidth refuses as a whole (any non-printable character) are
measured per character with the non-printables counted as zero.

```python
from pngn_width import get_width, find_wide_glyphs

get_width("╭──╮")                   # 4
find_wide_glyphs(["∷", "你", "─"])  # ['你']
```
"""

import threading
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Union

from wcwidth import wcwidth, wcswidth

from pngn_config import get_cache_config

# Configure logging
logger = logging.getLogger('pngn_width')


class GlyphWidthCalculator:
    """
    Column-width measurement with an LRU of recent strings.

    Attributes:
        stats: hits, misses, measurements, per-character fallbacks, evictions
    """

    def __init__(self,
                 cache_size: Optional[int] = None,
                 enable_cache: Optional[bool] = None):
        cache_config = get_cache_config()
        self._limit = cache_config.width_cache_size if cache_size is None else cache_size
        self._enabled = cache_config.enable_caching if enable_cache is None else enable_cache
        self._widths: "OrderedDict[str, int]" = OrderedDict()
        self._lock = threading.Lock()

        self.stats = {
            'cache_hits': 0,
            'cache_misses': 0,
            'calculations': 0,
            'nonprintable_fallbacks': 0,
            'cache_evictions': 0,
        }

    def get_width(self, text: str) -> int:
        """Columns the cursor advances when text is written"""
        if not text:
            return 0

        if self._enabled:
            with self._lock:
                if text in self._widths:
                    self._widths.move_to_end(text)
                    self.stats['cache_hits'] += 1
                    return self._widths[text]
                self.stats['cache_misses'] += 1

        width = self._measure(text)

        if self._enabled:
            with self._lock:
                while self._widths and len(self._widths) >= self._limit:
                    self._widths.popitem(last=False)
                    self.stats['cache_evictions'] += 1
                self._widths[text] = width
        return width

    def get_widths(self, texts: Iterable[str]) -> List[int]:
        return [self.get_width(text) for text in texts]

    def _measure(self, text: str) -> int:
        self.stats['calculations'] += 1
        width = wcswidth(text)
        if width >= 0:
            return width

        # -1 means at least one non-printable character
        self.stats['nonprintable_fallbacks'] += 1
        return sum(max(wcwidth(char), 0) for char in text)

    def clear_cache(self):
        with self._lock:
            self._widths.clear()

    def get_stats(self) -> Dict[str, Union[int, float, bool]]:
        """Counters plus cache_hit_rate, cache_entries and cache_enabled"""
        stats = dict(self.stats)
        lookups = stats['cache_hits'] + stats['cache_misses']
        stats['cache_hit_rate'] = stats['cache_hits'] / lookups if lookups else 0.0
        with self._lock:
            stats['cache_entries'] = len(self._widths)
        stats['cache_enabled'] = self._enabled
        return stats


# ============================================================================
# MODULE-LEVEL HELPERS
# ============================================================================

_shared = None
_shared_lock = threading.Lock()


def _calculator() -> GlyphWidthCalculator:
    global _shared

    if _shared is None:
        with _shared_lock:
            if _shared is None:
                _shared = GlyphWidthCalculator()
    return _shared


def get_width(text: str) -> int:
    """
    Columns occupied by text.

    Example:
        >>> get_width("─│─")
        3
        >>> get_width("你好")
        4
    """
    return _calculator().get_width(text)


def get_widths(texts: Iterable[str]) -> List[int]:
    return _calculator().get_widths(texts)


def is_single_cell(glyph: str) -> bool:
    """True when the glyph occupies exactly one column"""
    return get_width(glyph) == 1


def find_wide_glyphs(glyphs: Iterable[str]) -> List[str]:
    """Glyphs that would break block alignment, in input order"""
    offenders = [glyph for glyph in glyphs if not is_single_cell(glyph)]
    if offenders:
        logger.warning(f"Glyphs not one column wide: {offenders!r}")
    return offenders


def clear_default_cache():
    if _shared is not None:
        _shared.clear_cache()


def get_default_stats() -> Dict[str, Union[int, float, bool]]:
    """Shared calculator statistics; empty before first use"""
    return _shared.get_stats() if _shared is not None else {}
