from __future__ import annotations

from collections import OrderedDict
from functools import lru_cache
from typing import Iterable

import pygame


Color = tuple[int, int, int] | tuple[int, int, int, int]


@lru_cache(maxsize=64)
def to_rgb(color: str) -> tuple[int, int, int]:
    """Convert a display token such as ``"#fbbf24"`` into an RGB tuple."""

    parsed = pygame.Color(color)
    return parsed.r, parsed.g, parsed.b


_TEXT_SURFACE_CACHE_MAX_SIZE = 256
_TEXT_SURFACE_CACHE: OrderedDict[tuple[int, str, Color], pygame.Surface] = OrderedDict()


def get_text_surface(font: pygame.font.Font, text: str, color: Color) -> pygame.Surface:
    """Return a cached rendered surface for the given font, text and color."""

    key = (id(font), text, color)
    cached = _TEXT_SURFACE_CACHE.get(key)
    if cached is not None:
        _TEXT_SURFACE_CACHE.move_to_end(key)
        return cached
    rendered = font.render(text, True, color[:3])
    if len(color) == 4:
        rendered.set_alpha(color[3])
    _TEXT_SURFACE_CACHE[key] = rendered
    if len(_TEXT_SURFACE_CACHE) > _TEXT_SURFACE_CACHE_MAX_SIZE:
        _TEXT_SURFACE_CACHE.popitem(last=False)
    return rendered


def load_font(preferred_names: Iterable[str], size: int, *, bold: bool = False) -> pygame.font.Font:
    names = list(preferred_names)
    for name in names:
        match = pygame.font.match_font(name, bold=bold)
        if match:
            return pygame.font.Font(match, size)
    if not names:
        return pygame.font.Font(None, size)
    return pygame.font.SysFont(names[0], size, bold=bold)
