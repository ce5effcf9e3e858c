"""Rendering helpers for the three-body simulator."""

from .camera import (
    ROTATE_LEFT,
    ROTATE_RIGHT,
    TILT_DOWN,
    TILT_UP,
    Camera,
    CameraState,
    ProjectedPoint,
)
from .projection import RenderItem, build_render_list, format_hud_lines, project_points
from .assets import get_text_surface, load_font, to_rgb
from .draw import (
    Star,
    draw_body,
    draw_glow,
    draw_hud,
    draw_scene,
    draw_starfield,
    draw_trail,
    generate_starfield,
    trail_runs,
    trail_width,
)
from .ui import Button, ButtonVisualStyle, build_text_panel, wrap_text

__all__ = [
    "Button",
    "ButtonVisualStyle",
    "Camera",
    "CameraState",
    "ProjectedPoint",
    "ROTATE_LEFT",
    "ROTATE_RIGHT",
    "RenderItem",
    "Star",
    "TILT_DOWN",
    "TILT_UP",
    "build_render_list",
    "build_text_panel",
    "draw_body",
    "draw_glow",
    "draw_hud",
    "draw_scene",
    "draw_starfield",
    "draw_trail",
    "format_hud_lines",
    "generate_starfield",
    "get_text_surface",
    "load_font",
    "project_points",
    "to_rgb",
    "trail_runs",
    "trail_width",
    "wrap_text",
]
