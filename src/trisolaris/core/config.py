"""Configuration dataclasses for the three-body simulation."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhysicsCfg:
    default_g_constant: float = 1.5
    min_g_constant: float = 0.1
    max_g_constant: float = 5.0
    softening: float = 1000.0
    base_dt: float = 0.1
    default_time_scale: float = 1.0
    min_time_scale: float = 0.1
    max_time_scale: float = 3.0
    max_trail_length: int = 150
    trail_sample_probability: float = 0.3
    planet_mass: float = 10.0
    planet_radius: float = 5.0
    sun_radius_factor: float = 2.0
    publish_interval: float = 0.5

    def dt_for(self, time_scale: float) -> float:
        return self.base_dt * time_scale


@dataclass(frozen=True)
class CameraCfg:
    default_zoom: float = 1.0
    min_zoom: float = 0.1
    max_zoom: float = 50.0
    zoom_sensitivity: float = 0.001
    max_pitch: float = 1.4
    rotate_speed: float = 0.03


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1520
    height: int = 800
    sidebar_width: int = 320
    background_color: str = "#020617"
    sidebar_color: tuple[int, int, int, int] = (15, 23, 42, 230)
    sidebar_border_color: tuple[int, int, int] = (30, 41, 59)
    title_color: tuple[int, int, int] = (129, 140, 248)
    section_color: tuple[int, int, int] = (100, 116, 139)
    value_color: tuple[int, int, int] = (129, 140, 248)
    text_color: tuple[int, int, int] = (203, 213, 225)
    star_count: int = 80
    star_seed: int = 1337
    star_yaw_factor: float = 0.1
    planet_trail_alpha: float = 0.5
    sun_trail_alpha: float = 0.3
    planet_trail_width: float = 1.0
    sun_trail_width: float = 2.0
    trail_width_exponent: float = 0.2
    planet_glow_radius: int = 5
    sun_glow_radius: int = 30
    glow_layers: int = 6
    glow_peak_alpha: int = 110
    label_min_zoom: float = 0.2
    label_offset: tuple[int, int] = (15, -15)
    label_color: tuple[int, int, int, int] = (255, 255, 255, 128)
    hud_color: tuple[int, int, int, int] = (255, 255, 255, 77)
    hint_color: tuple[int, int, int] = (100, 116, 139)
    oracle_panel_color: tuple[int, int, int, int] = (15, 23, 42, 210)
    stable_era_color: tuple[int, int, int] = (52, 211, 153)
    chaotic_era_color: tuple[int, int, int] = (248, 113, 113)
    watermark_color: tuple[int, int, int] = (30, 41, 59)
    button_color: tuple[int, int, int, int] = (30, 41, 59, 235)
    button_hover_color: tuple[int, int, int, int] = (51, 65, 85, 245)
    button_border_color: tuple[int, int, int, int] = (51, 65, 85, 128)
    button_text_color: tuple[int, int, int] = (203, 213, 225)
    primary_button_color: tuple[int, int, int, int] = (79, 70, 229, 255)
    primary_button_hover_color: tuple[int, int, int, int] = (99, 102, 241, 255)
    primary_button_text_color: tuple[int, int, int] = (255, 255, 255)
    button_radius: int = 6
    double_click_interval: float = 0.4
    wheel_delta_per_notch: float = 100.0
    fps_cap: int = 0

    @property
    def canvas_width(self) -> int:
        return self.width - self.sidebar_width


@dataclass(frozen=True)
class OracleCfg:
    model: str = "gemini-2.5-flash"
    api_key_env_vars: tuple[str, ...] = ("GEMINI_API_KEY", "API_KEY")
    wrap_width: int = 300


PHYSICS_CFG = PhysicsCfg()
CAMERA_CFG = CameraCfg()
RENDER_CFG = RenderCfg()
ORACLE_CFG = OracleCfg()


__all__ = [
    "CAMERA_CFG",
    "CameraCfg",
    "ORACLE_CFG",
    "OracleCfg",
    "PHYSICS_CFG",
    "PhysicsCfg",
    "RENDER_CFG",
    "RenderCfg",
]
