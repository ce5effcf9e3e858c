"""
Trisolaris - Interactive Three-Body Simulator
=============================================

Three suns and one unlucky planet under mutual gravity, drawn on a tilted
plane that can be panned, zoomed and turned.

Controls:
    - Drag: Pan
    - Scroll: Zoom
    - Double click: Reset view
    - A/D: Rotate view
    - W/S: Tilt view
    - SPACE: Run/Pause
    - R: Reset current scenario
    - 1-4: Pick scenario
    - -/=: Gravitational constant
    - [/]: Time scale
    - O: Consult the Oracle
    - ESC: Quit
"""
from __future__ import annotations

import argparse
import random
import time
from typing import Sequence

import pygame
from pygame.locals import DOUBLEBUF, RESIZABLE

from trisolaris import __version__
from trisolaris.core.config import PHYSICS_CFG, RENDER_CFG, RenderCfg
from trisolaris.core.driver import AnimationDriver
from trisolaris.core.logging_utils import RunLogger
from trisolaris.core.model import Body, SimulationSettings, Snapshot
from trisolaris.core.physics import is_finite_body
from trisolaris.data.scenarios import (
    SCENARIO_DEFINITIONS,
    SCENARIOS,
    SimulationPreset,
    resolve_preset,
    scenario_for,
)
from trisolaris.render import (
    ROTATE_LEFT,
    ROTATE_RIGHT,
    TILT_DOWN,
    TILT_UP,
    Button,
    ButtonVisualStyle,
    Camera,
    build_render_list,
    build_text_panel,
    draw_scene,
    generate_starfield,
    get_text_surface,
    load_font,
    wrap_text,
)
from trisolaris.services.oracle import OracleResponse, OracleWorker

HELD_KEY_ACTIONS = {
    pygame.K_a: ROTATE_LEFT,
    pygame.K_d: ROTATE_RIGHT,
    pygame.K_w: TILT_UP,
    pygame.K_s: TILT_DOWN,
}

PRESET_KEYS = {
    pygame.K_1: SCENARIO_DEFINITIONS[0].preset,
    pygame.K_2: SCENARIO_DEFINITIONS[1].preset,
    pygame.K_3: SCENARIO_DEFINITIONS[2].preset,
    pygame.K_4: SCENARIO_DEFINITIONS[3].preset,
}

G_STEP = 0.1
TIME_SCALE_STEP = 0.1
ORACLE_PANEL_WIDTH = 320
MIN_CANVAS_SIZE = 200


def _set_display_mode_with_vsync(size: tuple[int, int], flags: int = 0) -> pygame.Surface:
    """Create the display surface with double buffering and vsync when available."""
    flags |= DOUBLEBUF
    try:
        return pygame.display.set_mode(size, flags, vsync=1)
    except pygame.error:
        return pygame.display.set_mode(size, flags)


def held_actions(pressed: Sequence[bool]) -> set[str]:
    return {action for key, action in HELD_KEY_ACTIONS.items() if pressed[key]}


class TrisolarisApp:
    """Window, input dispatch and panels around the :class:`AnimationDriver`."""

    def __init__(
        self,
        size: tuple[int, int],
        *,
        preset: SimulationPreset,
        seed: int | None = None,
        running: bool = False,
        record: bool = False,
        render_cfg: RenderCfg = RENDER_CFG,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Trisolaris – Three Body Simulator")
        self.render_cfg = render_cfg
        self.screen = _set_display_mode_with_vsync(size, RESIZABLE)
        self.clock = pygame.time.Clock()

        self.font = load_font(["consolas", "dejavusansmono", "monospace"], 14)
        self.small_font = load_font(["consolas", "dejavusansmono", "monospace"], 11)
        self.title_font = load_font(["arial", "dejavusans"], 22, bold=True)
        self.era_font = load_font(["arial", "dejavusans"], 24, bold=True)
        self.watermark_font = load_font(["arial", "dejavusans"], 64, bold=True)
        self.stars = generate_starfield(render_cfg.star_count, seed=render_cfg.star_seed)

        self.seed = seed
        settings = SimulationSettings(is_running=running, preset=preset.value)
        canvas_w, canvas_h = self.canvas_rect.size
        self.driver = AnimationDriver(
            canvas_w,
            canvas_h,
            settings=settings,
            camera=Camera(),
            render=self._render_canvas,
            rng=random.Random(seed),
        )
        self.oracle = OracleWorker()
        self._shown_response: OracleResponse | None = None
        self._last_click = -1.0
        self._invalid_logged: set[str] = set()
        self.running = True

        self.logger: RunLogger | None = None
        if record:
            self._start_recording()
        self.driver.publisher.subscribe(self._on_snapshot)

        self.buttons: list[Button] = []
        self._oracle_button: Button | None = None
        self._dismiss_button: Button | None = None
        self._layout()

    # ----------------------------------------------------------------- layout
    @property
    def canvas_rect(self) -> pygame.Rect:
        width, height = self.screen.get_size()
        sidebar = self.render_cfg.sidebar_width
        return pygame.Rect(sidebar, 0, max(1, width - sidebar), height)

    def _layout(self) -> None:
        cfg = self.render_cfg
        secondary = ButtonVisualStyle.secondary(cfg)
        primary = ButtonVisualStyle.primary(cfg)
        x = 24
        inner = cfg.sidebar_width - 48
        settings = self.driver.settings

        self.buttons = [
            Button(
                (x, 72, inner, 40),
                "Run",
                self.toggle_running,
                text_getter=lambda: "Pause" if settings.is_running else "Run",
                style_getter=lambda: secondary if settings.is_running else primary,
            )
        ]
        y = 160
        for scenario in SCENARIO_DEFINITIONS:
            self.buttons.append(
                Button(
                    (x, y, inner, 34),
                    scenario.name,
                    lambda preset=scenario.preset: self.reset(preset),
                    style=secondary,
                )
            )
            y += 42

        height = self.screen.get_height()
        slider_y = max(y + 40, height - 170)
        self._constants_y = slider_y
        for offset, (label, delta, setter) in enumerate(
            (
                ("-", -G_STEP, self.adjust_g),
                ("+", G_STEP, self.adjust_g),
                ("-", -TIME_SCALE_STEP, self.adjust_time_scale),
                ("+", TIME_SCALE_STEP, self.adjust_time_scale),
            )
        ):
            row = offset // 2
            col = offset % 2
            self.buttons.append(
                Button(
                    (x + inner - 72 + col * 38, slider_y + 28 + row * 52, 34, 28),
                    label,
                    lambda delta=delta, setter=setter: setter(delta),
                    style=secondary,
                )
            )

        canvas = self.canvas_rect
        self._oracle_button = Button(
            (canvas.right - 24 - ORACLE_PANEL_WIDTH, 24, ORACLE_PANEL_WIDTH, 44),
            "Consult the Oracle",
            self.consult_oracle,
            text_getter=lambda: "Refresh Prediction" if self._shown_response else "Consult the Oracle",
            style=primary,
        )

    # ---------------------------------------------------------------- actions
    def toggle_running(self) -> None:
        running = self.driver.toggle_running()
        self._log_event("run" if running else "pause", {"preset": self.driver.settings.preset})

    def reset(self, preset: SimulationPreset | str) -> None:
        self.driver.reset(preset)
        self._invalid_logged.clear()
        self._log_event("reset", {"preset": self.driver.settings.preset})

    def adjust_g(self, delta: float) -> None:
        value = self.driver.set_g_constant(round(self.driver.settings.g_constant + delta, 2))
        self._log_event("settings", {"g_constant": value})

    def adjust_time_scale(self, delta: float) -> None:
        value = self.driver.set_time_scale(round(self.driver.settings.time_scale + delta, 2))
        self._log_event("settings", {"time_scale": value})

    def consult_oracle(self) -> None:
        if self.oracle.busy:
            return
        self.oracle.request(self.driver.snapshot())
        self._log_event("oracle", {"state": "requested"})

    def dismiss_oracle(self) -> None:
        self.oracle.dismiss()
        self._shown_response = None

    # -------------------------------------------------------------- recording
    def _start_recording(self) -> None:
        self.logger = RunLogger()
        settings = self.driver.settings
        canvas_w, canvas_h = self.driver.size
        self.logger.write_meta(
            {
                "preset": settings.preset,
                "G": settings.g_constant,
                "time_scale": settings.time_scale,
                "softening": settings.softening,
                "dt": self.driver.dt,
                "publish_interval": PHYSICS_CFG.publish_interval,
                "canvas": [canvas_w, canvas_h],
                "seed": self.seed,
                "integrator": "semi-implicit Euler",
                "code_version": f"Trisolaris v{__version__}",
            }
        )
        self.logger.log_snapshot(self.driver.snapshot())

    def _log_event(self, event_type: str, details: object = "") -> None:
        if self.logger is not None:
            self.logger.log_event(self.driver.sim_time, event_type, details)

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        for body in snapshot.bodies:
            if body.id not in self._invalid_logged and not is_finite_body(body):
                self._invalid_logged.add(body.id)
                self._log_event("invalid_body", {"id": body.id})
        if self.logger is not None:
            self.logger.log_snapshot(snapshot)

    # ----------------------------------------------------------------- events
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event)
            elif event.type == pygame.MOUSEMOTION:
                self.driver.camera.drag(self._canvas_pos(event.pos))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.driver.camera.end_drag()
            elif event.type == pygame.MOUSEWHEEL:
                if self.canvas_rect.collidepoint(pygame.mouse.get_pos()):
                    self.driver.camera.zoom_by(-event.y * self.render_cfg.wheel_delta_per_notch)
            elif event.type == pygame.WINDOWLEAVE:
                self.driver.camera.end_drag()
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.size)

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.toggle_running()
        elif key == pygame.K_r:
            self.reset(self.driver.settings.preset)
        elif key in PRESET_KEYS:
            self.reset(PRESET_KEYS[key])
        elif key == pygame.K_o:
            self.consult_oracle()
        elif key == pygame.K_MINUS:
            self.adjust_g(-G_STEP)
        elif key == pygame.K_EQUALS:
            self.adjust_g(G_STEP)
        elif key == pygame.K_LEFTBRACKET:
            self.adjust_time_scale(-TIME_SCALE_STEP)
        elif key == pygame.K_RIGHTBRACKET:
            self.adjust_time_scale(TIME_SCALE_STEP)

    def _handle_click(self, event: pygame.event.Event) -> None:
        for button in self.buttons:
            if button.handle_event(event):
                return
        if self._dismiss_button is not None and self._dismiss_button.handle_event(event):
            return
        if self._oracle_button is not None and self._oracle_button.handle_event(event):
            return
        if not self.canvas_rect.collidepoint(event.pos):
            return
        now = time.perf_counter()
        if now - self._last_click <= self.render_cfg.double_click_interval:
            self.driver.camera.reset()
            self._last_click = -1.0
            return
        self._last_click = now
        self.driver.camera.begin_drag(self._canvas_pos(event.pos))

    def _handle_resize(self, size: tuple[int, int]) -> None:
        width = max(size[0], self.render_cfg.sidebar_width + MIN_CANVAS_SIZE)
        height = max(size[1], MIN_CANVAS_SIZE)
        self.screen = _set_display_mode_with_vsync((width, height), RESIZABLE)
        canvas = self.canvas_rect
        self.driver.resize(canvas.width, canvas.height)
        self._layout()

    def _canvas_pos(self, pos: tuple[int, int]) -> tuple[int, int]:
        canvas = self.canvas_rect
        return pos[0] - canvas.x, pos[1] - canvas.y

    # --------------------------------------------------------------- drawing
    def _render_canvas(self, bodies: Sequence[Body], camera: Camera, fps: float) -> None:
        canvas = self.screen.subsurface(self.canvas_rect)
        items = build_render_list(bodies, camera, canvas.get_size())
        draw_scene(
            canvas,
            items,
            camera,
            fps,
            stars=self.stars,
            label_font=self.font,
            hud_font=self.small_font,
            render_cfg=self.render_cfg,
        )
        watermark = get_text_surface(self.watermark_font, "TRISOLARIS", self.render_cfg.watermark_color)
        canvas.blit(watermark, watermark.get_rect(bottomright=(canvas.get_width() - 24, canvas.get_height() - 24)))

    def _draw_sidebar(self) -> None:
        cfg = self.render_cfg
        height = self.screen.get_height()
        sidebar = pygame.Surface((cfg.sidebar_width, height), pygame.SRCALPHA)
        sidebar.fill(cfg.sidebar_color)
        self.screen.blit(sidebar, (0, 0))
        pygame.draw.line(self.screen, cfg.sidebar_border_color, (cfg.sidebar_width - 1, 0), (cfg.sidebar_width - 1, height))

        self.screen.blit(get_text_surface(self.title_font, "Three Body Sim", cfg.title_color), (24, 24))
        self.screen.blit(get_text_surface(self.small_font, "SCENARIOS", cfg.section_color), (24, 138))

        mouse_pos = pygame.mouse.get_pos()
        for button in self.buttons:
            button.draw(self.screen, self.font, mouse_pos)

        settings = self.driver.settings
        y = self._constants_y
        self.screen.blit(get_text_surface(self.small_font, "UNIVERSE CONSTANTS", cfg.section_color), (24, y))
        rows = (
            ("Gravitational Constant (G)", f"{settings.g_constant:.2f}"),
            ("Time Scale", f"{settings.time_scale:.1f}x"),
        )
        for row, (label, value) in enumerate(rows):
            row_y = y + 34 + row * 52
            self.screen.blit(get_text_surface(self.font, label, cfg.text_color), (24, row_y))
            self.screen.blit(get_text_surface(self.font, value, cfg.value_color), (24, row_y + 18))

        scenario = scenario_for(settings.preset)
        lines = wrap_text(scenario.description, self.small_font, cfg.sidebar_width - 48)
        for idx, line in enumerate(lines):
            self.screen.blit(
                get_text_surface(self.small_font, line, cfg.section_color),
                (24, 160 + 42 * len(SCENARIO_DEFINITIONS) + idx * self.small_font.get_linesize()),
            )

    def _draw_oracle(self) -> None:
        cfg = self.render_cfg
        response = self.oracle.poll()
        if response is not self._shown_response and response is not None:
            self._log_event("oracle", {"era": response.era})
        self._shown_response = response
        self._dismiss_button = None
        mouse_pos = pygame.mouse.get_pos()
        x = self.canvas_rect.right - 24 - ORACLE_PANEL_WIDTH

        if self.oracle.busy:
            panel = build_text_panel(
                self.font,
                [("Communing with the stars...", cfg.value_color)],
                background_color=cfg.oracle_panel_color,
                min_width=ORACLE_PANEL_WIDTH,
            )
            self.screen.blit(panel, (x, 24))
            return

        if self._oracle_button is not None:
            self._oracle_button.draw(self.screen, self.font, mouse_pos)
        if response is None:
            return

        era_color = cfg.stable_era_color if response.is_stable else cfg.chaotic_era_color
        lines: list[tuple[str, tuple[int, int, int]]] = []
        for line in wrap_text(f'"{response.description}"', self.font, ORACLE_PANEL_WIDTH - 28):
            lines.append((line, cfg.text_color))
        lines.append(("", cfg.text_color))
        lines.append(("DIRECTIVE", cfg.value_color))
        for line in wrap_text(response.recommendation, self.font, ORACLE_PANEL_WIDTH - 28):
            lines.append((line, (226, 232, 240)))
        panel = build_text_panel(
            self.font,
            lines,
            background_color=cfg.oracle_panel_color,
            padding=(14, 48),
            min_width=ORACLE_PANEL_WIDTH,
        )
        era = get_text_surface(self.era_font, response.era, era_color)
        panel.blit(era, (14, 12))
        panel_y = 80
        self.screen.blit(panel, (x, panel_y))
        self._dismiss_button = Button(
            (x, panel_y + panel.get_height() + 8, ORACLE_PANEL_WIDTH, 28),
            "Dismiss",
            self.dismiss_oracle,
            style=ButtonVisualStyle.secondary(cfg),
        )
        self._dismiss_button.draw(self.screen, self.small_font, mouse_pos)

    # ------------------------------------------------------------------- loop
    def run(self) -> None:
        try:
            while self.running:
                self.clock.tick(self.render_cfg.fps_cap)
                self._handle_events()
                if not self.running:
                    break
                self.driver.tick(time.perf_counter(), held_actions(pygame.key.get_pressed()))
                self._draw_sidebar()
                self._draw_oracle()
                pygame.display.flip()
        finally:
            self.driver.publisher.unsubscribe(self._on_snapshot)
            if self.logger is not None:
                self.logger.close()
            pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive three-body simulator.")
    parser.add_argument("--width", type=int, default=RENDER_CFG.width, help="Window width in pixels")
    parser.add_argument("--height", type=int, default=RENDER_CFG.height, help="Window height in pixels")
    parser.add_argument(
        "--preset",
        choices=sorted(SCENARIOS),
        default=SCENARIO_DEFINITIONS[0].key,
        help="Starting scenario",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for random scenarios and trail sampling")
    parser.add_argument("--record", action="store_true", help="Record the run under data/runs")
    parser.add_argument("--running", action="store_true", help="Start with the simulation running")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    min_width = RENDER_CFG.sidebar_width + MIN_CANVAS_SIZE
    if args.width < min_width or args.height < MIN_CANVAS_SIZE:
        build_parser().error(f"Window must be at least {min_width}x{MIN_CANVAS_SIZE} pixels")
    app = TrisolarisApp(
        (args.width, args.height),
        preset=resolve_preset(args.preset),
        seed=args.seed,
        running=args.running,
        record=args.record,
    )
    app.run()


if __name__ == "__main__":
    main()
