#!/usr/bin/env python3
"""
Orrery Simulator application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- The rendering thread owns the running Universe. It is the frame scheduler: it calls
  Universe.frame_tick() once per frame until the universe is killed, and swaps in a new
  Universe whenever another scenario is loaded.
- The Dear PyGui panel builds its widgets from the Universe's declarative controls
  (play/pause, date picker, seconds-per-tick slider) and shows the simulated date.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the viewport)
  and frame ticks. Universe methods are guarded by the universe's re-entrant lock.
- The UI class runs in the main thread via Dear PyGui. It refreshes its readouts on a periodic
  frame callback and invokes Universe methods (play, reset, speed) from widget callbacks.

Units and conventions
- SI units in world space: meters [m], kilograms [kg], seconds [s]. Scenario files use km.
- Simulated time is seconds since J2000; dates are UTC.

Running
1) Install: `pip install -e .`
2) Run this module: `python orrery_sim.py [scenario.json]`
"""

import logging
import sys
import threading
import time
from datetime import datetime, timezone
from typing import Optional

import pygame
import dearpygui.dearpygui as dpg

from orrery.constants import VIEW_HEIGHT, VIEW_WIDTH
from orrery.errors import ScenarioError
from orrery.physics import Ticker
from orrery.scenario_loader import list_scenarios, load_scenario
from orrery.scene import Scene
from orrery.settings import DATE_ID, DELTA_T_ID, START_ID
from orrery.time_model import DateDisplay
from orrery.universe import Universe
from orrery.utils import parse_time_of_day

logger = logging.getLogger("orrery")

DEFAULT_SCENARIO = "solar_system.json"

# ============================================================
# Pygame Renderer Thread
# ============================================================


class PygameRenderer(threading.Thread):
    """
    Pygame loop: handles viewport input and schedules the universe's frames.
    Wheel zooms, arrows and right/middle drag pan, Space toggles play, F cycles the followed body.
    """
    def __init__(self, date_display: DateDisplay):
        super().__init__(daemon=True)
        self.date_display = date_display
        self.lock = threading.RLock()
        self.universe: Optional[Universe] = None
        self.pending_scenario = None
        self.scene_ready = threading.Event()
        self.surface = None
        self.clock = None
        self.dragging_background = False
        self.drag_start_screen = (0, 0)
        self.pan_speed_keys = 600  # pixels per second
        self.running = True

    def load_scenario(self, scenario) -> None:
        """Queue a scenario; the renderer thread swaps universes before its next frame."""
        with self.lock:
            self.pending_scenario = scenario
            self.scene_ready.clear()

    def current_universe(self) -> Optional[Universe]:
        with self.lock:
            return self.universe

    def _swap_universe(self):
        with self.lock:
            scenario, self.pending_scenario = self.pending_scenario, None
            old = self.universe
        if scenario is None:
            return
        if old is not None:
            old.kill()
        universe = Universe(lambda: Scene(self.surface), Ticker(), self.date_display)
        try:
            universe.init(scenario)
        except ScenarioError as e:
            logger.error("Cannot start scenario %s: %s", scenario.title, e)
            universe = None
        with self.lock:
            self.universe = universe
        self.scene_ready.set()

    def run(self):
        pygame.init()
        pygame.display.set_caption("Orrery Simulator - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

        last_time = time.perf_counter()
        while self.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            if self.pending_scenario is not None:
                self._swap_universe()

            universe = self.current_universe()
            self.handle_events(universe, real_dt)
            if universe is not None and not universe.killed:
                universe.frame_tick()

            # Limit FPS
            self.clock.tick(60)

        universe = self.current_universe()
        if universe is not None:
            universe.kill()
        pygame.quit()

    def handle_events(self, universe: Optional[Universe], real_dt):
        scene = universe.get_scene() if universe is not None else None
        moved = False

        if scene is not None:
            keys = pygame.key.get_pressed()
            pan = self.pan_speed_keys * real_dt
            if keys[pygame.K_LEFT]:
                scene.camera.pan_pixels(pan, 0); moved = True
            if keys[pygame.K_RIGHT]:
                scene.camera.pan_pixels(-pan, 0); moved = True
            if keys[pygame.K_UP]:
                scene.camera.pan_pixels(0, pan); moved = True
            if keys[pygame.K_DOWN]:
                scene.camera.pan_pixels(0, -pan); moved = True

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                if scene is not None:
                    scene.set_surface(self.surface)
                    moved = True

            elif scene is None:
                continue

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                scene.camera.zoom(factor, pygame.mouse.get_pos())
                moved = True

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    universe.toggle_play()
                elif event.key == pygame.K_f:
                    names = [b.name for b in scene.bodies]
                    if names:
                        current = scene.follow_name if scene.follow_name in names else names[0]
                        scene.follow(names[(names.index(current) + 1) % len(names)])
                        moved = True

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (2, 3):
                self.dragging_background = True
                self.drag_start_screen = pygame.mouse.get_pos()

            elif event.type == pygame.MOUSEBUTTONUP and event.button in (2, 3):
                self.dragging_background = False

            elif event.type == pygame.MOUSEMOTION and self.dragging_background:
                mouse = pygame.mouse.get_pos()
                scene.camera.pan_pixels(mouse[0] - self.drag_start_screen[0], mouse[1] - self.drag_start_screen[1])
                self.drag_start_screen = mouse
                moved = True

        if moved:
            universe.request_draw()


# ============================================================
# Dear PyGui UI
# ============================================================


class UI:
    """
    Dear PyGui interface: scenario picker, simulation controls, date readout.
    """
    def __init__(self, renderer: PygameRenderer, date_display: DateDisplay):
        self.renderer = renderer
        self.date_display = date_display
        self.status_msg_id = None
        self.date_text_id = None
        self.play_button_id = None
        self.date_picker_id = None
        self.time_input_id = None
        self.speed_slider_id = None
        self._scenario_map = {}
        self._controls = {}
        self._bound_universe = None

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        current = dpg.get_frame_count()
        dpg.set_frame_callback(current + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Orrery Simulator - Controls', width=460, height=420)

        with dpg.window(label="Controls", width=440, height=400, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Scenario:")
                for fn, title in list_scenarios():
                    self._scenario_map[title] = fn
                items = list(self._scenario_map.keys())
                dpg.add_combo(items, default_value=(items[0] if items else ""), width=220, tag="scenario_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_scenario(dpg.get_value("scenario_combo")))

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                self.play_button_id = dpg.add_button(label="Play", width=80, callback=self._toggle_play)
                dpg.add_checkbox(label="Trails", default_value=True, callback=self._toggle_trails)
            with dpg.group(horizontal=True):
                dpg.add_text("Seconds per tick:")
                self.speed_slider_id = dpg.add_slider_float(min_value=0.0, max_value=1.0, default_value=0.0,
                                                            width=240, callback=self._on_speed)

            dpg.add_separator()

            dpg.add_text("Date (UTC)")
            self.date_text_id = dpg.add_text("-")
            self.date_picker_id = dpg.add_date_picker(level=dpg.mvDatePickerLevel_Day,
                                                      default_value={"month_day": 1, "month": 0, "year": 100})
            with dpg.group(horizontal=True):
                self.time_input_id = dpg.add_input_text(label="Time (HH:MM[:SS])", default_value="12:00", width=100)
                dpg.add_button(label="Go to date", callback=self._on_date_picked)
                dpg.add_button(label="Now", callback=lambda: self._reset_to(datetime.now(timezone.utc)))

            dpg.add_separator()
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        self._set_status(msg, color=(255, 120, 120))

    def load_scenario(self, title: str):
        fn = self._scenario_map.get(title.strip())
        if fn is None:
            self._set_error(f"Unknown scenario: {title}")
            return
        try:
            scenario = load_scenario(fn)
        except ScenarioError as e:
            self._set_error(str(e))
            return
        self.renderer.load_scenario(scenario)
        self._set_status(f"Loaded scenario: {scenario.title}")

    def _bind_controls(self, universe: Universe):
        """Point the widgets at a newly started universe."""
        self._controls = universe.controls()
        speed = self._controls[DELTA_T_ID].initial
        dpg.configure_item(self.speed_slider_id, min_value=speed.min, max_value=speed.max)
        dpg.set_value(self.speed_slider_id, speed.initial)
        date = self._controls[DATE_ID].initial
        dpg.set_value(self.date_picker_id, {"month_day": date.day, "month": date.month - 1, "year": date.year - 1900})
        dpg.set_value(self.time_input_id, date.strftime("%H:%M:%S"))
        self._bound_universe = universe

    def _toggle_play(self):
        control = self._controls.get(START_ID)
        if control is None:
            return
        control.on_change(None)

    def _toggle_trails(self, sender, value, user_data=None):
        universe = self.renderer.current_universe()
        if universe is None or universe.get_scene() is None:
            return
        universe.get_scene().show_trails = bool(value)
        universe.request_draw()
        self._set_status(f"Trails {'ON' if value else 'OFF'}.")

    def _on_speed(self, sender, app_data, user_data=None):
        control = self._controls.get(DELTA_T_ID)
        if control is not None and app_data is not None:
            control.on_change(float(app_data))

    def _on_date_picked(self):
        picked = dpg.get_value(self.date_picker_id)
        hms = parse_time_of_day(dpg.get_value(self.time_input_id))
        if hms is None:
            self._set_error("Time must be HH:MM or HH:MM:SS")
            return
        try:
            date = datetime(picked["year"] + 1900, picked["month"] + 1, picked["month_day"], *hms, tzinfo=timezone.utc)
        except (KeyError, ValueError) as e:
            self._set_error(f"Invalid date: {e}")
            return
        self._reset_to(date)

    def _reset_to(self, date: datetime):
        control = self._controls.get(DATE_ID)
        if control is None:
            return
        control.on_change(date)
        self._set_status(f"Date set to {date:%Y-%m-%d %H:%M:%S} UTC")

    def _sync_ui_with_sim(self):
        """
        Periodic UI update: rebind controls after a scenario swap and refresh readouts.
        """
        universe = self.renderer.current_universe()
        if universe is not None and universe is not self._bound_universe and universe.scenario is not None:
            self._bind_controls(universe)
        date = self.date_display.get_date()
        dpg.set_value(self.date_text_id, f"{date:%Y-%m-%d %H:%M:%S}" if date else "-")
        if universe is not None:
            dpg.configure_item(self.play_button_id, label="Pause" if universe.is_playing() else "Play")
        self._schedule_sync()


# ============================================================
# Application Entry
# ============================================================


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    argv = sys.argv[1:] if argv is None else argv
    scenario_file = argv[0] if argv else DEFAULT_SCENARIO
    try:
        scenario = load_scenario(scenario_file)
    except ScenarioError as e:
        logger.error("%s", e)
        return 1

    date_display = DateDisplay()
    renderer = PygameRenderer(date_display)
    renderer.load_scenario(scenario)

    # Start Pygame renderer thread
    renderer.start()
    renderer.scene_ready.wait(timeout=5.0)

    ui = UI(renderer, date_display)

    # Keyboard shortcut in UI window to toggle play/pause (Space)
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_down)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
