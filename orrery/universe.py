#!/usr/bin/env python3
"""
Universe: orchestrates one running scenario.

What this module does
- Builds the scenario's bodies (BodyRegistry), places them for the starting date
  and balances the system around its barycenter.
- Runs the play / pause / reset state machine and the simulation clock (TimeModel).
- Performs one frame of work per frame_tick(): advance the clock, let the Ticker
  move the bodies, refresh the camera, draw. While paused it only draws when a
  redraw was requested since the previous frame.

Lifecycle
    UNINITIALIZED -> READY -> PAUSED <-> PLAYING -> KILLED
READY becomes PAUSED once the scene's resources are loaded. KILLED is terminal:
every operation afterwards is a no-op.

Threading model
- The caller owns the frame loop (the pygame renderer thread) and calls frame_tick()
  until `killed`; the Universe never schedules itself.
- Control callbacks (play/pause, date picker, speed slider) come from the Dear PyGui
  thread. Every public method holds one re-entrant lock, so a callback never
  interleaves with a frame.
- Exceptions raised by the scene or the ticker propagate to the caller of frame_tick().
"""
import enum
import logging
import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from .barycenter import set_barycenter
from .constants import KM, USE_PHYSICS_BY_DEFAULT
from .data_models import Body
from .physics import Ticker
from .registry import BodyRegistry
from .scenario_loader import ScenarioConfig
from .settings import DATE_ID, DELTA_T_ID, START_ID, SettingControl, merge_settings
from .time_model import DateDisplay, TimeModel

logger = logging.getLogger(__name__)


class SimulationState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    KILLED = "killed"


class Universe:
    """
    One scenario's simulation: bodies, clock and lifecycle.

    Collaborators are injected: `scene_factory` builds the renderer-facing scene,
    `ticker` moves bodies and `date_display` shows the simulated date.
    """

    def __init__(self, scene_factory: Callable[[], object], ticker: Optional[Ticker] = None,
                 date_display: Optional[DateDisplay] = None):
        self.lock = threading.RLock()
        self.scene_factory = scene_factory
        self.ticker = ticker or Ticker()
        self.date_display = date_display or DateDisplay()
        self.state = SimulationState.UNINITIALIZED
        self.time = TimeModel()
        self.registry: Optional[BodyRegistry] = None
        self.scene = None
        self.scenario: Optional[ScenarioConfig] = None
        self.settings: Dict = {}
        self.use_physics = USE_PHYSICS_BY_DEFAULT
        self.draw_requested = False
        self.size = 0.0
        self.ready: Optional[Future] = None

    # ------------------------------------------------------------------
    # Setup and teardown
    # ------------------------------------------------------------------

    def init(self, scenario: ScenarioConfig, settings: Optional[Dict] = None) -> Future:
        """
        Set up `scenario` and return a future that completes once the scene is ready.

        Raises ScenarioError (before anything is created) when the scenario's bodies
        are inconsistent. Any other failure during setup leaves the universe
        uninitialized, as it was before the call.
        """
        with self.lock:
            if self.state is not SimulationState.UNINITIALIZED:
                raise RuntimeError(f"universe already initialized (state {self.state.value})")
            registry = BodyRegistry.build(scenario.bodies, scenario.trail_vertices)
            try:
                ready = self._set_up(scenario, registry, settings)
            except Exception:
                self._discard_setup()
                raise
            self.ready = ready
            ready.add_done_callback(self._on_scene_ready)
            return ready

    def _set_up(self, scenario: ScenarioConfig, registry: BodyRegistry, settings: Optional[Dict]) -> Future:
        self.scenario = scenario
        self.registry = registry
        self.settings = merge_settings(scenario.default_gui_settings, settings, scenario.forced_gui_settings)
        self.use_physics = USE_PHYSICS_BY_DEFAULT if scenario.use_physics is None else scenario.use_physics

        start = self.settings.get("date") or self.date_display.get_date()
        self.time.reset_to(start if isinstance(start, datetime) else None)

        self.scene = self.scene_factory()
        outer, inner, largest_radius = self.calculate_dimensions()
        self.size = outer
        self.scene.set_dimension(outer, inner, largest_radius)
        ready = self.scene.create_stage(scenario)
        if ready is None:
            ready = Future()
            ready.set_result(self.scene)

        self._init_bodies()
        self.ticker.set_seconds_per_tick(scenario.seconds_per_tick.initial)
        self.ticker.set_calculations_per_tick(scenario.calculations_per_tick)
        self.state = SimulationState.READY
        logger.info("Scenario %s initialized: %d bodies, central %s, physics %s",
                    scenario.title, len(registry), registry.central.name,
                    "on" if self.use_physics else "off")
        return ready

    def _discard_setup(self) -> None:
        if self.scene is not None:
            self.scene.kill()
        self.ticker.set_bodies([])
        self.state = SimulationState.UNINITIALIZED
        self.time = TimeModel()
        self.registry = None
        self.scene = None
        self.scenario = None
        self.settings = {}
        self.use_physics = USE_PHYSICS_BY_DEFAULT
        self.size = 0.0
        logger.error("Scenario setup failed; universe left uninitialized")

    def _init_bodies(self) -> None:
        registry = self.registry
        if not self.scenario.calculate_all:
            registry.force_unit_masses()
        for body in registry.bodies:
            body.init()
            body.set_position_from_date(self.time.current_time)

        self.set_barycenter()

        for body in registry.bodies:
            self.scene.add_body(body)
            body.after_initialized(True)

        self.scene.set_central_body(registry.central)
        self.ticker.set_bodies(registry.bodies)

    def _on_scene_ready(self, ready: Future) -> None:
        with self.lock:
            if self.state is not SimulationState.READY:
                return
            if ready.exception() is not None:
                logger.error("Scene failed to load: %s", ready.exception())
                return
            self.show_date()
            self.scene.set_camera_defaults(self.settings.get("camera"))
            self.scene.draw()
            self.state = SimulationState.PAUSED

    def kill(self) -> None:
        """Stop the simulation for good and release the scene and bodies."""
        with self.lock:
            if self.state is SimulationState.KILLED:
                return
            self.state = SimulationState.KILLED
            self.date_display.set_date(None)
            self.ticker.set_bodies([])
            if self.scene is not None:
                self.scene.kill()
            self.scene = None
            self.registry = None
            logger.info("Universe killed")

    @property
    def killed(self) -> bool:
        return self.state is SimulationState.KILLED

    # ------------------------------------------------------------------
    # Play / pause / reset
    # ------------------------------------------------------------------

    def play(self) -> None:
        with self.lock:
            if self.state is SimulationState.PAUSED:
                self.state = SimulationState.PLAYING
            else:
                logger.debug("play() ignored in state %s", self.state.value)

    def pause(self) -> None:
        with self.lock:
            if self.state is SimulationState.PLAYING:
                self.state = SimulationState.PAUSED
            else:
                logger.debug("pause() ignored in state %s", self.state.value)

    def toggle_play(self) -> None:
        with self.lock:
            if self.state is SimulationState.PLAYING:
                self.pause()
            else:
                self.play()

    def set_playing(self, playing: Optional[bool]) -> None:
        """Play or pause as asked; None toggles."""
        with self.lock:
            if playing is None:
                self.toggle_play()
            elif playing:
                self.play()
            else:
                self.pause()

    def is_playing(self) -> bool:
        return self.state is SimulationState.PLAYING

    def stop(self, skip_render: bool = False) -> None:
        """Pause, and redraw right away unless skip_render."""
        with self.lock:
            self.pause()
            if skip_render or self.state is not SimulationState.PAUSED:
                return
            self.scene.update_camera()
            self.scene.draw()

    def reset(self, date: Optional[datetime] = None) -> None:
        """
        Jump to `date` (now when None). Valid while paused, or while the scene is
        still loading; bodies are placed from their orbits again, discarding
        everything integrated so far.
        """
        with self.lock:
            if self.state not in (SimulationState.PAUSED, SimulationState.READY):
                logger.debug("reset() ignored in state %s", self.state.value)
                return
            self.time.reset_to(date)
            self.reposition_bodies()
            self.scene.on_date_reset()
            self.show_date()
            self.draw_requested = True
            logger.info("Simulation date reset to %s", self.time.date.isoformat())

    def on_date_change(self, date: Optional[datetime]) -> None:
        """Date picker handler: picking a date pauses the simulation first."""
        with self.lock:
            self.pause()
            self.reset(date)

    def reposition_bodies(self) -> None:
        registry = self.registry
        for body in registry.bodies:
            body.reset()
            body.set_position_from_date(self.time.current_time)

        self.ticker.tick(False, self.time.current_time)
        self.set_barycenter()

        # satellites follow their already repositioned parent
        for body in registry.bodies:
            body.after_initialized(False)

    def set_barycenter(self) -> bool:
        registry = self.registry
        return set_barycenter(registry.central, registry.bodies, self.use_physics, self.scenario.use_barycenter)

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def frame_tick(self) -> bool:
        """
        Do one display frame of work. Returns False once killed, telling the
        scheduler to stop calling.
        """
        with self.lock:
            if self.state is SimulationState.KILLED:
                return False
            if self.state is SimulationState.PLAYING:
                self.time.advance(self.ticker.get_delta_t())
                self.ticker.tick(self.use_physics, self.time.current_time)
                self.scene.update_camera()
                self.scene.draw()
                self.show_date()
            elif self.state is SimulationState.PAUSED:
                self.scene.update_camera()
                if self.draw_requested:
                    self.scene.draw()
            self.draw_requested = False
            return True

    def request_draw(self) -> None:
        with self.lock:
            self.draw_requested = True

    def show_date(self) -> None:
        self.date_display.set_date(self.time.display_date())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_body(self, name: Optional[str] = None) -> Optional[Body]:
        """Body by name; no name or "central" gives the central body."""
        if self.registry is None:
            return None
        return self.registry.get(name)

    def get_scene(self):
        return self.scene

    def calculate_dimensions(self) -> Tuple[float, float, float]:
        """
        (largest semi-major axis, smallest semi-major axis around the central body,
        largest radius), converted from km to m.
        """
        registry = self.registry
        central = registry.central
        largest_radius = max((b.radius for b in registry.bodies), default=0.0)
        largest_sma = 0.0
        smallest_sma = 0.0
        for b in registry.bodies:
            if b.is_central or b.orbit is None:
                continue
            largest_sma = max(largest_sma, b.orbit.a)
            if (not b.relative_to or b.relative_to == central.name) and (not smallest_sma or b.orbit.a < smallest_sma):
                smallest_sma = b.orbit.a
        return largest_sma * KM, smallest_sma * KM, largest_radius * KM

    def controls(self) -> Dict[str, SettingControl]:
        """Declarative controls for the settings panel."""
        return {
            START_ID: SettingControl("toggle", self.is_playing(), self.set_playing),
            DATE_ID: SettingControl("date", self.time.display_date(), self.on_date_change),
            DELTA_T_ID: SettingControl("slider", self.scenario.seconds_per_tick, self.set_seconds_per_tick),
        }

    def set_seconds_per_tick(self, value: float) -> None:
        with self.lock:
            self.ticker.set_seconds_per_tick(value)
