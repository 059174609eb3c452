#!/usr/bin/env python3
"""
Data models for the Orrery Simulator.

This module defines the Body dataclass shared between the orchestrator, the
barycenter corrector, the integrator and the renderer.

Units and usage
- position is in meters [m], velocity in meters per second [m/s], mass in kg.
- radius and orbit.a come from scenario files and are in kilometers [km].
- position and velocity are always absolute (world frame). `relative_to` names the
  body whose frame the orbit elements (and the trail) are expressed in; the
  orbit-relative state is kept so the body can be re-anchored on its parent.
- Only the orchestrator, the barycenter corrector and the integrator write
  position and velocity; the renderer only reads them.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import DEFAULT_BODY_COLOR, DEFAULT_TRAIL_VERTICES, G, YEAR
from .orbit import OrbitElements, orbital_period, state_at
from .trail import TrailBuffer
from .vector_utils import Vec3, ZERO, vec_add


@dataclass(eq=False)
class Body:
    """
    A celestial body of a scenario.

    Fields:
    - name: Unique identifier within the scenario
    - mass: Mass in kilograms; forced to 1 for non-central bodies unless the
      scenario asks for full n-body mass accounting
    - radius: Visual radius in kilometers
    - color: RGB tuple used for rendering
    - orbit: Orbit elements around the host body, or None for a body placed
      by initial_position / initial_velocity
    - relative_to: Name of the body whose frame the orbit is expressed in
    - is_still: Opts the body out of barycenter correction and integration
    - trail_vertices: Capacity of the trail buffer
    """
    name: str
    mass: float
    radius: float = 0.0
    color: Tuple[int, int, int] = DEFAULT_BODY_COLOR
    orbit: Optional[OrbitElements] = None
    relative_to: Optional[str] = None
    is_still: bool = False
    initial_position: Vec3 = ZERO
    initial_velocity: Vec3 = ZERO
    trail_vertices: int = DEFAULT_TRAIL_VERTICES
    position: Vec3 = ZERO
    velocity: Vec3 = ZERO
    is_central: bool = False
    # Body orbited by this one: the relative_to target or the central body
    host: Optional["Body"] = field(default=None, repr=False)
    trail: TrailBuffer = field(init=False, repr=False)

    def __post_init__(self):
        self.physical_mass = self.mass
        self.declared_relative_to = self.relative_to
        self.orbit_position: Vec3 = ZERO
        self.orbit_velocity: Vec3 = ZERO
        self.last_trail_time: Optional[float] = None
        self.trail = TrailBuffer(self.trail_vertices)

    # ---- lifecycle -------------------------------------------------------

    def init(self) -> None:
        self.position = self.initial_position
        self.velocity = self.initial_velocity
        self.last_trail_time = None

    def reset(self) -> None:
        """Drop any corrected state before repositioning from the orbit."""
        self.relative_to = self.declared_relative_to
        self.init()

    def gravitational_parameter(self) -> float:
        host_mass = self.host.physical_mass if self.host is not None else 0.0
        return G * (host_mass + self.physical_mass)

    def anchor(self) -> Tuple[Vec3, Vec3]:
        """Absolute state of the frame this body's orbit is expressed in."""
        if self.relative_to and self.host is not None:
            return self.host.get_position(), self.host.get_absolute_velocity()
        return ZERO, ZERO

    def set_position_from_date(self, time: float) -> None:
        """Place the body on its orbit at epoch time `time` (seconds since J2000)."""
        if self.orbit is None or self.host is None:
            return
        self.orbit_position, self.orbit_velocity = state_at(self.orbit, self.gravitational_parameter(), time)
        anchor_pos, anchor_vel = self.anchor()
        self.position = vec_add(anchor_pos, self.orbit_position)
        self.velocity = vec_add(anchor_vel, self.orbit_velocity)

    def after_initialized(self, is_first_run: bool) -> None:
        """
        Re-anchor on the parent once every body is placed and balanced; satellites
        follow their parent's corrected position and velocity.
        """
        if self.orbit is not None and self.relative_to and self.host is not None:
            anchor_pos, anchor_vel = self.anchor()
            self.position = vec_add(anchor_pos, self.orbit_position)
            self.velocity = vec_add(anchor_vel, self.orbit_velocity)
        if is_first_run:
            self.reset_trail()

    # ---- state access ----------------------------------------------------

    def get_position(self) -> Vec3:
        return self.position

    def get_absolute_velocity(self) -> Vec3:
        return self.velocity

    def set_velocity(self, v: Vec3) -> None:
        self.velocity = v

    def add_to_absolute_velocity(self, v: Vec3) -> None:
        self.velocity = vec_add(self.velocity, v)

    # ---- trail -----------------------------------------------------------

    def trail_reference(self) -> Optional["Body"]:
        return self.host if self.relative_to else None

    def reset_trail(self) -> None:
        self.trail.set_reference_body(self.trail_reference())
        self.trail.reset()
        self.trail.seed(self.position)

    def trail_segment_duration(self) -> float:
        """Simulated seconds between two committed trail points."""
        span = YEAR
        if self.orbit is not None:
            try:
                span = orbital_period(self.orbit, self.gravitational_parameter())
            except ValueError:
                span = YEAR
        return span / self.trail_vertices

    def tick_trail(self, time: float) -> None:
        if self.last_trail_time is None or time < self.last_trail_time:
            self.last_trail_time = time
            return
        if time - self.last_trail_time >= self.trail_segment_duration():
            self.trail.request_advance()
            self.last_trail_time = time
