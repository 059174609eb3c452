#!/usr/bin/env python3
"""
Body position integrator ("Ticker") for the Orrery Simulator

Responsibilities
- Compute pairwise gravitational accelerations with optional Plummer-like softening.
- Advance body states using a fourth-order Runge–Kutta (RK4) time integrator.
- Move every body once per frame: either by integrating gravity (physics mode) or by
  placing each body on its Keplerian orbit for the current date (kinematic mode).

Units and conventions
- World space positions are in meters [m].
- Velocities are in meters per second [m/s].
- Masses are in kilograms [kg].
- Time steps are in seconds [s].
- The gravitational constant G is expressed in SI: m^3 kg^-1 s^-2.

Numerical notes
- Softening: adds eps^2 to r^2 to limit accelerations at short range. Orrery scenarios
  use real distances, so the default is no softening.
- Complexity: acceleration computation is O(N^2) per step (direct summation), fine for
  the tens of bodies a scenario holds.
- Energy: RK4 is not symplectic; total energy will slowly drift over long runs.
- Still bodies attract others but are never moved by the integrator.
"""

import math
from typing import List

from .constants import DEFAULT_CALCULATIONS_PER_TICK, DEFAULT_SECONDS_PER_TICK, DEFAULT_SOFTENING, G
from .data_models import Body
from .vector_utils import Vec3, ZERO, vec_add, vec_scale


class NBodyPhysics:
    """
    N-body gravitational physics engine with softened gravity.

    The gravitational acceleration of body i due to body j is:
    a_i = G * m_j * r_ij / (|r_ij|^2 + eps^2)^(3/2)

    Where eps is the softening parameter.
    """

    def __init__(self, softening: float = DEFAULT_SOFTENING):
        self.softening = max(0.0, float(softening))

    def set_softening(self, softening: float) -> None:
        self.softening = max(0.0, float(softening))

    def compute_accelerations(self, bodies: List[Body], positions: List[Vec3]) -> List[Vec3]:
        """
        Compute gravitational accelerations for all bodies.

        Args:
            bodies: List of Body objects (only .mass is used here).
            positions: List of (x, y, z) positions (meters) corresponding to each body.

        Returns:
            List of (ax, ay, az) accelerations (m/s^2) for each body, same order as inputs.
        """
        n = len(bodies)
        accelerations = [ZERO] * n
        eps_squared = self.softening * self.softening

        for i in range(n):
            ax_total, ay_total, az_total = 0.0, 0.0, 0.0
            xi, yi, zi = positions[i]

            for j in range(n):
                if i == j:
                    continue

                xj, yj, zj = positions[j]
                dx = xj - xi
                dy = yj - yi
                dz = zj - zi

                r_squared_soft = dx * dx + dy * dy + dz * dz + eps_squared
                if r_squared_soft == 0:
                    continue  # coincident bodies without softening
                inv_r_cubed = 1.0 / (r_squared_soft * math.sqrt(r_squared_soft))
                acceleration_magnitude = G * bodies[j].mass * inv_r_cubed

                ax_total += dx * acceleration_magnitude
                ay_total += dy * acceleration_magnitude
                az_total += dz * acceleration_magnitude

            accelerations[i] = (ax_total, ay_total, az_total)

        return accelerations

    def rk4_integration_step(self, bodies: List[Body], timestep: float) -> None:
        """
        Perform one Runge-Kutta 4th order integration step.

        Workflow:
        1) k1 at t
        2) k2 at t + dt/2 using k1
        3) k3 at t + dt/2 using k2
        4) k4 at t + dt using k3
        Combine (k1 + 2*k2 + 2*k3 + k4)/6.

        Args:
            bodies: List of Body objects to integrate (modified in place, still bodies excepted).
            timestep: Time step size in seconds (>= 0).
        """
        n = len(bodies)
        moving = [not b.is_still for b in bodies]

        def masked(values: List[Vec3]) -> List[Vec3]:
            return [values[i] if moving[i] else ZERO for i in range(n)]

        def advance(base: List[Vec3], rate: List[Vec3], dt: float) -> List[Vec3]:
            return [vec_add(base[i], vec_scale(rate[i], dt)) for i in range(n)]

        initial_positions = [b.position for b in bodies]
        initial_velocities = masked([b.velocity for b in bodies])

        k1_velocities = initial_velocities
        k1_accelerations = masked(self.compute_accelerations(bodies, initial_positions))

        k2_positions = advance(initial_positions, k1_velocities, timestep * 0.5)
        k2_velocities = advance(initial_velocities, k1_accelerations, timestep * 0.5)
        k2_accelerations = masked(self.compute_accelerations(bodies, k2_positions))

        k3_positions = advance(initial_positions, k2_velocities, timestep * 0.5)
        k3_velocities = advance(initial_velocities, k2_accelerations, timestep * 0.5)
        k3_accelerations = masked(self.compute_accelerations(bodies, k3_positions))

        k4_velocities = advance(initial_velocities, k3_accelerations, timestep)
        k4_positions = advance(initial_positions, k3_velocities, timestep)
        k4_accelerations = masked(self.compute_accelerations(bodies, k4_positions))

        for i in range(n):
            if not moving[i]:
                continue
            position_change = vec_scale(
                vec_add(
                    vec_add(k1_velocities[i], vec_scale(vec_add(k2_velocities[i], k3_velocities[i]), 2.0)),
                    k4_velocities[i]
                ),
                timestep / 6.0
            )
            velocity_change = vec_scale(
                vec_add(
                    vec_add(k1_accelerations[i], vec_scale(vec_add(k2_accelerations[i], k3_accelerations[i]), 2.0)),
                    k4_accelerations[i]
                ),
                timestep / 6.0
            )
            bodies[i].position = vec_add(bodies[i].position, position_change)
            bodies[i].velocity = vec_add(bodies[i].velocity, velocity_change)


class Ticker:
    """
    Moves the bodies of a running scenario, one call per displayed frame.

    Each tick covers `seconds_per_tick` of simulated time, split into
    `calculations_per_tick` RK4 substeps in physics mode.
    """

    def __init__(self, softening: float = DEFAULT_SOFTENING):
        self.seconds_per_tick = DEFAULT_SECONDS_PER_TICK
        self.calculations_per_tick = DEFAULT_CALCULATIONS_PER_TICK
        self.bodies: List[Body] = []
        self.physics = NBodyPhysics(softening)

    def set_seconds_per_tick(self, value: float) -> None:
        # simulated time never runs backwards while playing
        self.seconds_per_tick = max(0.0, float(value))

    def set_calculations_per_tick(self, n: int) -> None:
        self.calculations_per_tick = max(1, int(n))

    def set_bodies(self, bodies: List[Body]) -> None:
        self.bodies = list(bodies)

    def get_delta_t(self) -> float:
        return self.seconds_per_tick

    def tick(self, use_physics: bool, time: float) -> None:
        """Bring every body to epoch time `time`."""
        if use_physics:
            dt = self.seconds_per_tick / self.calculations_per_tick
            if dt > 0:
                for _ in range(self.calculations_per_tick):
                    self.physics.rk4_integration_step(self.bodies, dt)
        else:
            # bodies are in processing order, so parents move before their satellites
            for body in self.bodies:
                body.set_position_from_date(time)
        for body in self.bodies:
            body.tick_trail(time)
