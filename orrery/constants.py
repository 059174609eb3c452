#!/usr/bin/env python3
"""
Shared constants for the Orrery Simulator.

World space is SI (meters, seconds, kilograms). Scenario files give distances
and radii in kilometers; multiply by KM when converting.
"""
from datetime import datetime, timezone

# Physical constants
G = 6.67430e-11  # m^3 kg^-1 s^-2
KM = 1000.0  # m
DAY = 86400.0  # s
YEAR = 365.25 * DAY  # s

# Reference epoch for simulation time (epoch time is seconds since J2000)
J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# Barycenter: above this central/body mass ratio the central body is taken as
# the center of rotation of the body
DOMINANCE_RATIO = 1e11

# Simulation defaults
USE_PHYSICS_BY_DEFAULT = True
DEFAULT_SECONDS_PER_TICK = 3600.0
DEFAULT_CALCULATIONS_PER_TICK = 10
DEFAULT_TRAIL_VERTICES = 200
DEFAULT_SOFTENING = 0.0  # m

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
HUD_COLOR = (200, 200, 200)
DEFAULT_BODY_COLOR = (200, 200, 255)
MIN_BODY_PIXELS = 2
MAX_BODY_PIXELS = 40

# Camera zoom bounds (meters-per-pixel), narrowed per scenario by Scene.set_dimension
DEFAULT_METERS_PER_PIXEL = 1e9
MIN_METERS_PER_PIXEL = 1e3
MAX_METERS_PER_PIXEL = 1e12

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
