#!/usr/bin/env python3
"""
Keplerian orbit propagation.

A body's scenario entry may carry orbital elements at the J2000 epoch. This
module turns those elements into a position and velocity relative to the body
being orbited, at any epoch time (seconds since J2000).

Units and conventions
- Semi-major axis `a` is in kilometers (scenario units); results are in m and m/s.
- Angles (inclination, ascending node, argument of periapsis, mean anomaly) are in degrees.
- `period`, when given, is in days and overrides the period derived from mu.
- mu is the gravitational parameter G * (M_host + m) in m^3 s^-2.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import DAY, KM
from .vector_utils import Vec3

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class OrbitElements:
    """
    Keplerian elements at J2000.

    Fields:
    - a: semi-major axis [km]
    - e: eccentricity, 0 <= e < 1
    - i: inclination [deg]
    - o: longitude of the ascending node [deg]
    - w: argument of periapsis [deg]
    - M: mean anomaly at J2000 [deg]
    - period: orbital period [days]; derived from mu when None
    """
    a: float
    e: float = 0.0
    i: float = 0.0
    o: float = 0.0
    w: float = 0.0
    M: float = 0.0
    period: Optional[float] = None

    def __post_init__(self):
        if self.a <= 0:
            raise ValueError(f"semi-major axis must be positive, got {self.a}")
        if not 0.0 <= self.e < 1.0:
            raise ValueError(f"only elliptic orbits are supported, got e={self.e}")
        if self.period is not None and self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")


def solve_kepler(mean_anomaly: float, e: float, tol: float = 1e-12, max_iter: int = 50) -> float:
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly E.

    Both angles are in radians. Newton iteration started from a second-order guess.
    """
    M = math.fmod(mean_anomaly, TWO_PI)
    E = M + e * math.sin(M) * (1.0 + e * math.cos(M))
    for _ in range(max_iter):
        dE = (M - E + e * math.sin(E)) / (1.0 - e * math.cos(E))
        E += dE
        if abs(dE) < tol:
            break
    return E


def orbital_period(elements: OrbitElements, mu: float) -> float:
    """Orbital period in seconds."""
    if elements.period is not None:
        return elements.period * DAY
    if mu <= 0:
        raise ValueError("cannot derive an orbital period without a positive gravitational parameter")
    a = elements.a * KM
    return TWO_PI * math.sqrt(a * a * a / mu)


def _to_reference_frame(x: float, y: float, elements: OrbitElements) -> Vec3:
    """Rotate a perifocal (x, y) vector by w, i and o into the reference frame."""
    w = math.radians(elements.w)
    o = math.radians(elements.o)
    i = math.radians(elements.i)
    cos_w, sin_w = math.cos(w), math.sin(w)
    cos_o, sin_o = math.cos(o), math.sin(o)
    cos_i, sin_i = math.cos(i), math.sin(i)

    rx = (cos_o * cos_w - sin_o * sin_w * cos_i) * x + (-cos_o * sin_w - sin_o * cos_w * cos_i) * y
    ry = (sin_o * cos_w + cos_o * sin_w * cos_i) * x + (-sin_o * sin_w + cos_o * cos_w * cos_i) * y
    rz = (sin_w * sin_i) * x + (cos_w * sin_i) * y
    return (rx, ry, rz)


def state_at(elements: OrbitElements, mu: float, epoch_time: float) -> Tuple[Vec3, Vec3]:
    """
    Position [m] and velocity [m/s] relative to the orbited body at epoch_time.
    """
    a = elements.a * KM
    e = elements.e
    n = TWO_PI / orbital_period(elements, mu)

    mean_anomaly = math.radians(elements.M) + n * epoch_time
    E = solve_kepler(mean_anomaly, e)
    cos_E, sin_E = math.cos(E), math.sin(E)
    b_ratio = math.sqrt(1.0 - e * e)

    x_orb = a * (cos_E - e)
    y_orb = a * b_ratio * sin_E

    # dE/dt from differentiating Kepler's equation
    E_dot = n / (1.0 - e * cos_E)
    vx_orb = -a * sin_E * E_dot
    vy_orb = a * b_ratio * cos_E * E_dot

    return _to_reference_frame(x_orb, y_orb, elements), _to_reference_frame(vx_orb, vy_orb, elements)
