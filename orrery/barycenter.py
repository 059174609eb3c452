#!/usr/bin/env python3
"""
Barycenter correction.

Scenario orbits are expressed around the central body, which starts at rest at
the origin. With physics enabled that system drifts: the other bodies carry
momentum the central body does not balance. One corrective pass places the
central body so that the whole system's center of mass and total momentum are
at the origin, then converts the other bodies to that shared frame.

The pass is not idempotent on already-corrected state. Callers must reset
bodies to their orbit-derived baseline before running it again.
"""
import logging
from dataclasses import dataclass
from typing import Iterable

from .constants import DOMINANCE_RATIO
from .data_models import Body
from .vector_utils import Vec3, ZERO, vec_add, vec_scale

logger = logging.getLogger(__name__)


@dataclass
class MassCenter:
    """Running totals of the non-central bodies."""
    mass: float = 0.0
    pos: Vec3 = ZERO
    momentum: Vec3 = ZERO


def accumulate_mass_center(bodies: Iterable[Body]) -> MassCenter:
    """
    Mass-weighted center of position and total momentum of `bodies`.

    The position is an incremental weighted average, so no final division by
    the total mass is needed.
    """
    center = MassCenter()
    for b in bodies:
        center.mass += b.mass
        if center.mass <= 0:
            continue
        ratio = b.mass / center.mass
        center.pos = vec_add(vec_scale(center.pos, 1.0 - ratio), vec_scale(b.get_position(), ratio))
        center.momentum = vec_add(center.momentum, vec_scale(b.get_absolute_velocity(), b.mass))
    return center


def should_balance(central: Body, use_physics: bool = True, use_barycenter: bool = True) -> bool:
    return bool(use_physics and use_barycenter and not central.is_still)


def set_barycenter(central: Body, bodies: Iterable[Body], use_physics: bool = True,
                   use_barycenter: bool = True) -> bool:
    """
    Balance the system around its barycenter.

    `bodies` may include the central body; it is skipped. Returns True when a
    correction was applied, False when disabled or degenerate (no mass).
    """
    if not should_balance(central, use_physics, use_barycenter):
        return False
    others = [b for b in bodies if b is not central]
    center = accumulate_mass_center(others)
    if center.mass <= 0 or central.mass <= 0:
        logger.debug("Barycenter pass skipped: no mass to balance around %s", central.name)
        return False

    momentum = vec_scale(center.momentum, 1.0 / center.mass)
    mass_ratio = center.mass / central.mass
    central.set_velocity(vec_scale(momentum, -mass_ratio))
    central.position = vec_scale(center.pos, -mass_ratio)

    for b in others:
        if b.relative_to and b.relative_to != central.name:
            continue
        b.add_to_absolute_velocity(central.get_absolute_velocity())
        if b.mass > 0 and central.mass / b.mass <= DOMINANCE_RATIO:
            if b.relative_to == central.name:
                # comparable masses: tracked in the barycentric frame, not as a satellite
                b.relative_to = None
        else:
            # central body is the center of rotation
            b.position = vec_add(b.position, central.position)
    return True
