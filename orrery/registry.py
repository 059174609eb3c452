#!/usr/bin/env python3
"""
Body registry: turns a scenario's body configurations into Body instances.

The registry keeps two views of the same bodies:
- by_name: insertion-ordered mapping name -> Body, in scenario order
- bodies: processing order, bodies without `relative_to` first, then bodies
  with one, each group keeping scenario order

The partition is one level deep. A body relative to a body that is itself
relative to another is accepted only when its parent already precedes it in
processing order (i.e. is declared earlier in the scenario); otherwise the
scenario is rejected rather than processed in the wrong order.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .constants import DEFAULT_TRAIL_VERTICES, KM
from .data_models import Body
from .errors import ScenarioError
from .scenario_loader import BodyConfig
from .vector_utils import vec_scale

logger = logging.getLogger(__name__)

ScenarioBodies = Union[Mapping[str, BodyConfig], Iterable[Tuple[str, BodyConfig]]]


def select_central(bodies: List[Body]) -> Body:
    """Mark and return the most massive body; the first one wins ties."""
    if not bodies:
        raise ScenarioError("cannot select a central body from an empty body set")
    central = None
    for body in bodies:
        if central is None or body.mass > central.mass:
            central = body
    for body in bodies:
        body.is_central = body is central
    return central


def order_for_processing(bodies: List[Body]) -> List[Body]:
    """Stable partition: bodies without relative_to first, then the others."""
    return [b for b in bodies if not b.relative_to] + [b for b in bodies if b.relative_to]


def _check_parents_first(ordered: List[Body]) -> None:
    seen = set()
    for body in ordered:
        if body.relative_to and body.relative_to not in seen:
            raise ScenarioError(
                f"body {body.name!r} would be processed before its parent {body.relative_to!r}; "
                f"declare parents before their satellites"
            )
        seen.add(body.name)


def _check_orbit_periods(ordered: List[Body]) -> None:
    # without an explicit period, the period comes from G * (M_host + m)
    for body in ordered:
        if body.orbit is None or body.orbit.period is not None or body.host is None:
            continue
        if body.host.physical_mass + body.physical_mass <= 0:
            raise ScenarioError(
                f"body {body.name!r} orbits {body.host.name!r} but neither has mass; "
                f"give the orbit a period"
            )


class BodyRegistry:
    """Ordered, named collection of a scenario's bodies with its central body."""

    def __init__(self, bodies: List[Body], by_name: Dict[str, Body], central: Body):
        self.bodies = bodies
        self.by_name = by_name
        self.central = central

    @classmethod
    def build(cls, scenario_bodies: ScenarioBodies, trail_vertices: int = DEFAULT_TRAIL_VERTICES) -> "BodyRegistry":
        """
        Construct one Body per (name, config) entry.

        Raises ScenarioError for an empty body set, duplicate names, a
        relative_to naming an unknown body, or an orbit whose period cannot be
        derived because neither body has mass.
        """
        if isinstance(scenario_bodies, Mapping):
            entries = list(scenario_bodies.items())
        else:
            entries = list(scenario_bodies)
        if not entries:
            raise ScenarioError("scenario has no bodies")

        by_name: Dict[str, Body] = {}
        for name, config in entries:
            if name in by_name:
                raise ScenarioError(f"duplicate body name {name!r}")
            by_name[name] = Body(
                name=name,
                mass=config.mass,
                radius=config.radius,
                color=config.color,
                orbit=config.orbit,
                relative_to=config.relative_to,
                is_still=config.is_still,
                initial_position=vec_scale(config.position, KM),
                initial_velocity=config.velocity,
                trail_vertices=config.trail_vertices or trail_vertices,
            )

        for body in by_name.values():
            if body.relative_to is None:
                continue
            if body.relative_to == body.name:
                raise ScenarioError(f"body {body.name!r} cannot be relative to itself")
            if body.relative_to not in by_name:
                raise ScenarioError(f"body {body.name!r} is relative to unknown body {body.relative_to!r}")

        central = select_central(list(by_name.values()))
        if central.relative_to:
            raise ScenarioError(f"central body {central.name!r} cannot be relative to {central.relative_to!r}")

        ordered = order_for_processing(list(by_name.values()))
        _check_parents_first(ordered)
        for body in ordered:
            if body is central:
                body.host = None
            else:
                body.host = by_name[body.relative_to] if body.relative_to else central
        _check_orbit_periods(ordered)

        logger.debug("Registry built: %s (central %s)", [b.name for b in ordered], central.name)
        return cls(ordered, by_name, central)

    def get(self, name: Optional[str] = None) -> Optional[Body]:
        """Look up a body by name; no name or "central" gives the central body."""
        if not name or name == "central":
            return self.central
        return self.by_name.get(name)

    def non_central(self) -> List[Body]:
        return [b for b in self.bodies if b is not self.central]

    def force_unit_masses(self) -> None:
        """Decouple orbital mass from gravitational mass for every non-central body."""
        for body in self.non_central():
            body.mass = 1.0

    def names(self) -> List[str]:
        return list(self.by_name)

    def __iter__(self):
        return iter(self.bodies)

    def __len__(self) -> int:
        return len(self.bodies)
