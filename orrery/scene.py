#!/usr/bin/env python3
"""
Pygame scene: draws a scenario's bodies and their trails.

The scene is driven by the Universe (create_stage, add_body, draw, ...) from the
renderer thread. It reads body positions and never writes them; the only body
state it touches is the trail, sampled once per drawn frame.
"""
import logging
import math
from concurrent.futures import Future
from typing import List, Optional

import pygame
from pygame import gfxdraw

from .camera import Camera
from .constants import (
    BACKGROUND_COLOR,
    HUD_COLOR,
    MAX_BODY_PIXELS,
    MIN_BODY_PIXELS,
    SAFE_COORD_LIMIT,
)
from .data_models import Body

logger = logging.getLogger(__name__)

# Camera framing, in multiples of the scenario's extent
FIT_MARGIN = 2.4
MAX_ZOOM_OUT = 4.0
MAX_ZOOM_IN = 0.005


def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


def _darken(color, factor=0.7):
    return tuple(int(c * factor) for c in color)


class Scene:
    """Top-down view of the running scenario on a pygame surface."""

    def __init__(self, surface=None):
        self.surface = surface
        self.camera = Camera()
        if surface is not None:
            self.camera.set_viewport_size(*surface.get_size())
        self.bodies: List[Body] = []
        self.central_body: Optional[Body] = None
        self.follow_name: Optional[str] = None
        self.show_trails = True
        self.title = ""
        self.largest_radius = 0.0
        self.font = None

    def set_surface(self, surface) -> None:
        self.surface = surface
        self.camera.set_viewport_size(*surface.get_size())

    def create_stage(self, scenario) -> Future:
        """Prepare drawing resources; the returned future completes when they are loaded."""
        self.title = scenario.title
        ready: Future = Future()
        try:
            if not pygame.font.get_init():
                pygame.font.init()
            try:
                self.font = pygame.font.SysFont("consolas", 16)
            except (OSError, RuntimeError):
                self.font = pygame.font.Font(None, 16)
        except pygame.error as e:
            logger.error("Could not load scene fonts: %s", e)
            ready.set_exception(e)
            return ready
        ready.set_result(self)
        return ready

    def add_body(self, body: Body) -> None:
        self.bodies.append(body)

    def set_central_body(self, body: Body) -> None:
        self.central_body = body

    def set_dimension(self, outer: float, inner: float, largest_radius: float) -> None:
        """Frame the camera from the scenario's extent (all values in meters)."""
        self.largest_radius = largest_radius
        view = max(1, min(self.camera.viewport_size))
        outer = outer or inner or largest_radius or 1.0
        inner = inner or outer
        self.camera.set_zoom_bounds(inner * MAX_ZOOM_IN / view, outer * MAX_ZOOM_OUT / view)
        self.camera.set_meters_per_pixel(outer * FIT_MARGIN / view)

    def set_camera_defaults(self, settings) -> None:
        settings = settings or {}
        self.follow_name = settings.get("follow")
        mpp = settings.get("meters_per_pixel")
        if mpp:
            self.camera.set_meters_per_pixel(float(mpp))

    def follow(self, name: Optional[str]) -> None:
        self.follow_name = name

    def _followed_body(self) -> Optional[Body]:
        if self.follow_name:
            for b in self.bodies:
                if b.name == self.follow_name:
                    return b
        return self.central_body

    def update_camera(self) -> None:
        target = self._followed_body()
        if target is not None:
            self.camera.look_at(target.get_position())

    def on_date_reset(self) -> None:
        """Bodies jumped to another date: their trails restart from where they are now."""
        for b in self.bodies:
            b.reset_trail()

    def body_pixels(self, body: Body) -> int:
        if self.largest_radius <= 0:
            return MIN_BODY_PIXELS
        scale = math.sqrt(body.radius / self.largest_radius)
        return int(MIN_BODY_PIXELS + (MAX_BODY_PIXELS - MIN_BODY_PIXELS) * scale)

    def draw(self) -> None:
        for b in self.bodies:
            b.trail.sample(b.get_position())
        surf = self.surface
        if surf is None:
            return
        surf.fill(BACKGROUND_COLOR)

        if self.show_trails:
            for b in self.bodies:
                pts = []
                for p in b.trail.world_points():
                    sp = _safe_point(self.camera.world_to_screen(p))
                    if sp:
                        pts.append(sp)
                if len(pts) > 1:
                    pygame.draw.aalines(surf, _darken(b.color), False, pts)

        for b in self.bodies:
            sp = _safe_point(self.camera.world_to_screen(b.get_position()))
            if sp is None:
                continue
            r = self.body_pixels(b)
            gfxdraw.filled_circle(surf, sp[0], sp[1], r, b.color)
            gfxdraw.aacircle(surf, sp[0], sp[1], r, b.color)

        if self.font is not None:
            img = self.font.render(self.title, True, HUD_COLOR)
            surf.blit(img, (10, 10))
            followed = self._followed_body()
            if followed is not None:
                img = self.font.render(f"Following: {followed.name}", True, HUD_COLOR)
                surf.blit(img, (10, 30))

        if surf is pygame.display.get_surface():
            pygame.display.flip()

    def kill(self) -> None:
        self.bodies = []
        self.central_body = None
        self.follow_name = None
