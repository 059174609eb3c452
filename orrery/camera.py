#!/usr/bin/env python3
"""
Camera utilities for the top-down world-to-screen projection.

World space is 3D; the camera looks down the z axis, so z is dropped and
world +y points up the screen.
"""
from typing import Optional, Tuple

from .constants import (
    DEFAULT_METERS_PER_PIXEL,
    MIN_METERS_PER_PIXEL,
    MAX_METERS_PER_PIXEL,
    VIEW_WIDTH,
    VIEW_HEIGHT,
)
from .vector_utils import Vec3, clamp


class Camera:
    """
    Maps world coordinates (meters) to screen pixels.
    """

    def __init__(self, center=(0.0, 0.0), meters_per_pixel=DEFAULT_METERS_PER_PIXEL):
        self.center = [center[0], center[1]]
        self.mpp = meters_per_pixel
        self.min_mpp = MIN_METERS_PER_PIXEL
        self.max_mpp = MAX_METERS_PER_PIXEL
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def set_zoom_bounds(self, min_mpp: float, max_mpp: float) -> None:
        self.min_mpp = clamp(min_mpp, MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
        self.max_mpp = clamp(max(max_mpp, self.min_mpp), MIN_METERS_PER_PIXEL, MAX_METERS_PER_PIXEL)
        self.mpp = clamp(self.mpp, self.min_mpp, self.max_mpp)

    def set_meters_per_pixel(self, mpp: float) -> None:
        self.mpp = clamp(mpp, self.min_mpp, self.max_mpp)

    def look_at(self, pos: Vec3) -> None:
        self.center = [pos[0], pos[1]]

    def world_to_screen(self, pos: Vec3) -> Tuple[int, int]:
        cx, cy = self.center
        mpp = self.mpp
        px = (pos[0] - cx) / mpp + self.viewport_size[0] / 2
        py = -(pos[1] - cy) / mpp + self.viewport_size[1] / 2
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Vec3:
        cx, cy = self.center
        mpp = self.mpp
        wx = (screen[0] - self.viewport_size[0] / 2) * mpp + cx
        wy = -(screen[1] - self.viewport_size[1] / 2) * mpp + cy
        return (wx, wy, 0.0)

    def zoom(self, factor, pivot_screen: Optional[Tuple[int, int]] = None):
        factor = clamp(factor, 0.05, 20.0)
        before = None
        if pivot_screen is not None:
            before = self.screen_to_world(pivot_screen)
        self.mpp = clamp(self.mpp * (1.0 / factor), self.min_mpp, self.max_mpp)
        if pivot_screen is not None and before is not None:
            after = self.screen_to_world(pivot_screen)
            self.center[0] += (before[0] - after[0])
            self.center[1] += (before[1] - after[1])

    def pan_pixels(self, dx_pixels, dy_pixels):
        self.center[0] -= dx_pixels * self.mpp
        self.center[1] += dy_pixels * self.mpp
