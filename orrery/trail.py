#!/usr/bin/env python3
"""
Bounded trail buffer: the recent path of a body, drawn as a fixed-length polyline.

The buffer always holds exactly `capacity` vertices. It runs in two phases:

- Filling (current_vertex < capacity): every sample overwrites the vertices from
  the cursor to the end, so the unfilled tail collapses onto the newest point and
  the line is always full length.
- Sliding (current_vertex == capacity): a sample overwrites the last vertex only.
  If an advance was requested since the previous sample, every vertex first
  shifts one slot toward the start, dropping the oldest point.

Advances (permanent history growth) are requested on a simulated-time cadence by
the owning body, while samples happen every drawn frame. The head of the trail
therefore moves smoothly and the history grows in discrete segments.

Trails can be expressed in the frame of a reference body (a moon's trail around
its planet). Vertices are then stored relative to that body and `origin` tracks
the body's position at the last sample; `world_points()` maps them back.
"""
from typing import List, Optional

from .vector_utils import Vec3, ZERO, vec_add, vec_sub


class TrailBuffer:
    """Fixed-capacity, reference-frame-aware position history."""

    def __init__(self, capacity: int, reference_body=None):
        if capacity < 1:
            raise ValueError(f"trail capacity must be at least 1, got {capacity}")
        self.capacity = int(capacity)
        self.reference_body = reference_body
        self.origin: Vec3 = ZERO
        self.vertices: List[Vec3] = []
        self.current_vertex = 0
        self.pending_advance = False
        self.reset()

    @property
    def is_filling(self) -> bool:
        return self.current_vertex < self.capacity

    def reset(self) -> None:
        """Discard the history; all vertices are zeroed and the buffer is Filling again."""
        self.vertices = [ZERO] * self.capacity
        self.current_vertex = 0
        self.pending_advance = False

    def set_reference_body(self, body) -> None:
        """Express the trail relative to `body` (None for absolute space)."""
        if body is not self.reference_body:
            self.reset()
        self.reference_body = body
        if body is None:
            self.origin = ZERO

    def request_advance(self) -> None:
        """Make the next sample commit a new history point."""
        if self.current_vertex < self.capacity:
            self.current_vertex += 1
        self.pending_advance = True

    def _to_trail_frame(self, point: Vec3) -> Vec3:
        if self.reference_body is None:
            return point
        self.origin = self.reference_body.get_position()
        return vec_sub(point, self.origin)

    def sample(self, point: Vec3) -> None:
        """Move the head of the trail to `point` (absolute coordinates)."""
        pos = self._to_trail_frame(point)
        if self.current_vertex < self.capacity:
            for i in range(self.current_vertex, self.capacity):
                self.vertices[i] = pos
            return
        if self.pending_advance:
            del self.vertices[0]
            self.vertices.append(pos)
            self.pending_advance = False
        self.vertices[-1] = pos

    def seed(self, point: Vec3) -> None:
        """Anchor the start of the trail before regular sampling begins."""
        self.vertices[0] = self._to_trail_frame(point)
        self.current_vertex = 1

    def world_points(self) -> List[Vec3]:
        """Vertices in absolute coordinates, oldest first."""
        if self.reference_body is None:
            return list(self.vertices)
        return [vec_add(self.origin, v) for v in self.vertices]
