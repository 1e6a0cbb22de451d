"""Ray casting against wall bodies.

Each wall is treated as an oriented box: its axis gives the local x, its
left-hand normal the local y (thickness) and world z the local z (height).
A ray is transformed into that frame and clipped with the slab method; the
entry and exit parameters are the faces it crosses.

A thick wall crossed perpendicularly therefore yields two hits with the same
``BarrierKey``. Collapsing them is the job of ``engine.hits``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from openings_creator.engine.scope import Barrier, BarrierScope
from openings_creator.models.geometry import Point3D, Vector3D
from openings_creator.models.identity import BarrierKey

logger = logging.getLogger(__name__)

# Direction components smaller than this are treated as parallel to a slab
_PARALLEL_EPS = 1e-12


@dataclass(frozen=True)
class Hit:
    """One ray/face intersection: which barrier, and how far along the ray."""

    key: BarrierKey
    proximity: float


def _wall_frame(barrier: Barrier) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Rotation rows, frame origin and box bounds for a barrier."""
    wall = barrier.wall
    dx, dy = wall.direction
    nx, ny = wall.normal
    rotation = np.array([
        [dx, dy, 0.0],
        [nx, ny, 0.0],
        [0.0, 0.0, 1.0],
    ])
    origin = np.array([
        wall.start.x + barrier.offset.x,
        wall.start.y + barrier.offset.y,
        barrier.base_elevation,
    ])
    half = wall.thickness / 2
    lower = np.array([0.0, -half, 0.0])
    upper = np.array([wall.length, half, wall.height])
    return rotation, origin, lower, upper


def clip_ray_to_box(
    point: np.ndarray,
    direction: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
) -> tuple[float, float] | None:
    """Entry/exit ray parameters through an axis-aligned box, or None on a miss.

    The ray is treated as an infinite line; parameters may be negative.
    """
    t_enter = -np.inf
    t_exit = np.inf
    for axis in range(3):
        p = point[axis]
        d = direction[axis]
        if abs(d) < _PARALLEL_EPS:
            if p < lower[axis] or p > upper[axis]:
                return None
            continue
        t1 = (lower[axis] - p) / d
        t2 = (upper[axis] - p) / d
        if t1 > t2:
            t1, t2 = t2, t1
        t_enter = max(t_enter, t1)
        t_exit = min(t_exit, t2)
        if t_enter > t_exit:
            return None
    return float(t_enter), float(t_exit)


class WallIntersector:
    """Casts rays against the barriers of a scope.

    Usage:
        intersector = WallIntersector(scope)
        hits = intersector.find(origin, direction)
    """

    def __init__(self, scope: BarrierScope):
        self.scope = scope
        self._frames = [(barrier, _wall_frame(barrier)) for barrier in scope]

    def find(self, origin: Point3D, direction: Vector3D) -> list[Hit]:
        """All faces crossed in front of ``origin`` along ``direction``.

        ``direction`` must be a unit vector so that proximities are distances.
        Hits come grouped per barrier (entry face, then exit face) in scope
        order, not sorted by proximity.
        """
        o = np.array(origin.as_tuple())
        d = np.array(direction.as_tuple())
        hits: list[Hit] = []
        for barrier, (rotation, frame_origin, lower, upper) in self._frames:
            clipped = clip_ray_to_box(rotation @ (o - frame_origin), rotation @ d, lower, upper)
            if clipped is None:
                continue
            t_enter, t_exit = clipped
            faces = [t_enter] if t_enter == t_exit else [t_enter, t_exit]
            for t in faces:
                if t >= 0:
                    hits.append(Hit(key=barrier.key, proximity=t))
        logger.debug(
            "Ray from %s along %s: %d hits", origin.as_tuple(), direction.as_tuple(), len(hits)
        )
        return hits
