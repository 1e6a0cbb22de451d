"""Reduce a conduit to a directed segment and an opening size."""

from __future__ import annotations

from dataclasses import dataclass

from openings_creator.errors import UnsupportedGeometry
from openings_creator.models.elements import (
    Conduit,
    CrossSection,
    Line,
    RectangularSection,
    RoundSection,
)
from openings_creator.models.geometry import Point3D, Vector3D


@dataclass(frozen=True)
class Centerline:
    """A conduit's axis: start point, unit direction and length."""

    origin: Point3D
    direction: Vector3D
    length: float

    def point_at(self, proximity: float) -> Point3D:
        """Point at ``proximity`` along the direction from the origin."""
        return self.origin + self.direction * proximity


def extract_centerline(conduit: Conduit) -> Centerline:
    """Centerline of a straight conduit.

    Raises:
        UnsupportedGeometry: the location is missing, an arc or a polyline.
    """
    curve = conduit.location
    if curve is None:
        raise UnsupportedGeometry(conduit.global_id, "no location curve")
    if not isinstance(curve, Line):
        raise UnsupportedGeometry(
            conduit.global_id, f"centerline is a {curve.kind}, only straight lines are supported"
        )
    return Centerline(origin=curve.start, direction=curve.direction, length=curve.length)


def opening_size(section: CrossSection) -> tuple[float, float]:
    """(width, height) of the opening for a cross-section.

    Rectangular: (width, height). Round: (diameter, diameter).
    """
    if isinstance(section, RectangularSection):
        return (section.width, section.height)
    if isinstance(section, RoundSection):
        return (section.diameter, section.diameter)
    raise TypeError(f"Unsupported cross-section: {type(section).__name__}")
