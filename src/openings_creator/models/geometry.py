"""Geometric primitives for model elements."""

from __future__ import annotations

import math

from pydantic import BaseModel


class Point2D(BaseModel):
    """2D point in the XY plane (meters)."""

    x: float
    y: float

    def distance_to(self, other: Point2D) -> float:
        """Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point2D):
            return NotImplemented
        return math.isclose(self.x, other.x, abs_tol=1e-6) and math.isclose(
            self.y, other.y, abs_tol=1e-6
        )

    def __hash__(self) -> int:
        return hash((round(self.x, 6), round(self.y, 6)))


class Vector3D(BaseModel):
    """3D vector (meters, or unitless when normalized)."""

    x: float
    y: float
    z: float

    @property
    def length(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalized(self) -> Vector3D:
        """Unit vector with the same direction. Raises on a zero vector."""
        length = self.length
        if length == 0:
            raise ValueError("Cannot normalize a zero-length vector")
        return Vector3D(x=self.x / length, y=self.y / length, z=self.z / length)

    def dot(self, other: Vector3D) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __mul__(self, factor: float) -> Vector3D:
        return Vector3D(x=self.x * factor, y=self.y * factor, z=self.z * factor)

    __rmul__ = __mul__


class Point3D(BaseModel):
    """3D point (meters)."""

    x: float
    y: float
    z: float

    def distance_to(self, other: Point3D) -> float:
        """Euclidean distance to another point."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __add__(self, other: Vector3D) -> Point3D:
        """Translate the point by a vector."""
        if not isinstance(other, Vector3D):
            return NotImplemented
        return Point3D(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def __sub__(self, other: Point3D) -> Vector3D:
        """Vector pointing from ``other`` to this point."""
        if not isinstance(other, Point3D):
            return NotImplemented
        return Vector3D(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)
