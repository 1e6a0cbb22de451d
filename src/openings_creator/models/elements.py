"""Model elements: walls, ducts, pipes, opening templates and openings.

Element IDs use IFC-compatible GlobalIds so the same ID appears in the JSON
session and in an exported IFC file.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from openings_creator.models.geometry import Point2D, Point3D, Vector3D
from openings_creator.models.identity import generate_element_id


class Wall(BaseModel):
    """A straight wall defined by its axis, height and thickness.

    The axis lies in the XY plane. The wall body spans ``thickness / 2`` to
    either side of the axis and rises ``height`` from its base, which sits at
    the owning level's elevation plus ``base_offset``.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    name: str = ""
    description: str = ""
    start: Point2D
    end: Point2D
    height: float = Field(gt=0, description="Wall height in meters")
    thickness: float = Field(gt=0, description="Wall thickness in meters")
    level_id: str | None = Field(default=None, description="GlobalId of the owning level")
    base_offset: float = Field(default=0.0, description="Base offset from level elevation")
    load_bearing: bool = Field(default=False, description="Pset_WallCommon.LoadBearing")
    is_external: bool = Field(default=False, description="Pset_WallCommon.IsExternal")

    @property
    def length(self) -> float:
        """Wall length (axis)."""
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> tuple[float, float]:
        """Unit direction of the axis in the XY plane."""
        length = self.length
        return ((self.end.x - self.start.x) / length, (self.end.y - self.start.y) / length)

    @property
    def normal(self) -> tuple[float, float]:
        """Left-hand normal of the axis."""
        dx, dy = self.direction
        return (-dy, dx)

    @model_validator(mode="after")
    def start_and_end_differ(self) -> Wall:
        if self.start == self.end:
            raise ValueError("Wall start and end points must be different")
        return self


# ── Centerline curves ─────────────────────────────────────────────────


class Line(BaseModel):
    """A bounded straight segment."""

    kind: Literal["line"] = "line"
    start: Point3D
    end: Point3D

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Vector3D:
        """Unit vector from start to end."""
        return (self.end - self.start).normalized()

    @model_validator(mode="after")
    def start_and_end_differ(self) -> Line:
        if self.length == 0:
            raise ValueError("Line start and end points must be different")
        return self


class Arc(BaseModel):
    """A circular arc through three points."""

    kind: Literal["arc"] = "arc"
    start: Point3D
    mid: Point3D
    end: Point3D


class Polyline(BaseModel):
    """A chain of straight segments."""

    kind: Literal["polyline"] = "polyline"
    points: list[Point3D]

    @field_validator("points")
    @classmethod
    def at_least_2_points(cls, v: list[Point3D]) -> list[Point3D]:
        if len(v) < 2:
            raise ValueError("Polyline must have at least 2 points")
        return v


Curve = Annotated[Union[Line, Arc, Polyline], Field(discriminator="kind")]


# ── Cross-sections ────────────────────────────────────────────────────


class RectangularSection(BaseModel):
    """Rectangular duct profile."""

    shape: Literal["rectangular"] = "rectangular"
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class RoundSection(BaseModel):
    """Circular duct or pipe profile."""

    shape: Literal["round"] = "round"
    diameter: float = Field(gt=0)


CrossSection = Annotated[
    Union[RectangularSection, RoundSection], Field(discriminator="shape")
]


# ── Conduits ──────────────────────────────────────────────────────────


class Duct(BaseModel):
    """An HVAC duct segment.

    ``location`` is the centerline; ``None`` means the element has no usable
    location curve.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    kind: Literal["duct"] = "duct"
    name: str = ""
    system_name: str = ""
    location: Curve | None = None
    cross_section: CrossSection


class Pipe(BaseModel):
    """A plumbing pipe segment."""

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    kind: Literal["pipe"] = "pipe"
    name: str = ""
    system_name: str = ""
    location: Curve | None = None
    diameter: float = Field(gt=0, description="Outside diameter in meters")

    @property
    def cross_section(self) -> RoundSection:
        return RoundSection(diameter=self.diameter)


Conduit = Union[Duct, Pipe]


def straight_duct(
    start: tuple[float, float, float],
    end: tuple[float, float, float],
    width: float,
    height: float,
    name: str = "",
) -> Duct:
    """Build a rectangular duct along a straight segment."""
    return Duct(
        name=name,
        location=Line(
            start=Point3D(x=start[0], y=start[1], z=start[2]),
            end=Point3D(x=end[0], y=end[1], z=end[2]),
        ),
        cross_section=RectangularSection(width=width, height=height),
    )


def straight_pipe(
    start: tuple[float, float, float],
    end: tuple[float, float, float],
    diameter: float,
    name: str = "",
) -> Pipe:
    """Build a pipe along a straight segment."""
    return Pipe(
        name=name,
        location=Line(
            start=Point3D(x=start[0], y=start[1], z=start[2]),
            end=Point3D(x=end[0], y=end[1], z=end[2]),
        ),
        diameter=diameter,
    )


# ── Openings ──────────────────────────────────────────────────────────


class OpeningTemplate(BaseModel):
    """A loadable family type used to cut openings.

    A template must be activated before the first instance is placed.
    ``parameter_names`` lists the instance parameters the family exposes.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    family_name: str
    type_name: str = ""
    category: str = "GenericModel"
    is_active: bool = False
    parameter_names: list[str] = Field(default_factory=list)

    def has_parameter(self, name: str) -> bool:
        return name in self.parameter_names


class Opening(BaseModel):
    """A placed opening instance hosted by a wall.

    ``host_element_id``/``host_linked_element_id`` mirror the host wall's
    ``BarrierKey``. ``parameters`` holds the instance parameter values,
    including the two size parameters.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    name: str = ""
    template_id: str = Field(description="GlobalId of the OpeningTemplate")
    host_element_id: str
    host_linked_element_id: str | None = None
    level_id: str
    location: Point3D
    conduit_id: str = ""
    parameters: dict[str, float] = Field(default_factory=dict)

    def lookup_parameter(self, name: str) -> float | None:
        return self.parameters.get(name)

    def set_parameter(self, name: str, value: float) -> None:
        if not math.isfinite(value):
            raise ValueError(f"Parameter '{name}' must be finite, got {value}")
        self.parameters[name] = value
