"""Turn a retained hit into a ready-to-commit opening placement."""

from __future__ import annotations

from dataclasses import dataclass

from openings_creator.engine.centerline import Centerline, opening_size
from openings_creator.engine.intersector import Hit
from openings_creator.engine.scope import BarrierScope
from openings_creator.models.document import Level
from openings_creator.models.elements import Conduit
from openings_creator.models.geometry import Point3D
from openings_creator.models.identity import BarrierKey


@dataclass(frozen=True)
class OpeningPlacement:
    """Where and how big one opening is, and what hosts it."""

    conduit_id: str
    insertion_point: Point3D
    host_barrier: BarrierKey
    host_level: Level
    size_width: float
    size_height: float

    def to_dict(self) -> dict:
        return {
            "conduit_id": self.conduit_id,
            "insertion_point": [round(c, 6) for c in self.insertion_point.as_tuple()],
            "host_element_id": self.host_barrier.element_id,
            "host_linked_element_id": self.host_barrier.linked_element_id,
            "level": self.host_level.name,
            "width": self.size_width,
            "height": self.size_height,
        }


def resolve_placement(
    conduit: Conduit,
    centerline: Centerline,
    hit: Hit,
    scope: BarrierScope,
) -> OpeningPlacement:
    """Placement for one conduit/hit pair.

    Raises:
        MissingHostLevel: the hit barrier has no level.
    """
    level = scope.resolve_level(hit.key)
    width, height = opening_size(conduit.cross_section)
    return OpeningPlacement(
        conduit_id=conduit.global_id,
        insertion_point=centerline.point_at(hit.proximity),
        host_barrier=hit.key,
        host_level=level,
        size_width=width,
        size_height=height,
    )
