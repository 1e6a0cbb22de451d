"""Model data: geometry, elements, documents."""

from openings_creator.models.identity import BarrierKey, generate_element_id
from openings_creator.models.geometry import Point2D, Point3D, Vector3D
from openings_creator.models.elements import (
    Arc,
    Conduit,
    CrossSection,
    Duct,
    Line,
    Opening,
    OpeningTemplate,
    Pipe,
    Polyline,
    RectangularSection,
    RoundSection,
    Wall,
    straight_duct,
    straight_pipe,
)
from openings_creator.models.document import (
    Document,
    Level,
    LinkInstance,
    Session,
    Transaction,
    View3D,
)

__all__ = [
    "BarrierKey",
    "generate_element_id",
    "Point2D",
    "Point3D",
    "Vector3D",
    "Arc",
    "Conduit",
    "CrossSection",
    "Duct",
    "Line",
    "Opening",
    "OpeningTemplate",
    "Pipe",
    "Polyline",
    "RectangularSection",
    "RoundSection",
    "Wall",
    "straight_duct",
    "straight_pipe",
    "Document",
    "Level",
    "LinkInstance",
    "Session",
    "Transaction",
    "View3D",
]
