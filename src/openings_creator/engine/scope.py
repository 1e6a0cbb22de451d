"""Barrier enumeration: which walls a ray may hit, and their levels.

``collect_barriers`` gathers walls of the active document and, through its
link instances, walls of linked documents. Linked walls are translated into
the active document's coordinates by the link offset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from openings_creator.config import BarrierFilter
from openings_creator.errors import MissingCollaborator, MissingHostLevel
from openings_creator.models.document import Document, Level, Session, View3D
from openings_creator.models.elements import Wall
from openings_creator.models.geometry import Point3D
from openings_creator.models.identity import BarrierKey

logger = logging.getLogger(__name__)


@dataclass
class Barrier:
    """A wall eligible as a crossing target, in active-document coordinates."""

    key: BarrierKey
    wall: Wall
    document: Document
    offset: Point3D = field(default_factory=lambda: Point3D(x=0.0, y=0.0, z=0.0))

    @property
    def level(self) -> Level | None:
        if self.wall.level_id is None:
            return None
        return self.document.get_level(self.wall.level_id)

    @property
    def base_elevation(self) -> float:
        """Absolute z of the wall base in active-document coordinates."""
        level = self.level
        elevation = level.elevation if level is not None else 0.0
        return elevation + self.wall.base_offset + self.offset.z


@dataclass
class BarrierScope:
    """The barriers visible in one 3D view, keyed by identity."""

    view: View3D
    barriers: list[Barrier] = field(default_factory=list)
    host: Document | None = None

    def __post_init__(self) -> None:
        self._by_key = {b.key: b for b in self.barriers}

    def __len__(self) -> int:
        return len(self.barriers)

    def __iter__(self) -> Iterator[Barrier]:
        return iter(self.barriers)

    def get(self, key: BarrierKey) -> Barrier | None:
        return self._by_key.get(key)

    def resolve_level(self, key: BarrierKey) -> Level:
        """Level of the active document that hosts an opening in the barrier.

        A host wall's own level is used. A linked wall's level belongs to the
        linked document, so it is mapped to the highest active-document level
        at or below the linked wall's base.

        Raises:
            MissingHostLevel: unknown barrier, no level id, dangling level id,
                or no active-document level under a linked wall.
        """
        barrier = self.get(key)
        level = barrier.level if barrier is not None else None
        if level is not None and key.is_linked:
            level = self.host.level_at(barrier.base_elevation) if self.host else None
        if level is None:
            raise MissingHostLevel(key.element_id, key.linked_element_id)
        return level


def collect_barriers(
    session: Session,
    host: Document,
    view: View3D | None,
    barrier_filter: BarrierFilter | None,
) -> BarrierScope:
    """Enumerate the walls a conduit may cross.

    Args:
        session: Open documents, used to resolve link instances.
        host: The active document.
        view: 3D view rays are cast through; hidden elements are skipped.
        barrier_filter: Which walls qualify.

    Raises:
        MissingCollaborator: no view or no filter.
    """
    if view is None:
        raise MissingCollaborator("No 3D view to cast rays through")
    if barrier_filter is None:
        raise MissingCollaborator("No barrier filter")

    barriers: list[Barrier] = []
    for wall in host.walls:
        if view.is_hidden(wall.global_id) or not barrier_filter.passes(wall):
            continue
        barriers.append(Barrier(key=BarrierKey(element_id=wall.global_id), wall=wall, document=host))

    if barrier_filter.include_links:
        for link in host.links:
            if view.is_hidden(link.global_id):
                continue
            linked = session.get_document(link.document_title)
            if linked is None:
                logger.warning(
                    "Link '%s' points at '%s', which is not open; skipping",
                    link.name or link.global_id, link.document_title,
                )
                continue
            for wall in linked.walls:
                if view.is_hidden(wall.global_id) or not barrier_filter.passes(wall):
                    continue
                key = BarrierKey(element_id=link.global_id, linked_element_id=wall.global_id)
                barriers.append(Barrier(key=key, wall=wall, document=linked, offset=link.offset))

    logger.debug("Collected %d barriers in view '%s'", len(barriers), view.name)
    return BarrierScope(view=view, barriers=barriers, host=host)
