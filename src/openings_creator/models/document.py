"""Documents, transactions and the session of open documents.

A ``Document`` is one model file: levels, walls, conduits, opening templates,
3D views, link instances and placed openings. Edits that add openings or
activate templates must happen inside ``Document.transaction()``.

A ``Session`` is the set of documents open at once. One of them is active
(the model that receives openings); the conduits usually come from another
one.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Literal

from pydantic import BaseModel, Field, PrivateAttr

from openings_creator.errors import CommitFailure
from openings_creator.models.elements import (
    Conduit,
    Duct,
    Opening,
    OpeningTemplate,
    Pipe,
    Wall,
)
from openings_creator.models.geometry import Point2D, Point3D
from openings_creator.models.identity import generate_element_id

logger = logging.getLogger(__name__)

# Levels this close above a height still count as at or below it
_ELEVATION_TOLERANCE = 1e-6


class Level(BaseModel):
    """A horizontal datum (building storey).

    Elevation is absolute, following IFC's IfcBuildingStorey convention.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    name: str
    elevation: float = 0.0


class View3D(BaseModel):
    """A 3D view. Rays are cast through a non-template 3D view.

    Elements listed in ``hidden_element_ids`` (walls or link instances) are
    invisible to the ray caster.
    """

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    name: str
    is_template: bool = False
    hidden_element_ids: list[str] = Field(default_factory=list)

    def is_hidden(self, element_id: str) -> bool:
        return element_id in self.hidden_element_ids


class LinkInstance(BaseModel):
    """A placed link to another document of the session, translated by ``offset``."""

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    name: str = ""
    document_title: str
    offset: Point3D = Field(default_factory=lambda: Point3D(x=0.0, y=0.0, z=0.0))


class Transaction:
    """An all-or-nothing edit scope on a document.

    Snapshots openings and template activation flags on start, restores
    them on rollback.
    """

    def __init__(self, document: Document, name: str):
        self.document = document
        self.name = name
        self.status: Literal["pending", "started", "committed", "rolled_back"] = "pending"
        self._openings: list[Opening] = []
        self._active_flags: dict[str, bool] = {}

    @property
    def has_started(self) -> bool:
        return self.status == "started"

    def start(self) -> None:
        if self.document._transaction is not None:
            raise CommitFailure(
                f"Cannot start '{self.name}': transaction "
                f"'{self.document._transaction.name}' is already open"
            )
        self._openings = [o.model_copy(deep=True) for o in self.document.openings]
        self._active_flags = {t.global_id: t.is_active for t in self.document.templates}
        self.document._transaction = self
        self.status = "started"
        logger.debug("Transaction '%s' started on '%s'", self.name, self.document.title)

    def commit(self) -> None:
        self._require_started()
        self.document._transaction = None
        self.status = "committed"
        logger.debug("Transaction '%s' committed", self.name)

    def rollback(self) -> None:
        self._require_started()
        self.document.openings = self._openings
        for template in self.document.templates:
            if template.global_id in self._active_flags:
                template.is_active = self._active_flags[template.global_id]
        self.document._transaction = None
        self.status = "rolled_back"
        logger.info("Transaction '%s' rolled back", self.name)

    def _require_started(self) -> None:
        if not self.has_started:
            raise CommitFailure(f"Transaction '{self.name}' is not open ({self.status})")


class Document(BaseModel):
    """A single model document."""

    global_id: str = Field(default_factory=generate_element_id, description="IFC GlobalId")
    title: str
    read_only: bool = False
    levels: list[Level] = Field(default_factory=list)
    walls: list[Wall] = Field(default_factory=list)
    ducts: list[Duct] = Field(default_factory=list)
    pipes: list[Pipe] = Field(default_factory=list)
    templates: list[OpeningTemplate] = Field(default_factory=list)
    views: list[View3D] = Field(default_factory=list)
    links: list[LinkInstance] = Field(default_factory=list)
    openings: list[Opening] = Field(default_factory=list)

    _transaction: Transaction | None = PrivateAttr(default=None)

    # ── Lookups ───────────────────────────────────────────────────────

    def get_level(self, level_id: str) -> Level | None:
        """Find a level by GlobalId."""
        return next((lv for lv in self.levels if lv.global_id == level_id), None)

    def get_level_by_name(self, name: str) -> Level | None:
        """Find a level by name (case-insensitive)."""
        return next((lv for lv in self.levels if lv.name.lower() == name.lower()), None)

    def level_at(self, elevation: float) -> Level | None:
        """Highest level at or below ``elevation``."""
        below = [lv for lv in self.levels if lv.elevation <= elevation + _ELEVATION_TOLERANCE]
        return max(below, key=lambda lv: lv.elevation, default=None)

    def get_wall(self, wall_id: str) -> Wall | None:
        """Find a wall by GlobalId."""
        return next((w for w in self.walls if w.global_id == wall_id), None)

    def get_link(self, link_id: str) -> LinkInstance | None:
        return next((lk for lk in self.links if lk.global_id == link_id), None)

    def get_view(self, name: str) -> View3D | None:
        """Find a 3D view by name (case-insensitive)."""
        return next((v for v in self.views if v.name.lower() == name.lower()), None)

    def first_model_view(self) -> View3D | None:
        """First 3D view that is not a view template."""
        return next((v for v in self.views if not v.is_template), None)

    def find_template(self, family_name: str) -> OpeningTemplate | None:
        """First template of the given family name."""
        return next((t for t in self.templates if t.family_name == family_name), None)

    def conduits(self, kind: Literal["duct", "pipe"]) -> Iterator[Conduit]:
        """Iterate the conduits of one kind."""
        if kind == "duct":
            yield from self.ducts
        elif kind == "pipe":
            yield from self.pipes
        else:
            raise ValueError(f"Unknown conduit kind '{kind}'")

    # ── Add elements ──────────────────────────────────────────────────

    def add_level(self, name: str, elevation: float = 0.0) -> Level:
        """Add a level. Raises ValueError on a duplicate name."""
        if self.get_level_by_name(name) is not None:
            raise ValueError(f"Level '{name}' already exists")
        level = Level(name=name, elevation=elevation)
        self.levels.append(level)
        self.levels.sort(key=lambda lv: lv.elevation)
        return level

    def add_wall(
        self,
        level_name: str,
        start: tuple[float, float],
        end: tuple[float, float],
        height: float,
        thickness: float,
        name: str = "",
        base_offset: float = 0.0,
    ) -> Wall:
        """Add a wall on a level (by level name). Returns the created wall."""
        level = self.get_level_by_name(level_name)
        if level is None:
            available = [lv.name for lv in self.levels]
            raise ValueError(f"Level '{level_name}' not found. Available: {available}")
        wall = Wall(
            name=name,
            start=Point2D(x=start[0], y=start[1]),
            end=Point2D(x=end[0], y=end[1]),
            height=height,
            thickness=thickness,
            level_id=level.global_id,
            base_offset=base_offset,
        )
        self.walls.append(wall)
        return wall

    # ── Transactions ──────────────────────────────────────────────────

    @property
    def active_transaction(self) -> Transaction | None:
        return self._transaction

    @contextmanager
    def transaction(self, name: str) -> Iterator[Transaction]:
        """Open a transaction; commit on success, roll back on any exception."""
        tx = Transaction(self, name)
        tx.start()
        try:
            yield tx
        except BaseException:
            tx.rollback()
            raise
        tx.commit()


class Session(BaseModel):
    """All documents open at once, plus which one is active."""

    documents: list[Document] = Field(default_factory=list)
    active_title: str = ""

    # ── File I/O ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: str | Path) -> Session:
        """Load a session from a JSON file."""
        path = Path(path)
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def save(self, path: str | Path) -> Path:
        """Save the session to a JSON file. Creates parent dirs if needed."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    # ── Lookups ───────────────────────────────────────────────────────

    @property
    def active_document(self) -> Document | None:
        if not self.active_title:
            return self.documents[0] if self.documents else None
        return self.get_document(self.active_title)

    def get_document(self, title: str) -> Document | None:
        """Find a document by exact title."""
        return next((d for d in self.documents if d.title == title), None)

    def find_document(self, marker: str, exclude: Document | None = None) -> Document | None:
        """First document whose title contains ``marker``."""
        return next(
            (d for d in self.documents if marker in d.title and d is not exclude),
            None,
        )

    def add_document(self, title: str, activate: bool = False) -> Document:
        if self.get_document(title) is not None:
            raise ValueError(f"Document '{title}' is already open")
        document = Document(title=title)
        self.documents.append(document)
        if activate:
            self.active_title = title
        return document
