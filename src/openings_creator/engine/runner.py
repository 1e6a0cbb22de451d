"""Orchestration: find collaborators, walk every conduit, commit openings.

Pipeline per conduit:
    centerline → ray cast → filter & dedupe → resolve placement → commit

Ducts are processed first, then pipes. A conduit with unsupported geometry
or a hit on a wall without a level is skipped and recorded in the report;
the rest of the run continues. Missing collaborators stop the run before any
transaction, and a commit failure rolls back every opening of the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from openings_creator.config import Settings
from openings_creator.engine.centerline import extract_centerline
from openings_creator.engine.committer import activate_template, commit_placement
from openings_creator.engine.hits import filter_and_dedupe
from openings_creator.engine.intersector import WallIntersector
from openings_creator.engine.placement import OpeningPlacement, resolve_placement
from openings_creator.engine.scope import BarrierScope, collect_barriers
from openings_creator.errors import MissingCollaborator, MissingHostLevel, UnsupportedGeometry
from openings_creator.models.document import Document, Session, View3D
from openings_creator.models.elements import Conduit, Opening, OpeningTemplate

logger = logging.getLogger(__name__)

CONDUIT_KINDS = ("duct", "pipe")


@dataclass
class SkippedConduit:
    conduit_id: str
    kind: str
    reason: str


@dataclass
class SkippedHit:
    conduit_id: str
    barrier: str
    reason: str


@dataclass
class RunReport:
    """What a run planned, placed and skipped."""

    placements: list[OpeningPlacement] = field(default_factory=list)
    openings: list[Opening] = field(default_factory=list)
    skipped_conduits: list[SkippedConduit] = field(default_factory=list)
    skipped_hits: list[SkippedHit] = field(default_factory=list)
    processed: dict[str, int] = field(default_factory=lambda: {k: 0 for k in CONDUIT_KINDS})

    def to_dict(self) -> dict:
        return {
            "processed": dict(self.processed),
            "placements": [p.to_dict() for p in self.placements],
            "openings": [o.global_id for o in self.openings],
            "skipped_conduits": [vars(s) for s in self.skipped_conduits],
            "skipped_hits": [vars(s) for s in self.skipped_hits],
        }


class OpeningsRunner:
    """Places openings in the active document for every conduit crossing a wall.

    Usage:
        runner = OpeningsRunner(session, settings)
        report = runner.run()      # or runner.plan() for a dry run
    """

    def __init__(self, session: Session, settings: Settings | None = None):
        self.session = session
        self.settings = settings or Settings()
        self.host: Document | None = None
        self.source: Document | None = None
        self.template: OpeningTemplate | None = None
        self.view: View3D | None = None
        self.scope: BarrierScope | None = None
        self.intersector: WallIntersector | None = None

    # ── Collaborators ─────────────────────────────────────────────────

    def prepare(self) -> None:
        """Resolve everything shared by all conduits.

        Raises:
            MissingCollaborator: no active document, no conduit document, no
                template or no usable 3D view.
        """
        settings = self.settings
        host = self.session.active_document
        if host is None:
            raise MissingCollaborator("No active document")

        source = self.session.find_document(settings.secondary_document_marker, exclude=host)
        if source is None:
            raise MissingCollaborator(
                f"No open document with '{settings.secondary_document_marker}' in its title"
            )

        template = host.find_template(settings.template_family_name)
        if template is None:
            raise MissingCollaborator(
                f"Opening family '{settings.template_family_name}' not found in '{host.title}'"
            )

        view = self._find_view(host)
        scope = collect_barriers(self.session, host, view, settings.barrier_filter)

        self.host, self.source, self.template, self.view = host, source, template, view
        self.scope = scope
        self.intersector = WallIntersector(scope)
        logger.info(
            "Placing '%s' in '%s' for conduits of '%s' (%d barriers)",
            template.family_name, host.title, source.title, len(scope),
        )

    def _find_view(self, host: Document) -> View3D:
        name = self.settings.view_name
        if name is None:
            view = host.first_model_view()
            if view is None:
                raise MissingCollaborator(f"No 3D view in '{host.title}'")
            return view
        view = host.get_view(name)
        if view is None or view.is_template:
            raise MissingCollaborator(f"3D view '{name}' not found in '{host.title}'")
        return view

    # ── Pipeline ──────────────────────────────────────────────────────

    def conduit_placements(self, conduit: Conduit, report: RunReport) -> list[OpeningPlacement]:
        """Placements for one conduit. Skips are recorded in ``report``."""
        try:
            centerline = extract_centerline(conduit)
        except UnsupportedGeometry as exc:
            logger.warning("Skipping %s %s: %s", conduit.kind, conduit.global_id, exc.reason)
            report.skipped_conduits.append(
                SkippedConduit(conduit_id=conduit.global_id, kind=conduit.kind, reason=exc.reason)
            )
            return []

        hits = self.intersector.find(centerline.origin, centerline.direction)
        retained = filter_and_dedupe(hits, centerline.length)

        placements = []
        for hit in retained:
            try:
                placements.append(resolve_placement(conduit, centerline, hit, self.scope))
            except MissingHostLevel as exc:
                logger.warning("Skipping crossing of %s: %s", conduit.global_id, exc)
                report.skipped_hits.append(
                    SkippedHit(conduit_id=conduit.global_id, barrier=str(hit.key), reason=str(exc))
                )
        return placements

    def iter_placements(self, report: RunReport) -> Iterator[OpeningPlacement]:
        """Placements for all ducts, then all pipes, of the conduit document."""
        for kind in CONDUIT_KINDS:
            for conduit in self.source.conduits(kind):
                report.processed[kind] += 1
                yield from self.conduit_placements(conduit, report)

    # ── Entry points ──────────────────────────────────────────────────

    def plan(self) -> RunReport:
        """Compute placements without modifying any document."""
        if self.intersector is None:
            self.prepare()
        report = RunReport()
        report.placements.extend(self.iter_placements(report))
        return report

    def run(self) -> RunReport:
        """Compute and commit all openings.

        Raises:
            MissingCollaborator: before any transaction starts.
            CommitFailure: the placement transaction was rolled back.
        """
        if self.intersector is None:
            self.prepare()
        host, template = self.host, self.template
        activate_template(host, template)

        report = RunReport()
        with host.transaction("Place openings"):
            for placement in self.iter_placements(report):
                report.placements.append(placement)
                report.openings.append(
                    commit_placement(host, placement, template, self.settings)
                )
        logger.info(
            "Placed %d openings (%d ducts, %d pipes, %d conduits skipped)",
            len(report.openings), report.processed["duct"], report.processed["pipe"],
            len(report.skipped_conduits),
        )
        return report
