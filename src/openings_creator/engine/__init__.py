"""Crossing detection and opening placement."""

from openings_creator.config import BarrierFilter
from openings_creator.engine.centerline import Centerline, extract_centerline, opening_size
from openings_creator.engine.scope import Barrier, BarrierScope, collect_barriers
from openings_creator.engine.intersector import Hit, WallIntersector
from openings_creator.engine.hits import filter_and_dedupe, within_segment
from openings_creator.engine.placement import OpeningPlacement, resolve_placement
from openings_creator.engine.committer import activate_template, commit_placement
from openings_creator.engine.runner import OpeningsRunner, RunReport

__all__ = [
    "Centerline",
    "extract_centerline",
    "opening_size",
    "Barrier",
    "BarrierFilter",
    "BarrierScope",
    "collect_barriers",
    "Hit",
    "WallIntersector",
    "filter_and_dedupe",
    "within_segment",
    "OpeningPlacement",
    "resolve_placement",
    "activate_template",
    "commit_placement",
    "OpeningsRunner",
    "RunReport",
]
