"""Restrict ray hits to a conduit's segment and collapse repeated barriers.

A ray through a thick wall reports one hit per face. Only one opening per
wall is wanted, so hits are reduced to one per ``BarrierKey``. The first hit
seen for a key wins, in the order the caster returned them. Hits are never
sorted here: which face's hit survives is part of the observable result.
"""

from __future__ import annotations

from collections.abc import Iterable

from openings_creator.engine.intersector import Hit
from openings_creator.models.identity import BarrierKey


def within_segment(hit: Hit, length: float) -> bool:
    """True if the hit lies on the segment ``[0, length]``."""
    return 0.0 <= hit.proximity <= length


def filter_and_dedupe(hits: Iterable[Hit], length: float) -> list[Hit]:
    """Hits on the segment, one per barrier, first-seen wins.

    Args:
        hits: Raw hits in caster order. Any order, may repeat keys, may lie
            beyond the segment end or behind its start.
        length: Segment length.

    Returns:
        Retained hits in the order their keys were first seen.
    """
    first_seen: dict[BarrierKey, Hit] = {}
    for hit in hits:
        if not within_segment(hit, length):
            continue
        first_seen.setdefault(hit.key, hit)
    return list(first_seen.values())
