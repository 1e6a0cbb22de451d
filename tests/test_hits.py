"""Tests for segment filtering and per-barrier deduplication."""

import random

from openings_creator.engine.hits import filter_and_dedupe, within_segment
from openings_creator.engine.intersector import Hit
from openings_creator.models import BarrierKey

W1 = BarrierKey(element_id="W1")
W2 = BarrierKey(element_id="W2")
LINKED_W1 = BarrierKey(element_id="L1", linked_element_id="W1")


class TestWithinSegment:
    def test_bounds_inclusive(self):
        assert within_segment(Hit(W1, 0.0), 10.0)
        assert within_segment(Hit(W1, 10.0), 10.0)

    def test_outside(self):
        assert not within_segment(Hit(W1, 10.0001), 10.0)
        assert not within_segment(Hit(W1, -0.5), 10.0)


class TestFilterAndDedupe:
    def test_single_hit(self):
        assert filter_and_dedupe([Hit(W1, 4.0)], 10.0) == [Hit(W1, 4.0)]

    def test_thick_wall_first_face_wins(self):
        assert filter_and_dedupe([Hit(W1, 4.0), Hit(W1, 4.3)], 10.0) == [Hit(W1, 4.0)]

    def test_first_seen_wins_even_if_farther(self):
        assert filter_and_dedupe([Hit(W1, 4.3), Hit(W1, 4.0)], 10.0) == [Hit(W1, 4.3)]

    def test_beyond_end_dropped(self):
        assert filter_and_dedupe([Hit(W1, 12.0)], 10.0) == []

    def test_dropped_hit_does_not_claim_key(self):
        hits = [Hit(W1, 12.0), Hit(W1, 4.0)]
        assert filter_and_dedupe(hits, 10.0) == [Hit(W1, 4.0)]

    def test_negative_dropped(self):
        assert filter_and_dedupe([Hit(W1, -1.0), Hit(W2, 2.0)], 10.0) == [Hit(W2, 2.0)]

    def test_order_of_first_appearance_kept(self):
        hits = [Hit(W2, 8.0), Hit(W1, 3.0), Hit(W2, 8.2), Hit(W1, 3.2)]
        assert filter_and_dedupe(hits, 10.0) == [Hit(W2, 8.0), Hit(W1, 3.0)]

    def test_linked_and_host_keys_distinct(self):
        hits = [Hit(W1, 3.0), Hit(LINKED_W1, 6.0)]
        assert filter_and_dedupe(hits, 10.0) == hits

    def test_empty(self):
        assert filter_and_dedupe([], 10.0) == []

    def test_accepts_iterator(self):
        assert filter_and_dedupe(iter([Hit(W1, 1.0)]), 10.0) == [Hit(W1, 1.0)]

    def test_random_inputs(self):
        rng = random.Random(20240611)
        keys = [BarrierKey(element_id=f"W{i}") for i in range(6)]
        for _ in range(200):
            length = rng.uniform(1.0, 20.0)
            hits = [
                Hit(rng.choice(keys), rng.uniform(-5.0, 25.0))
                for _ in range(rng.randint(0, 15))
            ]
            kept = filter_and_dedupe(hits, length)

            assert all(0.0 <= h.proximity <= length for h in kept)
            assert len({h.key for h in kept}) == len(kept)
            for h in kept:
                first = next(x for x in hits if x.key == h.key and 0.0 <= x.proximity <= length)
                assert h is first
            positions = [hits.index(h) for h in kept]
            assert positions == sorted(positions)
            in_range_keys = {h.key for h in hits if 0.0 <= h.proximity <= length}
            assert {h.key for h in kept} == in_range_keys
