"""Tests for turning hits into placements."""

import math

import pytest

from openings_creator.config import BarrierFilter
from openings_creator.engine.centerline import extract_centerline
from openings_creator.engine.intersector import Hit
from openings_creator.engine.placement import resolve_placement
from openings_creator.engine.scope import collect_barriers
from openings_creator.errors import MissingHostLevel
from openings_creator.models import BarrierKey, Point3D, straight_pipe


@pytest.fixture
def scope(session, host):
    return collect_barriers(session, host, host.views[0], BarrierFilter())


class TestResolvePlacement:
    def test_duct(self, host, source, scope):
        duct = source.ducts[0]
        key = BarrierKey(element_id=host.walls[0].global_id)
        placement = resolve_placement(duct, extract_centerline(duct), Hit(key, 3.85), scope)

        assert placement.conduit_id == duct.global_id
        assert placement.host_barrier == key
        assert placement.host_level.name == "Level 1"
        assert (placement.size_width, placement.size_height) == (0.3, 0.2)
        p = placement.insertion_point
        assert math.isclose(p.x, 3.85) and p.y == 0 and p.z == 1

    def test_pipe_uses_diameter_twice(self, host, scope):
        pipe = straight_pipe((0, 1, 0.5), (10, 1, 0.5), diameter=0.11)
        key = BarrierKey(element_id=host.walls[0].global_id)
        placement = resolve_placement(pipe, extract_centerline(pipe), Hit(key, 4.0), scope)
        assert (placement.size_width, placement.size_height) == (0.11, 0.11)
        assert placement.insertion_point == Point3D(x=4.0, y=1.0, z=0.5)

    def test_wall_without_level(self, host, source, scope):
        host.walls[0].level_id = None
        duct = source.ducts[0]
        key = BarrierKey(element_id=host.walls[0].global_id)
        with pytest.raises(MissingHostLevel):
            resolve_placement(duct, extract_centerline(duct), Hit(key, 3.85), scope)

    def test_to_dict(self, host, source, scope):
        duct = source.ducts[0]
        key = BarrierKey(element_id=host.walls[0].global_id)
        data = resolve_placement(duct, extract_centerline(duct), Hit(key, 4.0), scope).to_dict()
        assert data["insertion_point"] == [4.0, 0.0, 1.0]
        assert data["host_element_id"] == host.walls[0].global_id
        assert data["host_linked_element_id"] is None
        assert data["level"] == "Level 1"
        assert data["width"] == 0.3
