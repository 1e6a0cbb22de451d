"""Tests for template activation and opening commits."""

import pytest

from openings_creator.config import Settings
from openings_creator.engine.committer import activate_template, commit_placement
from openings_creator.engine.placement import OpeningPlacement
from openings_creator.errors import CommitFailure
from openings_creator.models import BarrierKey, Point3D


@pytest.fixture
def template(host):
    return host.templates[0]


@pytest.fixture
def placement(host):
    return OpeningPlacement(
        conduit_id="D1",
        insertion_point=Point3D(x=3.85, y=0.0, z=1.0),
        host_barrier=BarrierKey(element_id=host.walls[0].global_id),
        host_level=host.levels[0],
        size_width=0.3,
        size_height=0.2,
    )


class TestActivateTemplate:
    def test_activates_once(self, host, template):
        assert activate_template(host, template) is True
        assert template.is_active
        assert activate_template(host, template) is False
        assert host.active_transaction is None

    def test_read_only_document_left_untouched(self, host, template):
        host.read_only = True
        with pytest.raises(CommitFailure, match="read-only"):
            activate_template(host, template)
        assert template.is_active is False
        assert host.active_transaction is None

    def test_refused_inside_open_transaction(self, host, template):
        with host.transaction("Outer"):
            with pytest.raises(CommitFailure):
                activate_template(host, template)
        assert not template.is_active


class TestCommitPlacement:
    def test_creates_opening(self, host, template, placement):
        activate_template(host, template)
        with host.transaction("Place"):
            opening = commit_placement(host, placement, template, Settings())

        assert host.openings == [opening]
        assert opening.template_id == template.global_id
        assert opening.host_element_id == host.walls[0].global_id
        assert opening.host_linked_element_id is None
        assert opening.level_id == host.levels[0].global_id
        assert opening.location == placement.insertion_point
        assert opening.conduit_id == "D1"
        assert opening.parameters == {"Ширина": 0.3, "Высота": 0.2}

    def test_linked_host(self, host, template, placement):
        activate_template(host, template)
        linked = OpeningPlacement(
            conduit_id="D1",
            insertion_point=placement.insertion_point,
            host_barrier=BarrierKey(element_id="LINK", linked_element_id="W9"),
            host_level=placement.host_level,
            size_width=0.3,
            size_height=0.2,
        )
        with host.transaction("Place"):
            opening = commit_placement(host, linked, template, Settings())
        assert (opening.host_element_id, opening.host_linked_element_id) == ("LINK", "W9")

    def test_custom_parameter_names(self, host, template, placement):
        template.parameter_names = ["Width", "Height"]
        activate_template(host, template)
        settings = Settings(width_parameter="Width", height_parameter="Height")
        with host.transaction("Place"):
            opening = commit_placement(host, placement, template, settings)
        assert opening.parameters == {"Width": 0.3, "Height": 0.2}

    def test_requires_transaction(self, host, template, placement):
        activate_template(host, template)
        with pytest.raises(CommitFailure, match="No open transaction"):
            commit_placement(host, placement, template, Settings())
        assert host.openings == []

    def test_read_only_document(self, host, template, placement):
        activate_template(host, template)
        host.read_only = True
        with pytest.raises(CommitFailure, match="read-only"):
            with host.transaction("Place"):
                commit_placement(host, placement, template, Settings())
        assert host.openings == []

    def test_inactive_template(self, host, template, placement):
        with pytest.raises(CommitFailure, match="not active"):
            with host.transaction("Place"):
                commit_placement(host, placement, template, Settings())

    def test_missing_size_parameter(self, host, template, placement):
        template.parameter_names = ["Ширина"]
        activate_template(host, template)
        with pytest.raises(CommitFailure, match="Высота"):
            with host.transaction("Place"):
                commit_placement(host, placement, template, Settings())

    def test_non_finite_size_rolls_back(self, host, template, placement):
        activate_template(host, template)
        bad = OpeningPlacement(
            conduit_id="D2",
            insertion_point=placement.insertion_point,
            host_barrier=placement.host_barrier,
            host_level=placement.host_level,
            size_width=float("nan"),
            size_height=0.2,
        )
        with pytest.raises(CommitFailure, match="finite"):
            with host.transaction("Place"):
                commit_placement(host, placement, template, Settings())
                commit_placement(host, bad, template, Settings())
        assert host.openings == []
