"""Tests for IFC export and plan view rendering."""

import ifcopenshell
import matplotlib.pyplot as plt
import pytest

from openings_creator.engine.runner import OpeningsRunner
from openings_creator.export.ifc import IFCExporter, export_ifc
from openings_creator.export.planview import render_planview
from openings_creator.models import LinkInstance, Opening, Point3D, Session


@pytest.fixture
def placed(session, host):
    """Session after one run: one opening in W1."""
    OpeningsRunner(session).run()
    return host


class TestIFCExport:
    def test_export_creates_file(self, placed, tmp_path):
        path = export_ifc(placed, tmp_path / "out" / "model.ifc")
        assert path.exists()
        model = ifcopenshell.open(str(path))
        assert model.schema == "IFC2X3"
        assert len(model.by_type("IfcProject")) == 1
        assert len(model.by_type("IfcBuildingStorey")) == 1

    def test_header_names_document(self, host):
        exporter = IFCExporter(host)
        assert exporter.file.header.file_name.name == "Дом_АР.ifc"

    def test_opening_voids_wall(self, placed, tmp_path):
        path = export_ifc(placed, tmp_path / "model.ifc")
        model = ifcopenshell.open(str(path))

        walls = model.by_type("IfcWallStandardCase")
        openings = model.by_type("IfcOpeningElement")
        voids = model.by_type("IfcRelVoidsElement")
        assert len(walls) == 1 and len(openings) == 1 and len(voids) == 1
        assert openings[0].GlobalId == placed.openings[0].global_id
        assert voids[0].RelatingBuildingElement.GlobalId == placed.walls[0].global_id
        assert voids[0].RelatedOpeningElement == openings[0]

    def test_opening_properties(self, placed, tmp_path):
        model = ifcopenshell.open(str(export_ifc(placed, tmp_path / "model.ifc")))
        opening = model.by_type("IfcOpeningElement")[0]
        psets = [
            rel.RelatingPropertyDefinition
            for rel in opening.IsDefinedBy
            if rel.is_a("IfcRelDefinesByProperties")
        ]
        values = {
            p.Name: p.NominalValue.wrappedValue
            for pset in psets if pset.Name == "Pset_OpeningsCreator"
            for p in pset.HasProperties
        }
        assert values["Ширина"] == pytest.approx(0.3)
        assert values["Высота"] == pytest.approx(0.2)
        assert values["ConduitId"] == placed.openings[0].conduit_id

    def test_opening_extruded_through_wall(self, placed, tmp_path):
        model = ifcopenshell.open(str(export_ifc(placed, tmp_path / "model.ifc")))
        opening = model.by_type("IfcOpeningElement")[0]
        solid = opening.Representation.Representations[0].Items[0]
        assert solid.Depth == pytest.approx(0.31)
        assert solid.SweptArea.XDim == pytest.approx(0.3)
        assert solid.SweptArea.YDim == pytest.approx(0.2)

    def test_linked_host_skipped(self, placed, tmp_path):
        placed.openings.append(Opening(
            template_id=placed.templates[0].global_id,
            host_element_id="LINK",
            host_linked_element_id=placed.walls[0].global_id,
            level_id=placed.levels[0].global_id,
            location=Point3D(x=6.0, y=0.0, z=1.0),
            parameters={"Ширина": 0.3, "Высота": 0.2},
        ))
        exporter = IFCExporter(placed)
        model = ifcopenshell.open(str(exporter.export(tmp_path / "model.ifc")))
        assert exporter.skipped_openings == [placed.openings[1].global_id]
        assert len(model.by_type("IfcOpeningElement")) == 1

    def test_opening_without_size_skipped(self, placed, tmp_path):
        placed.openings[0].parameters.clear()
        exporter = IFCExporter(placed)
        model = ifcopenshell.open(str(exporter.export(tmp_path / "model.ifc")))
        assert exporter.skipped_openings == [placed.openings[0].global_id]
        assert len(model.by_type("IfcRelVoidsElement")) == 0

    def test_wall_without_level_in_building(self, host, tmp_path):
        host.walls[0].level_id = None
        model = ifcopenshell.open(str(export_ifc(host, tmp_path / "model.ifc")))
        rel = model.by_type("IfcRelContainedInSpatialStructure")[0]
        assert rel.RelatingStructure.is_a("IfcBuilding")

    def test_wall_load_bearing_property(self, host, tmp_path):
        host.walls[0].load_bearing = True
        model = ifcopenshell.open(str(export_ifc(host, tmp_path / "model.ifc")))
        wall = model.by_type("IfcWallStandardCase")[0]
        props = {
            p.Name: p.NominalValue.wrappedValue
            for rel in wall.IsDefinedBy
            if rel.is_a("IfcRelDefinesByProperties")
            for p in rel.RelatingPropertyDefinition.HasProperties
        }
        assert props["LoadBearing"]
        assert not props["IsExternal"]


class TestPlanView:
    def test_renders_png(self, placed, session, tmp_path):
        path = render_planview(session, tmp_path / "plan.png")
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_without_conduit_document(self, session, tmp_path):
        session.get_document("Дом_ОВ").title = "Другое"
        path = render_planview(session, tmp_path / "plan.png", show_labels=False)
        assert path.exists()

    def test_linked_walls_inside_view_limits(self, session, host, tmp_path, monkeypatch):
        kr = session.add_document("Дом_КР")
        kr.add_level("Level 1")
        kr.add_wall("Level 1", (0, -2), (0, 2), height=3.0, thickness=0.2)
        host.links.append(LinkInstance(document_title="Дом_КР", offset=Point3D(x=30, y=20, z=0)))

        figures = []
        monkeypatch.setattr(plt, "close", figures.append)
        render_planview(session, tmp_path / "plan.png")

        x0, x1 = figures[0].axes[0].get_xlim()
        y0, y1 = figures[0].axes[0].get_ylim()
        assert x0 < 4 and x1 > 30
        assert y0 < -2 and y1 > 22

    def test_empty_session(self, tmp_path):
        with pytest.raises(ValueError, match="active document"):
            render_planview(Session(), tmp_path / "plan.png")
