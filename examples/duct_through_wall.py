"""Two ducts and a pipe crossing a small plan: proof of concept.

Architectural model "Дом_АР" (active), one level, three walls:
- W1 along x=4 (0.3m thick), W2 along x=8 (0.2m thick)
- Ext along y=3, outside every conduit's path
Linked structural model "Дом_КР" at +6m in x: one 0.4m core wall.
HVAC model "Дом_ОВ": two rectangular ducts and one pipe running along +x,
plus a bent duct that is skipped.

Layout (top view):
   y
   3  ----------------------------  Ext
   |        |    [K]    |
   0  D1 ====|=====|=====|=====>  (duct 0.4 x 0.25)
      P1 ----|-----|-----|---->   (pipe Ø0.11, y=1)
  -2        |    [K]    |
            W1   K1     W2
            x=4  x=6    x=8
"""

from pathlib import Path

from openings_creator.config import Settings
from openings_creator.engine.runner import OpeningsRunner
from openings_creator.export.ifc import IFCExporter
from openings_creator.export.planview import render_planview
from openings_creator.logging_config import setup_logging
from openings_creator.models import (
    Arc,
    Duct,
    LinkInstance,
    OpeningTemplate,
    Point3D,
    RoundSection,
    Session,
    View3D,
    straight_duct,
    straight_pipe,
)

setup_logging("INFO")
settings = Settings()

session = Session()

# --- Architectural model ---
ar = session.add_document("Дом_АР", activate=True)
ar.add_level("Level 1", elevation=0.0)
ar.add_wall("Level 1", (4, -2), (4, 2), height=3.0, thickness=0.3, name="W1")
ar.add_wall("Level 1", (8, -2), (8, 2), height=3.0, thickness=0.2, name="W2")
ext = ar.add_wall("Level 1", (0, 3), (12, 3), height=3.0, thickness=0.4, name="Ext")
ext.is_external = True
ext.load_bearing = True
ar.templates.append(
    OpeningTemplate(
        family_name=settings.template_family_name,
        type_name="Прямоугольное",
        parameter_names=[settings.width_parameter, settings.height_parameter],
    )
)
ar.views.append(View3D(name="{3D}"))

# --- Structural model, linked ---
kr = session.add_document("Дом_КР")
kr.add_level("Level 1", elevation=0.0)
core = kr.add_wall("Level 1", (0, -2), (0, 2), height=3.0, thickness=0.4, name="K1")
core.load_bearing = True
ar.links.append(LinkInstance(name="КР", document_title="Дом_КР", offset=Point3D(x=6, y=0, z=0)))

# --- HVAC model ---
ov = session.add_document("Дом_ОВ")
ov.ducts.append(straight_duct((0, 0, 2.4), (12, 0, 2.4), width=0.4, height=0.25, name="D1"))
ov.ducts.append(
    Duct(
        name="D2 (bent)",
        location=Arc(
            start=Point3D(x=0, y=-1, z=2.4),
            mid=Point3D(x=5, y=-1.5, z=2.4),
            end=Point3D(x=10, y=-1, z=2.4),
        ),
        cross_section=RoundSection(diameter=0.2),
    )
)
ov.pipes.append(straight_pipe((0, 1, 0.5), (12, 1, 0.5), diameter=0.11, name="P1"))

# --- Place openings ---
report = OpeningsRunner(session, settings).run()

print(f"Processed: {report.processed['duct']} ducts, {report.processed['pipe']} pipes")
print(f"Openings placed: {len(report.openings)}")
for placement in report.placements:
    x, y, z = placement.insertion_point.as_tuple()
    print(
        f"  {placement.host_barrier}: ({x:.2f}, {y:.2f}, {z:.2f}) "
        f"{placement.size_width:g} x {placement.size_height:g}"
    )
for skipped in report.skipped_conduits:
    print(f"  skipped {skipped.kind} {skipped.conduit_id}: {skipped.reason}")

# --- Export ---
output = Path(__file__).parent / "output"
output.mkdir(exist_ok=True)

exporter = IFCExporter(ar, settings)
ifc_path = exporter.export(output / "duct_through_wall.ifc")
print(f"Exported to: {ifc_path}")
print(f"   Linked-wall openings not exported: {len(exporter.skipped_openings)}")

png_path = render_planview(session, output / "duct_through_wall.png", settings)
print(f"Plan view: {png_path}")
session.save(output / "duct_through_wall.json")
