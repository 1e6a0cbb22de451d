"""IFC export via ifcopenshell.

Writes a document's levels, walls and placed openings to IFC 2x3. Each
opening becomes an IfcOpeningElement voiding its host IfcWallStandardCase,
so the wall arrives in the receiving application already cut.

Openings hosted by walls of a linked document have no wall in this file to
void; they are skipped with a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path

import ifcopenshell

from openings_creator.config import Settings
from openings_creator.models.document import Document, Level
from openings_creator.models.elements import Opening, Wall
from openings_creator.models.identity import generate_element_id

logger = logging.getLogger(__name__)

# Openings are cut slightly deeper than the wall for a clean boolean
OPENING_DEPTH_MARGIN = 0.01

_SI_UNITS = (
    ("LENGTHUNIT", "METRE"),
    ("AREAUNIT", "SQUARE_METRE"),
    ("VOLUMEUNIT", "CUBIC_METRE"),
    ("PLANEANGLEUNIT", "RADIAN"),
)

Vec3 = tuple[float, float, float]


class IFCExporter:
    """Export a Document's walls and openings to an IFC file.

    Usage:
        exporter = IFCExporter(document, settings)
        exporter.export("model.ifc")
        exporter.skipped_openings   # GlobalIds left out of the file
    """

    def __init__(self, document: Document, settings: Settings | None = None):
        self.document = document
        self.settings = settings or Settings()
        self.file = ifcopenshell.file(schema="IFC2X3")
        self.skipped_openings: list[str] = []
        self._body: ifcopenshell.entity_instance | None = None
        self._walls: dict[str, ifcopenshell.entity_instance] = {}
        self._write_header()

    def _write_header(self) -> None:
        file_name = self.file.header.file_name
        file_name.name = f"{self.document.title}.ifc"
        file_name.author = ("Openings Creator",)
        file_name.organization = ("",)

    def export(self, output_path: str | Path) -> Path:
        """Write the IFC file. Returns the output path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        ifc_building = self._spatial_root()
        storeys = {
            level.global_id: self._storey(level, ifc_building) for level in self.document.levels
        }

        by_container: dict[str, list[ifcopenshell.entity_instance]] = {}
        for wall in self.document.walls:
            self._walls[wall.global_id] = self._wall(wall)
            container = wall.level_id if wall.level_id in storeys else ""
            by_container.setdefault(container, []).append(self._walls[wall.global_id])

        # Openings stay out of the spatial structure; IfcRelVoidsElement ties them to the wall
        for opening in self.document.openings:
            self._void(opening)

        for container, products in by_container.items():
            self.file.createIfcRelContainedInSpatialStructure(
                GlobalId=generate_element_id(),
                RelatingStructure=storeys.get(container, ifc_building),
                RelatedElements=products,
            )

        self.file.write(str(output_path))
        logger.info(
            "Exported %d walls and %d openings to %s",
            len(self._walls), len(self.document.openings) - len(self.skipped_openings),
            output_path,
        )
        return output_path

    # ── Spatial structure ─────────────────────────────────────────────

    def _spatial_root(self) -> ifcopenshell.entity_instance:
        """Contexts, project, site and building. Returns the building."""
        origin = self.file.createIfcAxis2Placement3D(
            Location=self.file.createIfcCartesianPoint((0.0, 0.0, 0.0)),
        )
        model = self.file.createIfcGeometricRepresentationContext(
            ContextIdentifier="3D",
            ContextType="Model",
            CoordinateSpaceDimension=3,
            Precision=1e-5,
            WorldCoordinateSystem=origin,
            TrueNorth=self.file.createIfcDirection((0.0, 1.0)),
        )
        self._body = self.file.createIfcGeometricRepresentationSubContext(
            ContextIdentifier="Body",
            ContextType="Model",
            ParentContext=model,
            TargetView="MODEL_VIEW",
        )
        units = [self.file.createIfcSIUnit(UnitType=t, Name=n) for t, n in _SI_UNITS]
        project = self.file.createIfcProject(
            GlobalId=self.document.global_id,
            Name=self.document.title,
            UnitsInContext=self.file.createIfcUnitAssignment(Units=units),
            RepresentationContexts=[model],
        )
        site = self._aggregate(project, self.file.createIfcSite(
            GlobalId=generate_element_id(), Name="Default Site", CompositionType="ELEMENT",
        ))
        return self._aggregate(site, self.file.createIfcBuilding(
            GlobalId=generate_element_id(), Name=self.document.title, CompositionType="ELEMENT",
        ))

    def _storey(
        self, level: Level, ifc_building: ifcopenshell.entity_instance
    ) -> ifcopenshell.entity_instance:
        return self._aggregate(ifc_building, self.file.createIfcBuildingStorey(
            GlobalId=level.global_id,
            Name=level.name,
            CompositionType="ELEMENT",
            Elevation=level.elevation,
        ))

    def _aggregate(
        self, parent: ifcopenshell.entity_instance, child: ifcopenshell.entity_instance
    ) -> ifcopenshell.entity_instance:
        self.file.createIfcRelAggregates(
            GlobalId=generate_element_id(), RelatingObject=parent, RelatedObjects=[child],
        )
        return child

    # ── Elements ──────────────────────────────────────────────────────

    def _wall(self, wall: Wall) -> ifcopenshell.entity_instance:
        """IfcWallStandardCase: the axis-length × thickness rectangle extruded by height."""
        level = self.document.get_level(wall.level_id) if wall.level_id else None
        base = (level.elevation if level else 0.0) + wall.base_offset
        dx, dy = wall.direction
        nx, ny = wall.normal
        half = wall.thickness / 2

        ifc_wall = self.file.createIfcWallStandardCase(
            GlobalId=wall.global_id,
            Name=wall.name or "Wall",
            Description=wall.description or None,
            ObjectPlacement=self._placement(
                (wall.start.x - nx * half, wall.start.y - ny * half, base),
                axis=(0.0, 0.0, 1.0),
                ref=(dx, dy, 0.0),
            ),
            Representation=self._box(
                wall.length, wall.thickness, wall.height, centre=(wall.length / 2, half)
            ),
        )
        self._pset(ifc_wall, "Pset_WallCommon", {
            "LoadBearing": ("IfcBoolean", wall.load_bearing),
            "IsExternal": ("IfcBoolean", wall.is_external),
        })
        return ifc_wall

    def _void(self, opening: Opening) -> None:
        """Cut one opening into its host wall, or record why it was skipped."""
        host = None
        if opening.host_linked_element_id is None:
            host = self.document.get_wall(opening.host_element_id)
        width = opening.lookup_parameter(self.settings.width_parameter)
        height = opening.lookup_parameter(self.settings.height_parameter)
        if host is None or width is None or height is None:
            reason = "no local host wall" if host is None else "no size parameters"
            logger.warning("Opening %s has %s; not exported", opening.global_id, reason)
            self.skipped_openings.append(opening.global_id)
            return

        # Box centred on the insertion point, pushed through the wall along its normal
        dx, dy = host.direction
        nx, ny = host.normal
        p = opening.location
        depth = host.thickness + OPENING_DEPTH_MARGIN
        back = (p.x - host.start.x) * nx + (p.y - host.start.y) * ny + depth / 2
        ifc_opening = self.file.createIfcOpeningElement(
            GlobalId=opening.global_id,
            Name=opening.name or "Opening",
            ObjectPlacement=self._placement(
                (p.x - nx * back, p.y - ny * back, p.z), axis=(nx, ny, 0.0), ref=(dx, dy, 0.0)
            ),
            Representation=self._box(width, height, depth),
        )

        values = {name: ("IfcLengthMeasure", v) for name, v in opening.parameters.items()}
        if opening.conduit_id:
            values["ConduitId"] = ("IfcIdentifier", opening.conduit_id)
        if values:
            self._pset(ifc_opening, "Pset_OpeningsCreator", values)

        self.file.createIfcRelVoidsElement(
            GlobalId=generate_element_id(),
            RelatingBuildingElement=self._walls[host.global_id],
            RelatedOpeningElement=ifc_opening,
        )

    # ── Geometry and properties ───────────────────────────────────────

    def _placement(self, origin: Vec3, axis: Vec3, ref: Vec3) -> ifcopenshell.entity_instance:
        """Absolute IfcLocalPlacement with local Z along ``axis`` and X along ``ref``."""
        return self.file.createIfcLocalPlacement(
            RelativePlacement=self.file.createIfcAxis2Placement3D(
                Location=self.file.createIfcCartesianPoint(origin),
                Axis=self.file.createIfcDirection(axis),
                RefDirection=self.file.createIfcDirection(ref),
            )
        )

    def _box(
        self,
        x_dim: float,
        y_dim: float,
        depth: float,
        centre: tuple[float, float] = (0.0, 0.0),
    ) -> ifcopenshell.entity_instance:
        """Swept-solid body: an ``x_dim`` × ``y_dim`` rectangle extruded along local +Z."""
        profile = self.file.createIfcRectangleProfileDef(
            ProfileType="AREA",
            XDim=x_dim,
            YDim=y_dim,
            Position=self.file.createIfcAxis2Placement2D(
                Location=self.file.createIfcCartesianPoint(centre),
            ),
        )
        solid = self.file.createIfcExtrudedAreaSolid(
            SweptArea=profile,
            Position=self.file.createIfcAxis2Placement3D(
                Location=self.file.createIfcCartesianPoint((0.0, 0.0, 0.0)),
            ),
            ExtrudedDirection=self.file.createIfcDirection((0.0, 0.0, 1.0)),
            Depth=depth,
        )
        body = self.file.createIfcShapeRepresentation(
            ContextOfItems=self._body,
            RepresentationIdentifier="Body",
            RepresentationType="SweptSolid",
            Items=[solid],
        )
        return self.file.createIfcProductDefinitionShape(Representations=[body])

    def _pset(
        self,
        product: ifcopenshell.entity_instance,
        name: str,
        values: dict[str, tuple[str, object]],
    ) -> None:
        """Attach a property set of single values, given as ``{name: (ifc_type, value)}``."""
        props = [
            self.file.createIfcPropertySingleValue(
                Name=prop, NominalValue=self.file.create_entity(ifc_type, value)
            )
            for prop, (ifc_type, value) in values.items()
        ]
        self.file.createIfcRelDefinesByProperties(
            GlobalId=generate_element_id(),
            RelatedObjects=[product],
            RelatingPropertyDefinition=self.file.createIfcPropertySet(
                GlobalId=generate_element_id(), Name=name, HasProperties=props,
            ),
        )


def export_ifc(
    document: Document, output_path: str | Path, settings: Settings | None = None
) -> Path:
    """Export ``document`` to IFC 2x3."""
    return IFCExporter(document, settings).export(output_path)
