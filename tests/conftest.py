"""Shared fixtures: an architectural model with one wall and an HVAC model."""

import pytest

from openings_creator.models import OpeningTemplate, Session, View3D, straight_duct


@pytest.fixture
def session() -> Session:
    """Two open documents.

    "Дом_АР" (active): Level 1 at 0.0, wall W1 along x=4 from y=-2 to y=2,
    3 m high and 0.3 m thick, the opening family and a 3D view.
    "Дом_ОВ": one 0.3 x 0.2 duct D1 from (0, 0, 1) to (10, 0, 1).
    """
    session = Session()
    host = session.add_document("Дом_АР", activate=True)
    host.add_level("Level 1", elevation=0.0)
    host.add_wall("Level 1", (4, -2), (4, 2), height=3.0, thickness=0.3, name="W1")
    host.templates.append(
        OpeningTemplate(
            family_name="Игнатов.Отверстия",
            type_name="Прямоугольное",
            parameter_names=["Ширина", "Высота"],
        )
    )
    host.views.append(View3D(name="{3D}"))

    source = session.add_document("Дом_ОВ")
    source.ducts.append(straight_duct((0, 0, 1), (10, 0, 1), width=0.3, height=0.2, name="D1"))
    return session


@pytest.fixture
def host(session):
    return session.get_document("Дом_АР")


@pytest.fixture
def source(session):
    return session.get_document("Дом_ОВ")
