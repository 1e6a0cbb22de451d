"""Element identity.

Element ids are IFC-compatible GlobalIds (22-char compressed GUIDs) so the
ids in the JSON session are the ids written to an exported IFC file.

``BarrierKey`` identifies one logical wall. A wall in the active document is
keyed by its own id. A wall reached through a link instance is keyed by the
link instance id plus the wall's id inside the linked document, so the same
linked file placed twice yields two distinct barriers.
"""

from __future__ import annotations

import uuid

import ifcopenshell.guid
from pydantic import BaseModel, ConfigDict


def generate_element_id() -> str:
    """Generate a new IFC-compatible GlobalId (22 characters)."""
    return ifcopenshell.guid.compress(uuid.uuid4().hex)


class BarrierKey(BaseModel):
    """Identity of one barrier, stable across the faces a ray crosses."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    linked_element_id: str | None = None

    @property
    def is_linked(self) -> bool:
        return self.linked_element_id is not None

    def __str__(self) -> str:
        if self.linked_element_id is None:
            return self.element_id
        return f"{self.element_id}/{self.linked_element_id}"
