"""Run configuration.

Defaults match the Russian-language project conventions the tool was
written for: the HVAC model title carries the section code "ОВ", openings
are instances of the "Игнатов.Отверстия" family, and their size parameters
are "Ширина" (width) and "Высота" (height).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from openings_creator.models.elements import Wall


class BarrierFilter(BaseModel):
    """Which walls count as barriers."""

    external_only: bool = False
    load_bearing_only: bool = False
    include_links: bool = True

    def passes(self, wall: Wall) -> bool:
        if self.external_only and not wall.is_external:
            return False
        if self.load_bearing_only and not wall.load_bearing:
            return False
        return True


class Settings(BaseModel):
    """Settings for one openings run."""

    secondary_document_marker: str = Field(
        default="ОВ", description="Substring identifying the document that holds the conduits"
    )
    template_family_name: str = Field(
        default="Игнатов.Отверстия", description="Family name of the opening template"
    )
    width_parameter: str = Field(default="Ширина", description="Instance parameter for width")
    height_parameter: str = Field(default="Высота", description="Instance parameter for height")
    view_name: str | None = Field(
        default=None, description="3D view to cast through; first non-template view if unset"
    )
    barrier_filter: BarrierFilter = Field(default_factory=BarrierFilter)


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a JSON file, or defaults when ``path`` is None."""
    if path is None:
        return Settings()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    return Settings.model_validate_json(path.read_text(encoding="utf-8"))
