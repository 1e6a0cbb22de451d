"""Top-down plan view of walls, conduits and openings using matplotlib.

- Walls as filled rectangles (load-bearing green, partitions amber, linked grey)
- Ducts and pipes as centerlines, width scaled to their size
- Openings as red squares across their host wall
"""

from __future__ import annotations

import math
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless rendering
import matplotlib.pyplot as plt
import matplotlib.patheffects as pe

from openings_creator.config import Settings
from openings_creator.engine.centerline import opening_size
from openings_creator.models.document import Document, Session
from openings_creator.models.elements import Arc, Conduit, Line, Opening, Polyline, Wall
from openings_creator.models.geometry import Point3D

# Halo effect for text readability on any background
_TEXT_HALO = [pe.withStroke(linewidth=3, foreground="black")]

_DUCT_COLOR = "#1565C0"
_PIPE_COLOR = "#00838F"
_OPENING_COLOR = "#C62828"


def render_planview(
    session: Session,
    output_path: str | Path,
    settings: Settings | None = None,
    title: str | None = None,
    dpi: int = 150,
    show_labels: bool = True,
    show_info_box: bool = True,
) -> Path:
    """Render the active document's walls, the conduits and placed openings to PNG.

    Args:
        session: Open documents. Conduits come from the document matching
            ``settings.secondary_document_marker``, if any.
        output_path: Output image path.
        settings: Run settings (conduit document marker, size parameters).
        title: Plot title (defaults to the active document title).
        dpi: Image resolution.
        show_labels: Show wall names and opening sizes.
        show_info_box: Show counts overlay.

    Returns:
        Path to the output image.
    """
    settings = settings or Settings()
    host = session.active_document
    if host is None:
        raise ValueError("Session has no active document")
    source = session.find_document(settings.secondary_document_marker, exclude=host)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(1, 1, figsize=(12, 10))
    ax.set_aspect("equal")
    ax.set_facecolor("#FAFAFA")
    fig.patch.set_facecolor("white")

    xs: list[float] = []
    ys: list[float] = []

    for wall in host.walls:
        _draw_wall(ax, wall, 0.0, 0.0, _wall_color(wall), show_labels)
        xs.extend([wall.start.x, wall.end.x])
        ys.extend([wall.start.y, wall.end.y])

    for link in host.links:
        linked = session.get_document(link.document_title)
        if linked is None:
            continue
        for wall in linked.walls:
            ox, oy = link.offset.x, link.offset.y
            _draw_wall(ax, wall, ox, oy, ("#BDBDBD", "#9E9E9E"), False)
            xs.extend([wall.start.x + ox, wall.end.x + ox])
            ys.extend([wall.start.y + oy, wall.end.y + oy])

    if source is not None:
        for conduit in [*source.ducts, *source.pipes]:
            _draw_conduit(ax, conduit)

    for opening in host.openings:
        _draw_opening(ax, host, opening, settings, show_labels)

    ax.set_title(title or host.title, fontsize=16, fontweight="bold", pad=20)
    ax.grid(True, alpha=0.2, linestyle="--")
    ax.set_xlabel("X (meters)", fontsize=10)
    ax.set_ylabel("Y (meters)", fontsize=10)

    margin = 1.5
    if xs and ys:
        ax.set_xlim(min(xs) - margin, max(xs) + margin)
        ax.set_ylim(min(ys) - margin, max(ys) + margin)

    if show_info_box:
        info_lines = [
            f"Walls: {len(host.walls)}",
            f"Ducts: {len(source.ducts)}" if source else "",
            f"Pipes: {len(source.pipes)}" if source else "",
            f"Openings: {len(host.openings)}",
        ]
        ax.text(
            0.02, 0.98, "\n".join(line for line in info_lines if line),
            transform=ax.transAxes,
            fontsize=8,
            verticalalignment="top",
            fontfamily="monospace",
            bbox=dict(boxstyle="round,pad=0.5", facecolor="white", alpha=0.8, edgecolor="#CCCCCC"),
            zorder=100,
        )

    plt.tight_layout()
    fig.savefig(str(output_path), dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path


def _wall_color(wall: Wall) -> tuple[str, str]:
    """(fill, outline): load-bearing green, partition amber."""
    if wall.load_bearing:
        return "#2E7D32", "#1B5E20"
    return "#F9A825", "#F57F17"


def _draw_wall(
    ax: plt.Axes,
    wall: Wall,
    ox: float,
    oy: float,
    colors: tuple[str, str],
    show_labels: bool,
) -> None:
    """Draw a wall as a filled rectangle, translated by (ox, oy)."""
    dx, dy = wall.direction
    nx, ny = wall.normal
    t = wall.thickness / 2
    sx, sy = wall.start.x + ox, wall.start.y + oy
    ex, ey = wall.end.x + ox, wall.end.y + oy
    corners_x = [sx + nx * t, ex + nx * t, ex - nx * t, sx - nx * t]
    corners_y = [sy + ny * t, ey + ny * t, ey - ny * t, sy - ny * t]
    fill_color, outline_color = colors

    ax.fill(corners_x, corners_y, color=fill_color, zorder=10)
    ax.plot(
        corners_x + [corners_x[0]],
        corners_y + [corners_y[0]],
        color=outline_color,
        linewidth=0.5,
        zorder=11,
    )

    if show_labels and wall.name:
        ax.text(
            (sx + ex) / 2 - nx * 0.4,
            (sy + ey) / 2 - ny * 0.4,
            wall.name,
            fontsize=6,
            ha="center",
            va="center",
            color="#DDDDDD",
            style="italic",
            rotation=math.degrees(math.atan2(dy, dx)),
            path_effects=_TEXT_HALO,
            zorder=20,
        )


def _curve_points(conduit: Conduit) -> list[Point3D]:
    curve = conduit.location
    if isinstance(curve, Line):
        return [curve.start, curve.end]
    if isinstance(curve, Arc):
        return [curve.start, curve.mid, curve.end]
    if isinstance(curve, Polyline):
        return list(curve.points)
    return []


def _draw_conduit(ax: plt.Axes, conduit: Conduit) -> None:
    """Draw a conduit centerline; dashed when it is not a straight segment."""
    points = _curve_points(conduit)
    if len(points) < 2:
        return
    width, _ = opening_size(conduit.cross_section)
    color = _DUCT_COLOR if conduit.kind == "duct" else _PIPE_COLOR
    ax.plot(
        [p.x for p in points],
        [p.y for p in points],
        color=color,
        linewidth=max(1.0, width * 20),
        alpha=0.6,
        linestyle="-" if isinstance(conduit.location, Line) else "--",
        solid_capstyle="butt",
        zorder=15,
    )


def _draw_opening(
    ax: plt.Axes,
    host: Document,
    opening: Opening,
    settings: Settings,
    show_labels: bool,
) -> None:
    """Draw an opening as a rectangle across its host wall, or a cross if unhosted here."""
    p = opening.location
    wall = None if opening.host_linked_element_id else host.get_wall(opening.host_element_id)
    width = opening.lookup_parameter(settings.width_parameter) or 0.0
    height = opening.lookup_parameter(settings.height_parameter) or 0.0

    if wall is None:
        ax.plot([p.x], [p.y], marker="x", color=_OPENING_COLOR, markersize=8, zorder=30)
    else:
        dx, dy = wall.direction
        nx, ny = wall.normal
        # Centre on the wall axis; the insertion point may sit on a face
        across = (p.x - wall.start.x) * nx + (p.y - wall.start.y) * ny
        cx, cy = p.x - nx * across, p.y - ny * across
        w = width / 2
        t = wall.thickness / 2 + 0.05
        corners_x = [cx - dx * w + nx * t, cx + dx * w + nx * t, cx + dx * w - nx * t, cx - dx * w - nx * t]
        corners_y = [cy - dy * w + ny * t, cy + dy * w + ny * t, cy + dy * w - ny * t, cy - dy * w - ny * t]
        ax.fill(corners_x, corners_y, color=_OPENING_COLOR, alpha=0.8, zorder=30)

    if show_labels and width and height:
        ax.text(
            p.x, p.y + 0.3,
            f"{width:g}×{height:g}",
            fontsize=6,
            ha="center",
            va="bottom",
            color="white",
            path_effects=_TEXT_HALO,
            zorder=31,
        )
