"""Openings Creator CLI.

Usage:
    python -m openings_creator <command> <session.json> [options]

A session file holds every open document: the active architectural model
that receives openings and the model holding ducts and pipes. Commands
print JSON to stdout; logs go to stderr.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from openings_creator.config import Settings, load_settings
from openings_creator.engine.runner import OpeningsRunner
from openings_creator.errors import OpeningsError
from openings_creator.logging_config import setup_logging
from openings_creator.models.document import Document, Session

app = typer.Typer(
    name="openings_creator",
    help="Place sized wall openings where ducts and pipes cross walls.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _output(data: dict) -> None:
    """Print JSON output to stdout."""
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(message: str) -> None:
    _output({"ok": False, "error": message})
    raise typer.Exit(1)


def _load_session(path: Path) -> Session:
    if not path.exists():
        _fail(f"Session not found: {path}")
    try:
        return Session.load(path)
    except (ValidationError, ValueError) as exc:
        _fail(f"Invalid session file {path}: {exc}")


def _load_settings(config: Optional[Path]) -> Settings:
    try:
        return load_settings(config)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        _fail(str(exc))


def _require_document(session: Session, title: Optional[str]) -> Document:
    document = session.get_document(title) if title else session.active_document
    if document is None:
        _fail(f"Document not found: {title or '(active)'}")
    return document


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs here"),
):
    """Configure logging for all commands."""
    setup_logging(log_level, log_file)


@app.command()
def place(
    session_file: Path = typer.Argument(..., help="Session JSON file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings JSON file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to save the session (default: in place)"
    ),
):
    """Place openings and save the session."""
    session = _load_session(session_file)
    settings = _load_settings(config)
    try:
        report = OpeningsRunner(session, settings).run()
    except OpeningsError as exc:
        _fail(f"{type(exc).__name__}: {exc}")
    saved = session.save(output or session_file)
    _output({"ok": True, "saved": str(saved), **report.to_dict()})


@app.command()
def plan(
    session_file: Path = typer.Argument(..., help="Session JSON file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings JSON file"),
):
    """Dry run: list the openings that would be placed."""
    session = _load_session(session_file)
    settings = _load_settings(config)
    try:
        report = OpeningsRunner(session, settings).plan()
    except OpeningsError as exc:
        _fail(f"{type(exc).__name__}: {exc}")
    _output({"ok": True, **report.to_dict()})


@app.command("list")
def list_cmd(
    session_file: Path = typer.Argument(..., help="Session JSON file"),
    what: str = typer.Argument(
        ..., help="What to list: documents, levels, walls, ducts, pipes, openings"
    ),
    document: Optional[str] = typer.Option(
        None, "--document", "-d", help="Document title (default: active)"
    ),
):
    """List session contents."""
    session = _load_session(session_file)
    result: dict = {"ok": True}

    if what == "documents":
        active = session.active_document
        result["documents"] = [
            {"title": d.title, "active": d is active, "walls": len(d.walls),
             "ducts": len(d.ducts), "pipes": len(d.pipes), "openings": len(d.openings)}
            for d in session.documents
        ]
        _output(result)
        return

    doc = _require_document(session, document)
    if what == "levels":
        result["levels"] = [
            {"id": lv.global_id, "name": lv.name, "elevation": lv.elevation}
            for lv in doc.levels
        ]
    elif what == "walls":
        result["walls"] = [
            {"id": w.global_id, "name": w.name, "length": round(w.length, 3),
             "thickness": w.thickness, "height": w.height, "level_id": w.level_id}
            for w in doc.walls
        ]
    elif what in ("ducts", "pipes"):
        result[what] = [
            {"id": c.global_id, "name": c.name,
             "curve": c.location.kind if c.location else None,
             "section": c.cross_section.model_dump()}
            for c in doc.conduits(what[:-1])
        ]
    elif what == "openings":
        result["openings"] = [
            {"id": o.global_id, "host": o.host_element_id,
             "host_linked": o.host_linked_element_id, "level_id": o.level_id,
             "location": [round(c, 6) for c in o.location.as_tuple()],
             "parameters": o.parameters}
            for o in doc.openings
        ]
    else:
        _fail(f"Unknown list target: {what}")
    _output(result)


@app.command()
def export(
    session_file: Path = typer.Argument(..., help="Session JSON file"),
    output: Path = typer.Argument(..., help="Output .ifc path"),
    document: Optional[str] = typer.Option(
        None, "--document", "-d", help="Document title (default: active)"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings JSON file"),
):
    """Export a document's walls and openings to IFC 2x3."""
    from openings_creator.export.ifc import IFCExporter

    session = _load_session(session_file)
    settings = _load_settings(config)
    doc = _require_document(session, document)
    exporter = IFCExporter(doc, settings)
    path = exporter.export(output)
    _output({
        "ok": True,
        "path": str(path),
        "walls": len(doc.walls),
        "openings": len(doc.openings) - len(exporter.skipped_openings),
        "skipped_openings": exporter.skipped_openings,
    })


@app.command()
def render(
    session_file: Path = typer.Argument(..., help="Session JSON file"),
    output: Path = typer.Argument(..., help="Output .png path"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings JSON file"),
):
    """Render a plan view of walls, conduits and openings to PNG."""
    from openings_creator.export.planview import render_planview

    session = _load_session(session_file)
    settings = _load_settings(config)
    try:
        path = render_planview(session, output, settings)
    except ValueError as exc:
        _fail(str(exc))
    _output({"ok": True, "path": str(path)})


@app.command()
def version() -> None:
    """Show version."""
    from openings_creator import __version__

    _output({"ok": True, "version": __version__})


if __name__ == "__main__":
    app()
