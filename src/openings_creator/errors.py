"""Exceptions raised by the openings engine.

Two groups with different propagation rules:

- recoverable, scoped to one conduit or one hit: ``UnsupportedGeometry``,
  ``MissingHostLevel``. The runner logs them and moves on.
- fatal for the whole run: ``MissingCollaborator`` (raised before any
  transaction starts) and ``CommitFailure`` (rolls back the open
  transaction).
"""

from __future__ import annotations


class OpeningsError(Exception):
    """Base class for all engine errors."""


class MissingCollaborator(OpeningsError):
    """A document, template or view shared by every conduit is missing."""


class UnsupportedGeometry(OpeningsError):
    """The conduit's centerline is not a single straight segment."""

    def __init__(self, conduit_id: str, reason: str):
        self.conduit_id = conduit_id
        self.reason = reason
        super().__init__(f"Conduit {conduit_id}: {reason}")


class MissingHostLevel(OpeningsError):
    """The barrier hit by a conduit has no owning level."""

    def __init__(self, element_id: str, linked_element_id: str | None = None):
        self.element_id = element_id
        self.linked_element_id = linked_element_id
        target = element_id if linked_element_id is None else f"{element_id}/{linked_element_id}"
        super().__init__(f"Wall {target} has no host level")


class CommitFailure(OpeningsError):
    """Writing an opening into the document failed."""
