"""Write openings into the active document.

Both operations mutate the document and must run inside a transaction:
``activate_template`` opens its own, ``commit_placement`` requires the
caller's.
"""

from __future__ import annotations

import logging

from openings_creator.config import Settings
from openings_creator.engine.placement import OpeningPlacement
from openings_creator.errors import CommitFailure
from openings_creator.models.document import Document
from openings_creator.models.elements import Opening, OpeningTemplate

logger = logging.getLogger(__name__)


def activate_template(document: Document, template: OpeningTemplate) -> bool:
    """Activate a template in a short transaction of its own.

    Returns:
        True if the template was inactive and got activated.

    Raises:
        CommitFailure: the document is read-only, or a transaction is open.
    """
    if document.read_only:
        raise CommitFailure(f"Document '{document.title}' is read-only")
    with document.transaction("Activate opening template"):
        if template.is_active:
            return False
        template.is_active = True
    logger.info("Activated template '%s'", template.family_name)
    return True


def commit_placement(
    document: Document,
    placement: OpeningPlacement,
    template: OpeningTemplate,
    settings: Settings,
) -> Opening:
    """Create an opening instance and set its two size parameters.

    Raises:
        CommitFailure: no open transaction, read-only document, inactive
            template, or the template lacks a size parameter.
    """
    tx = document.active_transaction
    if tx is None or not tx.has_started:
        raise CommitFailure(f"No open transaction on '{document.title}'")
    if document.read_only:
        raise CommitFailure(f"Document '{document.title}' is read-only")
    if not template.is_active:
        raise CommitFailure(f"Template '{template.family_name}' is not active")
    for name in (settings.width_parameter, settings.height_parameter):
        if not template.has_parameter(name):
            raise CommitFailure(
                f"Template '{template.family_name}' has no parameter '{name}'"
            )

    opening = Opening(
        name=template.type_name or template.family_name,
        template_id=template.global_id,
        host_element_id=placement.host_barrier.element_id,
        host_linked_element_id=placement.host_barrier.linked_element_id,
        level_id=placement.host_level.global_id,
        location=placement.insertion_point,
        conduit_id=placement.conduit_id,
    )
    try:
        opening.set_parameter(settings.width_parameter, placement.size_width)
        opening.set_parameter(settings.height_parameter, placement.size_height)
    except ValueError as exc:
        raise CommitFailure(str(exc)) from exc
    document.openings.append(opening)
    logger.debug(
        "Placed opening %s in wall %s at %s",
        opening.global_id, placement.host_barrier, placement.insertion_point.as_tuple(),
    )
    return opening
