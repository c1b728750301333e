"""
Change notifications for committed mutations.

Services call emit_change() inside their transaction; the event is only
dispatched once the outermost transaction commits, so rolled-back work is
never announced. Transport (websockets, push, ...) subscribes to the
``change_committed`` signal and decides fan-out.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Receivers get ``event=ChangeEvent``.
change_committed = Signal()


@dataclass(frozen=True)
class ChangeEvent:
    name: str
    resource_id: str
    diff: dict = field(default_factory=dict)

    @property
    def entity(self) -> str:
        return self.name.split('.', 1)[0]

    @property
    def action(self) -> str:
        return self.name.split('.', 1)[1]


def _serialize(value):
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def emit_change(entity: str, action: str, resource_id, /, **diff) -> ChangeEvent:
    """Queue a ``{entity}.{action}`` event for dispatch on commit."""
    event = ChangeEvent(
        name=f"{entity}.{action}",
        resource_id=str(resource_id),
        diff={key: _serialize(value) for key, value in diff.items()},
    )
    transaction.on_commit(lambda: dispatch(event))
    return event


def dispatch(event: ChangeEvent) -> None:
    logger.debug("Dispatching %s for %s", event.name, event.resource_id)
    responses = change_committed.send_robust(sender=ChangeEvent, event=event)
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                "Change receiver %r failed for %s: %s",
                receiver, event.name, response,
                exc_info=(type(response), response, response.__traceback__),
            )
