"""Capability checks shared by every service operation.

One place decides who may do what; services call ``require`` instead of
comparing organizer ids and roles inline.
"""

from enum import Enum

from ticketing.domain.errors import ForbiddenError
from ticketing.domain.models import Actor, Event, Ticket


class Capability(Enum):
    CREATE_EVENT = "create_event"
    MANAGE_EVENT = "manage_event"
    VIEW_EVENT_TICKETS = "view_event_tickets"
    PURCHASE = "purchase"
    REDEEM_TICKET = "redeem_ticket"
    TRANSFER_TICKET = "transfer_ticket"
    REFUND_TICKET = "refund_ticket"
    VIEW_DASHBOARD = "view_dashboard"


DENIED_MESSAGES = {
    Capability.CREATE_EVENT: "Only organizers can create events",
    Capability.MANAGE_EVENT: "You do not have permission to manage this event",
    Capability.VIEW_EVENT_TICKETS: "You do not have permission to view tickets for this event",
    Capability.PURCHASE: "You do not have permission to purchase tickets",
    Capability.REDEEM_TICKET: "You do not have permission to use this ticket",
    Capability.TRANSFER_TICKET: "You do not have permission to transfer this ticket",
    Capability.REFUND_TICKET: "You do not have permission to refund this ticket",
    Capability.VIEW_DASHBOARD: "Only organizers can view sales metrics",
}


def _owns_event(actor: Actor, event: Event | None) -> bool:
    return event is not None and (actor.is_admin or event.organizer_id == actor.id)


def _holds(actor: Actor, ticket: Ticket | None) -> bool:
    return ticket is not None and ticket.holder_id == actor.id


def is_allowed(
    actor: Actor | None,
    capability: Capability,
    event: Event | None = None,
    ticket: Ticket | None = None,
) -> bool:
    """Return whether ``actor`` holds ``capability`` over the given resources."""
    if actor is None:
        return False

    match capability:
        case Capability.CREATE_EVENT | Capability.VIEW_DASHBOARD:
            return actor.is_organizer
        case Capability.MANAGE_EVENT | Capability.VIEW_EVENT_TICKETS:
            return _owns_event(actor, event)
        case Capability.PURCHASE:
            return True
        case Capability.REDEEM_TICKET | Capability.REFUND_TICKET:
            return _holds(actor, ticket) or _owns_event(actor, event)
        case Capability.TRANSFER_TICKET:
            # Admins and organizers cannot move a ticket on a holder's behalf.
            return _holds(actor, ticket)
    return False


def require(
    actor: Actor | None,
    capability: Capability,
    event: Event | None = None,
    ticket: Ticket | None = None,
) -> None:
    """Raise ForbiddenError unless ``actor`` holds ``capability``."""
    if not is_allowed(actor, capability, event=event, ticket=ticket):
        raise ForbiddenError(DENIED_MESSAGES[capability])
