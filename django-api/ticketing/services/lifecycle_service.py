"""Ticket lifecycle manager.

Per-ticket state machine:

    active -> used          (redeem)
    active -> transferred   (transfer, holder reassigned in place)
    active -> refunded      (refund, one unit returned to the ledger)

used, transferred and refunded are terminal. Every transition is a
conditional update on the current status, so two racing requests against
the same ticket admit exactly one.
"""

import logging

from ticketing.domain import (
    Actor,
    EventId,
    Money,
    Ticket,
    TicketId,
    TicketStatus,
    TransactionType,
)
from ticketing.domain.errors import (
    AlreadyUsedError,
    EventNotFoundError,
    InvalidRequestError,
    InvalidTransitionError,
    RecipientNotFoundError,
    TicketNotFoundError,
)
from ticketing.domain.policies import Capability, require
from ticketing.services.common import parse_id, require_actor, store_boundary
from ticketing.services.ledger import EventCapacityLedger
from ticketing.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)


class TicketLifecycleManager:
    """Governs redeem, transfer and refund of issued tickets."""

    def __init__(self, store: TicketStore, ledger: EventCapacityLedger | None = None) -> None:
        self._store = store
        self._ledger = ledger or EventCapacityLedger(store)

    def redeem(self, actor: Actor | None, ticket_id: str) -> Ticket:
        """Mark an active ticket as used. Holders and the event's organizer may redeem.

        Raises:
            ForbiddenError: If the actor is neither holder nor organizer/admin.
            AlreadyUsedError: If the ticket is not active.
        """
        actor = require_actor(actor, "You must be logged in to use a ticket")
        key = parse_id(TicketId, ticket_id, "ticket ID")

        with store_boundary("redeem"):
            ticket = self._get_ticket(key)
            event = self._store.get_event(ticket.event_id)
            require(actor, Capability.REDEEM_TICKET, event=event, ticket=ticket)
            if not ticket.is_active:
                raise AlreadyUsedError(ticket.status.value)

            redeemed = self._store.transition_ticket(key, TicketStatus.ACTIVE, TicketStatus.USED)
            if redeemed is None:
                raise AlreadyUsedError(self._current_status(key))

        logger.info("Ticket %s redeemed by user %s", key, actor.id)
        return redeemed

    def transfer(self, actor: Actor | None, ticket_id: str, recipient: str) -> Ticket:
        """Reassign an active ticket to the user registered under ``recipient``.

        The ticket keeps its id, moves to the recipient, and becomes
        ``transferred`` (terminal).

        Raises:
            ForbiddenError: If the actor is not the current holder.
            InvalidTransitionError: If the ticket is not active.
            RecipientNotFoundError: If no user has that email.
        """
        actor = require_actor(actor, "You must be logged in to transfer a ticket")
        key = parse_id(TicketId, ticket_id, "ticket ID")
        recipient = (recipient or "").strip()
        if not recipient:
            raise InvalidRequestError("Please enter the recipient's email address")

        with store_boundary("transfer"):
            ticket = self._get_ticket(key)
            require(actor, Capability.TRANSFER_TICKET, ticket=ticket)
            if not ticket.is_active:
                raise _not_active("transferred", ticket.status)

            recipient_id = self._store.find_user_id_by_email(recipient)
            if recipient_id is None:
                raise RecipientNotFoundError()
            if recipient_id == actor.id:
                raise InvalidRequestError("You cannot transfer a ticket to yourself")

            with self._store.atomic():
                transferred = self._store.transition_ticket(
                    key, TicketStatus.ACTIVE, TicketStatus.TRANSFERRED, holder_id=recipient_id
                )
                if transferred is None:
                    raise _not_active("transferred", TicketStatus(self._current_status(key)))
                self._store.record_transaction(
                    TransactionType.TRANSFER,
                    Money(0),
                    actor.id,
                    event_id=ticket.event_id,
                    ticket_id=key,
                )

        logger.info("Ticket %s transferred from user %s to user %s", key, actor.id, recipient_id)
        return transferred

    def refund(self, actor: Actor | None, ticket_id: str) -> Ticket:
        """Refund an active ticket and return its unit to the ledger.

        Raises:
            ForbiddenError: If the actor is neither holder nor organizer/admin.
            InvalidTransitionError: If the ticket is not active.
        """
        actor = require_actor(actor, "You must be logged in to refund a ticket")
        key = parse_id(TicketId, ticket_id, "ticket ID")

        with store_boundary("refund"):
            ticket = self._get_ticket(key)
            event = self._store.get_event(ticket.event_id)
            require(actor, Capability.REFUND_TICKET, event=event, ticket=ticket)
            if not ticket.is_active:
                raise _not_active("refunded", ticket.status)

            ticket_type = self._store.get_ticket_type(ticket.ticket_type_id)
            with self._store.atomic():
                refunded = self._store.transition_ticket(
                    key, TicketStatus.ACTIVE, TicketStatus.REFUNDED
                )
                if refunded is None:
                    raise _not_active("refunded", TicketStatus(self._current_status(key)))
                self._ledger.increment(ticket.ticket_type_id, 1)
                self._store.record_transaction(
                    TransactionType.REFUND,
                    ticket_type.price if ticket_type else Money(0),
                    ticket.holder_id,
                    event_id=ticket.event_id,
                    ticket_id=key,
                )

        logger.info("Ticket %s refunded by user %s", key, actor.id)
        return refunded

    def tickets_for_holder(self, actor: Actor | None) -> list[Ticket]:
        actor = require_actor(actor, "You must be logged in to view your tickets")
        with store_boundary("tickets_for_holder"):
            return self._store.list_tickets_for_holder(actor.id)

    def tickets_for_event(self, actor: Actor | None, event_id: str) -> list[Ticket]:
        """Return every ticket issued for an event. Organizer or admin only."""
        actor = require_actor(actor, "You must be logged in to view event tickets")
        key = parse_id(EventId, event_id, "event ID")
        with store_boundary("tickets_for_event"):
            event = self._store.get_event(key)
            if event is None:
                raise EventNotFoundError(str(key))
            require(actor, Capability.VIEW_EVENT_TICKETS, event=event)
            return self._store.list_tickets_for_event(key)

    def _get_ticket(self, key: TicketId) -> Ticket:
        ticket = self._store.get_ticket(key)
        if ticket is None:
            raise TicketNotFoundError(str(key))
        return ticket

    def _current_status(self, key: TicketId) -> str:
        ticket = self._store.get_ticket(key)
        return ticket.status.value if ticket else TicketStatus.USED.value


def _not_active(action: str, status: TicketStatus) -> InvalidTransitionError:
    return InvalidTransitionError(
        f"Only active tickets can be {action}; this ticket is {status.value}"
    )
