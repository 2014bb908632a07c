"""Ticket issuance service - the only way tickets come into existence.

A purchase is one unit of work: the ledger decrement, the ticket rows and
the audit record commit together or not at all.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from ticketing.domain import Actor, EventId, Ticket, TicketTypeId, TransactionType
from ticketing.domain.errors import (
    EventNotFoundError,
    InvalidRequestError,
    TicketTypeNotFoundError,
)
from ticketing.domain.policies import Capability, require
from ticketing.services.common import parse_id, require_actor, store_boundary, utcnow
from ticketing.services.ledger import EventCapacityLedger
from ticketing.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)


class TicketIssuanceService:
    """Turns a purchase intent into persisted tickets and a ledger decrement."""

    def __init__(
        self,
        store: TicketStore,
        ledger: EventCapacityLedger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._ledger = ledger or EventCapacityLedger(store)
        self._clock = clock

    def purchase(
        self,
        buyer: Actor | None,
        event_id: str,
        ticket_type_id: str,
        quantity: int,
    ) -> list[Ticket]:
        """Issue ``quantity`` active tickets of one ticket type to the buyer.

        Raises:
            AuthenticationRequiredError: If there is no buyer.
            InvalidRequestError: If the quantity is out of range, the event is
                unknown or not on sale, or the ticket type is not part of it.
            SoldOutError: If remaining inventory cannot cover the quantity.
            StoreUnavailableError: If persistence failed. Nothing was issued.
        """
        buyer = require_actor(buyer, "You must be logged in to purchase a ticket")
        require(buyer, Capability.PURCHASE)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidRequestError("Quantity must be a whole number of at least 1")
        event_key = parse_id(EventId, event_id, "event ID")
        ticket_type_key = parse_id(TicketTypeId, ticket_type_id, "ticket type ID")

        with store_boundary("purchase"):
            event = self._store.get_event(event_key)
            if event is None:
                raise EventNotFoundError(str(event_key))
            if not event.is_on_sale:
                raise InvalidRequestError("Tickets for this event are not on sale")

            ticket_type = self._store.get_ticket_type(ticket_type_key)
            if ticket_type is None or ticket_type.event_id != event_key:
                raise TicketTypeNotFoundError(str(ticket_type_key))
            if quantity > ticket_type.max_per_order:
                raise InvalidRequestError(
                    f"You can buy at most {ticket_type.max_per_order} "
                    f"{ticket_type.name} tickets per order"
                )

            with self._store.atomic():
                self._ledger.decrement(ticket_type_key, quantity)
                tickets = self._store.create_tickets(
                    ticket_type, buyer.id, quantity, self._clock()
                )
                self._store.record_transaction(
                    TransactionType.PURCHASE,
                    ticket_type.price * quantity,
                    buyer.id,
                    event_id=event_key,
                )

        logger.info(
            "Issued %d x %s for event %s to user %s",
            quantity,
            ticket_type.name,
            event_key,
            buyer.id,
        )
        return tickets
