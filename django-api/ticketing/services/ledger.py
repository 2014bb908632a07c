"""Event capacity ledger.

The remaining quantity on each ticket type is the single authoritative
source of available inventory. All changes go through the store's atomic
conditional update; nothing here reads a value and writes it back.
"""

import logging

from ticketing.domain import TicketTypeId
from ticketing.domain.errors import InvalidRequestError, SoldOutError, TicketTypeNotFoundError
from ticketing.services.common import store_boundary
from ticketing.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)


class EventCapacityLedger:
    """Remaining-quantity counter per ticket type."""

    def __init__(self, store: TicketStore) -> None:
        self._store = store

    def get_remaining(self, ticket_type_id: TicketTypeId) -> int:
        """Return the current remaining quantity.

        Raises:
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        with store_boundary("get_remaining"):
            remaining = self._store.get_remaining(ticket_type_id)
        if remaining is None:
            raise TicketTypeNotFoundError(str(ticket_type_id))
        return remaining

    def decrement(self, ticket_type_id: TicketTypeId, amount: int) -> None:
        """Take ``amount`` units if and only if that many remain.

        Raises:
            InvalidRequestError: If amount is not positive.
            SoldOutError: If remaining < amount. Nothing changes.
        """
        _check_amount(amount)
        with store_boundary("decrement"):
            applied = self._store.decrement_remaining(ticket_type_id, amount)
        if not applied:
            logger.info("Ledger refused %d units of ticket type %s", amount, ticket_type_id)
            raise SoldOutError(str(ticket_type_id), amount)

    def increment(self, ticket_type_id: TicketTypeId, amount: int) -> None:
        """Return ``amount`` units to inventory (refunds, administrative correction).

        Raises:
            InvalidRequestError: If amount is not positive.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        _check_amount(amount)
        with store_boundary("increment"):
            applied = self._store.increment_remaining(ticket_type_id, amount)
        if not applied:
            raise TicketTypeNotFoundError(str(ticket_type_id))
        logger.info("Ledger restored %d units to ticket type %s", amount, ticket_type_id)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvalidRequestError("Quantity must be a whole number of at least 1")
