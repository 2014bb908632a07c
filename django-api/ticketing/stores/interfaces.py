"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Infrastructure failures
surface as StoreError, never as a backend-specific exception.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from ticketing.domain import (
    AuditTransaction,
    DashboardMetrics,
    Event,
    EventId,
    Money,
    Ticket,
    TicketId,
    TicketStatus,
    TicketType,
    TicketTypeId,
    TransactionType,
)


class StoreError(Exception):
    """Raised by a store when the underlying persistence fails."""


class EventStore(ABC):
    """Interface for event catalog persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a unit of work: everything inside commits or rolls back together."""
        ...

    @abstractmethod
    def list_events(
        self, category: str | None = None, search: str | None = None
    ) -> list[Event]:
        """Return published events ordered by starts_at ascending."""
        ...

    @abstractmethod
    def list_events_for_organizer(self, organizer_id: int) -> list[Event]:
        """Return every event owned by the organizer, newest first."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Return an event and hold its row lock until the enclosing unit of work ends.

        Only meaningful inside ``atomic()``. Capacity edits for one event
        serialize on this lock.
        """
        ...

    @abstractmethod
    def create_event(self, organizer_id: int, fields: dict[str, Any]) -> Event:
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, changes: dict[str, Any]) -> Event:
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        ...

    @abstractmethod
    def event_has_tickets(self, event_id: EventId) -> bool:
        ...

    @abstractmethod
    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        """Return the ticket types of an event, oldest first."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        ...

    @abstractmethod
    def create_ticket_type(self, event_id: EventId, fields: dict[str, Any]) -> TicketType:
        ...

    @abstractmethod
    def update_ticket_type(
        self, ticket_type_id: TicketTypeId, changes: dict[str, Any]
    ) -> TicketType:
        ...

    @abstractmethod
    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> None:
        ...

    @abstractmethod
    def ticket_type_has_tickets(self, ticket_type_id: TicketTypeId) -> bool:
        ...

    @abstractmethod
    def allocated_quantity(
        self, event_id: EventId, exclude_ticket_type_id: TicketTypeId | None = None
    ) -> int:
        """Return remaining inventory plus non-refunded issued tickets for an event."""
        ...

    @abstractmethod
    def dashboard_metrics(self, organizer_id: int) -> DashboardMetrics:
        """Aggregate sales across every event owned by the organizer."""
        ...


class TicketStore(ABC):
    """Interface for inventory, ticket and audit persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a unit of work: everything inside commits or rolls back together."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        ...

    @abstractmethod
    def get_remaining(self, ticket_type_id: TicketTypeId) -> int | None:
        """Return the remaining quantity, or None if the ticket type does not exist."""
        ...

    @abstractmethod
    def decrement_remaining(self, ticket_type_id: TicketTypeId, amount: int) -> bool:
        """Atomically subtract ``amount`` if at least that much remains.

        Returns False, changing nothing, when remaining < amount.
        """
        ...

    @abstractmethod
    def increment_remaining(self, ticket_type_id: TicketTypeId, amount: int) -> bool:
        """Add ``amount`` to the remaining quantity. False if the type is gone."""
        ...

    @abstractmethod
    def create_tickets(
        self, ticket_type: TicketType, holder_id: int, quantity: int, purchased_at: datetime
    ) -> list[Ticket]:
        """Create ``quantity`` active tickets for the holder."""
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def transition_ticket(
        self,
        ticket_id: TicketId,
        expected: TicketStatus,
        new_status: TicketStatus,
        holder_id: int | None = None,
    ) -> Ticket | None:
        """Move a ticket from ``expected`` to ``new_status``, optionally reassigning it.

        Returns None, changing nothing, when the ticket is no longer in ``expected``.
        """
        ...

    @abstractmethod
    def find_user_id_by_email(self, email: str) -> int | None:
        ...

    @abstractmethod
    def record_transaction(
        self,
        type: TransactionType,
        amount: Money,
        user_id: int,
        event_id: EventId | None = None,
        ticket_id: TicketId | None = None,
    ) -> AuditTransaction:
        ...

    @abstractmethod
    def list_tickets_for_holder(self, holder_id: int) -> list[Ticket]:
        """Return the holder's tickets, most recently purchased first."""
        ...

    @abstractmethod
    def list_tickets_for_event(self, event_id: EventId) -> list[Ticket]:
        ...
