"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    EventStatus,
    Money,
    Role,
    TicketId,
    TicketStatus,
    TicketTypeId,
    TransactionStatus,
    TransactionType,
)

PURCHASABLE_STATUSES = frozenset({EventStatus.ON_SALE, EventStatus.UPCOMING})


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an operation."""

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_organizer(self) -> bool:
        return self.role in (Role.ORGANIZER, Role.ADMIN)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer_id: int
    title: str
    description: str
    location: str
    address: str | None
    category: str | None
    starts_at: datetime
    status: EventStatus
    total_capacity: Capacity
    image_url: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_published(self) -> bool:
        return self.status is not EventStatus.DRAFT

    @property
    def is_on_sale(self) -> bool:
        return self.status in PURCHASABLE_STATUSES


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType.

    ``quantity`` is the remaining inventory, not the amount originally put on sale.
    """

    id: TicketTypeId
    event_id: EventId
    name: str
    description: str | None
    price: Money
    quantity: Capacity
    max_per_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Ticket:
    """Domain representation of an issued Ticket."""

    id: TicketId
    ticket_type_id: TicketTypeId
    event_id: EventId
    holder_id: int
    status: TicketStatus
    purchased_at: datetime
    blockchain_token_id: str | None = None
    label: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status is TicketStatus.ACTIVE


@dataclass(frozen=True)
class AuditTransaction:
    """Append-only audit record. Never consulted for inventory or ownership."""

    id: str
    type: TransactionType
    amount: Money
    status: TransactionStatus
    user_id: int
    event_id: EventId | None
    ticket_id: TicketId | None
    created_at: datetime


@dataclass(frozen=True)
class TicketTypeSales:
    """Tickets issued for one ticket type."""

    ticket_type_id: TicketTypeId
    name: str
    tickets_sold: int


@dataclass(frozen=True)
class DashboardMetrics:
    """Sales figures across every event an organizer owns."""

    total_revenue: Money
    tickets_sold: int
    active_events: int
    total_attendees: int
    sales_by_ticket_type: tuple[TicketTypeSales, ...] = ()
