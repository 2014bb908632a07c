from ticketing.domain.models import (
    Actor,
    AuditTransaction,
    DashboardMetrics,
    Event,
    Ticket,
    TicketType,
    TicketTypeSales,
)
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

__all__ = [
    "Actor",
    "AuditTransaction",
    "DashboardMetrics",
    "Event",
    "Ticket",
    "TicketType",
    "TicketTypeSales",
    "EventId",
    "TicketTypeId",
    "TicketId",
    "Money",
    "Capacity",
    "Role",
    "EventStatus",
    "TicketStatus",
    "TransactionType",
    "TransactionStatus",
]
