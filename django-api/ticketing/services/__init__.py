from ticketing.services.event_service import EventService
from ticketing.services.issuance_service import TicketIssuanceService
from ticketing.services.ledger import EventCapacityLedger
from ticketing.services.lifecycle_service import TicketLifecycleManager

__all__ = [
    "EventService",
    "EventCapacityLedger",
    "TicketIssuanceService",
    "TicketLifecycleManager",
]
