from ticketing.handlers.views import (
    EventDetailView,
    EventListView,
    EventTicketListView,
    OrganizerEventListView,
    OrganizerMetricsView,
    PurchaseView,
    RedeemTicketView,
    RefundTicketView,
    TicketListView,
    TicketTypeDetailView,
    TicketTypeListView,
    TransferTicketView,
)

__all__ = [
    "EventDetailView",
    "EventListView",
    "EventTicketListView",
    "OrganizerEventListView",
    "OrganizerMetricsView",
    "PurchaseView",
    "RedeemTicketView",
    "RefundTicketView",
    "TicketListView",
    "TicketTypeDetailView",
    "TicketTypeListView",
    "TransferTicketView",
]
