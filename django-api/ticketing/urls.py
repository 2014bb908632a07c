from django.urls import path

from ticketing.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/ticket-types",
        TicketTypeListView.as_view(),
        name="ticket-type-list",
    ),
    path(
        "events/<str:event_id>/ticket-types/<str:ticket_type_id>/purchase",
        PurchaseView.as_view(),
        name="ticket-purchase",
    ),
    path(
        "events/<str:event_id>/tickets",
        EventTicketListView.as_view(),
        name="event-ticket-list",
    ),
    path(
        "ticket-types/<str:ticket_type_id>",
        TicketTypeDetailView.as_view(),
        name="ticket-type-detail",
    ),
    path("organizer/events", OrganizerEventListView.as_view(), name="organizer-event-list"),
    path("organizer/metrics", OrganizerMetricsView.as_view(), name="organizer-metrics"),
    path("tickets", TicketListView.as_view(), name="ticket-list"),
    path("tickets/<str:ticket_id>/redeem", RedeemTicketView.as_view(), name="ticket-redeem"),
    path("tickets/<str:ticket_id>/transfer", TransferTicketView.as_view(), name="ticket-transfer"),
    path("tickets/<str:ticket_id>/refund", RefundTicketView.as_view(), name="ticket-refund"),
]
