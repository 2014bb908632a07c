"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from django.core.cache import cache
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.cache import EVENT_LIST_KEY, catalog_timeout, event_detail_key
from ticketing.domain import EventId
from ticketing.handlers.auth import current_actor
from ticketing.handlers.serializers import (
    DashboardMetricsSerializer,
    EventInputSerializer,
    EventSerializer,
    PurchaseInputSerializer,
    TicketSerializer,
    TicketTypeInputSerializer,
    TicketTypeSerializer,
    TransferInputSerializer,
)
from ticketing.services import (
    EventService,
    TicketIssuanceService,
    TicketLifecycleManager,
)
from ticketing.services.common import parse_id
from ticketing.stores.django_store import DjangoEventStore, DjangoTicketStore


def event_service() -> EventService:
    return EventService(DjangoEventStore())


def issuance_service() -> TicketIssuanceService:
    return TicketIssuanceService(DjangoTicketStore())


def lifecycle_manager() -> TicketLifecycleManager:
    return TicketLifecycleManager(DjangoTicketStore())


def paginated(view: APIView, request: Request, items: list) -> Response:
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(items, request, view=view)
    return paginator.get_paginated_response(page)


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request: Request) -> Response:
        category = request.query_params.get("category")
        search = request.query_params.get("q")
        cacheable = not category and not search

        data = cache.get(EVENT_LIST_KEY) if cacheable else None
        if data is None:
            events = event_service().list_events(category=category, search=search)
            data = EventSerializer(events, many=True).data
            if cacheable:
                cache.set(EVENT_LIST_KEY, data, catalog_timeout())
        return paginated(self, request, list(data))

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = event_service().create_event(current_actor(request), serializer.validated_data)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request: Request, event_id: str) -> Response:
        key = parse_id(EventId, event_id, "event ID")
        cached = cache.get(event_detail_key(key))
        if cached is not None:
            return Response(cached)

        service = event_service()
        actor = current_actor(request)
        event = service.get_event(event_id, actor)
        data = {
            **EventSerializer(event).data,
            "ticket_types": TicketTypeSerializer(
                service.list_ticket_types(event_id, actor), many=True
            ).data,
        }
        # Drafts are per-viewer, only the public view is shared.
        if event.is_published:
            cache.set(event_detail_key(key), data, catalog_timeout())
        return Response(data)

    def patch(self, request: Request, event_id: str) -> Response:
        serializer = EventInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        event = event_service().update_event(
            current_actor(request), event_id, serializer.validated_data
        )
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        event_service().delete_event(current_actor(request), event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TicketTypeListView(APIView):
    """Handler for GET/POST /api/events/{event_id}/ticket-types"""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request: Request, event_id: str) -> Response:
        ticket_types = event_service().list_ticket_types(event_id, current_actor(request))
        return Response(TicketTypeSerializer(ticket_types, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TicketTypeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket_type = event_service().create_ticket_type(
            current_actor(request), event_id, serializer.validated_data
        )
        return Response(TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(APIView):
    """Handler for PATCH/DELETE /api/ticket-types/{ticket_type_id}"""

    def patch(self, request: Request, ticket_type_id: str) -> Response:
        serializer = TicketTypeInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        ticket_type = event_service().update_ticket_type(
            current_actor(request), ticket_type_id, serializer.validated_data
        )
        return Response(TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, ticket_type_id: str) -> Response:
        event_service().delete_ticket_type(current_actor(request), ticket_type_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PurchaseView(APIView):
    """Handler for POST /api/events/{event_id}/ticket-types/{ticket_type_id}/purchase"""

    def post(self, request: Request, event_id: str, ticket_type_id: str) -> Response:
        serializer = PurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tickets = issuance_service().purchase(
            current_actor(request),
            event_id,
            ticket_type_id,
            serializer.validated_data["quantity"],
        )
        return Response(
            {"tickets": TicketSerializer(tickets, many=True).data},
            status=status.HTTP_201_CREATED,
        )


class OrganizerEventListView(APIView):
    """Handler for GET /api/organizer/events"""

    def get(self, request: Request) -> Response:
        events = event_service().list_organizer_events(current_actor(request))
        return paginated(self, request, EventSerializer(events, many=True).data)


class OrganizerMetricsView(APIView):
    """Handler for GET /api/organizer/metrics"""

    def get(self, request: Request) -> Response:
        metrics = event_service().dashboard_metrics(current_actor(request))
        return Response(DashboardMetricsSerializer(metrics).data)


class EventTicketListView(APIView):
    """Handler for GET /api/events/{event_id}/tickets"""

    def get(self, request: Request, event_id: str) -> Response:
        tickets = lifecycle_manager().tickets_for_event(current_actor(request), event_id)
        return paginated(self, request, TicketSerializer(tickets, many=True).data)


class TicketListView(APIView):
    """Handler for GET /api/tickets"""

    def get(self, request: Request) -> Response:
        tickets = lifecycle_manager().tickets_for_holder(current_actor(request))
        return paginated(self, request, TicketSerializer(tickets, many=True).data)


class RedeemTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/redeem"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = lifecycle_manager().redeem(current_actor(request), ticket_id)
        return Response(TicketSerializer(ticket).data)


class TransferTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/transfer"""

    def post(self, request: Request, ticket_id: str) -> Response:
        serializer = TransferInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = lifecycle_manager().transfer(
            current_actor(request), ticket_id, serializer.validated_data["recipient"]
        )
        return Response(TicketSerializer(ticket).data)


class RefundTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/refund"""

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = lifecycle_manager().refund(current_actor(request), ticket_id)
        return Response(TicketSerializer(ticket).data)
