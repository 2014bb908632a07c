"""Event service - catalog reads and organizer-side event management.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from ticketing.domain import (
    Actor,
    DashboardMetrics,
    Event,
    EventId,
    EventStatus,
    Money,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.errors import (
    CapacityExceededError,
    EventHasTicketsError,
    EventNotFoundError,
    InvalidRequestError,
    TicketTypeNotFoundError,
)
from ticketing.domain.policies import Capability, is_allowed, require
from ticketing.services.common import parse_id, require_actor, store_boundary
from ticketing.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

EVENT_FIELDS = frozenset(
    {
        "title",
        "description",
        "location",
        "address",
        "category",
        "starts_at",
        "status",
        "total_capacity",
        "image_url",
    }
)
TICKET_TYPE_FIELDS = frozenset({"name", "description", "price", "quantity", "max_per_order"})


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def list_events(self, category: str | None = None, search: str | None = None) -> list[Event]:
        """Return published events. A category of "all" means no filter."""
        if category and category.lower() == "all":
            category = None
        with store_boundary("list_events"):
            return self._store.list_events(category=category or None, search=search or None)

    def list_organizer_events(self, actor: Actor | None) -> list[Event]:
        actor = require_actor(actor, "You must be logged in to view your events")
        with store_boundary("list_organizer_events"):
            return self._store.list_events_for_organizer(actor.id)

    def dashboard_metrics(self, actor: Actor | None) -> DashboardMetrics:
        """Return revenue, tickets sold, active events and attendees for the
        organizer's own events.

        Raises:
            ForbiddenError: If the actor is not an organizer or admin.
        """
        actor = require_actor(actor, "You must be logged in to view your metrics")
        require(actor, Capability.VIEW_DASHBOARD)
        with store_boundary("dashboard_metrics"):
            return self._store.dashboard_metrics(actor.id)

    def get_event(self, event_id: str, actor: Actor | None = None) -> Event:
        """Return an event by ID.

        Draft events are only visible to their organizer and admins.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist or is not visible.
        """
        key = parse_id(EventId, event_id, "event ID")
        with store_boundary("get_event"):
            return self._visible_event(key, actor)

    def list_ticket_types(self, event_id: str, actor: Actor | None = None) -> list[TicketType]:
        key = parse_id(EventId, event_id, "event ID")
        with store_boundary("list_ticket_types"):
            self._visible_event(key, actor)
            return self._store.list_ticket_types(key)

    def create_event(self, actor: Actor | None, fields: dict[str, Any]) -> Event:
        actor = require_actor(actor, "You must be logged in to create an event")
        require(actor, Capability.CREATE_EVENT)
        fields = _clean_event_fields(fields)
        for required in ("title", "location", "starts_at", "total_capacity"):
            if fields.get(required) in (None, ""):
                raise InvalidRequestError(f"{required.replace('_', ' ').capitalize()} is required")
        fields.setdefault("status", EventStatus.DRAFT)

        with store_boundary("create_event"):
            event = self._store.create_event(actor.id, fields)
        logger.info("Event %s created by user %s", event.id, actor.id)
        return event

    def update_event(self, actor: Actor | None, event_id: str, changes: dict[str, Any]) -> Event:
        """Apply organizer edits to an event.

        Raises:
            ForbiddenError: If the actor does not own the event.
            CapacityExceededError: If the new capacity is below what is allocated.
        """
        actor = require_actor(actor, "You must be logged in to update an event")
        key = parse_id(EventId, event_id, "event ID")
        changes = _clean_event_fields(changes)

        with store_boundary("update_event"), self._store.atomic():
            event = self._managed_event(actor, key, lock=True)
            if "total_capacity" in changes:
                allocated = self._store.allocated_quantity(key)
                if changes["total_capacity"] < allocated:
                    raise CapacityExceededError(allocated, changes["total_capacity"])
            if not changes:
                return event
            updated = self._store.update_event(key, changes)
        logger.info("Event %s updated by user %s", key, actor.id)
        return updated

    def delete_event(self, actor: Actor | None, event_id: str) -> None:
        """Delete an event that has no issued tickets."""
        actor = require_actor(actor, "You must be logged in to delete an event")
        key = parse_id(EventId, event_id, "event ID")
        with store_boundary("delete_event"):
            self._managed_event(actor, key)
            if self._store.event_has_tickets(key):
                raise EventHasTicketsError("event")
            self._store.delete_event(key)
        logger.info("Event %s deleted by user %s", key, actor.id)

    def create_ticket_type(
        self, actor: Actor | None, event_id: str, fields: dict[str, Any]
    ) -> TicketType:
        actor = require_actor(actor, "You must be logged in to add ticket types")
        key = parse_id(EventId, event_id, "event ID")
        fields = _clean_ticket_type_fields(fields)
        for required in ("name", "price", "quantity"):
            if fields.get(required) in (None, ""):
                raise InvalidRequestError(f"{required.capitalize()} is required")

        with store_boundary("create_ticket_type"), self._store.atomic():
            event = self._managed_event(actor, key, lock=True)
            allocated = self._store.allocated_quantity(key) + fields["quantity"]
            if allocated > event.total_capacity.value:
                raise CapacityExceededError(allocated, event.total_capacity.value)
            ticket_type = self._store.create_ticket_type(key, fields)
        logger.info("Ticket type %s added to event %s", ticket_type.id, key)
        return ticket_type

    def update_ticket_type(
        self, actor: Actor | None, ticket_type_id: str, changes: dict[str, Any]
    ) -> TicketType:
        """Edit a ticket type. A new quantity overwrites the remaining inventory."""
        actor = require_actor(actor, "You must be logged in to edit ticket types")
        key = parse_id(TicketTypeId, ticket_type_id, "ticket type ID")
        changes = _clean_ticket_type_fields(changes)

        with store_boundary("update_ticket_type"), self._store.atomic():
            ticket_type = self._get_ticket_type(key)
            event = self._managed_event(actor, ticket_type.event_id, lock=True)
            if "quantity" in changes:
                allocated = (
                    self._store.allocated_quantity(event.id, exclude_ticket_type_id=key)
                    + changes["quantity"]
                )
                if allocated > event.total_capacity.value:
                    raise CapacityExceededError(allocated, event.total_capacity.value)
            if not changes:
                return ticket_type
            updated = self._store.update_ticket_type(key, changes)
        logger.info("Ticket type %s updated by user %s", key, actor.id)
        return updated

    def delete_ticket_type(self, actor: Actor | None, ticket_type_id: str) -> None:
        actor = require_actor(actor, "You must be logged in to delete ticket types")
        key = parse_id(TicketTypeId, ticket_type_id, "ticket type ID")
        with store_boundary("delete_ticket_type"):
            ticket_type = self._get_ticket_type(key)
            self._managed_event(actor, ticket_type.event_id)
            if self._store.ticket_type_has_tickets(key):
                raise EventHasTicketsError("ticket type")
            self._store.delete_ticket_type(key)
        logger.info("Ticket type %s deleted by user %s", key, actor.id)

    def _visible_event(self, key: EventId, actor: Actor | None) -> Event:
        event = self._store.get_event(key)
        if event is None:
            raise EventNotFoundError(str(key))
        if not event.is_published and not is_allowed(actor, Capability.MANAGE_EVENT, event=event):
            raise EventNotFoundError(str(key))
        return event

    def _managed_event(self, actor: Actor, key: EventId, lock: bool = False) -> Event:
        # Locking serializes capacity checks with the write that follows them.
        event = self._store.lock_event(key) if lock else self._store.get_event(key)
        if event is None:
            raise EventNotFoundError(str(key))
        require(actor, Capability.MANAGE_EVENT, event=event)
        return event

    def _get_ticket_type(self, key: TicketTypeId) -> TicketType:
        ticket_type = self._store.get_ticket_type(key)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(key))
        return ticket_type


def _clean_event_fields(fields: dict[str, Any]) -> dict[str, Any]:
    cleaned = {name: value for name, value in fields.items() if name in EVENT_FIELDS}
    if "status" in cleaned and not isinstance(cleaned["status"], EventStatus):
        try:
            cleaned["status"] = EventStatus(cleaned["status"])
        except ValueError:
            raise InvalidRequestError(f"Unknown event status: {cleaned['status']}") from None
    if "total_capacity" in cleaned:
        cleaned["total_capacity"] = _whole_number(cleaned["total_capacity"], "Capacity", minimum=1)
    return cleaned


def _clean_ticket_type_fields(fields: dict[str, Any]) -> dict[str, Any]:
    cleaned = {name: value for name, value in fields.items() if name in TICKET_TYPE_FIELDS}
    if "price" in cleaned:
        try:
            cleaned["price"] = Money(Decimal(str(cleaned["price"]))).amount
        except (InvalidOperation, ValueError):
            raise InvalidRequestError("Price must be a non-negative amount") from None
    if "quantity" in cleaned:
        cleaned["quantity"] = _whole_number(cleaned["quantity"], "Quantity", minimum=0)
    if "max_per_order" in cleaned:
        cleaned["max_per_order"] = _whole_number(
            cleaned["max_per_order"], "Maximum per order", minimum=1
        )
    return cleaned


def _whole_number(value: Any, label: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise InvalidRequestError(f"{label} must be a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{label} must be a whole number") from None
    if number != value and str(number) != str(value).strip():
        raise InvalidRequestError(f"{label} must be a whole number")
    if number < minimum:
        raise InvalidRequestError(f"{label} must be at least {minimum}")
    return number
