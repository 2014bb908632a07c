"""Unit tests for EventService.

These test error handling and domain error mapping against a mocked store.
Run with: pytest tests/test_services.py -v
"""

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import ADMIN, BUYER_A, ORGANIZER
from fakes import make_event, make_ticket_type
from ticketing.domain import DashboardMetrics, EventStatus, Money
from ticketing.domain.errors import (
    AuthenticationRequiredError,
    CapacityExceededError,
    EventHasTicketsError,
    EventNotFoundError,
    ForbiddenError,
    InvalidIdError,
    InvalidRequestError,
    StoreUnavailableError,
)
from ticketing.services import EventService
from ticketing.stores.interfaces import EventStore, StoreError


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock(spec=EventStore)
    store.lock_event.side_effect = lambda event_id: store.get_event(event_id)
    return store


@pytest.fixture
def service(store) -> EventService:
    return EventService(store)


@pytest.fixture
def event():
    return make_event(organizer_id=ORGANIZER.id, capacity=100)


class TestEventCatalog:
    def test_get_event_invalid_id_raises_error(self, service):
        with pytest.raises(InvalidIdError):
            service.get_event("not-a-uuid")

    def test_get_event_not_found_raises_error(self, service, store, event):
        store.get_event.return_value = None
        with pytest.raises(EventNotFoundError):
            service.get_event(str(event.id))

    def test_draft_event_hidden_from_public(self, service, store, event):
        store.get_event.return_value = replace(event, status=EventStatus.DRAFT)
        with pytest.raises(EventNotFoundError):
            service.get_event(str(event.id), BUYER_A)

    def test_draft_event_visible_to_organizer(self, service, store, event):
        draft = replace(event, status=EventStatus.DRAFT)
        store.get_event.return_value = draft
        assert service.get_event(str(event.id), ORGANIZER) == draft

    def test_list_ticket_types_event_not_found_raises_error(self, service, store, event):
        store.get_event.return_value = None
        with pytest.raises(EventNotFoundError):
            service.list_ticket_types(str(event.id))
        store.list_ticket_types.assert_not_called()

    def test_category_all_means_no_filter(self, service, store):
        store.list_events.return_value = []
        service.list_events(category="all", search="")
        store.list_events.assert_called_once_with(category=None, search=None)

    def test_store_failure_becomes_store_unavailable(self, service, store):
        store.list_events.side_effect = StoreError("timeout")
        with pytest.raises(StoreUnavailableError):
            service.list_events()


class TestEventManagement:
    def fields(self, **overrides):
        return {
            "title": "Harbor Lights Festival",
            "location": "Pier 7",
            "starts_at": datetime(2026, 6, 1, 20, 0, tzinfo=UTC),
            "total_capacity": 100,
            **overrides,
        }

    def test_create_event_requires_login(self, service):
        with pytest.raises(AuthenticationRequiredError):
            service.create_event(None, self.fields())

    def test_attendees_cannot_create_events(self, service, store):
        with pytest.raises(ForbiddenError, match="Only organizers"):
            service.create_event(BUYER_A, self.fields())
        store.create_event.assert_not_called()

    def test_create_event_defaults_to_draft(self, service, store, event):
        store.create_event.return_value = event
        service.create_event(ORGANIZER, self.fields(unknown="dropped"))

        organizer_id, fields = store.create_event.call_args.args
        assert organizer_id == ORGANIZER.id
        assert fields["status"] is EventStatus.DRAFT
        assert "unknown" not in fields

    @pytest.mark.parametrize("capacity", [0, -5, "many", 2.5])
    def test_create_event_rejects_bad_capacity(self, service, capacity):
        with pytest.raises(InvalidRequestError):
            service.create_event(ORGANIZER, self.fields(total_capacity=capacity))

    def test_create_event_requires_title(self, service):
        with pytest.raises(InvalidRequestError, match="Title is required"):
            service.create_event(ORGANIZER, self.fields(title=""))

    def test_update_event_forbidden_for_other_organizers(self, service, store, event):
        store.get_event.return_value = replace(event, organizer_id=99)
        with pytest.raises(ForbiddenError):
            service.update_event(ORGANIZER, str(event.id), {"title": "Mine now"})
        store.update_event.assert_not_called()

    def test_admin_may_update_any_event(self, service, store, event):
        store.get_event.return_value = replace(event, organizer_id=99)
        store.update_event.return_value = event
        service.update_event(ADMIN, str(event.id), {"title": "Renamed"})
        store.update_event.assert_called_once()

    def test_capacity_cannot_drop_below_allocation(self, service, store, event):
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 80
        with pytest.raises(CapacityExceededError):
            service.update_event(ORGANIZER, str(event.id), {"total_capacity": 50})

    def test_unknown_status_is_rejected(self, service, store, event):
        with pytest.raises(InvalidRequestError, match="Unknown event status"):
            service.update_event(ORGANIZER, str(event.id), {"status": "postponed"})

    def test_delete_event_with_tickets_is_refused(self, service, store, event):
        store.get_event.return_value = event
        store.event_has_tickets.return_value = True
        with pytest.raises(EventHasTicketsError):
            service.delete_event(ORGANIZER, str(event.id))
        store.delete_event.assert_not_called()

    def test_delete_event_without_tickets(self, service, store, event):
        store.get_event.return_value = event
        store.event_has_tickets.return_value = False
        service.delete_event(ORGANIZER, str(event.id))
        store.delete_event.assert_called_once_with(event.id)


class TestTicketTypeManagement:
    def test_create_ticket_type_within_capacity(self, service, store, event):
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 60
        store.create_ticket_type.return_value = make_ticket_type(event)

        service.create_ticket_type(
            ORGANIZER, str(event.id), {"name": "VIP", "price": "99.5", "quantity": 40}
        )

        _, fields = store.create_ticket_type.call_args.args
        assert fields["price"] == Decimal("99.5")
        assert fields["quantity"] == 40

    def test_create_ticket_type_over_capacity(self, service, store, event):
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 60
        with pytest.raises(CapacityExceededError) as excinfo:
            service.create_ticket_type(
                ORGANIZER, str(event.id), {"name": "VIP", "price": "10", "quantity": 41}
            )
        assert excinfo.value.allocated == 101
        store.create_ticket_type.assert_not_called()

    def test_negative_price_rejected(self, service, event):
        with pytest.raises(InvalidRequestError, match="Price"):
            service.create_ticket_type(
                ORGANIZER, str(event.id), {"name": "VIP", "price": "-1", "quantity": 1}
            )

    def test_update_quantity_excludes_own_allocation(self, service, store, event):
        ticket_type = make_ticket_type(event, remaining=10)
        store.get_ticket_type.return_value = ticket_type
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 90
        store.update_ticket_type.return_value = ticket_type

        service.update_ticket_type(ORGANIZER, str(ticket_type.id), {"quantity": 10})

        store.allocated_quantity.assert_called_once_with(
            event.id, exclude_ticket_type_id=ticket_type.id
        )
        store.update_ticket_type.assert_called_once_with(ticket_type.id, {"quantity": 10})

    def test_delete_ticket_type_with_tickets_is_refused(self, service, store, event):
        ticket_type = make_ticket_type(event)
        store.get_ticket_type.return_value = ticket_type
        store.get_event.return_value = event
        store.ticket_type_has_tickets.return_value = True
        with pytest.raises(EventHasTicketsError, match="ticket type"):
            service.delete_ticket_type(ORGANIZER, str(ticket_type.id))

    def test_capacity_check_runs_under_event_lock(self, service, store, event):
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 0
        store.create_ticket_type.return_value = make_ticket_type(event)

        service.create_ticket_type(
            ORGANIZER, str(event.id), {"name": "VIP", "price": "10", "quantity": 5}
        )

        calls = [name for name, _, _ in store.mock_calls if not name.startswith("get_event")]
        assert calls == [
            "atomic",
            "atomic().__enter__",
            "lock_event",
            "allocated_quantity",
            "create_ticket_type",
            "atomic().__exit__",
        ]

    def test_capacity_edit_locks_the_event(self, service, store, event):
        store.get_event.return_value = event
        store.allocated_quantity.return_value = 20
        store.update_event.return_value = event

        service.update_event(ORGANIZER, str(event.id), {"total_capacity": 40})

        store.lock_event.assert_called_once_with(event.id)
        store.atomic.return_value.__exit__.assert_called_once()


class TestDashboardMetrics:
    def test_requires_login(self, service):
        with pytest.raises(AuthenticationRequiredError):
            service.dashboard_metrics(None)

    def test_attendees_are_forbidden(self, service, store):
        with pytest.raises(ForbiddenError, match="sales metrics"):
            service.dashboard_metrics(BUYER_A)
        store.dashboard_metrics.assert_not_called()

    def test_scoped_to_the_organizer(self, service, store):
        metrics = DashboardMetrics(
            total_revenue=Money(Decimal("40.00")),
            tickets_sold=2,
            active_events=1,
            total_attendees=1,
        )
        store.dashboard_metrics.return_value = metrics

        assert service.dashboard_metrics(ORGANIZER) == metrics
        store.dashboard_metrics.assert_called_once_with(ORGANIZER.id)

    def test_store_failure_becomes_store_unavailable(self, service, store):
        store.dashboard_metrics.side_effect = StoreError("timeout")
        with pytest.raises(StoreUnavailableError):
            service.dashboard_metrics(ORGANIZER)
