"""Tests for cache behavior.

Run with: pytest tests/test_cache.py -v
"""

import pytest
from django.core.cache import cache

from ticketing.cache import EVENT_LIST_KEY, event_detail_key
from ticketing.domain import TicketTypeId
from ticketing.stores.django_store import DjangoTicketStore


def prime(event_id):
    cache.set(EVENT_LIST_KEY, ["stale"])
    cache.set(event_detail_key(event_id), {"stale": True})


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on model changes."""

    def test_event_save_invalidates_list_cache(self, db_event, django_capture_on_commit_callbacks):
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True):
            db_event.title = "Harbor Lights Festival 2026"
            db_event.save()
        assert cache.get(EVENT_LIST_KEY) is None

    def test_event_save_invalidates_detail_cache(self, db_event, django_capture_on_commit_callbacks):
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True):
            db_event.save()
        assert cache.get(event_detail_key(db_event.id)) is None

    def test_event_delete_invalidates_detail_cache(self, db_event, django_capture_on_commit_callbacks):
        event_id = db_event.id
        prime(event_id)
        with django_capture_on_commit_callbacks(execute=True):
            db_event.delete()
        assert cache.get(event_detail_key(event_id)) is None

    def test_ticket_type_save_invalidates_event_detail(
        self, db_event, db_ticket_type, django_capture_on_commit_callbacks
    ):
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True):
            db_ticket_type.price = "25.00"
            db_ticket_type.save()
        assert cache.get(event_detail_key(db_event.id)) is None

    def test_ledger_decrement_invalidates_event_detail(
        self, db_event, db_ticket_type, django_capture_on_commit_callbacks
    ):
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True):
            assert DjangoTicketStore().decrement_remaining(TicketTypeId(db_ticket_type.id), 1)
        assert cache.get(event_detail_key(db_event.id)) is None

    def test_failed_decrement_keeps_cache(
        self, db_event, db_ticket_type, django_capture_on_commit_callbacks
    ):
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            assert not DjangoTicketStore().decrement_remaining(TicketTypeId(db_ticket_type.id), 11)
        assert callbacks == []
        assert cache.get(event_detail_key(db_event.id)) == {"stale": True}

    def test_unrelated_event_detail_survives(
        self, db_event, organizer, django_capture_on_commit_callbacks
    ):
        from ticketing.models import Event

        other = Event.objects.create(
            organizer=organizer,
            title="Quiet Reading Night",
            location="Library",
            starts_at=db_event.starts_at,
            total_capacity=20,
        )
        prime(db_event.id)
        with django_capture_on_commit_callbacks(execute=True):
            other.save()
        assert cache.get(event_detail_key(db_event.id)) == {"stale": True}


@pytest.mark.django_db
class TestCachedCatalog:
    def test_event_list_is_cached(self, api_client, db_event):
        api_client.get("/api/events")
        cached = cache.get(EVENT_LIST_KEY)
        assert [item["title"] for item in cached] == ["Harbor Lights Festival"]

    def test_filtered_list_is_not_cached(self, api_client, db_event):
        api_client.get("/api/events", {"category": "music"})
        assert cache.get(EVENT_LIST_KEY) is None

    def test_detail_reflects_purchase_after_commit(
        self, api_client, attendee, db_event, db_ticket_type, django_capture_on_commit_callbacks
    ):
        url = f"/api/events/{db_event.id}"
        assert api_client.get(url).data["ticket_types"][0]["remaining"] == 10

        api_client.force_authenticate(user=attendee)
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(
                f"{url}/ticket-types/{db_ticket_type.id}/purchase", {"quantity": 2}, format="json"
            )
        assert response.status_code == 201

        assert api_client.get(url).data["ticket_types"][0]["remaining"] == 8

    def test_draft_detail_is_not_cached(self, api_client, organizer, db_event):
        db_event.status = "draft"
        db_event.save()
        api_client.force_authenticate(user=organizer)

        assert api_client.get(f"/api/events/{db_event.id}").status_code == 200
        assert cache.get(event_detail_key(db_event.id)) is None
