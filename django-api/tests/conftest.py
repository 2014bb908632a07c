"""Pytest configuration and shared fixtures."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from fakes import InMemoryTicketStore, make_event, make_ticket_type
from ticketing.domain import Actor, Role


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


# In-memory fixtures for service tests

ORGANIZER = Actor(id=1, role=Role.ORGANIZER)
BUYER_A = Actor(id=2, role=Role.ATTENDEE)
BUYER_B = Actor(id=3, role=Role.ATTENDEE)
ADMIN = Actor(id=4, role=Role.ADMIN)
STRANGER = Actor(id=5, role=Role.ATTENDEE)


@pytest.fixture
def store() -> InMemoryTicketStore:
    store = InMemoryTicketStore()
    store.add_user(BUYER_A.id, "a@example.com")
    store.add_user(BUYER_B.id, "b@example.com")
    store.add_user(STRANGER.id, "stranger@example.com")
    return store


@pytest.fixture
def event(store):
    return store.add_event(make_event(organizer_id=ORGANIZER.id))


@pytest.fixture
def ticket_type(store, event):
    return store.add_ticket_type(make_ticket_type(event, remaining=10, max_per_order=4))


# Database fixtures for store and API tests


def make_user(django_user_model, username: str, role: str = "attendee", **extra):
    user = django_user_model.objects.create_user(
        username=username, email=f"{username}@example.com", password="pw-123456", **extra
    )
    user.profile.role = role
    user.profile.save()
    return user


@pytest.fixture
def organizer(db, django_user_model):
    return make_user(django_user_model, "olivia", role="organizer")


@pytest.fixture
def attendee(db, django_user_model):
    return make_user(django_user_model, "arjun")


@pytest.fixture
def other_attendee(db, django_user_model):
    return make_user(django_user_model, "bea")


@pytest.fixture
def admin_user(db, django_user_model):
    return make_user(django_user_model, "root", role="admin")


@pytest.fixture
def db_event(organizer):
    from ticketing.models import Event

    return Event.objects.create(
        organizer=organizer,
        title="Harbor Lights Festival",
        description="Two nights of music by the water",
        location="Pier 7",
        category="music",
        starts_at=timezone.now() + timedelta(days=30),
        status=Event.Status.ON_SALE,
        total_capacity=100,
    )


@pytest.fixture
def db_ticket_type(db_event):
    from ticketing.models import TicketType

    return TicketType.objects.create(
        event=db_event,
        name="General Admission",
        price=Decimal("20.00"),
        quantity=10,
        max_per_order=4,
    )
