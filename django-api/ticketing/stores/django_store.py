"""Django ORM implementations of the EventStore and TicketStore."""

import functools
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import Count, F, Sum
from django.utils import timezone

from ticketing import cache, models
from ticketing.domain import (
    AuditTransaction,
    Capacity,
    DashboardMetrics,
    Event,
    EventId,
    EventStatus,
    Money,
    Ticket,
    TicketId,
    TicketStatus,
    TicketType,
    TicketTypeId,
    TicketTypeSales,
    TransactionStatus,
    TransactionType,
)
from ticketing.stores.interfaces import EventStore, StoreError, TicketStore


def _translate_errors(method):
    """Re-raise database failures as StoreError so services stay ORM-agnostic."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except DatabaseError as exc:
            raise StoreError(f"{method.__name__} failed: {exc}") from exc

    return wrapper


@contextmanager
def _atomic() -> Iterator[None]:
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        raise StoreError(f"transaction failed: {exc}") from exc


def _columns(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in fields.items()}


def to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        organizer_id=row.organizer_id,
        title=row.title,
        description=row.description,
        location=row.location,
        address=row.address,
        category=row.category,
        starts_at=row.starts_at,
        status=EventStatus(row.status),
        total_capacity=Capacity(row.total_capacity),
        image_url=row.image_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def to_ticket_type(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        description=row.description,
        price=Money(row.price),
        quantity=Capacity(row.quantity),
        max_per_order=row.max_per_order,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def to_ticket(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        event_id=EventId(row.event_id),
        holder_id=row.holder_id,
        status=TicketStatus(row.status),
        purchased_at=row.purchased_at,
        blockchain_token_id=row.blockchain_token_id,
        label=row.label,
    )


def to_transaction(row: models.Transaction) -> AuditTransaction:
    return AuditTransaction(
        id=str(row.id),
        type=TransactionType(row.type),
        amount=Money(row.amount),
        status=TransactionStatus(row.status),
        user_id=row.user_id,
        event_id=EventId(row.event_id) if row.event_id else None,
        ticket_id=TicketId(row.ticket_id) if row.ticket_id else None,
        created_at=row.created_at,
    )


class DjangoEventStore(EventStore):
    """Django ORM event catalog store."""

    def atomic(self):
        return _atomic()

    @_translate_errors
    def list_events(
        self, category: str | None = None, search: str | None = None
    ) -> list[Event]:
        queryset = models.Event.objects.exclude(status=models.Event.Status.DRAFT)
        if category:
            queryset = queryset.filter(category__iexact=category)
        if search:
            queryset = queryset.filter(title__icontains=search)
        return [to_event(row) for row in queryset.order_by("starts_at")]

    @_translate_errors
    def list_events_for_organizer(self, organizer_id: int) -> list[Event]:
        queryset = models.Event.objects.filter(organizer_id=organizer_id).order_by("-created_at")
        return [to_event(row) for row in queryset]

    @_translate_errors
    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(id=event_id.value).first()
        return to_event(row) if row else None

    @_translate_errors
    def lock_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_for_update().filter(id=event_id.value).first()
        return to_event(row) if row else None

    @_translate_errors
    def create_event(self, organizer_id: int, fields: dict[str, Any]) -> Event:
        row = models.Event.objects.create(organizer_id=organizer_id, **_columns(fields))
        return to_event(row)

    @_translate_errors
    def update_event(self, event_id: EventId, changes: dict[str, Any]) -> Event:
        row = models.Event.objects.get(id=event_id.value)
        for name, value in _columns(changes).items():
            setattr(row, name, value)
        row.save()
        return to_event(row)

    @_translate_errors
    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(id=event_id.value).delete()

    @_translate_errors
    def event_has_tickets(self, event_id: EventId) -> bool:
        return models.Ticket.objects.filter(event_id=event_id.value).exists()

    @_translate_errors
    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        queryset = models.TicketType.objects.filter(event_id=event_id.value).order_by("created_at")
        return [to_ticket_type(row) for row in queryset]

    @_translate_errors
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = models.TicketType.objects.filter(id=ticket_type_id.value).first()
        return to_ticket_type(row) if row else None

    @_translate_errors
    def create_ticket_type(self, event_id: EventId, fields: dict[str, Any]) -> TicketType:
        row = models.TicketType.objects.create(event_id=event_id.value, **_columns(fields))
        return to_ticket_type(row)

    @_translate_errors
    def update_ticket_type(
        self, ticket_type_id: TicketTypeId, changes: dict[str, Any]
    ) -> TicketType:
        row = models.TicketType.objects.get(id=ticket_type_id.value)
        columns = _columns(changes)
        for name, value in columns.items():
            setattr(row, name, value)
        row.save(update_fields=[*columns, "updated_at"])
        return to_ticket_type(row)

    @_translate_errors
    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> None:
        row = models.TicketType.objects.filter(id=ticket_type_id.value).first()
        if row is not None:
            row.delete()

    @_translate_errors
    def ticket_type_has_tickets(self, ticket_type_id: TicketTypeId) -> bool:
        return models.Ticket.objects.filter(ticket_type_id=ticket_type_id.value).exists()

    @_translate_errors
    def allocated_quantity(
        self, event_id: EventId, exclude_ticket_type_id: TicketTypeId | None = None
    ) -> int:
        ticket_types = models.TicketType.objects.filter(event_id=event_id.value)
        if exclude_ticket_type_id is not None:
            ticket_types = ticket_types.exclude(id=exclude_ticket_type_id.value)
        remaining = ticket_types.aggregate(total=Sum("quantity"))["total"] or 0
        issued = (
            models.Ticket.objects.filter(event_id=event_id.value)
            .exclude(status=models.Ticket.Status.REFUNDED)
            .count()
        )
        return remaining + issued

    @_translate_errors
    def dashboard_metrics(self, organizer_id: int) -> DashboardMetrics:
        tickets = models.Ticket.objects.filter(event__organizer_id=organizer_id)
        revenue = models.Transaction.objects.filter(
            event__organizer_id=organizer_id,
            type=models.Transaction.Type.PURCHASE,
            status=models.Transaction.Status.COMPLETED,
        ).aggregate(total=Sum("amount"))["total"]
        active_events = models.Event.objects.filter(
            organizer_id=organizer_id,
            status__in=[models.Event.Status.ON_SALE, models.Event.Status.UPCOMING],
        ).count()
        counts = tickets.aggregate(
            sold=Count("id"), attendees=Count("holder_id", distinct=True)
        )
        by_type = (
            tickets.values("ticket_type_id", "ticket_type__name")
            .annotate(sold=Count("id"))
            .order_by("-sold", "ticket_type__name")
        )
        return DashboardMetrics(
            total_revenue=Money(revenue or Decimal("0")),
            tickets_sold=counts["sold"],
            active_events=active_events,
            total_attendees=counts["attendees"],
            sales_by_ticket_type=tuple(
                TicketTypeSales(
                    ticket_type_id=TicketTypeId(row["ticket_type_id"]),
                    name=row["ticket_type__name"],
                    tickets_sold=row["sold"],
                )
                for row in by_type
            ),
        )


class DjangoTicketStore(TicketStore):
    """Inventory and ticket store using Django ORM.

    Ledger changes are single conditional UPDATE statements, so concurrent
    purchases serialize on the ticket type row instead of racing a
    read-then-write.
    """

    def atomic(self):
        return _atomic()

    @_translate_errors
    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(id=event_id.value).first()
        return to_event(row) if row else None

    @_translate_errors
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = models.TicketType.objects.filter(id=ticket_type_id.value).first()
        return to_ticket_type(row) if row else None

    @_translate_errors
    def get_remaining(self, ticket_type_id: TicketTypeId) -> int | None:
        return (
            models.TicketType.objects.filter(id=ticket_type_id.value)
            .values_list("quantity", flat=True)
            .first()
        )

    @_translate_errors
    def decrement_remaining(self, ticket_type_id: TicketTypeId, amount: int) -> bool:
        updated = models.TicketType.objects.filter(
            id=ticket_type_id.value, quantity__gte=amount
        ).update(quantity=F("quantity") - amount, updated_at=timezone.now())
        if updated:
            self._invalidate_on_commit(ticket_type_id)
        return updated == 1

    @_translate_errors
    def increment_remaining(self, ticket_type_id: TicketTypeId, amount: int) -> bool:
        updated = models.TicketType.objects.filter(id=ticket_type_id.value).update(
            quantity=F("quantity") + amount, updated_at=timezone.now()
        )
        if updated:
            self._invalidate_on_commit(ticket_type_id)
        return updated == 1

    def _invalidate_on_commit(self, ticket_type_id: TicketTypeId) -> None:
        # Queryset.update() sends no signals, so the catalog cache is cleared here.
        event_id = (
            models.TicketType.objects.filter(id=ticket_type_id.value)
            .values_list("event_id", flat=True)
            .first()
        )
        if event_id is not None:
            transaction.on_commit(lambda: cache.invalidate_event(event_id))

    @_translate_errors
    def create_tickets(
        self, ticket_type: TicketType, holder_id: int, quantity: int, purchased_at: datetime
    ) -> list[Ticket]:
        rows = models.Ticket.objects.bulk_create(
            [
                models.Ticket(
                    ticket_type_id=ticket_type.id.value,
                    event_id=ticket_type.event_id.value,
                    holder_id=holder_id,
                    status=models.Ticket.Status.ACTIVE,
                    purchased_at=purchased_at,
                    label=ticket_type.name,
                )
                for _ in range(quantity)
            ]
        )
        return [to_ticket(row) for row in rows]

    @_translate_errors
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.filter(id=ticket_id.value).first()
        return to_ticket(row) if row else None

    @_translate_errors
    def transition_ticket(
        self,
        ticket_id: TicketId,
        expected: TicketStatus,
        new_status: TicketStatus,
        holder_id: int | None = None,
    ) -> Ticket | None:
        changes: dict[str, Any] = {"status": new_status.value, "updated_at": timezone.now()}
        if holder_id is not None:
            changes["holder_id"] = holder_id
        updated = models.Ticket.objects.filter(
            id=ticket_id.value, status=expected.value
        ).update(**changes)
        if not updated:
            return None
        return to_ticket(models.Ticket.objects.get(id=ticket_id.value))

    @_translate_errors
    def find_user_id_by_email(self, email: str) -> int | None:
        return (
            get_user_model()
            .objects.filter(email__iexact=email, is_active=True)
            .order_by("id")
            .values_list("id", flat=True)
            .first()
        )

    @_translate_errors
    def record_transaction(
        self,
        type: TransactionType,
        amount: Money,
        user_id: int,
        event_id: EventId | None = None,
        ticket_id: TicketId | None = None,
    ) -> AuditTransaction:
        row = models.Transaction.objects.create(
            type=type.value,
            amount=amount.amount,
            status=models.Transaction.Status.COMPLETED,
            user_id=user_id,
            event_id=event_id.value if event_id else None,
            ticket_id=ticket_id.value if ticket_id else None,
        )
        return to_transaction(row)

    @_translate_errors
    def list_tickets_for_holder(self, holder_id: int) -> list[Ticket]:
        queryset = models.Ticket.objects.filter(holder_id=holder_id).order_by("-purchased_at")
        return [to_ticket(row) for row in queryset]

    @_translate_errors
    def list_tickets_for_event(self, event_id: EventId) -> list[Ticket]:
        queryset = models.Ticket.objects.filter(event_id=event_id.value).order_by("-purchased_at")
        return [to_ticket(row) for row in queryset]
