"""Serializers for transforming domain models to API responses, and for
validating the shape of request bodies before they reach a service.
"""

from rest_framework import serializers

from ticketing.domain import EventStatus


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    organizer_id = serializers.IntegerField()
    title = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    address = serializers.CharField(allow_null=True)
    category = serializers.CharField(allow_null=True)
    starts_at = serializers.DateTimeField()
    status = serializers.CharField(source="status.value")
    total_capacity = serializers.IntegerField(source="total_capacity.value")
    image_url = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source="price.amount")
    remaining = serializers.IntegerField(source="quantity.value")
    max_per_order = serializers.IntegerField()


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.UUIDField(source="id.value")
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    holder_id = serializers.IntegerField()
    status = serializers.CharField(source="status.value")
    purchased_at = serializers.DateTimeField()
    blockchain_token_id = serializers.CharField(allow_null=True)
    label = serializers.CharField(allow_null=True)


class TicketTypeSalesSerializer(serializers.Serializer):
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    name = serializers.CharField()
    tickets_sold = serializers.IntegerField()


class DashboardMetricsSerializer(serializers.Serializer):
    """Serializer for an organizer's DashboardMetrics."""

    total_revenue = serializers.DecimalField(
        max_digits=12, decimal_places=2, source="total_revenue.amount"
    )
    tickets_sold = serializers.IntegerField()
    active_events = serializers.IntegerField()
    total_attendees = serializers.IntegerField()
    sales_by_ticket_type = TicketTypeSalesSerializer(many=True)


class EventInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    location = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=255, allow_null=True, required=False)
    category = serializers.CharField(max_length=100, allow_null=True, required=False)
    starts_at = serializers.DateTimeField()
    status = serializers.ChoiceField(
        choices=[status.value for status in EventStatus], required=False
    )
    total_capacity = serializers.IntegerField()
    image_url = serializers.URLField(max_length=500, allow_null=True, required=False)


class TicketTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(allow_null=True, allow_blank=True, required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    max_per_order = serializers.IntegerField(required=False)


class PurchaseInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(default=1)


class TransferInputSerializer(serializers.Serializer):
    recipient = serializers.CharField(max_length=254)
