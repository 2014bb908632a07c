"""Django signals for cache invalidation and profile provisioning."""

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from ticketing import cache
from ticketing.models import Event, Profile, TicketType


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile(sender, instance, created, **kwargs):
    """Give every new user an attendee profile."""
    if created:
        Profile.objects.get_or_create(user=instance)


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    event_id = instance.pk
    transaction.on_commit(lambda: cache.invalidate_event(event_id))


@receiver([post_save, post_delete], sender=TicketType)
def invalidate_ticket_type_cache(sender, instance, **kwargs):
    """Invalidate the owning event's caches when a ticket type changes."""
    event_id = instance.event_id
    transaction.on_commit(lambda: cache.invalidate_event(event_id))
