"""Catalog cache keys and invalidation helpers."""

import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

EVENT_LIST_KEY = "events:list"


def event_detail_key(event_id) -> str:
    return f"events:{event_id}"


def catalog_timeout() -> int:
    return getattr(settings, "CATALOG_CACHE_TIMEOUT", 60)


def invalidate_event(event_id) -> None:
    """Drop the cached list and the cached detail for one event."""
    cache.delete_many([EVENT_LIST_KEY, event_detail_key(event_id)])
    logger.debug("Invalidated catalog cache for event %s", event_id)
