"""Resolve the Django request user into the domain Actor."""

import logging

from django.core.exceptions import ObjectDoesNotExist

from ticketing.domain import Actor, Role

logger = logging.getLogger(__name__)


def current_actor(request) -> Actor | None:
    """Return the authenticated actor, or None for anonymous requests."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return Actor(id=user.id, role=Role.ADMIN)
    try:
        stored = user.profile.role
    except ObjectDoesNotExist:
        return Actor(id=user.id, role=Role.ATTENDEE)
    try:
        role = Role.parse(stored)
    except ValueError:
        logger.warning("User %s has unknown role %r, treating as attendee", user.id, stored)
        role = Role.ATTENDEE
    return Actor(id=user.id, role=role)
