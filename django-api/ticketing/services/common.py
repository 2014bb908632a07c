"""Helpers shared by the service layer."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TypeVar

from ticketing.domain.errors import (
    AuthenticationRequiredError,
    InvalidIdError,
    StoreUnavailableError,
)
from ticketing.domain.models import Actor
from ticketing.stores.interfaces import StoreError

logger = logging.getLogger(__name__)

IdT = TypeVar("IdT")


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_id(id_type: type[IdT], raw, kind: str) -> IdT:
    """Parse a raw identifier into a domain id, raising InvalidIdError."""
    try:
        return id_type.from_string(str(raw))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(kind) from None


def require_actor(actor: Actor | None, message: str) -> Actor:
    if actor is None:
        raise AuthenticationRequiredError(message)
    return actor


@contextmanager
def store_boundary(operation: str) -> Iterator[None]:
    """Convert store failures into StoreUnavailableError, logging the cause.

    Domain errors raised inside the block pass through untouched.
    """
    try:
        yield
    except StoreError as exc:
        logger.error("Store failure during %s: %s", operation, exc, exc_info=exc)
        raise StoreUnavailableError() from exc
