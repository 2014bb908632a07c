"""Domain error codes for the ticketing module.

Every error carries a message that is safe to show to the end user.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_ID = "INVALID_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    EVENT_HAS_TICKETS = "EVENT_HAS_TICKETS"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    SOLD_OUT = "SOLD_OUT"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_USED = "ALREADY_USED"
    RECIPIENT_NOT_FOUND = "RECIPIENT_NOT_FOUND"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidRequestError(DomainError):
    """Malformed or unsatisfiable input. Correctable by the caller."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_REQUEST) -> None:
        super().__init__(code=code, message=message)


class InvalidIdError(InvalidRequestError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "ID") -> None:
        super().__init__(f"Invalid {kind} format", code=ErrorCode.INVALID_ID)


class EventNotFoundError(InvalidRequestError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found", code=ErrorCode.EVENT_NOT_FOUND)
        self.event_id = event_id


class TicketTypeNotFoundError(InvalidRequestError):
    """Raised when a ticket type is not found or belongs to another event."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__("Ticket type not found", code=ErrorCode.TICKET_TYPE_NOT_FOUND)
        self.ticket_type_id = ticket_type_id


class TicketNotFoundError(InvalidRequestError):
    """Raised when a ticket is not found."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__("Ticket not found", code=ErrorCode.TICKET_NOT_FOUND)
        self.ticket_id = ticket_id


class EventHasTicketsError(InvalidRequestError):
    def __init__(self, what: str = "event") -> None:
        super().__init__(
            f"This {what} has issued tickets and cannot be deleted",
            code=ErrorCode.EVENT_HAS_TICKETS,
        )


class CapacityExceededError(InvalidRequestError):
    """Raised when ticket type allocations would exceed the event's capacity."""

    def __init__(self, allocated: int, capacity: int) -> None:
        super().__init__(
            f"Ticket allocation ({allocated}) exceeds the event capacity ({capacity})",
            code=ErrorCode.CAPACITY_EXCEEDED,
        )
        self.allocated = allocated
        self.capacity = capacity


class SoldOutError(DomainError):
    """Raised when remaining inventory cannot cover the requested quantity."""

    def __init__(self, ticket_type_id: str, requested: int) -> None:
        super().__init__(code=ErrorCode.SOLD_OUT, message="This event is sold out")
        self.ticket_type_id = ticket_type_id
        self.requested = requested


InsufficientInventoryError = SoldOutError


class AuthenticationRequiredError(DomainError):
    def __init__(self, message: str = "You must be logged in to do that") -> None:
        super().__init__(code=ErrorCode.AUTHENTICATION_REQUIRED, message=message)


class ForbiddenError(DomainError):
    """Raised when the actor lacks permission for the operation."""

    def __init__(self, message: str = "You do not have permission to do that") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class InvalidTransitionError(DomainError):
    """Raised when a ticket is not in a state compatible with the operation."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_TRANSITION) -> None:
        super().__init__(code=code, message=message)


class AlreadyUsedError(InvalidTransitionError):
    def __init__(self, status: str = "used") -> None:
        if status == "used":
            message = "Ticket has already been used"
        else:
            message = f"Ticket is {status} and can no longer be used"
        super().__init__(message, code=ErrorCode.ALREADY_USED)
        self.status = status


class RecipientNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.RECIPIENT_NOT_FOUND,
            message="The email address does not belong to a registered user",
        )


class StoreUnavailableError(DomainError):
    """Raised when persistence failed. Distinct from business-rule failures."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="The service is temporarily unavailable, please try again",
        )
