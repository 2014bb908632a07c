"""Unit tests for TicketLifecycleManager: redeem, transfer, refund.

Run with: pytest tests/test_lifecycle.py -v
"""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from conftest import ADMIN, BUYER_A, BUYER_B, ORGANIZER, STRANGER
from ticketing.domain import Money, TicketStatus, TransactionType
from ticketing.domain.errors import (
    AlreadyUsedError,
    AuthenticationRequiredError,
    EventNotFoundError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    RecipientNotFoundError,
    StoreUnavailableError,
    TicketNotFoundError,
)
from ticketing.services import TicketIssuanceService, TicketLifecycleManager
from ticketing.stores.interfaces import StoreError


@pytest.fixture
def manager(store) -> TicketLifecycleManager:
    return TicketLifecycleManager(store)


@pytest.fixture
def ticket(store, event, ticket_type):
    [ticket] = TicketIssuanceService(store).purchase(BUYER_A, str(event.id), str(ticket_type.id), 1)
    return ticket


class TestRedeem:
    def test_second_redeem_is_rejected(self, store, manager, ticket):
        redeemed = manager.redeem(BUYER_A, str(ticket.id))
        assert redeemed.status is TicketStatus.USED

        with pytest.raises(AlreadyUsedError) as excinfo:
            manager.redeem(BUYER_A, str(ticket.id))
        assert excinfo.value.message == "Ticket has already been used"
        assert store.get_ticket(ticket.id).status is TicketStatus.USED

    def test_organizer_may_redeem_at_the_door(self, manager, ticket):
        assert manager.redeem(ORGANIZER, str(ticket.id)).status is TicketStatus.USED

    def test_admin_may_redeem(self, manager, ticket):
        assert manager.redeem(ADMIN, str(ticket.id)).status is TicketStatus.USED

    def test_other_users_are_forbidden(self, store, manager, ticket):
        with pytest.raises(ForbiddenError):
            manager.redeem(STRANGER, str(ticket.id))
        assert store.get_ticket(ticket.id).status is TicketStatus.ACTIVE

    def test_unknown_ticket(self, manager):
        with pytest.raises(TicketNotFoundError):
            manager.redeem(BUYER_A, str(uuid.uuid4()))

    def test_requires_login(self, manager, ticket):
        with pytest.raises(AuthenticationRequiredError):
            manager.redeem(None, str(ticket.id))

    def test_concurrent_redeems_admit_one(self, manager, ticket):
        barrier = threading.Barrier(10)

        def scan(_):
            barrier.wait()
            try:
                manager.redeem(ORGANIZER, str(ticket.id))
                return "accepted"
            except AlreadyUsedError:
                return "rejected"

        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(pool.map(scan, range(10)))

        assert results.count("accepted") == 1
        assert results.count("rejected") == 9


class TestTransfer:
    def test_transfer_reassigns_holder(self, store, manager, ticket):
        moved = manager.transfer(BUYER_A, str(ticket.id), "b@example.com")

        assert moved.id == ticket.id
        assert moved.holder_id == BUYER_B.id
        assert moved.status is TicketStatus.TRANSFERRED

    def test_transfer_is_audited_with_zero_amount(self, store, manager, ticket):
        manager.transfer(BUYER_A, str(ticket.id), "b@example.com")

        [record] = store.transactions_of(TransactionType.TRANSFER)
        assert record.amount == Money(Decimal("0"))
        assert record.user_id == BUYER_A.id
        assert record.ticket_id == ticket.id

    def test_recipient_lookup_ignores_case_and_whitespace(self, manager, ticket):
        moved = manager.transfer(BUYER_A, str(ticket.id), "  B@Example.com ")
        assert moved.holder_id == BUYER_B.id

    def test_previous_holder_loses_control(self, manager, ticket):
        manager.transfer(BUYER_A, str(ticket.id), "b@example.com")

        with pytest.raises(ForbiddenError):
            manager.transfer(BUYER_A, str(ticket.id), "stranger@example.com")
        with pytest.raises(ForbiddenError):
            manager.redeem(BUYER_A, str(ticket.id))

    def test_transferred_ticket_is_terminal(self, manager, ticket):
        manager.transfer(BUYER_A, str(ticket.id), "b@example.com")

        with pytest.raises(InvalidTransitionError):
            manager.redeem(BUYER_B, str(ticket.id))
        with pytest.raises(InvalidTransitionError):
            manager.transfer(BUYER_B, str(ticket.id), "a@example.com")
        with pytest.raises(InvalidTransitionError):
            manager.refund(BUYER_B, str(ticket.id))

    def test_unknown_recipient(self, store, manager, ticket):
        with pytest.raises(RecipientNotFoundError) as excinfo:
            manager.transfer(BUYER_A, str(ticket.id), "ghost@example.com")
        assert "registered user" in excinfo.value.message
        assert store.get_ticket(ticket.id).holder_id == BUYER_A.id

    def test_blank_recipient(self, manager, ticket):
        with pytest.raises(InvalidRequestError):
            manager.transfer(BUYER_A, str(ticket.id), "   ")

    def test_transfer_to_self(self, manager, ticket):
        with pytest.raises(InvalidRequestError, match="yourself"):
            manager.transfer(BUYER_A, str(ticket.id), "a@example.com")

    def test_only_holder_may_transfer(self, manager, ticket):
        with pytest.raises(ForbiddenError) as excinfo:
            manager.transfer(ORGANIZER, str(ticket.id), "b@example.com")
        assert excinfo.value.message == "You do not have permission to transfer this ticket"

    def test_used_ticket_cannot_be_transferred(self, manager, ticket):
        manager.redeem(BUYER_A, str(ticket.id))
        with pytest.raises(InvalidTransitionError):
            manager.transfer(BUYER_A, str(ticket.id), "b@example.com")


class TestRefund:
    def test_refund_returns_unit_to_ledger(self, store, manager, ticket, ticket_type):
        assert store.remaining(ticket_type) == 9

        refunded = manager.refund(BUYER_A, str(ticket.id))

        assert refunded.status is TicketStatus.REFUNDED
        assert store.remaining(ticket_type) == 10

    def test_refund_is_audited_at_unit_price(self, store, manager, ticket):
        manager.refund(ORGANIZER, str(ticket.id))

        [record] = store.transactions_of(TransactionType.REFUND)
        assert record.amount == Money(Decimal("20.00"))
        assert record.user_id == BUYER_A.id

    def test_refund_twice_is_rejected(self, store, manager, ticket, ticket_type):
        manager.refund(BUYER_A, str(ticket.id))
        with pytest.raises(InvalidTransitionError):
            manager.refund(BUYER_A, str(ticket.id))
        assert store.remaining(ticket_type) == 10

    def test_used_ticket_cannot_be_refunded(self, manager, ticket):
        manager.redeem(BUYER_A, str(ticket.id))
        with pytest.raises(InvalidTransitionError):
            manager.refund(BUYER_A, str(ticket.id))

    def test_strangers_cannot_refund(self, manager, ticket):
        with pytest.raises(ForbiddenError):
            manager.refund(STRANGER, str(ticket.id))

    def test_store_failure_rolls_back_refund(self, store, manager, ticket, ticket_type):
        original = store.record_transaction

        def failing(*args, **kwargs):
            if kwargs.get("ticket_id") is not None:
                raise StoreError("audit insert failed")
            return original(*args, **kwargs)

        store.record_transaction = failing
        with pytest.raises(StoreUnavailableError):
            manager.refund(BUYER_A, str(ticket.id))

        assert store.get_ticket(ticket.id).status is TicketStatus.ACTIVE
        assert store.remaining(ticket_type) == 9


class TestQueries:
    def test_tickets_for_holder(self, manager, ticket):
        assert [t.id for t in manager.tickets_for_holder(BUYER_A)] == [ticket.id]
        assert manager.tickets_for_holder(BUYER_B) == []

    def test_tickets_for_event_requires_organizer(self, manager, event, ticket):
        assert len(manager.tickets_for_event(ORGANIZER, str(event.id))) == 1
        with pytest.raises(ForbiddenError):
            manager.tickets_for_event(BUYER_A, str(event.id))

    def test_tickets_for_unknown_event(self, manager):
        with pytest.raises(EventNotFoundError):
            manager.tickets_for_event(ORGANIZER, str(uuid.uuid4()))
