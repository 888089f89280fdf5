import itertools

import pytest

from app.core.enums import OrderStatus, RefundStatus
from app.core.transitions import (
    ORDER_TRANSITIONS,
    REFUND_TRANSITIONS,
    can_transition,
    can_transition_refund,
    ensure_transition,
    is_terminal,
)
from app.exceptions import InvalidTransitionException

ALLOWED_ORDER = {
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "preparing"),
    ("confirmed", "cancelled"),
    ("preparing", "dispatched"),
    ("preparing", "cancelled"),
    ("dispatched", "delivered"),
    ("dispatched", "cancelled"),
}

ALLOWED_REFUND = {
    ("pending", "approved"),
    ("pending", "rejected"),
    ("approved", "processed"),
    ("approved", "failed"),
    ("failed", "approved"),
}


class TestOrderTransitions:
    def test_table_covers_every_status(self) -> None:
        assert set(ORDER_TRANSITIONS) == set(OrderStatus)

    @pytest.mark.parametrize(
        "current,requested", list(itertools.product(OrderStatus, OrderStatus))
    )
    def test_only_listed_pairs_are_allowed(
        self, current: OrderStatus, requested: OrderStatus
    ) -> None:
        expected = (current.value, requested.value) in ALLOWED_ORDER
        assert can_transition(current, requested) is expected

    def test_accepts_plain_strings(self) -> None:
        assert can_transition("pending", "confirmed")
        assert not can_transition("pending", "delivered")

    def test_unknown_status_is_never_transitionable(self) -> None:
        assert not can_transition("pending", "teleported")
        assert not can_transition("teleported", "pending")

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_statuses(self, status: OrderStatus) -> None:
        assert is_terminal(status)
        assert not any(can_transition(status, target) for target in OrderStatus)

    def test_non_terminal_status(self) -> None:
        assert not is_terminal(OrderStatus.DISPATCHED)

    def test_ensure_transition_raises_with_details(self) -> None:
        with pytest.raises(InvalidTransitionException) as exc_info:
            ensure_transition("order", "ord_1", "delivered", OrderStatus.PENDING)

        exc = exc_info.value
        assert exc.status_code == 409
        assert exc.error_code == "INVALID_STATUS_TRANSITION"
        assert exc.details == {
            "entity": "order",
            "id": "ord_1",
            "current_status": "delivered",
            "requested_status": "pending",
        }


class TestRefundTransitions:
    def test_table_covers_every_status(self) -> None:
        assert set(REFUND_TRANSITIONS) == set(RefundStatus)

    @pytest.mark.parametrize(
        "current,requested", list(itertools.product(RefundStatus, RefundStatus))
    )
    def test_only_listed_pairs_are_allowed(
        self, current: RefundStatus, requested: RefundStatus
    ) -> None:
        expected = (current.value, requested.value) in ALLOWED_REFUND
        assert can_transition_refund(current, requested) is expected

    @pytest.mark.parametrize("status", [RefundStatus.REJECTED, RefundStatus.PROCESSED])
    def test_terminal_statuses(self, status: RefundStatus) -> None:
        assert is_terminal(status, RefundStatus)

    def test_failed_refund_can_only_be_retried(self) -> None:
        assert can_transition_refund("failed", "approved")
        assert not can_transition_refund("failed", "processed")
