"""Order and refund status transition tables."""

from enum import Enum
from typing import Mapping, Optional, Union

from app.core.enums import OrderStatus, RefundStatus
from app.exceptions import InvalidTransitionException

ORDER_TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.DISPATCHED, OrderStatus.CANCELLED}),
    OrderStatus.DISPATCHED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

REFUND_TRANSITIONS: Mapping[RefundStatus, frozenset[RefundStatus]] = {
    RefundStatus.PENDING: frozenset({RefundStatus.APPROVED, RefundStatus.REJECTED}),
    RefundStatus.APPROVED: frozenset({RefundStatus.PROCESSED, RefundStatus.FAILED}),
    RefundStatus.REJECTED: frozenset(),
    RefundStatus.PROCESSED: frozenset(),
    # retry only
    RefundStatus.FAILED: frozenset({RefundStatus.APPROVED}),
}

_TABLES: dict[type[Enum], Mapping] = {
    OrderStatus: ORDER_TRANSITIONS,
    RefundStatus: REFUND_TRANSITIONS,
}

StatusLike = Union[OrderStatus, RefundStatus, str]


def _coerce(status_type: type[Enum], value: StatusLike) -> Optional[Enum]:
    if isinstance(value, status_type):
        return value
    try:
        return status_type(value)
    except ValueError:
        return None


def can_transition(
    current: StatusLike,
    requested: StatusLike,
    status_type: type[Enum] = OrderStatus,
) -> bool:
    """Return whether ``current -> requested`` is listed in the table.

    Unknown status strings are never transitionable.
    """
    table = _TABLES[status_type]
    current_status = _coerce(status_type, current)
    requested_status = _coerce(status_type, requested)
    if current_status is None or requested_status is None:
        return False
    return requested_status in table[current_status]


def can_transition_refund(current: StatusLike, requested: StatusLike) -> bool:
    return can_transition(current, requested, RefundStatus)


def is_terminal(status: StatusLike, status_type: type[Enum] = OrderStatus) -> bool:
    coerced = _coerce(status_type, status)
    return coerced is not None and not _TABLES[status_type][coerced]


def ensure_transition(
    entity: str,
    entity_id: str,
    current: StatusLike,
    requested: StatusLike,
    status_type: type[Enum] = OrderStatus,
) -> None:
    """Raise InvalidTransitionException unless the table allows the change."""
    if not can_transition(current, requested, status_type):
        raise InvalidTransitionException(
            entity=entity,
            entity_id=entity_id,
            current=_status_value(current),
            requested=_status_value(requested),
        )


def _status_value(status: StatusLike) -> str:
    return status.value if isinstance(status, Enum) else str(status)
