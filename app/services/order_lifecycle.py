import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OrderStatus
from app.core.transitions import ensure_transition
from app.db.models import Order
from app.db.repositories import OrderRepository
from app.exceptions import InvalidTransitionException, OrderNotFoundException
from app.metrics import order_transitions_total, rejected_transitions_total

logger = logging.getLogger(__name__)


class OrderLifecycleService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.order_repo = OrderRepository(session)

    async def get_order(
        self, order_id: str, restaurant_id: Optional[str] = None
    ) -> Order:
        order = await self.order_repo.get_by_id(order_id)
        if order is None or (restaurant_id and order.restaurant_id != restaurant_id):
            raise OrderNotFoundException(order_id)
        return order

    async def transition_order(
        self,
        order_id: str,
        requested: OrderStatus,
        note: Optional[str] = None,
        restaurant_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        """Move an order to ``requested`` and append one log entry.

        The write is conditional on the status read here; if another request
        changed the order in between, this one is rejected.
        """
        order = await self.get_order(order_id, restaurant_id)
        current = order.order_status

        try:
            ensure_transition("order", order_id, current, requested, OrderStatus)
        except InvalidTransitionException:
            rejected_transitions_total.labels(entity="order").inc()
            logger.warning(
                "Rejected order transition order_id=%s current=%s requested=%s",
                order_id,
                current,
                requested.value,
                extra={"order_id": order_id, "current": current, "requested": requested.value},
            )
            raise

        timestamp = now or datetime.now(timezone.utc)
        log_entry = {
            "timestamp": timestamp.isoformat(),
            "status": requested.value,
            "note": note or f"Status updated to {requested.value}",
        }
        order_logs = [*(order.order_logs or []), log_entry]

        applied = await self.order_repo.compare_and_set_status(
            order_id=order_id,
            expected_status=current,
            new_status=requested.value,
            order_logs=order_logs,
        )
        if not applied:
            rejected_transitions_total.labels(entity="order").inc()
            logger.warning(
                "Concurrent order update detected order_id=%s expected=%s requested=%s",
                order_id,
                current,
                requested.value,
                extra={"order_id": order_id, "current": current, "requested": requested.value},
            )
            raise InvalidTransitionException("order", order_id, current, requested.value)

        await self.session.refresh(order)
        order_transitions_total.labels(status=requested.value).inc()
        logger.info(
            "Order status updated order_id=%s %s -> %s",
            order_id,
            current,
            requested.value,
            extra={"order_id": order_id, "from_status": current, "to_status": requested.value},
        )
        return order
