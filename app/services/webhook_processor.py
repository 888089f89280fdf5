import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import CarrierStatus, OrderStatus
from app.core.transitions import can_transition
from app.db.models import Order, PorterDelivery
from app.db.repositories import PorterDeliveryRepository
from app.exceptions import DeliveryNotFoundException, InvalidTransitionException
from app.metrics import carrier_webhooks_total
from app.schemas.porter import PorterWebhookPayload
from app.services.order_lifecycle import OrderLifecycleService

logger = logging.getLogger(__name__)

CARRIER_TO_ORDER_STATUS: dict[CarrierStatus, OrderStatus] = {
    CarrierStatus.ORDER_ACCEPTED: OrderStatus.DISPATCHED,
    CarrierStatus.ORDER_START_TRIP: OrderStatus.DISPATCHED,
    CarrierStatus.ORDER_REOPEN: OrderStatus.DISPATCHED,
    CarrierStatus.ORDER_END_JOB: OrderStatus.DELIVERED,
    CarrierStatus.ORDER_CANCEL: OrderStatus.CANCELLED,
}


@dataclass(frozen=True)
class WebhookResult:
    order_id: str
    porter_order_id: str
    porter_status: CarrierStatus
    original_order_status: str
    order_status: str
    reassignment_required: bool


def is_voluntary_cancel(
    status: CarrierStatus, original_order_status: str, delivery_active: bool = True
) -> bool:
    """A carrier cancel on the live delivery of an order we had not cancelled."""
    return (
        status == CarrierStatus.ORDER_CANCEL
        and delivery_active
        and original_order_status != OrderStatus.CANCELLED.value
    )


class CarrierWebhookProcessor:
    """
    Applies a carrier status callback to the delivery row and its order.

    The order status is read before anything is written so that a carrier
    cancel can be told apart from one we requested. The caller commits and,
    when ``reassignment_required`` is set, schedules a new delivery.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.delivery_repo = PorterDeliveryRepository(session)
        self.lifecycle = OrderLifecycleService(session)

    async def handle(
        self, payload: PorterWebhookPayload, now: Optional[datetime] = None
    ) -> WebhookResult:
        now = now or datetime.now(timezone.utc)
        carrier_webhooks_total.labels(status=payload.status.value).inc()

        delivery = await self.delivery_repo.get_by_porter_order_id(payload.order_id)
        if delivery is None:
            raise DeliveryNotFoundException(payload.order_id, payload.status.value)

        order = await self.lifecycle.get_order(delivery.order_id)
        original_status = order.order_status
        # A superseded row, or one already cancelled, no longer drives the order.
        was_active = delivery.is_active
        voluntary_cancel = is_voluntary_cancel(
            payload.status, original_status, delivery_active=was_active
        )

        self._apply_to_delivery(delivery, payload, now)
        await self.delivery_repo.save(delivery)

        if not was_active:
            logger.info(
                "Carrier status recorded on inactive delivery porter_order_id=%s "
                "status=%s order_id=%s",
                payload.order_id,
                payload.status.value,
                order.id,
                extra={"porter_order_id": payload.order_id, "order_id": order.id},
            )
        elif not voluntary_cancel:
            await self._sync_order_status(order, payload.status)

        logger.info(
            "Carrier webhook processed porter_order_id=%s status=%s order_id=%s "
            "order_status=%s reassignment_required=%s",
            payload.order_id,
            payload.status.value,
            order.id,
            order.order_status,
            voluntary_cancel,
            extra={
                "porter_order_id": payload.order_id,
                "order_id": order.id,
                "carrier_status": payload.status.value,
            },
        )
        return WebhookResult(
            order_id=order.id,
            porter_order_id=payload.order_id,
            porter_status=payload.status,
            original_order_status=original_status,
            order_status=order.order_status,
            reassignment_required=voluntary_cancel,
        )

    def _apply_to_delivery(
        self, delivery: PorterDelivery, payload: PorterWebhookPayload, now: datetime
    ) -> None:
        delivery.status = payload.status.value
        delivery.updated_at = now
        details = payload.order_details

        if payload.status == CarrierStatus.ORDER_ACCEPTED:
            driver = details.driver_details
            if driver is not None:
                delivery.partner_name = driver.driver_name
                delivery.partner_phone_number = driver.mobile
                delivery.vehicle_number = driver.vehicle_number
            if details.event_ts:
                delivery.estimated_delivery_time = datetime.fromtimestamp(
                    details.event_ts, tz=timezone.utc
                )
        elif payload.status == CarrierStatus.ORDER_START_TRIP:
            delivery.pickup_time = now
        elif payload.status == CarrierStatus.ORDER_END_JOB:
            delivery.actual_delivery_time = now
        elif payload.status == CarrierStatus.ORDER_REOPEN:
            delivery.actual_delivery_time = None
        elif payload.status == CarrierStatus.ORDER_CANCEL:
            delivery.is_active = False

    async def _sync_order_status(self, order: Order, status: CarrierStatus) -> None:
        target = CARRIER_TO_ORDER_STATUS[status]
        if order.order_status == target.value:
            return
        if not can_transition(order.order_status, target):
            logger.warning(
                "Skipping carrier status sync order_id=%s current=%s carrier_status=%s",
                order.id,
                order.order_status,
                status.value,
                extra={"order_id": order.id, "carrier_status": status.value},
            )
            return
        try:
            await self.lifecycle.transition_order(
                order.id, target, note=f"Carrier status {status.value}"
            )
        except InvalidTransitionException:
            # Another writer moved the order first.
            logger.warning(
                "Carrier status sync lost race order_id=%s",
                order.id,
                extra={"order_id": order.id},
            )
