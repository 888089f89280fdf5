import logging
from typing import Optional

from fastapi import APIRouter, status

from app.api.dependencies import PorterClientDep, ReassignerDep, SessionDep
from app.schemas.porter import (
    DeliveryAssignmentResponse,
    PorterWebhookPayload,
    PorterWebhookResponse,
)
from app.services.delivery_dispatch import DeliveryDispatcher, parse_carrier
from app.services.order_lifecycle import OrderLifecycleService
from app.services.reassignment import DeliveryReassignmentService
from app.services.webhook_processor import CarrierWebhookProcessor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/webhook", response_model=PorterWebhookResponse)
async def porter_webhook(
    payload: PorterWebhookPayload,
    session: SessionDep,
    reassigner: ReassignerDep,
) -> PorterWebhookResponse:
    processor = CarrierWebhookProcessor(session)
    result = await processor.handle(payload)
    await session.commit()

    if result.reassignment_required:
        logger.info(
            "Carrier cancelled delivery, scheduling reassignment order_id=%s "
            "porter_order_id=%s",
            result.order_id,
            result.porter_order_id,
            extra={"order_id": result.order_id, "porter_order_id": result.porter_order_id},
        )
        reassigner.schedule(result.order_id)

    return PorterWebhookResponse(
        porter_status=result.porter_status,
        order_id=result.order_id,
        porter_order_id=result.porter_order_id,
        order_status=result.order_status,
        reassignment_triggered=result.reassignment_required,
    )


@router.post(
    "/create-delivery/{order_id}",
    response_model=DeliveryAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_delivery(
    order_id: str,
    session: SessionDep,
    porter_client: PorterClientDep,
    carrier: Optional[str] = None,
) -> DeliveryAssignmentResponse:
    preferred = parse_carrier(carrier)
    order = await OrderLifecycleService(session).get_order(order_id)
    dispatcher = DeliveryDispatcher(session, porter_client)
    porter_order_id = await dispatcher.create_delivery_order(order, preferred)
    await session.commit()
    return DeliveryAssignmentResponse(
        message="Delivery order created",
        order_id=order_id,
        carrier=preferred,
        porter_order_id=porter_order_id,
    )


@router.post("/reassign/{order_id}", response_model=DeliveryAssignmentResponse)
async def reassign_delivery(
    order_id: str,
    session: SessionDep,
    porter_client: PorterClientDep,
    carrier: Optional[str] = None,
) -> DeliveryAssignmentResponse:
    preferred = parse_carrier(carrier)
    service = DeliveryReassignmentService(session, porter_client)
    porter_order_id = await service.reassign(order_id, preferred)
    await session.commit()
    return DeliveryAssignmentResponse(
        message="Delivery reassigned",
        order_id=order_id,
        carrier=preferred,
        porter_order_id=porter_order_id,
    )
