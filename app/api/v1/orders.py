from fastapi import APIRouter

from app.api.dependencies import SessionDep
from app.schemas.orders import OrderResponse, OrderStatusUpdate
from app.services.order_lifecycle import OrderLifecycleService

router = APIRouter()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, session: SessionDep) -> OrderResponse:
    service = OrderLifecycleService(session)
    order = await service.get_order(order_id)
    return OrderResponse.model_validate(order)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: OrderStatusUpdate, session: SessionDep
) -> OrderResponse:
    service = OrderLifecycleService(session)
    order = await service.transition_order(order_id, body.status, note=body.note)
    await session.commit()
    return OrderResponse.model_validate(order)
