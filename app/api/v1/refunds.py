from fastapi import APIRouter

from app.api.dependencies import SessionDep
from app.schemas.orders import RefundResponse, RefundStatusUpdate
from app.services.refund_lifecycle import RefundLifecycleService

router = APIRouter()


@router.get("/{refund_id}", response_model=RefundResponse)
async def get_refund(refund_id: str, session: SessionDep) -> RefundResponse:
    service = RefundLifecycleService(session)
    refund = await service.get_refund(refund_id)
    return RefundResponse.model_validate(refund)


@router.put("/{refund_id}/status", response_model=RefundResponse)
async def update_refund_status(
    refund_id: str, body: RefundStatusUpdate, session: SessionDep
) -> RefundResponse:
    service = RefundLifecycleService(session)
    refund = await service.transition_refund(
        refund_id, body.status, admin_comment=body.admin_comment
    )
    await session.commit()
    return RefundResponse.model_validate(refund)
