import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RefundStatus
from app.core.transitions import ensure_transition
from app.db.models import Refund
from app.db.repositories import RefundRepository
from app.exceptions import InvalidTransitionException, RefundNotFoundException
from app.metrics import refund_transitions_total, rejected_transitions_total

logger = logging.getLogger(__name__)


class RefundLifecycleService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.refund_repo = RefundRepository(session)

    async def get_refund(self, refund_id: str) -> Refund:
        refund = await self.refund_repo.get_by_id(refund_id)
        if refund is None:
            raise RefundNotFoundException(refund_id)
        return refund

    async def transition_refund(
        self,
        refund_id: str,
        requested: RefundStatus,
        admin_comment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Refund:
        refund = await self.get_refund(refund_id)
        current = refund.status

        try:
            ensure_transition("refund", refund_id, current, requested, RefundStatus)
        except InvalidTransitionException:
            rejected_transitions_total.labels(entity="refund").inc()
            raise

        processed_at = None
        if requested == RefundStatus.PROCESSED:
            processed_at = now or datetime.now(timezone.utc)

        applied = await self.refund_repo.compare_and_set_status(
            refund_id=refund_id,
            expected_status=current,
            new_status=requested.value,
            admin_comment=admin_comment,
            processed_at=processed_at,
        )
        if not applied:
            rejected_transitions_total.labels(entity="refund").inc()
            raise InvalidTransitionException("refund", refund_id, current, requested.value)

        await self.session.refresh(refund)
        refund_transitions_total.labels(status=requested.value).inc()
        logger.info(
            "Refund status updated refund_id=%s %s -> %s",
            refund_id,
            current,
            requested.value,
            extra={"refund_id": refund_id, "from_status": current, "to_status": requested.value},
        )
        return refund
