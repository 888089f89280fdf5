from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RefundStatus
from app.db.models import Refund


class RefundRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        refund_id: str,
        order_id: str,
        amount: float,
        reason: Optional[str] = None,
    ) -> Refund:
        refund = Refund(
            id=refund_id,
            order_id=order_id,
            amount=amount,
            reason=reason,
            status=RefundStatus.PENDING.value,
        )
        self.session.add(refund)
        await self.session.flush()
        return refund

    async def get_by_id(self, refund_id: str) -> Optional[Refund]:
        stmt = select(Refund).where(Refund.id == refund_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def compare_and_set_status(
        self,
        refund_id: str,
        expected_status: str,
        new_status: str,
        admin_comment: Optional[str] = None,
        processed_at: Optional[datetime] = None,
    ) -> bool:
        values: dict = {"status": new_status}
        if admin_comment is not None:
            values["admin_comment"] = admin_comment
        if processed_at is not None:
            values["processed_at"] = processed_at

        stmt = (
            update(Refund)
            .where(Refund.id == refund_id)
            .where(Refund.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
