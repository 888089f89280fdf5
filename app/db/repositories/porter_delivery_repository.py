from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import PorterDelivery


class PorterDeliveryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        order_id: str,
        porter_order_id: str,
        tracking_url: Optional[str] = None,
        porter_response: Optional[dict] = None,
    ) -> PorterDelivery:
        delivery = PorterDelivery(
            order_id=order_id,
            porter_order_id=porter_order_id,
            status="created",
            is_active=True,
            tracking_url=tracking_url,
            porter_response=porter_response,
        )
        self.session.add(delivery)
        await self.session.flush()
        return delivery

    async def get_by_porter_order_id(
        self, porter_order_id: str
    ) -> Optional[PorterDelivery]:
        stmt = select(PorterDelivery).where(
            PorterDelivery.porter_order_id == porter_order_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_order_id(self, order_id: str) -> list[PorterDelivery]:
        stmt = (
            select(PorterDelivery)
            .where(PorterDelivery.order_id == order_id)
            .order_by(PorterDelivery.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def deactivate_for_order(self, order_id: str) -> int:
        stmt = (
            update(PorterDelivery)
            .where(PorterDelivery.order_id == order_id)
            .where(PorterDelivery.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def save(self, delivery: PorterDelivery) -> PorterDelivery:
        await self.session.flush()
        return delivery
