from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OrderStatus
from app.db.models import Order


class OrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        order_id: str,
        user_id: str,
        restaurant_id: str,
        cart_id: str,
        total_amount: float = 0,
        status: OrderStatus = OrderStatus.PENDING,
        customer_name: Optional[str] = None,
        customer_contact: Optional[str] = None,
        delivery_address: Optional[dict] = None,
    ) -> Order:
        order = Order(
            id=order_id,
            user_id=user_id,
            restaurant_id=restaurant_id,
            cart_id=cart_id,
            order_status=status.value,
            order_logs=[],
            total_amount=total_amount,
            customer_name=customer_name,
            customer_contact=customer_contact,
            delivery_address=delivery_address,
        )
        self.session.add(order)
        await self.session.flush()
        return order

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def compare_and_set_status(
        self,
        order_id: str,
        expected_status: str,
        new_status: str,
        order_logs: list[dict],
    ) -> bool:
        """Single-row conditional update of status and logs.

        Returns False if the row's status is no longer ``expected_status``.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .where(Order.order_status == expected_status)
            .values(order_status=new_status, order_logs=order_logs)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
