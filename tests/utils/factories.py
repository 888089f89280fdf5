from typing import Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import CarrierStatus, OrderStatus
from app.db.models import Order, PorterDelivery, Product, Refund, Restaurant
from app.db.repositories import (
    OrderRepository,
    PorterDeliveryRepository,
    ProductRepository,
    RefundRepository,
    RestaurantRepository,
)

ALL_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class RestaurantFactory:
    @staticmethod
    def create_restaurant_id(suffix: Optional[str] = None) -> str:
        if suffix:
            return f"res_{suffix}"
        return f"res_{uuid4().hex[:8]}"

    @staticmethod
    def opening_hours(
        open_time: str = "10:00",
        close_time: str = "22:00",
        days: tuple[str, ...] = ALL_DAYS,
    ) -> dict:
        return {
            day: {"is_open": True, "open_time": open_time, "close_time": close_time}
            for day in days
        }

    @staticmethod
    async def create(
        session: AsyncSession,
        restaurant_id: Optional[str] = None,
        opening_hours: Optional[dict] = None,
        is_open: bool = False,
        auto_open_close: bool = True,
        timezone: str = "UTC",
    ) -> Restaurant:
        restaurant_id = restaurant_id or RestaurantFactory.create_restaurant_id()
        restaurant = await RestaurantRepository(session).create(
            restaurant_id=restaurant_id,
            name=f"Restaurant {restaurant_id}",
            opening_hours=opening_hours,
            auto_open_close=auto_open_close,
            is_open=is_open,
            timezone=timezone,
        )
        await session.commit()
        return restaurant


class ProductFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        restaurant_id: str,
        product_id: Optional[str] = None,
        price: float = 100.0,
        is_available: bool = True,
        tags: Optional[list[str]] = None,
    ) -> Product:
        product_id = product_id or f"prd_{uuid4().hex[:8]}"
        product = await ProductRepository(session).create(
            product_id=product_id,
            restaurant_id=restaurant_id,
            name=f"Product {product_id}",
            price=price,
            is_available=is_available,
            tags=tags,
        )
        await session.commit()
        return product


class OrderFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        restaurant_id: str,
        order_id: Optional[str] = None,
        status: OrderStatus = OrderStatus.PENDING,
        total_amount: float = 350.0,
    ) -> Order:
        order = await OrderRepository(session).create(
            order_id=order_id or f"ord_{uuid4().hex[:12]}",
            user_id="usr_test",
            restaurant_id=restaurant_id,
            cart_id="cart_test",
            total_amount=total_amount,
            status=status,
            customer_name="Test Customer",
            customer_contact="+919800000000",
            delivery_address={"line1": "12 MG Road", "city": "Bengaluru"},
        )
        await session.commit()
        return order


class DeliveryFactory:
    @staticmethod
    async def create(
        session: AsyncSession, order_id: str, porter_order_id: Optional[str] = None
    ) -> PorterDelivery:
        delivery = await PorterDeliveryRepository(session).create(
            order_id=order_id,
            porter_order_id=porter_order_id or f"CRN_{uuid4().hex[:8]}",
        )
        await session.commit()
        return delivery


class RefundFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        order_id: str,
        refund_id: Optional[str] = None,
        amount: float = 100.0,
    ) -> Refund:
        refund = await RefundRepository(session).create(
            refund_id=refund_id or f"rfd_{uuid4().hex[:8]}",
            order_id=order_id,
            amount=amount,
            reason="Item missing",
        )
        await session.commit()
        return refund


class WebhookFactory:
    @staticmethod
    def create_payload(
        porter_order_id: str,
        status: CarrierStatus,
        driver_name: Optional[str] = None,
        event_ts: Optional[int] = None,
    ) -> dict:
        order_details: dict = {}
        if event_ts is not None:
            order_details["event_ts"] = event_ts
        if driver_name is not None:
            order_details["driver_details"] = {
                "driver_name": driver_name,
                "vehicle_number": "KA01AB1234",
                "mobile": "+919811111111",
            }
        return {
            "order_id": porter_order_id,
            "status": status.value,
            "order_details": order_details,
        }
