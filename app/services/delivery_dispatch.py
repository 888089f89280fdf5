import logging
import time
from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Carrier
from app.db.models import Order, Restaurant
from app.db.repositories import PorterDeliveryRepository, RestaurantRepository
from app.exceptions import CarrierException, ValidationException

logger = logging.getLogger(__name__)


class CarrierClient(Protocol):
    async def create_order(self, order_request: dict[str, Any]) -> dict[str, Any]: ...

    async def cancel_order(self, porter_order_id: str) -> dict[str, Any]: ...


def parse_carrier(value: Optional[str]) -> Carrier:
    """Resolve a carrier preference, defaulting to Porter."""
    if not value:
        return Carrier.PORTER
    try:
        return Carrier(value.lower())
    except ValueError as e:
        raise ValidationException(
            message=f"Unsupported delivery carrier: {value}",
            error_code="UNSUPPORTED_CARRIER",
            details={"carrier": value},
        ) from e


def _address_details(
    address: dict[str, Any], name: Optional[str], phone: Optional[str]
) -> dict[str, Any]:
    return {
        "address": {
            "apartment_address": address.get("apartment", ""),
            "street_address1": address.get("line1", ""),
            "street_address2": address.get("line2", ""),
            "landmark": address.get("landmark", ""),
            "city": address.get("city", ""),
            "state": address.get("state", ""),
            "pincode": address.get("pincode", ""),
            "country": address.get("country", "India"),
            "lat": address.get("latitude"),
            "lng": address.get("longitude"),
            "contact_details": {"name": name or "", "phone_number": phone or ""},
        }
    }


def build_porter_order_request(order: Order, restaurant: Optional[Restaurant]) -> dict:
    restaurant_name = restaurant.name if restaurant else order.restaurant_id
    return {
        "request_id": f"FOOD_{order.id[:8]}_{int(time.time())}",
        "delivery_instructions": {
            "instructions_list": [
                {"type": "text", "description": "Handle with care - Food delivery"}
            ]
        },
        "pickup_details": _address_details(
            {"apartment": restaurant_name}, restaurant_name, None
        ),
        "drop_details": _address_details(
            order.delivery_address or {},
            order.customer_name,
            order.customer_contact,
        ),
        "additional_comments": (
            f"Food delivery from {restaurant_name}. "
            f"Order value: {order.total_amount:.2f}"
        ),
    }


class DeliveryDispatcher:
    """Creates carrier delivery orders and records them as active deliveries."""

    def __init__(self, session: AsyncSession, porter_client: CarrierClient) -> None:
        self.session = session
        self.porter_client = porter_client
        self.delivery_repo = PorterDeliveryRepository(session)
        self.restaurant_repo = RestaurantRepository(session)

    async def create_delivery_order(
        self, order: Order, carrier: Carrier = Carrier.PORTER
    ) -> str:
        if carrier != Carrier.PORTER:
            raise ValidationException(
                message=f"Unsupported delivery carrier: {carrier}",
                error_code="UNSUPPORTED_CARRIER",
                details={"carrier": str(carrier)},
            )

        restaurant = await self.restaurant_repo.get_by_id(order.restaurant_id)
        response = await self.porter_client.create_order(
            build_porter_order_request(order, restaurant)
        )
        porter_order_id = response.get("order_id")
        if not porter_order_id:
            raise CarrierException(
                message="Porter create order response has no order_id",
                operation="create_order",
            )

        delivery = await self.delivery_repo.create(
            order_id=order.id,
            porter_order_id=porter_order_id,
            tracking_url=response.get("tracking_url"),
            porter_response=response,
        )
        logger.info(
            "Delivery order created order_id=%s porter_order_id=%s",
            order.id,
            porter_order_id,
            extra={"order_id": order.id, "porter_order_id": porter_order_id},
        )
        return delivery.porter_order_id
