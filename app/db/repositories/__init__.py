from app.db.repositories.order_repository import OrderRepository
from app.db.repositories.porter_delivery_repository import PorterDeliveryRepository
from app.db.repositories.product_repository import ProductRepository
from app.db.repositories.refund_repository import RefundRepository
from app.db.repositories.restaurant_repository import RestaurantRepository
from app.db.repositories.time_group_repository import TimeGroupRepository

__all__ = [
    "OrderRepository",
    "PorterDeliveryRepository",
    "ProductRepository",
    "RefundRepository",
    "RestaurantRepository",
    "TimeGroupRepository",
]
