from app.db.models.order import Order
from app.db.models.porter_delivery import PorterDelivery
from app.db.models.product import Product
from app.db.models.refund import Refund
from app.db.models.restaurant import Restaurant
from app.db.models.time_range_group import (
    TimeRangeProductsGroup,
    TimeRangeProductsGroupItem,
)

__all__ = [
    "Order",
    "PorterDelivery",
    "Product",
    "Refund",
    "Restaurant",
    "TimeRangeProductsGroup",
    "TimeRangeProductsGroupItem",
]
