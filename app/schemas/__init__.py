from app.schemas.common import ErrorDetail, ErrorResponse
from app.schemas.orders import (
    OrderResponse,
    OrderStatusUpdate,
    RefundResponse,
    RefundStatusUpdate,
)
from app.schemas.porter import (
    DeliveryAssignmentResponse,
    PorterWebhookPayload,
    PorterWebhookResponse,
)
from app.schemas.restaurants import (
    RestaurantStatusResult,
    RestaurantTimeStatus,
    ShopStatusUpdate,
    ShopTimingResponse,
    ShopTimingUpdate,
)
from app.schemas.system import AutomaticStatusResponse
from app.schemas.time_groups import (
    ProductsByTimeResponse,
    ProductTimeInfo,
    TimeGroupCreate,
    TimeGroupProductAdd,
    TimeGroupResponse,
    TimeGroupUpdate,
)

__all__ = [
    "AutomaticStatusResponse",
    "DeliveryAssignmentResponse",
    "ErrorDetail",
    "ErrorResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "PorterWebhookPayload",
    "PorterWebhookResponse",
    "ProductTimeInfo",
    "ProductsByTimeResponse",
    "RefundResponse",
    "RefundStatusUpdate",
    "RestaurantStatusResult",
    "RestaurantTimeStatus",
    "ShopStatusUpdate",
    "ShopTimingResponse",
    "ShopTimingUpdate",
    "TimeGroupCreate",
    "TimeGroupProductAdd",
    "TimeGroupResponse",
    "TimeGroupUpdate",
]
