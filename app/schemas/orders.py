from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import OrderStatus, RefundStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: Optional[str] = Field(default=None, max_length=500)


class OrderLogEntry(BaseModel):
    timestamp: datetime
    status: OrderStatus
    note: str


class OrderResponse(BaseModel):
    id: str
    user_id: str
    restaurant_id: str
    cart_id: str
    order_status: OrderStatus
    order_logs: list[OrderLogEntry] = Field(default_factory=list)
    total_amount: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RefundStatusUpdate(BaseModel):
    status: RefundStatus
    admin_comment: Optional[str] = Field(default=None, max_length=1000)


class RefundResponse(BaseModel):
    id: str
    order_id: str
    amount: float
    reason: Optional[str] = None
    status: RefundStatus
    admin_comment: Optional[str] = None
    processed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
