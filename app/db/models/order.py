from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import OrderStatus
from app.db.base import Base, JSONType


class Order(Base):
    """Food order. Identity columns never change; ``order_logs`` is append-only."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    restaurant_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("restaurants.id", ondelete="RESTRICT"), nullable=False
    )
    cart_id: Mapped[str] = mapped_column(String(50), nullable=False)
    order_status: Mapped[OrderStatus] = mapped_column(
        String(20), default=OrderStatus.PENDING.value, nullable=False
    )
    order_logs: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    total_amount: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_contact: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    delivery_address: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "order_status IN ('pending', 'confirmed', 'preparing', 'dispatched', 'delivered', 'cancelled')",
            name="valid_order_status",
        ),
        Index("idx_orders_restaurant_id", "restaurant_id"),
    )
