from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import RefundStatus
from app.db.base import Base


class Refund(Base):
    """Refund request. Status lifecycle: pending -> approved -> processed/failed."""

    __tablename__ = "refunds"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    order_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RefundStatus] = mapped_column(
        String(20), default=RefundStatus.PENDING.value, nullable=False
    )
    admin_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="positive_refund_amount"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'processed', 'failed')",
            name="valid_refund_status",
        ),
        CheckConstraint(
            "(status = 'processed' AND processed_at IS NOT NULL) OR (status != 'processed')",
            name="processed_at_consistency",
        ),
    )
