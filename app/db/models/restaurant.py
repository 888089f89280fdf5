from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String, func, true
from sqlalchemy.orm import Mapped, mapped_column

from app.core.config import settings
from app.db.base import Base, JSONType


class Restaurant(Base):
    """Restaurant entity. ``is_open`` is driven by the scheduler when auto-managed."""

    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), server_default="active", default="active", nullable=False
    )
    is_open: Mapped[bool] = mapped_column(
        Boolean, server_default=true(), default=True, nullable=False
    )
    auto_open_close: Mapped[bool] = mapped_column(
        Boolean, server_default=true(), default=True, nullable=False
    )
    opening_hours: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    timezone: Mapped[str] = mapped_column(
        String(64), default=lambda: settings.default_timezone, nullable=False
    )
    last_status_update: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'suspended', 'closed')",
            name="valid_restaurant_status",
        ),
        Index("idx_restaurants_auto_open_close", "auto_open_close", "status"),
    )
