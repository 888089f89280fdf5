from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Weekday
from app.core.time_windows import DayWindow


def _meta() -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": str(uuid4()),
    }


class ShopTimingUpdate(BaseModel):
    opening_hours: dict[Weekday, DayWindow]
    auto_open_close: bool = True


class ShopStatusUpdate(BaseModel):
    is_open: bool


class ShopTimingResponse(BaseModel):
    restaurant_id: str = Field(validation_alias="id")
    name: str
    is_open: bool
    auto_open_close: bool
    opening_hours: Optional[dict] = None
    timezone: str
    last_status_update: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RestaurantTimeStatus(BaseModel):
    is_open: bool
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    next_open_time: Optional[datetime] = None
    auto_open_close_enabled: bool
    last_status_update: Optional[datetime] = None
    timezone: str


class RestaurantStatusResult(BaseModel):
    restaurant_id: str
    is_open: bool
    changed: bool
    auto_open_close: bool
    last_status_update: Optional[datetime] = None
    meta: dict = Field(default_factory=_meta)
