from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.restaurants import RestaurantTimeStatus

HH_MM = r"^([01]\d|2[0-3]):[0-5]\d$"


class TimeGroupCreate(BaseModel):
    group_name: str = Field(..., min_length=1, max_length=100)
    start_time: str = Field(..., pattern=HH_MM)
    end_time: str = Field(..., pattern=HH_MM)


class TimeGroupUpdate(BaseModel):
    group_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_time: Optional[str] = Field(default=None, pattern=HH_MM)
    end_time: Optional[str] = Field(default=None, pattern=HH_MM)
    is_active: Optional[bool] = None


class TimeGroupResponse(BaseModel):
    id: int
    restaurant_id: str
    group_name: str
    start_time: str
    end_time: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TimeGroupProductAdd(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=50)


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    is_available: bool
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ProductTimeInfo(BaseModel):
    product_id: str
    product: ProductResponse
    time_groups: list[TimeGroupResponse] = Field(default_factory=list)
    is_available: bool
    reason: Optional[str] = None
    next_available: Optional[str] = None


class ProductsByTimeResponse(BaseModel):
    products: list[ProductTimeInfo]
    total_count: int
    page: int
    limit: int
    requested_time: str
    time_groups: list[TimeGroupResponse]
    restaurant_status: RestaurantTimeStatus
