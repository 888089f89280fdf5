from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query

from app.api.dependencies import CacheDep, SchedulerDep, SessionDep
from app.schemas.restaurants import (
    RestaurantStatusResult,
    RestaurantTimeStatus,
    ShopStatusUpdate,
    ShopTimingResponse,
    ShopTimingUpdate,
)
from app.schemas.time_groups import ProductsByTimeResponse
from app.services.availability import RestaurantAvailabilityService

router = APIRouter()


@router.get("/{restaurant_id}/shop-timing", response_model=ShopTimingResponse)
async def get_shop_timing(
    restaurant_id: str, session: SessionDep, cache: CacheDep
) -> ShopTimingResponse:
    service = RestaurantAvailabilityService(session, cache)
    return await service.get_shop_timing(restaurant_id)


@router.put("/{restaurant_id}/shop-timing", response_model=ShopTimingResponse)
async def update_shop_timing(
    restaurant_id: str,
    timing: ShopTimingUpdate,
    session: SessionDep,
    cache: CacheDep,
) -> ShopTimingResponse:
    service = RestaurantAvailabilityService(session, cache)
    opening_hours = {
        day.value: window.model_dump() for day, window in timing.opening_hours.items()
    }
    return await service.update_shop_timing(
        restaurant_id, opening_hours, timing.auto_open_close
    )


@router.put("/{restaurant_id}/shop-status", response_model=ShopTimingResponse)
async def update_shop_status(
    restaurant_id: str,
    body: ShopStatusUpdate,
    session: SessionDep,
    cache: CacheDep,
) -> ShopTimingResponse:
    service = RestaurantAvailabilityService(session, cache)
    return await service.update_shop_status(restaurant_id, body.is_open)


@router.get("/{restaurant_id}/time-status", response_model=RestaurantTimeStatus)
async def get_time_status(
    restaurant_id: str,
    session: SessionDep,
    cache: CacheDep,
    at: Optional[datetime] = None,
) -> RestaurantTimeStatus:
    service = RestaurantAvailabilityService(session, cache)
    return await service.get_time_status(restaurant_id, at)


@router.get("/{restaurant_id}/products/by-time", response_model=ProductsByTimeResponse)
async def get_products_by_time(
    restaurant_id: str,
    session: SessionDep,
    cache: CacheDep,
    at: Optional[datetime] = None,
    tags: Optional[list[str]] = Query(default=None),
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    availability: Optional[bool] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ProductsByTimeResponse:
    service = RestaurantAvailabilityService(session, cache)
    return await service.get_products_by_time(
        restaurant_id,
        at=at,
        tags=tags,
        min_price=min_price,
        max_price=max_price,
        availability=availability,
        page=page,
        limit=limit,
    )


@router.post(
    "/{restaurant_id}/force-status-update", response_model=RestaurantStatusResult
)
async def force_status_update(
    restaurant_id: str, scheduler: SchedulerDep
) -> RestaurantStatusResult:
    return await scheduler.force_status_update(restaurant_id)
