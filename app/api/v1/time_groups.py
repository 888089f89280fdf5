from fastapi import APIRouter, status

from app.api.dependencies import CacheDep, SessionDep
from app.schemas.time_groups import (
    TimeGroupCreate,
    TimeGroupProductAdd,
    TimeGroupResponse,
    TimeGroupUpdate,
)
from app.services.availability import RestaurantAvailabilityService

router = APIRouter()


@router.get("/{restaurant_id}/time-groups", response_model=list[TimeGroupResponse])
async def list_time_groups(
    restaurant_id: str, session: SessionDep, cache: CacheDep
) -> list[TimeGroupResponse]:
    service = RestaurantAvailabilityService(session, cache)
    groups = await service.list_time_groups(restaurant_id)
    return [TimeGroupResponse.model_validate(group) for group in groups]


@router.post(
    "/{restaurant_id}/time-groups",
    response_model=TimeGroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_time_group(
    restaurant_id: str,
    data: TimeGroupCreate,
    session: SessionDep,
    cache: CacheDep,
) -> TimeGroupResponse:
    service = RestaurantAvailabilityService(session, cache)
    group = await service.create_time_group(restaurant_id, data)
    return TimeGroupResponse.model_validate(group)


@router.get(
    "/{restaurant_id}/time-groups/{group_id}", response_model=TimeGroupResponse
)
async def get_time_group(
    restaurant_id: str, group_id: int, session: SessionDep, cache: CacheDep
) -> TimeGroupResponse:
    service = RestaurantAvailabilityService(session, cache)
    group = await service.get_time_group(restaurant_id, group_id)
    return TimeGroupResponse.model_validate(group)


@router.put(
    "/{restaurant_id}/time-groups/{group_id}", response_model=TimeGroupResponse
)
async def update_time_group(
    restaurant_id: str,
    group_id: int,
    data: TimeGroupUpdate,
    session: SessionDep,
    cache: CacheDep,
) -> TimeGroupResponse:
    service = RestaurantAvailabilityService(session, cache)
    group = await service.update_time_group(restaurant_id, group_id, data)
    return TimeGroupResponse.model_validate(group)


@router.delete(
    "/{restaurant_id}/time-groups/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_time_group(
    restaurant_id: str, group_id: int, session: SessionDep, cache: CacheDep
) -> None:
    service = RestaurantAvailabilityService(session, cache)
    await service.delete_time_group(restaurant_id, group_id)


@router.post(
    "/{restaurant_id}/time-groups/{group_id}/products",
    status_code=status.HTTP_201_CREATED,
)
async def add_product_to_group(
    restaurant_id: str,
    group_id: int,
    body: TimeGroupProductAdd,
    session: SessionDep,
    cache: CacheDep,
) -> dict:
    service = RestaurantAvailabilityService(session, cache)
    await service.add_product_to_group(restaurant_id, group_id, body.product_id)
    return {
        "message": "Product added to time group",
        "group_id": group_id,
        "product_id": body.product_id,
    }


@router.delete(
    "/{restaurant_id}/time-groups/{group_id}/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_product_from_group(
    restaurant_id: str,
    group_id: int,
    product_id: str,
    session: SessionDep,
    cache: CacheDep,
) -> None:
    service = RestaurantAvailabilityService(session, cache)
    await service.remove_product_from_group(restaurant_id, group_id, product_id)
