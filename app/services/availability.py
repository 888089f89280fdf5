import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import RestaurantCache
from app.core.config import settings
from app.core.time_windows import (
    WeeklySchedule,
    find_next_open_time,
    is_product_available_at,
    local_day_and_time,
    restaurant_should_be_open,
)
from app.db.models import Product, Restaurant, TimeRangeProductsGroup
from app.db.repositories import (
    ProductRepository,
    RestaurantRepository,
    TimeGroupRepository,
)
from app.exceptions import (
    BusinessException,
    InvalidTimeFormatException,
    ProductNotFoundException,
    RestaurantNotFoundException,
    TimeGroupNotFoundException,
    ValidationException,
)
from app.schemas.restaurants import RestaurantTimeStatus, ShopTimingResponse
from app.schemas.time_groups import (
    ProductResponse,
    ProductsByTimeResponse,
    ProductTimeInfo,
    TimeGroupCreate,
    TimeGroupResponse,
    TimeGroupUpdate,
)

logger = logging.getLogger(__name__)


class RestaurantAvailabilityService:
    """Shop timing, manual open/close, and time-gated product listings."""

    def __init__(self, session: AsyncSession, cache: RestaurantCache) -> None:
        self.session = session
        self.cache = cache
        self.restaurant_repo = RestaurantRepository(session)
        self.product_repo = ProductRepository(session)
        self.group_repo = TimeGroupRepository(session)

    async def _get_restaurant(self, restaurant_id: str) -> Restaurant:
        restaurant = await self.restaurant_repo.get_by_id(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundException(restaurant_id)
        return restaurant

    async def get_shop_timing(self, restaurant_id: str) -> ShopTimingResponse:
        key = self.cache.timing_key(restaurant_id)
        cached = await self.cache.get_json(key)
        if cached is not None:
            return ShopTimingResponse.model_validate(cached)

        restaurant = await self._get_restaurant(restaurant_id)
        timing = ShopTimingResponse.model_validate(restaurant)
        await self.cache.set_json(
            key, timing.model_dump(mode="json"), settings.cache_timing_ttl_seconds
        )
        return timing

    async def update_shop_timing(
        self, restaurant_id: str, opening_hours: dict, auto_open_close: bool
    ) -> ShopTimingResponse:
        restaurant = await self._get_restaurant(restaurant_id)
        try:
            schedule = WeeklySchedule.from_opening_hours(opening_hours)
        except ValidationError as e:
            error = e.errors()[0]
            raise InvalidTimeFormatException(
                str(error.get("input")), ".".join(str(part) for part in error["loc"])
            ) from e
        except ValueError as e:
            raise ValidationException(
                message="Invalid opening hours",
                details={"restaurant_id": restaurant_id, "error": str(e)},
            ) from e

        await self.restaurant_repo.update_timing(
            restaurant, schedule.to_opening_hours(), auto_open_close
        )
        await self.session.commit()
        await self.session.refresh(restaurant)
        await self.cache.invalidate_restaurant(restaurant_id)

        logger.info(
            "Shop timing updated restaurant_id=%s auto_open_close=%s",
            restaurant_id,
            auto_open_close,
            extra={"restaurant_id": restaurant_id},
        )
        return ShopTimingResponse.model_validate(restaurant)

    async def update_shop_status(
        self, restaurant_id: str, is_open: bool, now: Optional[datetime] = None
    ) -> ShopTimingResponse:
        """Manual open/close toggle."""
        restaurant = await self._get_restaurant(restaurant_id)
        now = now or datetime.now(timezone.utc)

        updated = await self.restaurant_repo.set_open_status(restaurant_id, is_open, now)
        if not updated:
            raise RestaurantNotFoundException(restaurant_id)
        await self.session.commit()
        await self.session.refresh(restaurant)
        await self.cache.invalidate_restaurant(restaurant_id)

        logger.info(
            "Shop status set manually restaurant_id=%s is_open=%s",
            restaurant_id,
            is_open,
            extra={"restaurant_id": restaurant_id, "is_open": is_open},
        )
        return ShopTimingResponse.model_validate(restaurant)

    async def get_time_status(
        self, restaurant_id: str, at: Optional[datetime] = None
    ) -> RestaurantTimeStatus:
        """Open/closed status with today's window and the next opening.

        Without ``at`` the stored flag is reported and the result is cached;
        with ``at`` the flag is evaluated for that instant.
        """
        key = self.cache.time_status_key(restaurant_id)
        if at is None:
            cached = await self.cache.get_json(key)
            if cached is not None:
                return RestaurantTimeStatus.model_validate(cached)

        restaurant = await self._get_restaurant(restaurant_id)
        check_time = at or datetime.now(timezone.utc)
        is_open = (
            restaurant.is_open
            if at is None
            else restaurant_should_be_open(restaurant, check_time)
        )
        status = RestaurantTimeStatus(
            is_open=is_open,
            auto_open_close_enabled=restaurant.auto_open_close,
            last_status_update=restaurant.last_status_update,
            timezone=restaurant.timezone,
        )

        if restaurant.auto_open_close and restaurant.opening_hours:
            schedule = WeeklySchedule.from_opening_hours(restaurant.opening_hours)
            day, _ = local_day_and_time(check_time, restaurant.timezone)
            window = schedule.window_for(day)
            if window is not None and window.is_open:
                status.opening_time = window.open_time
                status.closing_time = window.close_time
            if not status.is_open:
                status.next_open_time = find_next_open_time(
                    schedule, restaurant.timezone, check_time
                )

        if at is None:
            await self.cache.set_json(
                key,
                status.model_dump(mode="json"),
                settings.cache_time_status_ttl_seconds,
            )
        return status

    async def get_products_by_time(
        self,
        restaurant_id: str,
        at: Optional[datetime] = None,
        tags: Optional[list[str]] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        availability: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> ProductsByTimeResponse:
        restaurant_status = await self.get_time_status(restaurant_id, at)
        check_time = at or datetime.now(timezone.utc)
        _, requested_time = local_day_and_time(check_time, restaurant_status.timezone)

        groups = await self.group_repo.list_by_restaurant(restaurant_id)
        products = [
            product
            for product in await self.product_repo.list_by_restaurant(restaurant_id)
            if _matches_filters(product, tags, min_price, max_price, availability)
        ]
        memberships = await self.group_repo.groups_by_product(p.id for p in products)

        infos = []
        for product in products:
            product_groups = memberships.get(product.id, [])
            result = is_product_available_at(
                product_groups,
                restaurant_status.is_open,
                check_time,
                restaurant_status.timezone,
                product_available=product.is_available,
            )
            infos.append(
                ProductTimeInfo(
                    product_id=product.id,
                    product=ProductResponse.model_validate(product),
                    time_groups=[
                        TimeGroupResponse.model_validate(g) for g in product_groups
                    ],
                    is_available=result.is_available,
                    reason=result.reason,
                    next_available=result.next_available,
                )
            )

        start = (page - 1) * limit
        return ProductsByTimeResponse(
            products=infos[start : start + limit],
            total_count=len(infos),
            page=page,
            limit=limit,
            requested_time=requested_time,
            time_groups=[TimeGroupResponse.model_validate(g) for g in groups],
            restaurant_status=restaurant_status,
        )

    # Time groups

    async def list_time_groups(self, restaurant_id: str) -> list[TimeRangeProductsGroup]:
        await self._get_restaurant(restaurant_id)
        return await self.group_repo.list_by_restaurant(restaurant_id)

    async def get_time_group(
        self, restaurant_id: str, group_id: int
    ) -> TimeRangeProductsGroup:
        group = await self.group_repo.get_group(group_id, restaurant_id)
        if group is None:
            raise TimeGroupNotFoundException(str(group_id))
        return group

    async def create_time_group(
        self, restaurant_id: str, data: TimeGroupCreate
    ) -> TimeRangeProductsGroup:
        await self._get_restaurant(restaurant_id)
        group = await self.group_repo.create_group(
            restaurant_id=restaurant_id,
            group_name=data.group_name,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        await self.session.commit()
        await self.session.refresh(group)
        logger.info(
            "Time group created restaurant_id=%s group_id=%s %s-%s",
            restaurant_id,
            group.id,
            group.start_time,
            group.end_time,
            extra={"restaurant_id": restaurant_id, "group_id": group.id},
        )
        return group

    async def update_time_group(
        self, restaurant_id: str, group_id: int, data: TimeGroupUpdate
    ) -> TimeRangeProductsGroup:
        group = await self.get_time_group(restaurant_id, group_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(group, field, value)
        await self.group_repo.save(group)
        await self.session.commit()
        await self.session.refresh(group)
        return group

    async def delete_time_group(self, restaurant_id: str, group_id: int) -> None:
        group = await self.get_time_group(restaurant_id, group_id)
        await self.group_repo.delete_group(group)
        await self.session.commit()
        logger.info(
            "Time group deleted restaurant_id=%s group_id=%s",
            restaurant_id,
            group_id,
            extra={"restaurant_id": restaurant_id, "group_id": group_id},
        )

    async def _get_product(self, restaurant_id: str, product_id: str) -> Product:
        product = await self.product_repo.get_by_id(product_id)
        if product is None or product.restaurant_id != restaurant_id:
            raise ProductNotFoundException(product_id)
        return product

    async def add_product_to_group(
        self, restaurant_id: str, group_id: int, product_id: str
    ) -> None:
        group = await self.get_time_group(restaurant_id, group_id)
        await self._get_product(restaurant_id, product_id)
        if await self.group_repo.has_product(group.id, product_id):
            raise BusinessException(
                message="Product already in time group",
                error_code="PRODUCT_ALREADY_IN_GROUP",
                details={"group_id": group.id, "product_id": product_id},
            )
        await self.group_repo.add_product(group.id, product_id)
        await self.session.commit()

    async def remove_product_from_group(
        self, restaurant_id: str, group_id: int, product_id: str
    ) -> None:
        group = await self.get_time_group(restaurant_id, group_id)
        removed = await self.group_repo.remove_product(group.id, product_id)
        if not removed:
            raise ProductNotFoundException(product_id)
        await self.session.commit()


def _matches_filters(
    product: Product,
    tags: Optional[list[str]],
    min_price: Optional[float],
    max_price: Optional[float],
    availability: Optional[bool],
) -> bool:
    if tags:
        product_tags = {t.lower() for t in product.tags or []}
        if not any(tag.lower() in product_tags for tag in tags):
            return False
    if min_price is not None and product.price < min_price:
        return False
    if max_price is not None and product.price > max_price:
        return False
    if availability is not None and product.is_available != availability:
        return False
    return True
