import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RestaurantState
from app.db.models import Restaurant

logger = logging.getLogger(__name__)


class RestaurantRepository:

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        restaurant_id: str,
        name: str,
        opening_hours: Optional[dict] = None,
        auto_open_close: bool = True,
        is_open: bool = True,
        timezone: Optional[str] = None,
        status: RestaurantState = RestaurantState.ACTIVE,
    ) -> Restaurant:
        restaurant_kwargs: dict = {
            "id": restaurant_id,
            "name": name,
            "opening_hours": opening_hours,
            "auto_open_close": auto_open_close,
            "is_open": is_open,
            "status": status.value,
        }
        if timezone is not None:
            restaurant_kwargs["timezone"] = timezone

        restaurant = Restaurant(**restaurant_kwargs)
        self.session.add(restaurant)
        await self.session.flush()
        return restaurant

    async def get_by_id(self, restaurant_id: str) -> Optional[Restaurant]:
        stmt = select(Restaurant).where(Restaurant.id == restaurant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_auto_managed(self, limit: int, offset: int) -> list[Restaurant]:
        """One page of active restaurants whose open flag is scheduler-managed."""
        stmt = (
            select(Restaurant)
            .where(Restaurant.auto_open_close.is_(True))
            .where(Restaurant.status == RestaurantState.ACTIVE.value)
            .order_by(Restaurant.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_open_status(
        self, restaurant_id: str, is_open: bool, updated_at: datetime
    ) -> bool:
        """Persist an open/closed flip.

        Both the scheduler and manual status updates go through here.
        Returns False when the restaurant no longer exists.
        """
        stmt = (
            update(Restaurant)
            .where(Restaurant.id == restaurant_id)
            .values(is_open=is_open, last_status_update=updated_at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def update_timing(
        self,
        restaurant: Restaurant,
        opening_hours: dict,
        auto_open_close: bool,
    ) -> Restaurant:
        restaurant.opening_hours = opening_hours
        restaurant.auto_open_close = auto_open_close
        await self.session.flush()
        return restaurant
