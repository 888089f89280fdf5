from collections import defaultdict
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import TimeRangeProductsGroup, TimeRangeProductsGroupItem


class TimeGroupRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_group(
        self,
        restaurant_id: str,
        group_name: str,
        start_time: str,
        end_time: str,
        is_active: bool = True,
    ) -> TimeRangeProductsGroup:
        group = TimeRangeProductsGroup(
            restaurant_id=restaurant_id,
            group_name=group_name,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        self.session.add(group)
        await self.session.flush()
        return group

    async def get_group(
        self, group_id: int, restaurant_id: Optional[str] = None
    ) -> Optional[TimeRangeProductsGroup]:
        stmt = select(TimeRangeProductsGroup).where(TimeRangeProductsGroup.id == group_id)
        if restaurant_id:
            stmt = stmt.where(TimeRangeProductsGroup.restaurant_id == restaurant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_restaurant(self, restaurant_id: str) -> list[TimeRangeProductsGroup]:
        stmt = (
            select(TimeRangeProductsGroup)
            .where(TimeRangeProductsGroup.restaurant_id == restaurant_id)
            .order_by(TimeRangeProductsGroup.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save(self, group: TimeRangeProductsGroup) -> TimeRangeProductsGroup:
        await self.session.flush()
        return group

    async def delete_group(self, group: TimeRangeProductsGroup) -> None:
        await self.session.execute(
            delete(TimeRangeProductsGroupItem).where(
                TimeRangeProductsGroupItem.group_id == group.id
            )
        )
        await self.session.delete(group)
        await self.session.flush()

    async def has_product(self, group_id: int, product_id: str) -> bool:
        stmt = (
            select(TimeRangeProductsGroupItem.id)
            .where(TimeRangeProductsGroupItem.group_id == group_id)
            .where(TimeRangeProductsGroupItem.product_id == product_id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add_product(self, group_id: int, product_id: str) -> None:
        self.session.add(
            TimeRangeProductsGroupItem(group_id=group_id, product_id=product_id)
        )
        await self.session.flush()

    async def remove_product(self, group_id: int, product_id: str) -> int:
        result = await self.session.execute(
            delete(TimeRangeProductsGroupItem)
            .where(TimeRangeProductsGroupItem.group_id == group_id)
            .where(TimeRangeProductsGroupItem.product_id == product_id)
        )
        return result.rowcount

    async def groups_by_product(
        self, product_ids: Iterable[str]
    ) -> dict[str, list[TimeRangeProductsGroup]]:
        """Map each product id to the groups it belongs to, in group id order."""
        product_ids = list(product_ids)
        if not product_ids:
            return {}
        stmt = (
            select(TimeRangeProductsGroupItem.product_id, TimeRangeProductsGroup)
            .join(
                TimeRangeProductsGroup,
                TimeRangeProductsGroup.id == TimeRangeProductsGroupItem.group_id,
            )
            .where(TimeRangeProductsGroupItem.product_id.in_(product_ids))
            .order_by(TimeRangeProductsGroup.id)
        )
        result = await self.session.execute(stmt)
        grouped: dict[str, list[TimeRangeProductsGroup]] = defaultdict(list)
        for product_id, group in result.all():
            grouped[product_id].append(group)
        return dict(grouped)
