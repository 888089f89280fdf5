from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Product


class ProductRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        product_id: str,
        restaurant_id: str,
        name: str,
        price: float,
        is_available: bool = True,
        tags: Optional[list[str]] = None,
    ) -> Product:
        product = Product(
            id=product_id,
            restaurant_id=restaurant_id,
            name=name,
            price=price,
            is_available=is_available,
            tags=tags or [],
        )
        self.session.add(product)
        await self.session.flush()
        return product

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        stmt = select(Product).where(Product.id == product_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_restaurant(self, restaurant_id: str) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.restaurant_id == restaurant_id)
            .order_by(Product.name, Product.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
