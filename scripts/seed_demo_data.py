import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.repositories import (
    OrderRepository,
    ProductRepository,
    RestaurantRepository,
    TimeGroupRepository,
)
from app.db.session import AsyncSessionLocal

WEEKDAY_HOURS = {"is_open": True, "open_time": "10:00", "close_time": "22:00"}
LATE_NIGHT_HOURS = {"is_open": True, "open_time": "18:00", "close_time": "02:00"}

RESTAURANTS = [
    {
        "restaurant_id": "res_dosa_corner",
        "name": "Dosa Corner",
        "opening_hours": {
            day: WEEKDAY_HOURS
            for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
        },
        "products": [
            ("prd_masala_dosa", "Masala Dosa", 120.0, ["breakfast", "veg"]),
            ("prd_thali", "South Indian Thali", 250.0, ["lunch", "veg"]),
        ],
        "groups": [
            ("Breakfast", "10:00", "11:30", ["prd_masala_dosa"]),
            ("Lunch", "12:00", "15:30", ["prd_thali"]),
        ],
    },
    {
        "restaurant_id": "res_midnight_grill",
        "name": "Midnight Grill",
        "opening_hours": {
            day: LATE_NIGHT_HOURS
            for day in ("thursday", "friday", "saturday", "sunday")
        },
        "products": [
            ("prd_kebab_roll", "Kebab Roll", 180.0, ["non-veg"]),
        ],
        "groups": [],
    },
]


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        async with session.begin():
            restaurant_repo = RestaurantRepository(session)
            product_repo = ProductRepository(session)
            group_repo = TimeGroupRepository(session)
            order_repo = OrderRepository(session)

            for entry in RESTAURANTS:
                restaurant_id = entry["restaurant_id"]
                if await restaurant_repo.get_by_id(restaurant_id):
                    print(f"Skipping existing restaurant {restaurant_id}")
                    continue

                await restaurant_repo.create(
                    restaurant_id=restaurant_id,
                    name=entry["name"],
                    opening_hours=entry["opening_hours"],
                )
                for product_id, name, price, tags in entry["products"]:
                    await product_repo.create(
                        product_id, restaurant_id, name, price, tags=tags
                    )
                for group_name, start, end, product_ids in entry["groups"]:
                    group = await group_repo.create_group(
                        restaurant_id, group_name, start, end
                    )
                    for product_id in product_ids:
                        await group_repo.add_product(group.id, product_id)

                await order_repo.create(
                    order_id=f"ord_{restaurant_id[4:]}_001",
                    user_id="usr_demo",
                    restaurant_id=restaurant_id,
                    cart_id="cart_demo",
                    total_amount=300.0,
                    customer_name="Demo Customer",
                    customer_contact="+919800000000",
                )
                print(f"Seeded restaurant {restaurant_id}")


if __name__ == "__main__":
    asyncio.run(seed())
