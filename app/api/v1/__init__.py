from fastapi import APIRouter

from app.api.v1 import orders, porter, refunds, restaurants, system, time_groups

api_router = APIRouter()

api_router.include_router(
    restaurants.router, prefix="/restaurants", tags=["restaurants"]
)
api_router.include_router(
    time_groups.router, prefix="/restaurants", tags=["time-groups"]
)
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(refunds.router, prefix="/refunds", tags=["refunds"])
api_router.include_router(porter.router, prefix="/porter", tags=["porter"])
api_router.include_router(system.router, prefix="/system", tags=["system"])
