from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import RestaurantCache
from app.db.session import AsyncSessionLocal
from app.services.porter_client import PorterClient
from app.services.reassignment import BackgroundReassigner
from app.services.status_scheduler import RestaurantStatusScheduler


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


def get_cache(request: Request) -> RestaurantCache:
    return request.app.state.cache


def get_scheduler(request: Request) -> RestaurantStatusScheduler:
    return request.app.state.scheduler


def get_porter_client(request: Request) -> PorterClient:
    return request.app.state.porter_client


def get_reassigner(request: Request) -> BackgroundReassigner:
    return request.app.state.reassigner


SessionDep = Annotated[AsyncSession, Depends(get_session)]
CacheDep = Annotated[RestaurantCache, Depends(get_cache)]
SchedulerDep = Annotated[RestaurantStatusScheduler, Depends(get_scheduler)]
PorterClientDep = Annotated[PorterClient, Depends(get_porter_client)]
ReassignerDep = Annotated[BackgroundReassigner, Depends(get_reassigner)]
