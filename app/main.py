import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from app.api.middlewares import register_exception_handlers
from app.api.v1 import api_router
from app.cache import RestaurantCache, create_redis_client
from app.core.config import settings
from app.db.session import AsyncSessionLocal
from app.services.porter_client import PorterClient
from app.services.reassignment import BackgroundReassigner
from app.services.status_scheduler import RestaurantStatusScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cache = RestaurantCache(create_redis_client())
    porter_client = PorterClient()
    app.state.cache = cache
    app.state.porter_client = porter_client
    app.state.scheduler = RestaurantStatusScheduler(AsyncSessionLocal, cache)
    app.state.reassigner = BackgroundReassigner(AsyncSessionLocal, porter_client)

    if settings.scheduler_autostart:
        app.state.scheduler.start()

    yield

    await app.state.scheduler.stop()
    await app.state.reassigner.drain()
    await porter_client.close()
    await cache.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.api_debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/v1")
app.mount("/metrics", make_asgi_app())


@app.get("/health")
async def health_check() -> dict:
    return {"status": "healthy"}
