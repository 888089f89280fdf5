import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.cache import RestaurantCache
from app.core.config import settings
from app.core.time_windows import restaurant_should_be_open
from app.db.models import Restaurant
from app.db.repositories import RestaurantRepository
from app.exceptions import (
    PersistenceException,
    RestaurantNotFoundException,
    SchedulerAlreadyRunningException,
)
from app.metrics import (
    restaurant_status_flips_total,
    scheduler_errors_total,
    scheduler_running,
    scheduler_ticks_total,
)
from app.schemas.restaurants import RestaurantStatusResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_tick_deadline(previous: float, now: float, period: float) -> float:
    """Next tick on a fixed cadence. An overdue tick is due immediately."""
    return max(previous + period, now)


@dataclass
class TickResult:
    checked: int = 0
    updated: int = 0
    errors: int = 0


class RestaurantStatusScheduler:
    """
    Periodically aligns each auto-managed restaurant's open flag with its
    weekly opening hours.

    One asyncio task runs the loop. Every restaurant is evaluated in its own
    session so that a failure on one never rolls back or skips another.
    """

    TICK_SECONDS = 60
    TASK_NAME = "restaurant-status-scheduler"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: RestaurantCache,
        clock: Optional[Callable[[], datetime]] = None,
        page_size: Optional[int] = None,
    ) -> None:
        self.session_factory = session_factory
        self.cache = cache
        self.clock = clock or _utcnow
        self.page_size = page_size or settings.scheduler_page_size
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            raise SchedulerAlreadyRunningException()
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name=self.TASK_NAME)
        scheduler_running.set(1)
        logger.info(
            "Automatic status management started, tick every %ss", self.TICK_SECONDS
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        task, self._task = self._task, None
        await task
        scheduler_running.set(0)
        logger.info("Automatic status management stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.TICK_SECONDS
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=max(0.0, next_tick - loop.time())
                )
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_tick()
            except Exception as e:
                logger.error("Status tick failed: %s", e, exc_info=True)

            next_tick = next_tick_deadline(next_tick, loop.time(), self.TICK_SECONDS)

    async def run_tick(self, now: Optional[datetime] = None) -> TickResult:
        now = now or self.clock()
        result = TickResult()
        offset = 0
        scheduler_ticks_total.inc()
        logger.info("Running automatic restaurant status update at %s", now.isoformat())

        while True:
            try:
                async with self.session_factory() as session:
                    page = await RestaurantRepository(session).list_auto_managed(
                        limit=self.page_size, offset=offset
                    )
            except SQLAlchemyError as e:
                logger.error("Failed to fetch restaurants offset=%s: %s", offset, e)
                break

            for restaurant in page:
                result.checked += 1
                try:
                    if await self._apply(restaurant.id, now):
                        result.updated += 1
                except Exception as e:
                    result.errors += 1
                    scheduler_errors_total.inc()
                    logger.error(
                        "Failed to update restaurant restaurant_id=%s: %s",
                        restaurant.id,
                        e,
                        extra={"restaurant_id": restaurant.id},
                    )

            if len(page) < self.page_size:
                break
            offset += self.page_size

        logger.info(
            "Status update completed: checked=%s updated=%s errors=%s",
            result.checked,
            result.updated,
            result.errors,
        )
        return result

    async def _apply(self, restaurant_id: str, now: datetime) -> bool:
        """Evaluate one restaurant in its own transaction. Returns True on a flip."""
        async with self.session_factory() as session:
            async with session.begin():
                restaurant = await RestaurantRepository(session).get_by_id(restaurant_id)
                if restaurant is None:
                    return False
                changed = await self._sync_restaurant(session, restaurant, now)
        await self.cache.invalidate_restaurant(restaurant_id)
        return changed

    async def _sync_restaurant(
        self, session: AsyncSession, restaurant: Restaurant, now: datetime
    ) -> bool:
        should_be_open = restaurant_should_be_open(restaurant, now)
        if should_be_open == restaurant.is_open:
            return False

        await RestaurantRepository(session).set_open_status(
            restaurant.id, should_be_open, now
        )
        status = "opened" if should_be_open else "closed"
        restaurant_status_flips_total.labels(status=status).inc()
        logger.info(
            "Restaurant %s %s",
            restaurant.id,
            status,
            extra={"restaurant_id": restaurant.id, "is_open": should_be_open},
        )
        return True

    async def force_status_update(self, restaurant_id: str) -> RestaurantStatusResult:
        now = self.clock()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repo = RestaurantRepository(session)
                    restaurant = await repo.get_by_id(restaurant_id)
                    if restaurant is None:
                        raise RestaurantNotFoundException(restaurant_id)
                    changed = await self._sync_restaurant(session, restaurant, now)
                    await session.refresh(restaurant)
                    result = RestaurantStatusResult(
                        restaurant_id=restaurant.id,
                        is_open=restaurant.is_open,
                        changed=changed,
                        auto_open_close=restaurant.auto_open_close,
                        last_status_update=restaurant.last_status_update,
                    )
        except SQLAlchemyError as e:
            logger.error(
                "Forced status update failed restaurant_id=%s: %s",
                restaurant_id,
                e,
                extra={"restaurant_id": restaurant_id},
            )
            raise PersistenceException(
                message=f"Failed to update restaurant status: {restaurant_id}",
                operation="force_status_update",
            ) from e

        await self.cache.invalidate_restaurant(restaurant_id)
        return result
