import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.db.repositories import RestaurantRepository
from app.exceptions import (
    PersistenceException,
    RestaurantNotFoundException,
    SchedulerAlreadyRunningException,
)
from app.services.status_scheduler import RestaurantStatusScheduler, next_tick_deadline
from tests.utils import RestaurantFactory

# 2025-01-06 is a Monday.
NOON_MONDAY = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)
DAYTIME = RestaurantFactory.opening_hours("10:00", "22:00")
EVENINGS = RestaurantFactory.opening_hours("18:00", "23:00")


async def load_restaurant(session_factory, restaurant_id: str):
    async with session_factory() as session:
        return await RestaurantRepository(session).get_by_id(restaurant_id)


def failing_for(restaurant_id: str):
    original = RestaurantRepository.set_open_status

    async def set_open_status(self, target_id, is_open, updated_at):
        if target_id == restaurant_id:
            raise OperationalError(
                "UPDATE restaurants", {}, Exception("database is locked")
            )
        return await original(self, target_id, is_open, updated_at)

    return set_open_status


@pytest.mark.integration
class TestSchedulerTick:
    async def test_tick_aligns_flags_with_schedule(
        self, db_session, session_factory, cache, fake_redis
    ) -> None:
        await RestaurantFactory.create(db_session, "res_opens", DAYTIME, is_open=False)
        await RestaurantFactory.create(db_session, "res_closes", EVENINGS, is_open=True)
        await RestaurantFactory.create(db_session, "res_steady", DAYTIME, is_open=True)
        await RestaurantFactory.create(
            db_session, "res_manual", DAYTIME, is_open=False, auto_open_close=False
        )

        scheduler = RestaurantStatusScheduler(session_factory, cache)
        result = await scheduler.run_tick(NOON_MONDAY)

        assert (result.checked, result.updated, result.errors) == (3, 2, 0)

        opened = await load_restaurant(session_factory, "res_opens")
        closed = await load_restaurant(session_factory, "res_closes")
        steady = await load_restaurant(session_factory, "res_steady")
        manual = await load_restaurant(session_factory, "res_manual")
        assert opened.is_open is True
        assert closed.is_open is False
        assert steady.is_open is True
        assert manual.is_open is False
        assert opened.last_status_update.replace(tzinfo=None) == datetime(2025, 1, 6, 12, 0)
        assert steady.last_status_update is None

        assert set(fake_redis.deleted) == {
            "restaurant:res_opens:timing",
            "restaurant:res_opens:time_status",
            "restaurant:res_closes:timing",
            "restaurant:res_closes:time_status",
            "restaurant:res_steady:timing",
            "restaurant:res_steady:time_status",
        }

    async def test_one_failing_restaurant_does_not_stop_the_batch(
        self, db_session, session_factory, cache, monkeypatch, caplog
    ) -> None:
        for restaurant_id in ("res_a", "res_b", "res_c"):
            await RestaurantFactory.create(
                db_session, restaurant_id, DAYTIME, is_open=False
            )
        monkeypatch.setattr(
            RestaurantRepository, "set_open_status", failing_for("res_b")
        )

        scheduler = RestaurantStatusScheduler(session_factory, cache, page_size=2)
        result = await scheduler.run_tick(NOON_MONDAY)

        assert (result.checked, result.updated, result.errors) == (3, 2, 1)
        assert (await load_restaurant(session_factory, "res_a")).is_open is True
        assert (await load_restaurant(session_factory, "res_b")).is_open is False
        assert (await load_restaurant(session_factory, "res_c")).is_open is True
        assert "res_b" in caplog.text

    async def test_pages_through_all_restaurants(
        self, db_session, session_factory, cache
    ) -> None:
        for index in range(5):
            await RestaurantFactory.create(
                db_session, f"res_page_{index}", DAYTIME, is_open=False
            )

        scheduler = RestaurantStatusScheduler(session_factory, cache, page_size=2)
        result = await scheduler.run_tick(NOON_MONDAY)

        assert (result.checked, result.updated) == (5, 5)

    async def test_inactive_restaurants_are_skipped(
        self, db_session, session_factory, cache
    ) -> None:
        restaurant = await RestaurantFactory.create(
            db_session, "res_suspended", DAYTIME, is_open=False
        )
        restaurant.status = "suspended"
        await db_session.commit()

        scheduler = RestaurantStatusScheduler(session_factory, cache)
        result = await scheduler.run_tick(NOON_MONDAY)

        assert result.checked == 0


@pytest.mark.integration
class TestForceStatusUpdate:
    async def test_flips_auto_managed_restaurant(
        self, db_session, session_factory, cache
    ) -> None:
        await RestaurantFactory.create(db_session, "res_force", DAYTIME, is_open=False)
        scheduler = RestaurantStatusScheduler(
            session_factory, cache, clock=lambda: NOON_MONDAY
        )

        result = await scheduler.force_status_update("res_force")

        assert result.is_open is True
        assert result.changed is True
        assert (await load_restaurant(session_factory, "res_force")).is_open is True

    async def test_manual_restaurant_keeps_its_flag(
        self, db_session, session_factory, cache, fake_redis
    ) -> None:
        await RestaurantFactory.create(
            db_session, "res_manual", DAYTIME, is_open=False, auto_open_close=False
        )
        scheduler = RestaurantStatusScheduler(
            session_factory, cache, clock=lambda: NOON_MONDAY
        )

        result = await scheduler.force_status_update("res_manual")

        assert result.is_open is False
        assert result.changed is False
        assert "restaurant:res_manual:time_status" in fake_redis.deleted

    async def test_unknown_restaurant(self, session_factory, cache) -> None:
        scheduler = RestaurantStatusScheduler(session_factory, cache)

        with pytest.raises(RestaurantNotFoundException):
            await scheduler.force_status_update("res_missing")

    async def test_persistence_failure_propagates(
        self, db_session, session_factory, cache, monkeypatch
    ) -> None:
        await RestaurantFactory.create(db_session, "res_broken", DAYTIME, is_open=False)
        monkeypatch.setattr(
            RestaurantRepository, "set_open_status", failing_for("res_broken")
        )
        scheduler = RestaurantStatusScheduler(
            session_factory, cache, clock=lambda: NOON_MONDAY
        )

        with pytest.raises(PersistenceException):
            await scheduler.force_status_update("res_broken")


@pytest.mark.integration
class TestSchedulerLifecycle:
    async def test_start_twice_is_rejected(self, scheduler) -> None:
        scheduler.start()

        with pytest.raises(SchedulerAlreadyRunningException):
            scheduler.start()

        tickers = [
            task
            for task in asyncio.all_tasks()
            if task.get_name() == RestaurantStatusScheduler.TASK_NAME
        ]
        assert len(tickers) == 1
        await scheduler.stop()
        assert not scheduler.is_running

    async def test_stop_is_idempotent(self, scheduler) -> None:
        await scheduler.stop()
        scheduler.start()
        await scheduler.stop()
        await scheduler.stop()

        assert not scheduler.is_running

    async def test_can_restart_after_stop(self, scheduler) -> None:
        scheduler.start()
        await scheduler.stop()
        scheduler.start()

        assert scheduler.is_running

    async def test_loop_survives_tick_errors(self, scheduler, monkeypatch) -> None:
        calls = []

        async def exploding_tick(now=None):
            calls.append(now)
            raise RuntimeError("boom")

        monkeypatch.setattr(scheduler, "run_tick", exploding_tick)
        scheduler.TICK_SECONDS = 0.01
        scheduler.start()

        for _ in range(200):
            if len(calls) >= 3:
                break
            await asyncio.sleep(0.01)

        assert len(calls) >= 3
        assert scheduler.is_running
        await scheduler.stop()

    async def test_tick_duration_does_not_stretch_the_period(
        self, scheduler, monkeypatch
    ) -> None:
        loop = asyncio.get_running_loop()
        started = []

        async def slow_tick(now=None):
            started.append(loop.time())
            await asyncio.sleep(0.06)

        monkeypatch.setattr(scheduler, "run_tick", slow_tick)
        scheduler.TICK_SECONDS = 0.1
        scheduler.start()

        for _ in range(200):
            if len(started) >= 4:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

        assert len(started) >= 4
        gaps = [later - earlier for earlier, later in zip(started, started[1:])]
        # Sleeping a full period after each tick would space them 0.16s apart.
        assert sum(gaps) / len(gaps) < 0.14


class TestNextTickDeadline:
    def test_keeps_fixed_cadence(self) -> None:
        assert next_tick_deadline(previous=60.0, now=75.0, period=60) == 120.0

    def test_overdue_tick_is_due_now(self) -> None:
        assert next_tick_deadline(previous=60.0, now=130.0, period=60) == 130.0
