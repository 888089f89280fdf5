import asyncio
from typing import Any, Optional

from redis.exceptions import ConnectionError as RedisConnectionError

from app.exceptions import CarrierException
from app.services.reassignment import ReassignmentReport


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the cache makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, Optional[int]] = {}
        self.deleted: list[str] = []

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self.deleted.extend(keys)
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def aclose(self) -> None:
        return None


class UnavailableRedis(FakeRedis):
    async def get(self, key: str) -> Optional[str]:
        raise RedisConnectionError("connection refused")

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        raise RedisConnectionError("connection refused")

    async def delete(self, *keys: str) -> int:
        raise RedisConnectionError("connection refused")


class FakePorterClient:
    def __init__(
        self, fail_cancel: bool = False, create_delay: float = 0.0
    ) -> None:
        self.fail_cancel = fail_cancel
        self.create_delay = create_delay
        self.created: list[dict[str, Any]] = []
        self.cancelled: list[str] = []

    async def create_order(self, order_request: dict[str, Any]) -> dict[str, Any]:
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        self.created.append(order_request)
        porter_order_id = f"CRN{len(self.created):05d}"
        return {
            "request_id": order_request["request_id"],
            "order_id": porter_order_id,
            "tracking_url": f"https://porter.test/track/{porter_order_id}",
        }

    async def cancel_order(self, porter_order_id: str) -> dict[str, Any]:
        self.cancelled.append(porter_order_id)
        if self.fail_cancel:
            raise CarrierException(
                message="Order cannot be cancelled", operation="cancel_order"
            )
        return {"order_id": porter_order_id, "status": "cancelled"}

    async def close(self) -> None:
        return None


class ReassignmentRecorder:
    """Completion hook that lets tests await background reassignments."""

    def __init__(self) -> None:
        self.reports: list[ReassignmentReport] = []
        self._changed = asyncio.Event()

    async def __call__(self, report: ReassignmentReport) -> None:
        self.reports.append(report)
        self._changed.set()

    async def wait_for(self, count: int = 1, timeout: float = 5.0) -> None:
        async def _wait() -> None:
            while len(self.reports) < count:
                self._changed.clear()
                await self._changed.wait()

        await asyncio.wait_for(_wait(), timeout=timeout)
