import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.enums import Carrier, ReassignmentOutcome
from app.db.repositories import OrderRepository, PorterDeliveryRepository
from app.exceptions import CarrierException, OrderNotFoundException
from app.metrics import reassignments_total
from app.services.delivery_dispatch import CarrierClient, DeliveryDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReassignmentReport:
    order_id: str
    carrier: Carrier
    outcome: ReassignmentOutcome
    porter_order_id: Optional[str] = None
    error: Optional[str] = None


class DeliveryReassignmentService:
    def __init__(self, session: AsyncSession, porter_client: CarrierClient) -> None:
        self.session = session
        self.porter_client = porter_client
        self.order_repo = OrderRepository(session)
        self.delivery_repo = PorterDeliveryRepository(session)
        self.dispatcher = DeliveryDispatcher(session, porter_client)

    async def reassign(self, order_id: str, carrier: Carrier = Carrier.PORTER) -> str:
        """
        Replace the order's delivery with a new carrier order.

        Deliveries active at the time of the call are deactivated and their
        carrier orders cancelled on a best-effort basis. Returns the new
        carrier order id. The caller owns the transaction.
        """
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)

        deliveries = await self.delivery_repo.list_by_order_id(order_id)
        stale = [d.porter_order_id for d in deliveries if d.is_active]
        await self.delivery_repo.deactivate_for_order(order_id)

        for porter_order_id in stale:
            try:
                await self.porter_client.cancel_order(porter_order_id)
            except CarrierException as e:
                logger.warning(
                    "Failed to cancel stale carrier order porter_order_id=%s: %s",
                    porter_order_id,
                    e.message,
                    extra={"order_id": order_id, "porter_order_id": porter_order_id},
                )

        porter_order_id = await self.dispatcher.create_delivery_order(order, carrier)
        logger.info(
            "Delivery reassigned order_id=%s new_porter_order_id=%s cancelled=%s",
            order_id,
            porter_order_id,
            len(stale),
            extra={"order_id": order_id, "porter_order_id": porter_order_id},
        )
        return porter_order_id


CompletionHook = Callable[[ReassignmentReport], Awaitable[None]]


class BackgroundReassigner:
    """Runs reassignments detached from the request that triggered them."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        porter_client: CarrierClient,
        timeout_seconds: Optional[float] = None,
        on_complete: Optional[CompletionHook] = None,
    ) -> None:
        self.session_factory = session_factory
        self.porter_client = porter_client
        self.timeout_seconds = timeout_seconds or settings.reassignment_timeout_seconds
        self.on_complete = on_complete
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, order_id: str, carrier: Carrier = Carrier.PORTER) -> asyncio.Task:
        task = asyncio.create_task(
            self.run(order_id, carrier), name=f"reassign-{order_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run(
        self, order_id: str, carrier: Carrier = Carrier.PORTER
    ) -> ReassignmentReport:
        try:
            porter_order_id = await asyncio.wait_for(
                self._reassign(order_id, carrier), timeout=self.timeout_seconds
            )
            report = ReassignmentReport(
                order_id, carrier, ReassignmentOutcome.SUCCEEDED, porter_order_id
            )
            logger.info(
                "Background reassignment succeeded order_id=%s porter_order_id=%s",
                order_id,
                porter_order_id,
                extra={"order_id": order_id},
            )
        except asyncio.TimeoutError:
            report = ReassignmentReport(
                order_id,
                carrier,
                ReassignmentOutcome.TIMED_OUT,
                error=f"timed out after {self.timeout_seconds}s",
            )
            logger.error(
                "Background reassignment timed out order_id=%s",
                order_id,
                extra={"order_id": order_id},
            )
        except Exception as e:
            report = ReassignmentReport(
                order_id, carrier, ReassignmentOutcome.FAILED, error=str(e)
            )
            logger.error(
                "Background reassignment failed order_id=%s: %s",
                order_id,
                e,
                exc_info=True,
                extra={"order_id": order_id},
            )

        reassignments_total.labels(outcome=report.outcome.value).inc()
        if self.on_complete is not None:
            await self.on_complete(report)
        return report

    async def _reassign(self, order_id: str, carrier: Carrier) -> str:
        async with self.session_factory() as session:
            async with session.begin():
                service = DeliveryReassignmentService(session, self.porter_client)
                return await service.reassign(order_id, carrier)
