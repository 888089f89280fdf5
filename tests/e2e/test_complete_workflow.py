"""
End-to-end order flow: restaurant setup through delivery and refund.

Drives the HTTP surface, seeding only the rows the API cannot create.
"""

import pytest

from app.core.enums import CarrierStatus
from tests.utils import (
    OrderFactory,
    ProductFactory,
    RefundFactory,
    RestaurantFactory,
    WebhookFactory,
)

RESTAURANT = "/v1/restaurants/res_e2e"


@pytest.mark.e2e
class TestCompleteWorkflow:
    async def test_order_from_menu_to_refund(
        self, client, db_session, porter_client, reassignment_recorder
    ) -> None:
        await RestaurantFactory.create(db_session, "res_e2e", is_open=False)
        await ProductFactory.create(db_session, "res_e2e", "prd_biryani", price=320.0)

        # 1. Configure hours and open the shop
        timing = await client.put(
            f"{RESTAURANT}/shop-timing",
            json={
                "opening_hours": RestaurantFactory.opening_hours("00:00", "23:59"),
                "auto_open_close": True,
            },
        )
        assert timing.status_code == 200
        forced = await client.post(f"{RESTAURANT}/force-status-update")
        assert forced.json()["is_open"] is True

        # 2. Lunch-only menu item
        group = await client.post(
            f"{RESTAURANT}/time-groups",
            json={"group_name": "Lunch", "start_time": "11:00", "end_time": "16:00"},
        )
        group_id = group.json()["id"]
        await client.post(
            f"{RESTAURANT}/time-groups/{group_id}/products",
            json={"product_id": "prd_biryani"},
        )
        menu = await client.get(
            f"{RESTAURANT}/products/by-time", params={"at": "2025-01-06T12:30:00Z"}
        )
        assert menu.json()["products"][0]["is_available"] is True

        # 3. Kitchen flow
        order = await OrderFactory.create(db_session, "res_e2e", order_id="ord_e2e")
        for status in ("confirmed", "preparing"):
            response = await client.put(
                f"/v1/orders/{order.id}/status", json={"status": status}
            )
            assert response.status_code == 200

        # 4. Hand over to the carrier
        delivery = await client.post(f"/v1/porter/create-delivery/{order.id}")
        assert delivery.status_code == 201
        porter_order_id = delivery.json()["porter_order_id"]

        accepted = await client.post(
            "/v1/porter/webhook",
            json=WebhookFactory.create_payload(
                porter_order_id, CarrierStatus.ORDER_ACCEPTED, driver_name="Asha"
            ),
        )
        assert accepted.json()["order_status"] == "dispatched"

        # 5. Driver drops the job, a replacement is booked
        dropped = await client.post(
            "/v1/porter/webhook",
            json=WebhookFactory.create_payload(porter_order_id, CarrierStatus.ORDER_CANCEL),
        )
        assert dropped.json()["reassignment_triggered"] is True
        await reassignment_recorder.wait_for(1)
        replacement_id = reassignment_recorder.reports[0].porter_order_id
        assert replacement_id != porter_order_id
        assert len(porter_client.created) == 2

        for carrier_status in (
            CarrierStatus.ORDER_ACCEPTED,
            CarrierStatus.ORDER_START_TRIP,
            CarrierStatus.ORDER_END_JOB,
        ):
            response = await client.post(
                "/v1/porter/webhook",
                json=WebhookFactory.create_payload(replacement_id, carrier_status),
            )
            assert response.status_code == 200

        final = (await client.get(f"/v1/orders/{order.id}")).json()
        assert final["order_status"] == "delivered"
        assert [entry["status"] for entry in final["order_logs"]] == [
            "confirmed",
            "preparing",
            "dispatched",
            "delivered",
        ]

        # 6. Refund
        refund = await RefundFactory.create(db_session, order.id, amount=320.0)
        for status in ("approved", "processed"):
            response = await client.put(
                f"/v1/refunds/{refund.id}/status", json={"status": status}
            )
            assert response.status_code == 200
        assert response.json()["processed_at"] is not None
