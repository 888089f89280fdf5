import pytest

from app.core.enums import Carrier, CarrierStatus
from app.db.models import Order, Restaurant
from app.exceptions import ValidationException
from app.services.delivery_dispatch import build_porter_order_request, parse_carrier
from app.services.webhook_processor import is_voluntary_cancel


class TestParseCarrier:
    @pytest.mark.parametrize("value", [None, "", "porter", "PORTER"])
    def test_porter_and_default(self, value) -> None:
        assert parse_carrier(value) == Carrier.PORTER

    def test_unsupported_carrier(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            parse_carrier("dunzo")

        assert exc_info.value.error_code == "UNSUPPORTED_CARRIER"
        assert exc_info.value.details == {"carrier": "dunzo"}


class TestPorterOrderRequest:
    def test_addresses_and_comment(self) -> None:
        order = Order(
            id="ord_12345678_x",
            restaurant_id="res_1",
            total_amount=349.5,
            customer_name="Meera",
            customer_contact="+919800000000",
            delivery_address={"line1": "12 MG Road", "city": "Bengaluru", "pincode": "560001"},
        )
        restaurant = Restaurant(id="res_1", name="Spice Route")

        request = build_porter_order_request(order, restaurant)

        assert request["request_id"].startswith("FOOD_ord_1234_")
        drop = request["drop_details"]["address"]
        assert drop["street_address1"] == "12 MG Road"
        assert drop["pincode"] == "560001"
        assert drop["country"] == "India"
        assert drop["contact_details"] == {
            "name": "Meera",
            "phone_number": "+919800000000",
        }
        pickup = request["pickup_details"]["address"]
        assert pickup["contact_details"]["name"] == "Spice Route"
        assert request["additional_comments"] == (
            "Food delivery from Spice Route. Order value: 349.50"
        )

    def test_missing_restaurant_falls_back_to_id(self) -> None:
        order = Order(id="ord_1", restaurant_id="res_gone", total_amount=10.0)

        request = build_porter_order_request(order, None)

        assert request["pickup_details"]["address"]["apartment_address"] == "res_gone"
        assert request["drop_details"]["address"]["city"] == ""


class TestVoluntaryCancel:
    @pytest.mark.parametrize(
        "original, expected",
        [
            ("pending", True),
            ("dispatched", True),
            ("delivered", True),
            ("cancelled", False),
        ],
    )
    def test_cancel(self, original, expected) -> None:
        assert is_voluntary_cancel(CarrierStatus.ORDER_CANCEL, original) is expected

    def test_cancel_on_inactive_delivery(self) -> None:
        assert not is_voluntary_cancel(
            CarrierStatus.ORDER_CANCEL, "dispatched", delivery_active=False
        )

    def test_other_statuses_are_never_cancels(self) -> None:
        assert not is_voluntary_cancel(CarrierStatus.ORDER_END_JOB, "dispatched")
