from tests.utils.factories import (
    DeliveryFactory,
    OrderFactory,
    ProductFactory,
    RefundFactory,
    RestaurantFactory,
    WebhookFactory,
)
from tests.utils.fakes import (
    FakePorterClient,
    FakeRedis,
    ReassignmentRecorder,
    UnavailableRedis,
)

__all__ = [
    "DeliveryFactory",
    "FakePorterClient",
    "FakeRedis",
    "OrderFactory",
    "ProductFactory",
    "ReassignmentRecorder",
    "RefundFactory",
    "RestaurantFactory",
    "UnavailableRedis",
    "WebhookFactory",
]
