from app.services.availability import RestaurantAvailabilityService
from app.services.delivery_dispatch import DeliveryDispatcher
from app.services.order_lifecycle import OrderLifecycleService
from app.services.porter_client import PorterClient
from app.services.reassignment import BackgroundReassigner, DeliveryReassignmentService
from app.services.refund_lifecycle import RefundLifecycleService
from app.services.status_scheduler import RestaurantStatusScheduler
from app.services.webhook_processor import CarrierWebhookProcessor

__all__ = [
    "BackgroundReassigner",
    "CarrierWebhookProcessor",
    "DeliveryDispatcher",
    "DeliveryReassignmentService",
    "OrderLifecycleService",
    "PorterClient",
    "RefundLifecycleService",
    "RestaurantAvailabilityService",
    "RestaurantStatusScheduler",
]
