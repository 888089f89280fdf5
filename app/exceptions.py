from typing import Any, Optional


class BaseAPIException(Exception):
    """
    Base exception for all API errors.

    Provides consistent structure with status_code, error_code, and details.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}


class ValidationException(BaseAPIException):
    """Invalid input data (HTTP 422)."""

    status_code = 422
    error_code = "VALIDATION_ERROR"


class BusinessException(BaseAPIException):
    """Business rule violation (HTTP 409)."""

    status_code = 409
    error_code = "BUSINESS_RULE_VIOLATION"


class NotFoundException(BaseAPIException):
    """Resource not found (HTTP 404)."""

    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"


class UpstreamException(BaseAPIException):
    """Third-party API failure (HTTP 502)."""

    status_code = 502
    error_code = "UPSTREAM_ERROR"


class SystemException(BaseAPIException):
    """Internal system error (HTTP 500)."""

    status_code = 500
    error_code = "SYSTEM_ERROR"


# Domain-specific exceptions
class InvalidTransitionException(BusinessException):
    """Requested status change is not in the transition table."""

    error_code = "INVALID_STATUS_TRANSITION"

    def __init__(self, entity: str, entity_id: str, current: str, requested: str):
        super().__init__(
            message=f"Invalid {entity} status transition: {current} -> {requested}",
            details={
                "entity": entity,
                "id": entity_id,
                "current_status": current,
                "requested_status": requested,
            },
        )
        self.entity = entity
        self.current = current
        self.requested = requested


class SchedulerAlreadyRunningException(BusinessException):
    """Automatic status management was started twice."""

    error_code = "SCHEDULER_ALREADY_RUNNING"

    def __init__(self) -> None:
        super().__init__(message="Automatic status management is already running")


class RestaurantNotFoundException(NotFoundException):
    """Restaurant ID not found in database."""

    error_code = "RESTAURANT_NOT_FOUND"

    def __init__(self, restaurant_id: str):
        super().__init__(
            message=f"Restaurant not found: {restaurant_id}",
            details={"restaurant_id": restaurant_id},
        )


class OrderNotFoundException(NotFoundException):
    error_code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        super().__init__(
            message=f"Order not found: {order_id}",
            details={"order_id": order_id},
        )


class DeliveryNotFoundException(NotFoundException):
    """No delivery row matches the carrier order id of a webhook."""

    error_code = "DELIVERY_NOT_FOUND"

    def __init__(self, porter_order_id: str, status: Optional[str] = None):
        details: dict[str, Any] = {"porter_order_id": porter_order_id}
        if status is not None:
            details["status"] = status
        super().__init__(
            message=f"Porter delivery not found for order ID: {porter_order_id}",
            details=details,
        )


class RefundNotFoundException(NotFoundException):
    error_code = "REFUND_NOT_FOUND"

    def __init__(self, refund_id: str):
        super().__init__(
            message=f"Refund not found: {refund_id}",
            details={"refund_id": refund_id},
        )


class TimeGroupNotFoundException(NotFoundException):
    error_code = "TIME_GROUP_NOT_FOUND"

    def __init__(self, group_id: str):
        super().__init__(
            message=f"Time group not found: {group_id}",
            details={"group_id": group_id},
        )


class ProductNotFoundException(NotFoundException):
    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product not found: {product_id}",
            details={"product_id": product_id},
        )


class InvalidTimeFormatException(ValidationException):
    """Time value is not a zero-padded HH:MM string."""

    error_code = "INVALID_TIME_FORMAT"

    def __init__(self, value: str, field: Optional[str] = None):
        details: dict[str, Any] = {"value": value}
        if field:
            details["field"] = field
        super().__init__(
            message=f"Invalid time format, expected HH:MM: {value}",
            details=details,
        )


class CarrierException(UpstreamException):
    """Delivery carrier API call failed."""

    error_code = "CARRIER_ERROR"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        details: dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["upstream_status_code"] = status_code
        super().__init__(message=message, details=details)


class PersistenceException(SystemException):
    """Database connection or query failure."""

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(
            message=message, details={"operation": operation} if operation else {}
        )
