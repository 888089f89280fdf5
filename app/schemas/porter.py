from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import Carrier, CarrierStatus


class DriverDetails(BaseModel):
    driver_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    mobile: Optional[str] = None


class PartnerLocation(BaseModel):
    lat: Optional[float] = None
    long: Optional[float] = None


class WebhookOrderDetails(BaseModel):
    event_ts: Optional[int] = None
    partner_location: Optional[PartnerLocation] = None
    driver_details: Optional[DriverDetails] = None
    estimated_trip_fare: Optional[float] = None
    actual_trip_fare: Optional[float] = None


class PorterWebhookPayload(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=100)
    status: CarrierStatus
    order_details: WebhookOrderDetails = Field(default_factory=WebhookOrderDetails)


class PorterWebhookResponse(BaseModel):
    message: str = "Webhook processed successfully"
    porter_status: CarrierStatus
    order_id: str
    porter_order_id: str
    order_status: str
    reassignment_triggered: bool


class DeliveryAssignmentResponse(BaseModel):
    message: str
    order_id: str
    carrier: Carrier
    porter_order_id: str
