"""Pydantic API schemas for the Fulfillment domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class PlaceOrderRequest(BaseModel):
    customer_id: str | None = None
    items: list[OrderItemRequest]
    slot: str
    start_date: date
    end_date: date | None = None
    is_recurring: bool = False


class RecordPaymentRequest(BaseModel):
    amount: float


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class AssignDriverRequest(BaseModel):
    driver_id: str


class AssignRouteRequest(BaseModel):
    route_id: str


class AdvanceStatusRequest(BaseModel):
    status: str
    notes: str | None = None


class SchedulerTickRequest(BaseModel):
    as_of: datetime | None = None


class RegisterDriverRequest(BaseModel):
    name: str
    phone: str
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    capacity: int | None = None


class DriverAvailabilityRequest(BaseModel):
    status: str


class DriverLocationRequest(BaseModel):
    location: str


class CreateZoneRequest(BaseModel):
    name: str
    description: str | None = None


class CreateRouteRequest(BaseModel):
    zone_id: str
    name: str
    max_deliveries: int
    areas: list[str] = []
    estimated_time: int | None = None
    start_location: str | None = None
    end_location: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str


class OrderIdResponse(BaseModel):
    order_id: str


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    price: float


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str | None = None
    status: str
    slot: str
    start_date: date
    end_date: date | None = None
    is_recurring: bool = False
    items: list[OrderItemResponse] = []
    total_amount: float
    paid_amount: float
    payment_status: str
    cancellation_reason: str | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id) if order.customer_id else None,
            status=order.status,
            slot=order.slot,
            start_date=order.start_date,
            end_date=order.end_date,
            is_recurring=bool(order.is_recurring),
            items=[
                OrderItemResponse(product_id=str(i.product_id), quantity=i.quantity, price=i.price)
                for i in order.items
            ],
            total_amount=order.total_amount or 0.0,
            paid_amount=order.paid_amount or 0.0,
            payment_status=order.payment_status,
            cancellation_reason=order.cancellation_reason,
        )


class DeliveryResponse(BaseModel):
    delivery_id: str
    order_id: str
    route_id: str | None = None
    driver_id: str | None = None
    date: date
    slot: str
    status: str
    notes: str | None = None
    assigned_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_delivery(cls, delivery) -> "DeliveryResponse":
        return cls(
            delivery_id=str(delivery.id),
            order_id=str(delivery.order_id),
            route_id=str(delivery.route_id) if delivery.route_id else None,
            driver_id=str(delivery.driver_id) if delivery.driver_id else None,
            date=delivery.date,
            slot=delivery.slot,
            status=delivery.status,
            notes=delivery.notes,
            assigned_at=delivery.assigned_at,
            started_at=delivery.started_at,
            completed_at=delivery.completed_at,
            updated_at=delivery.updated_at,
        )


class DeliveryListResponse(BaseModel):
    deliveries: list[DeliveryResponse]
    count: int


class SlotResult(BaseModel):
    slot: str
    date: str
    processed_count: int
    failed_count: int


class SchedulerTickResponse(BaseModel):
    results: list[SlotResult]


class DriverIdResponse(BaseModel):
    driver_id: str


class DriverResponse(BaseModel):
    driver_id: str
    name: str
    phone: str
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    capacity: int | None = None
    status: str
    current_location: str | None = None
    last_updated: datetime | None = None

    @classmethod
    def from_driver(cls, driver) -> "DriverResponse":
        return cls(
            driver_id=str(driver.id),
            name=driver.name,
            phone=driver.phone,
            vehicle_type=driver.vehicle_type,
            vehicle_number=driver.vehicle_number,
            capacity=driver.capacity,
            status=driver.status,
            current_location=driver.current_location,
            last_updated=driver.last_updated,
        )


class DriverListResponse(BaseModel):
    drivers: list[DriverResponse]
    count: int


class ZoneIdResponse(BaseModel):
    zone_id: str


class RouteIdResponse(BaseModel):
    route_id: str


class OrderDetailResponse(OrderResponse):
    deliveries: list[DeliveryResponse] = []

    @classmethod
    def from_order_and_deliveries(cls, order, deliveries) -> "OrderDetailResponse":
        return cls(
            **OrderResponse.from_order(order).model_dump(),
            deliveries=[DeliveryResponse.from_delivery(d) for d in sorted(deliveries, key=lambda d: d.date)],
        )


class OrderListResponse(BaseModel):
    orders: list[OrderDetailResponse]
    count: int


class SlotCountsResponse(BaseModel):
    slot: str
    scheduled: int = 0
    assigned: int = 0
    delivered: int = 0
    failed: int = 0
    cancelled: int = 0
    auto_completed: int = 0

    @classmethod
    def from_view(cls, view) -> "SlotCountsResponse":
        return cls(
            slot=view.slot,
            scheduled=view.scheduled or 0,
            assigned=view.assigned or 0,
            delivered=view.delivered or 0,
            failed=view.failed or 0,
            cancelled=view.cancelled or 0,
            auto_completed=view.auto_completed or 0,
        )


class SlotBoardResponse(BaseModel):
    date: date
    slots: list[SlotCountsResponse]


class RouteResponse(BaseModel):
    route_id: str
    zone_id: str
    name: str
    areas: list[str] = []
    estimated_time: int | None = None
    max_deliveries: int
    start_location: str | None = None
    end_location: str | None = None

    @classmethod
    def from_route(cls, route) -> "RouteResponse":
        return cls(
            route_id=str(route.id),
            zone_id=str(route.zone_id),
            name=route.name,
            areas=route.area_list,
            estimated_time=route.estimated_time,
            max_deliveries=route.max_deliveries,
            start_location=route.start_location,
            end_location=route.end_location,
        )


class RouteListResponse(BaseModel):
    routes: list[RouteResponse]
    count: int


class ZoneResponse(BaseModel):
    zone_id: str
    name: str
    description: str | None = None
    active: bool = True
    routes: list[RouteResponse] = []

    @classmethod
    def from_zone(cls, zone, routes) -> "ZoneResponse":
        return cls(
            zone_id=str(zone.id),
            name=zone.name,
            description=zone.description,
            active=bool(zone.active),
            routes=[RouteResponse.from_route(r) for r in routes],
        )


class ZoneListResponse(BaseModel):
    zones: list[ZoneResponse]
    count: int
