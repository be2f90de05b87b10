"""FastAPI routes for the Fulfillment domain."""

import json
from datetime import date

from fastapi import APIRouter, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from fulfillment.api.schemas import (
    AdvanceStatusRequest,
    AssignDriverRequest,
    AssignRouteRequest,
    CancelOrderRequest,
    CreateRouteRequest,
    CreateZoneRequest,
    DeliveryListResponse,
    DeliveryResponse,
    DriverAvailabilityRequest,
    DriverIdResponse,
    DriverListResponse,
    DriverLocationRequest,
    DriverResponse,
    OrderDetailResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    RecordPaymentRequest,
    RegisterDriverRequest,
    RouteIdResponse,
    RouteListResponse,
    RouteResponse,
    SchedulerTickRequest,
    SchedulerTickResponse,
    SlotBoardResponse,
    SlotCountsResponse,
    SlotResult,
    StatusResponse,
    ZoneIdResponse,
    ZoneListResponse,
    ZoneResponse,
)
from fulfillment.delivery.assignment import AssignDriver, AssignRoute
from fulfillment.delivery.delivery import Delivery, Slot
from fulfillment.delivery.scheduler import run_scheduler_tick
from fulfillment.delivery.transitions import AdvanceDeliveryStatus
from fulfillment.driver.driver import Driver
from fulfillment.driver.management import (
    ChangeDriverAvailability,
    RegisterDriver,
    RemoveDriver,
    UpdateDriverLocation,
)
from fulfillment.network.management import CreateRoute, CreateZone, RemoveRoute
from fulfillment.network.route import Route
from fulfillment.network.zone import Zone
from fulfillment.order.lifecycle import CancelOrder, ConfirmOrder, RecordPayment
from fulfillment.order.order import Order
from fulfillment.order.placement import PlaceOrder
from fulfillment.projections.slot_board import SlotBoardView, board_key
from fulfillment.shared.errors import load
from fulfillment.shared.paging import fetch_all

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    """Place an order and schedule its delivery occurrences."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        slot=body.slot,
        start_date=body.start_date,
        end_date=body.end_date,
        is_recurring=body.is_recurring,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(status: str | None = None, customer_id: str | None = None) -> OrderListResponse:
    """Orders with their items and scheduled deliveries, newest first."""
    query = current_domain.repository_for(Order)._dao.query
    if status:
        query = query.filter(status=status)
    if customer_id:
        query = query.filter(customer_id=customer_id)
    orders = sorted(fetch_all(query), key=lambda o: o.created_at, reverse=True)
    delivery_repo = current_domain.repository_for(Delivery)
    return OrderListResponse(
        orders=[OrderDetailResponse.from_order_and_deliveries(o, delivery_repo.for_order(o.id)) for o in orders],
        count=len(orders),
    )


@order_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: str) -> OrderDetailResponse:
    order = load(Order, order_id)
    deliveries = current_domain.repository_for(Delivery).for_order(order.id)
    return OrderDetailResponse.from_order_and_deliveries(order, deliveries)


@order_router.put("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_order(order_id: str) -> OrderResponse:
    order = current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
async def record_payment(order_id: str, body: RecordPaymentRequest) -> OrderResponse:
    command = RecordPayment(order_id=order_id, amount=body.amount)
    order = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest | None = None) -> OrderResponse:
    """Cancel an order and every delivery still in progress."""
    command = CancelOrder(order_id=order_id, reason=body.reason if body else None)
    order = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.get("", response_model=DeliveryListResponse)
async def list_deliveries(
    on_date: date | None = Query(default=None, alias="date"),
    slot: str | None = None,
    status: str | None = None,
) -> DeliveryListResponse:
    deliveries = current_domain.repository_for(Delivery).listing(on_date=on_date, slot=slot, status=status)
    return DeliveryListResponse(
        deliveries=[DeliveryResponse.from_delivery(d) for d in deliveries],
        count=len(deliveries),
    )


@delivery_router.get("/board", response_model=SlotBoardResponse)
async def slot_board(on_date: date = Query(alias="date")) -> SlotBoardResponse:
    """Per-slot delivery counts for one day, from the slot board projection."""
    repo = current_domain.repository_for(SlotBoardView)
    slots = []
    for slot in Slot:
        try:
            view = repo.get(board_key(on_date.isoformat(), slot.value))
        except ObjectNotFoundError:
            slots.append(SlotCountsResponse(slot=slot.value))
            continue
        slots.append(SlotCountsResponse.from_view(view))
    return SlotBoardResponse(date=on_date, slots=slots)


@delivery_router.get("/{delivery_id}", response_model=DeliveryResponse)
async def get_delivery(delivery_id: str) -> DeliveryResponse:
    return DeliveryResponse.from_delivery(load(Delivery, delivery_id))


@delivery_router.put("/{delivery_id}/driver", response_model=DeliveryResponse)
async def assign_driver(delivery_id: str, body: AssignDriverRequest) -> DeliveryResponse:
    """Assign an available driver to a pending delivery."""
    command = AssignDriver(delivery_id=delivery_id, driver_id=body.driver_id)
    delivery = current_domain.process(command, asynchronous=False)
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.put("/{delivery_id}/route", response_model=DeliveryResponse)
async def assign_route(delivery_id: str, body: AssignRouteRequest) -> DeliveryResponse:
    command = AssignRoute(delivery_id=delivery_id, route_id=body.route_id)
    delivery = current_domain.process(command, asynchronous=False)
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.put("/{delivery_id}/status", response_model=DeliveryResponse)
async def advance_status(delivery_id: str, body: AdvanceStatusRequest) -> DeliveryResponse:
    """Move a delivery one step through its lifecycle, or fail/cancel it."""
    command = AdvanceDeliveryStatus(delivery_id=delivery_id, status=body.status, notes=body.notes)
    delivery = current_domain.process(command, asynchronous=False)
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.post("/maintenance/scheduler-tick", response_model=SchedulerTickResponse)
async def scheduler_tick(body: SchedulerTickRequest | None = None) -> SchedulerTickResponse:
    """Close out every slot whose cutover has passed.

    Safe to call repeatedly: a slot with nothing left open is skipped.
    """
    results = run_scheduler_tick(as_of=body.as_of if body else None)
    return SchedulerTickResponse(results=[SlotResult(**result) for result in results])


# ---------------------------------------------------------------------------
# Driver Router
# ---------------------------------------------------------------------------
driver_router = APIRouter(prefix="/drivers", tags=["drivers"])


@driver_router.post("", status_code=201, response_model=DriverIdResponse)
async def register_driver(body: RegisterDriverRequest) -> DriverIdResponse:
    command = RegisterDriver(
        name=body.name,
        phone=body.phone,
        vehicle_type=body.vehicle_type,
        vehicle_number=body.vehicle_number,
        capacity=body.capacity,
    )
    result = current_domain.process(command, asynchronous=False)
    return DriverIdResponse(driver_id=result)


@driver_router.get("", response_model=DriverListResponse)
async def list_drivers(status: str | None = None) -> DriverListResponse:
    drivers = current_domain.repository_for(Driver).listing(status=status)
    return DriverListResponse(
        drivers=[DriverResponse.from_driver(d) for d in drivers],
        count=len(drivers),
    )


@driver_router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(driver_id: str) -> DriverResponse:
    return DriverResponse.from_driver(load(Driver, driver_id))


@driver_router.put("/{driver_id}/availability", response_model=DriverResponse)
async def change_availability(driver_id: str, body: DriverAvailabilityRequest) -> DriverResponse:
    command = ChangeDriverAvailability(driver_id=driver_id, status=body.status)
    driver = current_domain.process(command, asynchronous=False)
    return DriverResponse.from_driver(driver)


@driver_router.put("/{driver_id}/location", response_model=DriverResponse)
async def update_location(driver_id: str, body: DriverLocationRequest) -> DriverResponse:
    command = UpdateDriverLocation(driver_id=driver_id, location=body.location)
    driver = current_domain.process(command, asynchronous=False)
    return DriverResponse.from_driver(driver)


@driver_router.delete("/{driver_id}", response_model=StatusResponse)
async def remove_driver(driver_id: str) -> StatusResponse:
    current_domain.process(RemoveDriver(driver_id=driver_id), asynchronous=False)
    return StatusResponse(status="removed")


# ---------------------------------------------------------------------------
# Network Routers
# ---------------------------------------------------------------------------
zone_router = APIRouter(prefix="/zones", tags=["network"])
route_router = APIRouter(prefix="/routes", tags=["network"])


@zone_router.post("", status_code=201, response_model=ZoneIdResponse)
async def create_zone(body: CreateZoneRequest) -> ZoneIdResponse:
    command = CreateZone(name=body.name, description=body.description)
    result = current_domain.process(command, asynchronous=False)
    return ZoneIdResponse(zone_id=result)


@route_router.post("", status_code=201, response_model=RouteIdResponse)
async def create_route(body: CreateRouteRequest) -> RouteIdResponse:
    command = CreateRoute(
        zone_id=body.zone_id,
        name=body.name,
        max_deliveries=body.max_deliveries,
        areas=json.dumps(body.areas),
        estimated_time=body.estimated_time,
        start_location=body.start_location,
        end_location=body.end_location,
    )
    result = current_domain.process(command, asynchronous=False)
    return RouteIdResponse(route_id=result)


@route_router.delete("/{route_id}", response_model=StatusResponse)
async def remove_route(route_id: str) -> StatusResponse:
    current_domain.process(RemoveRoute(route_id=route_id), asynchronous=False)
    return StatusResponse(status="removed")


@zone_router.get("", response_model=ZoneListResponse)
async def list_zones() -> ZoneListResponse:
    """Zones with the routes that run through them."""
    zones = sorted(fetch_all(current_domain.repository_for(Zone)._dao.query), key=lambda z: z.name)
    route_query = current_domain.repository_for(Route)._dao.query
    return ZoneListResponse(
        zones=[ZoneResponse.from_zone(z, fetch_all(route_query.filter(zone_id=str(z.id)))) for z in zones],
        count=len(zones),
    )


@route_router.get("", response_model=RouteListResponse)
async def list_routes(zone_id: str | None = None) -> RouteListResponse:
    query = current_domain.repository_for(Route)._dao.query
    if zone_id:
        query = query.filter(zone_id=zone_id)
    routes = sorted(fetch_all(query), key=lambda r: r.name)
    return RouteListResponse(routes=[RouteResponse.from_route(r) for r in routes], count=len(routes))
