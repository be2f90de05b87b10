"""Delivery assignment — bind deliveries to drivers and routes.

Driver assignment touches two aggregates. Both are written from one handler so
they commit in the same unit of work: a delivery is never observed Assigned
while its driver is still available.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery
from fulfillment.domain import fulfillment
from fulfillment.driver.driver import Driver
from fulfillment.network.route import Route
from fulfillment.shared.errors import load

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Delivery")
class AssignDriver:
    delivery_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@fulfillment.command(part_of="Delivery")
class AssignRoute:
    delivery_id = Identifier(required=True)
    route_id = Identifier(required=True)


@fulfillment.command_handler(part_of=Delivery)
class AssignmentHandler:
    @handle(AssignDriver)
    def assign_driver(self, command):
        delivery_repo = current_domain.repository_for(Delivery)
        delivery = load(Delivery, command.delivery_id)
        driver = load(Driver, command.driver_id)

        if delivery.route_id:
            route = load(Route, delivery.route_id)
            # The pending delivery is itself among the active ones
            route.ensure_capacity(len(delivery_repo.active_on_route(route.id, delivery.date)))

        delivery.assign_driver(str(driver.id))
        driver.dispatch(str(delivery.id))

        delivery_repo.add(delivery)
        current_domain.repository_for(Driver).add(driver)

        logger.info(
            "Driver assigned",
            delivery_id=str(delivery.id),
            driver_id=str(driver.id),
        )
        return delivery

    @handle(AssignRoute)
    def assign_route(self, command):
        delivery_repo = current_domain.repository_for(Delivery)
        delivery = load(Delivery, command.delivery_id)
        route = load(Route, command.route_id)

        others = [
            d for d in delivery_repo.active_on_route(route.id, delivery.date) if d.id != delivery.id
        ]
        delivery.assign_route(str(route.id))
        route.ensure_capacity(len(others) + 1)

        delivery_repo.add(delivery)
        return delivery
