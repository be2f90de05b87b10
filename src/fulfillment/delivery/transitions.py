"""Delivery status transitions — manual advances and cutover auto-completion.

Reaching a terminal state frees the delivery's driver in the same unit of
work, so a closed delivery never leaves its driver on_delivery.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Text
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery
from fulfillment.domain import fulfillment
from fulfillment.driver.driver import Driver
from fulfillment.shared.errors import NotFoundError, load

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Delivery")
class AdvanceDeliveryStatus:
    delivery_id = Identifier(required=True)
    status = Text(required=True)
    notes = Text()


@fulfillment.command(part_of="Delivery")
class AutoCompleteDelivery:
    """Close a delivery out as Delivered at its slot cutover."""

    delivery_id = Identifier(required=True)
    completed_at = DateTime(required=True)
    notes = Text(required=True)


def release_driver(delivery) -> None:
    if not delivery.driver_id:
        return
    try:
        driver = load(Driver, delivery.driver_id)
    except NotFoundError:
        logger.warning(
            "Driver of completed delivery no longer exists",
            delivery_id=str(delivery.id),
            driver_id=str(delivery.driver_id),
        )
        return
    driver.release(str(delivery.id))
    current_domain.repository_for(Driver).add(driver)


@fulfillment.command_handler(part_of=Delivery)
class DeliveryTransitionHandler:
    @handle(AdvanceDeliveryStatus)
    def advance_status(self, command):
        delivery = load(Delivery, command.delivery_id)
        delivery.advance(command.status, notes=command.notes)

        if delivery.is_terminal:
            release_driver(delivery)
        current_domain.repository_for(Delivery).add(delivery)
        return delivery

    @handle(AutoCompleteDelivery)
    def auto_complete(self, command):
        delivery = load(Delivery, command.delivery_id)
        if delivery.is_terminal:
            # Closed by a dispatcher between selection and processing
            logger.info(
                "Delivery already terminal, skipping auto-completion",
                delivery_id=str(delivery.id),
                status=delivery.status,
            )
            return delivery

        delivery.auto_complete(command.completed_at, command.notes)
        release_driver(delivery)
        current_domain.repository_for(Delivery).add(delivery)
        return delivery
