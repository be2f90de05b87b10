"""Order reacts to its deliveries closing out.

Once every delivery of an order is terminal and at least one of them reached
Delivered, the order itself is marked Delivered. Replays of the same event
leave an already-closed order untouched.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from fulfillment.delivery.delivery import Delivery, DeliveryStatus
from fulfillment.delivery.events import DeliveryCompleted
from fulfillment.domain import fulfillment
from fulfillment.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

_OPEN_ORDER_STATUSES = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


@fulfillment.event_handler(part_of=Order, stream_category="fulfillment::delivery")
class DeliveryEventHandler:
    @handle(DeliveryCompleted)
    def on_delivery_completed(self, event: DeliveryCompleted) -> None:
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(event.order_id)
        except ObjectNotFoundError:
            logger.warning("Completed delivery references unknown order", order_id=str(event.order_id))
            return

        if order.status not in _OPEN_ORDER_STATUSES:
            return

        deliveries = current_domain.repository_for(Delivery).for_order(str(order.id))
        if not all(d.is_terminal for d in deliveries):
            return
        if not any(d.status == DeliveryStatus.DELIVERED.value for d in deliveries):
            return

        order.mark_delivered()
        repo.add(order)
        logger.info("Order delivered", order_id=str(order.id), deliveries=len(deliveries))
