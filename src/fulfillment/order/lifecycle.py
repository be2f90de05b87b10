"""Order lifecycle — confirmation, payments and cancellation."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery, DeliveryStatus
from fulfillment.delivery.transitions import release_driver
from fulfillment.domain import fulfillment
from fulfillment.order.order import Order
from fulfillment.shared.errors import load

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="Order")
class ConfirmOrder:
    order_id = Identifier(required=True)


@fulfillment.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    amount = Float(required=True)


@fulfillment.command(part_of="Order")
class CancelOrder:
    """Cancel an order together with every delivery still in progress."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@fulfillment.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(ConfirmOrder)
    def confirm_order(self, command):
        order = load(Order, command.order_id)
        order.confirm()
        current_domain.repository_for(Order).add(order)
        return order

    @handle(RecordPayment)
    def record_payment(self, command):
        order = load(Order, command.order_id)
        order.record_payment(command.amount)
        current_domain.repository_for(Order).add(order)
        return order

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load(Order, command.order_id)
        delivery_repo = current_domain.repository_for(Delivery)
        active = [d for d in delivery_repo.for_order(str(order.id)) if not d.is_terminal]

        order.cancel(reason=command.reason, cancelled_deliveries=len(active))
        for delivery in active:
            delivery.advance(DeliveryStatus.CANCELLED.value, notes=command.reason)
            release_driver(delivery)
            delivery_repo.add(delivery)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            cancelled_deliveries=len(active),
        )
        return order
