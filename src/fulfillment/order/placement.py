"""Order placement — command and handler.

Creates the order and every delivery occurrence in one unit of work.
"""

import json

from protean import handle
from protean.fields import Boolean, Date, Identifier, String, Text
from protean.utils.globals import current_domain

from fulfillment.delivery.delivery import Delivery, Slot
from fulfillment.domain import fulfillment
from fulfillment.order.order import Order, delivery_dates


@fulfillment.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier()
    items = Text(required=True)  # JSON list of {product_id, quantity, price}
    slot = String(required=True, max_length=20, choices=Slot)
    start_date = Date(required=True)
    end_date = Date()
    is_recurring = Boolean(default=False)


@fulfillment.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        dates = delivery_dates(command.start_date, command.end_date, bool(command.is_recurring))

        order = Order.place(
            items_data=items_data,
            slot=command.slot,
            start_date=command.start_date,
            end_date=command.end_date if command.is_recurring else None,
            is_recurring=bool(command.is_recurring),
            customer_id=command.customer_id,
            delivery_count=len(dates),
        )
        current_domain.repository_for(Order).add(order)

        delivery_repo = current_domain.repository_for(Delivery)
        for delivery_date in dates:
            delivery_repo.add(Delivery.schedule(str(order.id), delivery_date, command.slot))

        return str(order.id)
