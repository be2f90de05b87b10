"""Order domain events."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="Order")
class OrderPlaced:
    """An order was placed and its delivery occurrences scheduled."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    items = Text(required=True)  # JSON list of {product_id, quantity, price}
    total_amount = Float(required=True)
    slot = String(required=True)
    start_date = String(required=True)
    end_date = String()
    is_recurring = Boolean(default=False)
    delivery_count = Integer(required=True)
    placed_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class PaymentRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    paid_amount = Float(required=True)
    payment_status = String(required=True)
    recorded_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    cancelled_deliveries = Integer(default=0)
    cancelled_at = DateTime(required=True)


@fulfillment.event(part_of="Order")
class OrderDelivered:
    """Every delivery of the order has closed and at least one arrived."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
