"""Order aggregate — a customer's meal order and the occurrences it spawns.

An order is placed for a slot starting on a given date. A one-off order yields
a single delivery; a recurring order yields one delivery per day up to its end
date. Deliveries live in their own aggregate and reference the order by id.

State Machine:
    PENDING → CONFIRMED → DELIVERED
    {PENDING, CONFIRMED} → CANCELLED
    PENDING → DELIVERED   (deliveries may close before confirmation)
"""

import json
from datetime import UTC, date, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Float, HasMany, Identifier, Integer, String

from fulfillment.delivery.delivery import Slot
from fulfillment.domain import fulfillment
from fulfillment.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPlaced,
    PaymentRecorded,
)
from fulfillment.shared.errors import InvalidTransitionError

MAX_OCCURRENCES = 30


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}


def delivery_dates(start_date: date, end_date: date | None = None, is_recurring: bool = False) -> list[date]:
    """Calendar days on which an order is delivered.

    Recurring orders run daily from ``start_date`` to ``end_date`` inclusive;
    without an end date they run for ``MAX_OCCURRENCES`` days.
    """
    if not is_recurring:
        return [start_date]

    end_date = end_date or start_date + timedelta(days=MAX_OCCURRENCES - 1)
    if end_date < start_date:
        raise ValidationError({"end_date": ["End date cannot be before start date"]})

    span = (end_date - start_date).days + 1
    if span > MAX_OCCURRENCES:
        raise ValidationError({"end_date": [f"Recurring orders cover at most {MAX_OCCURRENCES} days"]})
    return [start_date + timedelta(days=offset) for offset in range(span)]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fulfillment.entity(part_of="Order")
class OrderItem:
    """A line item, priced at the time of purchase."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class Order:
    customer_id = Identifier()
    status = String(
        max_length=20,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    slot = String(required=True, max_length=20, choices=Slot)
    start_date = Date(required=True)
    end_date = Date()
    is_recurring = Boolean(default=False)
    total_amount = Float(default=0.0)
    paid_amount = Float(default=0.0)
    payment_status = String(
        max_length=20,
        choices=PaymentStatus,
        default=PaymentStatus.UNPAID.value,
    )
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(
        cls,
        items_data: list[dict],
        slot: str,
        start_date: date,
        end_date: date | None = None,
        is_recurring: bool = False,
        customer_id: str | None = None,
        delivery_count: int = 1,
    ):
        """Place an order. Delivery occurrences are scheduled by the caller."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            slot=slot,
            start_date=start_date,
            end_date=end_date,
            is_recurring=is_recurring,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.UNPAID.value,
            paid_amount=0.0,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))
        order.total_amount = round(sum(item.price * item.quantity for item in order.items), 2)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=customer_id,
                items=json.dumps(items_data),
                total_amount=order.total_amount,
                slot=slot,
                start_date=order.start_date.isoformat(),
                end_date=order.end_date.isoformat() if order.end_date else None,
                is_recurring=is_recurring,
                delivery_count=delivery_count,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def confirm(self) -> None:
        self._assert_can_transition(OrderStatus.CONFIRMED)
        now = datetime.now(UTC)
        self.status = OrderStatus.CONFIRMED.value
        self.updated_at = now
        self.raise_(OrderConfirmed(order_id=str(self.id), confirmed_at=now))

    def record_payment(self, amount: float) -> None:
        """Add a payment to the running total and refresh the payment status."""
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})
        if self.status == OrderStatus.CANCELLED.value:
            raise InvalidTransitionError({"status": ["Cannot record a payment on a cancelled order"]})

        now = datetime.now(UTC)
        self.paid_amount = round((self.paid_amount or 0.0) + amount, 2)
        if self.paid_amount >= self.total_amount:
            self.payment_status = PaymentStatus.PAID.value
        else:
            self.payment_status = PaymentStatus.PARTIAL.value
        self.updated_at = now
        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                amount=amount,
                paid_amount=self.paid_amount,
                payment_status=self.payment_status,
                recorded_at=now,
            )
        )

    def cancel(self, reason: str | None = None, cancelled_deliveries: int = 0) -> None:
        self._assert_can_transition(OrderStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_deliveries=cancelled_deliveries,
                cancelled_at=now,
            )
        )

    def mark_delivered(self) -> None:
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))
