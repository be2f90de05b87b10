"""Tests for the SlotBoardView projector handlers, called directly."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from fulfillment.delivery.events import DeliveryCompleted, DeliveryScheduled, DriverAssigned
from fulfillment.projections.slot_board import (
    SlotBoardProjector,
    SlotBoardView,
    _get_or_create,
    board_key,
)
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


def _scheduled(delivery_id="dlv-1", slot="Lunch"):
    return DeliveryScheduled(
        delivery_id=delivery_id,
        order_id="ord-1",
        delivery_date="2026-03-02",
        slot=slot,
        scheduled_at=datetime.now(UTC),
    )


def _completed(outcome="Delivered", automatic=False):
    return DeliveryCompleted(
        delivery_id="dlv-1",
        order_id="ord-1",
        delivery_date="2026-03-02",
        slot="Lunch",
        outcome=outcome,
        automatic=automatic,
        completed_at=datetime.now(UTC),
    )


def _board(slot="Lunch"):
    return current_domain.repository_for(SlotBoardView).get(board_key("2026-03-02", slot))


class TestGetOrCreate:
    def test_creates_new_view_when_not_found(self):
        mock_repo = MagicMock()
        mock_repo.get.side_effect = ObjectNotFoundError({"_entity": "SlotBoardView not found"})
        now = datetime.now(UTC)

        with patch("fulfillment.projections.slot_board.current_domain") as mock_domain:
            mock_domain.repository_for = MagicMock(return_value=mock_repo)
            view = _get_or_create("2026-03-02", "Dinner", now)

        assert view.id == "2026-03-02:Dinner"
        assert view.scheduled == 0
        assert view.auto_completed == 0
        assert view.updated_at == now


class TestSlotBoardProjector:
    def test_counts_scheduled_per_slot(self):
        projector = SlotBoardProjector()
        projector.on_delivery_scheduled(_scheduled("dlv-1"))
        projector.on_delivery_scheduled(_scheduled("dlv-2"))
        projector.on_delivery_scheduled(_scheduled("dlv-3", slot="Dinner"))

        assert _board("Lunch").scheduled == 2
        assert _board("Dinner").scheduled == 1

    def test_counts_assignments(self):
        projector = SlotBoardProjector()
        projector.on_driver_assigned(
            DriverAssigned(
                delivery_id="dlv-1",
                driver_id="drv-1",
                delivery_date="2026-03-02",
                slot="Lunch",
                assigned_at=datetime.now(UTC),
            )
        )
        assert _board().assigned == 1

    def test_counts_outcomes_and_auto_completions(self):
        projector = SlotBoardProjector()
        projector.on_delivery_completed(_completed("Delivered", automatic=True))
        projector.on_delivery_completed(_completed("Delivered"))
        projector.on_delivery_completed(_completed("Failed"))
        projector.on_delivery_completed(_completed("Cancelled"))

        board = _board()
        assert board.delivered == 2
        assert board.auto_completed == 1
        assert board.failed == 1
        assert board.cancelled == 1
