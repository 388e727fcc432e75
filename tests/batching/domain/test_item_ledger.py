"""Tests for found/not-found reconciliation on order items."""

import pytest
from batching.errors import InvalidQuantityError, LedgerError
from batching.order import ledger
from batching.order.events import ItemFoundStatusUpdated
from batching.order.order import Order, OrderItem
from protean.exceptions import ValidationError


def _make_order(**overrides):
    data = {
        "id": "ord-100",
        "shop_id": "shop-1",
        "customer_id": "cust-1",
        "customer_phone": "0788000001",
        "shopper_id": "shopper-1",
    }
    data.update(overrides)
    return Order.accept(
        items_data=[
            {"id": "item-1", "unit_price": 1000.0, "quantity": 2},
            {"id": "item-2", "unit_price": 500.0, "quantity": 3},
        ],
        **data,
    )


def _shopping_order():
    order = _make_order()
    order.transition_to("shopping")
    return order


class TestResolveFoundQuantity:
    def test_not_found_records_zero(self):
        assert ledger.resolve_found_quantity(3, False) == 0

    def test_not_found_ignores_requested_quantity(self):
        assert ledger.resolve_found_quantity(3, False, 2) == 0

    def test_found_defaults_to_full_quantity(self):
        assert ledger.resolve_found_quantity(3, True) == 3

    def test_partial_quantity(self):
        assert ledger.resolve_found_quantity(3, True, 2) == 2

    @pytest.mark.parametrize("found_quantity", [0, -1, 4])
    def test_out_of_bounds_quantity(self, found_quantity):
        with pytest.raises(InvalidQuantityError):
            ledger.resolve_found_quantity(3, True, found_quantity)


class TestAggregations:
    def _items(self):
        return [
            OrderItem(unit_price=1000.0, quantity=2, found=True, found_quantity=1, resolved=True),
            OrderItem(unit_price=500.0, quantity=3, found=False, resolved=True),
            OrderItem(unit_price=200.0, quantity=1, found=True, found_quantity=1, resolved=True),
        ]

    def test_units(self):
        items = self._items()
        assert ledger.units_requested(items) == 6
        assert ledger.units_found(items) == 2
        assert ledger.units_short(items) == 4

    def test_items_found_counts_lines(self):
        assert ledger.items_found(self._items()) == 2

    def test_values(self):
        items = self._items()
        assert ledger.requested_value(items) == 3700.0
        assert ledger.found_value(items) == 1200.0
        assert ledger.refund_value(items) == 2500.0

    def test_empty_items(self):
        assert ledger.units_requested([]) == 0
        assert ledger.refund_value([]) == 0.0


class TestMarkItemFound:
    def test_mark_found_defaults_to_full_quantity(self):
        order = _shopping_order()
        item = order.mark_item_found("item-1", True)
        assert item.found is True
        assert item.found_quantity == 2
        assert item.resolved is True

    def test_mark_partially_found(self):
        order = _shopping_order()
        item = order.mark_item_found("item-2", True, 1)
        assert item.found_quantity == 1

    def test_mark_not_found(self):
        order = _shopping_order()
        item = order.mark_item_found("item-1", False)
        assert item.found is False
        assert item.found_quantity == 0
        assert item.resolved is True

    def test_found_then_unfound(self):
        order = _shopping_order()
        order.mark_item_found("item-1", True, 2)
        item = order.mark_item_found("item-1", False)
        assert item.found_quantity == 0

    def test_reducing_a_found_quantity(self):
        order = _shopping_order()
        order.mark_item_found("item-2", True, 3)
        item = order.mark_item_found("item-2", True, 1)
        assert item.found_quantity == 1

    def test_quantity_above_request_is_rejected(self):
        order = _shopping_order()
        with pytest.raises(InvalidQuantityError):
            order.mark_item_found("item-1", True, 5)
        assert order.get_item("item-1").found is False

    def test_unknown_item_is_rejected(self):
        order = _shopping_order()
        with pytest.raises(LedgerError):
            order.mark_item_found("item-404", True)

    @pytest.mark.parametrize("status", ["accepted", "on_the_way", "delivered"])
    def test_only_allowed_while_shopping(self, status):
        order = _make_order()
        order.status = status
        with pytest.raises(LedgerError):
            order.mark_item_found("item-1", True)

    def test_raises_item_found_event(self):
        order = _shopping_order()
        order._events.clear()
        order.mark_item_found("item-2", True, 2)
        event = order._events[-1]
        assert isinstance(event, ItemFoundStatusUpdated)
        assert event.item_id == "item-2"
        assert event.found_quantity == 2

    def test_ledger_errors_are_validation_errors(self):
        order = _shopping_order()
        with pytest.raises(ValidationError) as exc:
            order.mark_item_found("item-1", True, 9)
        assert "found_quantity" in exc.value.messages


class TestItemInvariant:
    def test_found_quantity_cannot_exceed_quantity(self):
        with pytest.raises(ValidationError):
            OrderItem(unit_price=100.0, quantity=1, found=True, found_quantity=2)

    def test_found_item_needs_units(self):
        with pytest.raises(ValidationError):
            OrderItem(unit_price=100.0, quantity=1, found=True, found_quantity=0)

    def test_accepting_a_found_item_fills_its_quantity(self):
        order = Order.accept(
            items_data=[{"id": "item-1", "unit_price": 100.0, "quantity": 4, "found": True}],
            id="ord-101",
            shop_id="shop-1",
        )
        item = order.get_item("item-1")
        assert item.found_quantity == 4
        assert item.resolved is True
        assert item.shop_id == "shop-1"
