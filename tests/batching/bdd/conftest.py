"""Shared BDD fixtures and step definitions for the Batching domain."""

import json

import pytest
from batching import engine
from batching.order.intake import AcceptOrder
from batching.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then, when


def accept_order(order_id, **overrides):
    data = {
        "order_id": order_id,
        "shop_id": "shop-bdd",
        "customer_id": "cust-bdd",
        "customer_phone": "0788000099",
        "shopper_id": "shopper-bdd",
        "service_fee": 300.0,
        "delivery_fee": 1200.0,
    }
    data.update(overrides)
    items = [
        {"id": f"{order_id}-item-1", "unit_price": 1000.0, "quantity": 2},
        {"id": f"{order_id}-item-2", "unit_price": 500.0, "quantity": 3},
    ]
    return current_domain.process(AcceptOrder(items=json.dumps(items), **data), asynchronous=False)


@pytest.fixture()
def outcome():
    """Container for the result of the last engine call."""
    return {"result": None}


@pytest.fixture()
def customer_key():
    return "cust-bdd_0788000099"


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an accepted regular order", target_fixture="order_id")
def regular_order():
    return accept_order("ord-bdd-regular")


@given("an accepted restaurant order", target_fixture="order_id")
def restaurant_order():
    return accept_order("ord-bdd-restaurant", order_type="restaurant")


@given(parsers.cfparse("a batch with {count:d} orders for one customer"), target_fixture="batch_ids")
def batch_for_one_customer(count):
    batch_ids = [accept_order(f"ord-bdd-group-{i}") for i in range(1, count + 1)]
    assert engine.combine_orders(batch_ids[0], batch_ids[1:]).ok
    return batch_ids


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the shopper requests status "{status}"'))
def request_status(order_id, status, outcome):
    outcome["result"] = engine.request_transition(order_id, status)


@when(parsers.cfparse('the shopper marks item "{item}" as found'))
def mark_found(order_id, item, outcome):
    outcome["result"] = engine.set_item_found(order_id, f"{order_id}-{item}", True)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{error_name}"'))
def request_fails(outcome, error_name):
    result = outcome["result"]
    assert result is not None
    assert not result.ok
    assert type(result.error).__name__ == error_name


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status
