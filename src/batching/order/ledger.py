"""Item ledger: found/not-found reconciliation for order items.

Pure aggregations over item lines. Items are anything exposing ``quantity``,
``found``, ``found_quantity`` and ``unit_price`` (``OrderItem`` entities in
practice). The mutation itself lives on the ``Order`` aggregate, which owns
the shopping-phase rule; ``resolve_found_quantity`` is the shared bounds check.
"""

from batching.errors import InvalidQuantityError


def resolve_found_quantity(quantity: int, found: bool, found_quantity: int | None = None) -> int:
    """Return the quantity to record for a found/not-found decision.

    Not found always records 0. Found defaults to the full requested quantity
    and otherwise must lie within 1..quantity.
    """
    if not found:
        return 0
    if found_quantity is None:
        return quantity
    if found_quantity < 1 or found_quantity > quantity:
        raise InvalidQuantityError(
            f"Found quantity must be between 1 and {quantity}, got {found_quantity}",
            quantity=quantity,
            found_quantity=found_quantity,
        )
    return found_quantity


def _found_units(item) -> int:
    if not item.found:
        return 0
    return item.found_quantity or 0


def units_requested(items) -> int:
    return sum(item.quantity for item in items)


def units_found(items) -> int:
    return sum(_found_units(item) for item in items)


def units_short(items) -> int:
    """Requested units not delivered, counting partial founds."""
    return units_requested(items) - units_found(items)


def items_found(items) -> int:
    """Number of item lines marked found, regardless of quantity."""
    return sum(1 for item in items if item.found)


def requested_value(items) -> float:
    return sum(item.unit_price * item.quantity for item in items)


def found_value(items) -> float:
    return sum(item.unit_price * _found_units(item) for item in items)


def refund_value(items) -> float:
    """Value of requested units that were not found. Never negative."""
    return max(requested_value(items) - found_value(items), 0.0)
