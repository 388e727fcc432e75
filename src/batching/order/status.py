"""Order status state machine: the transition table and its pure checks.

    accepted → shopping → on_the_way → at_customer → delivered
    accepted → {picked, on_the_way}  (orders that skip shopping)
    picked → on_the_way
    on_the_way → delivered

Guards that need order data (resolved items, delivery proof) live on the
``Order`` aggregate; this module only answers "is this step in the table".
"""

from enum import Enum

from batching.errors import TerminalStateError, TransitionError


class OrderStatus(Enum):
    ACCEPTED = "accepted"
    SHOPPING = "shopping"
    PICKED = "picked"
    ON_THE_WAY = "on_the_way"
    AT_CUSTOMER = "at_customer"
    DELIVERED = "delivered"


class OrderType(Enum):
    REGULAR = "regular"
    REEL = "reel"
    RESTAURANT = "restaurant"


class FeeKind(Enum):
    SERVICE_FEE = "serviceFee"
    DELIVERY_FEE = "deliveryFee"


_VALID_TRANSITIONS = {
    OrderStatus.ACCEPTED: {OrderStatus.SHOPPING, OrderStatus.PICKED, OrderStatus.ON_THE_WAY},
    OrderStatus.SHOPPING: {OrderStatus.ON_THE_WAY},
    OrderStatus.PICKED: {OrderStatus.ON_THE_WAY},
    OrderStatus.ON_THE_WAY: {OrderStatus.AT_CUSTOMER, OrderStatus.DELIVERED},
    OrderStatus.AT_CUSTOMER: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
}

# Reachable from ACCEPTED only when the order has no shopping phase
_SKIP_SHOPPING_TARGETS = {OrderStatus.PICKED, OrderStatus.ON_THE_WAY}

PICKING_STATUSES = frozenset({OrderStatus.ACCEPTED, OrderStatus.SHOPPING})
HANDOVER_STATUSES = frozenset({OrderStatus.ON_THE_WAY, OrderStatus.AT_CUSTOMER})


def parse_status(value) -> OrderStatus:
    """Coerce a status name into ``OrderStatus``, rejecting unknown names."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise TransitionError(f"Unknown order status: {value}", status=value) from None


def allowed_targets(current: OrderStatus, skips_shopping: bool = False) -> frozenset:
    """Statuses reachable in one step from ``current``."""
    targets = set(_VALID_TRANSITIONS[current])
    if current == OrderStatus.ACCEPTED:
        if skips_shopping:
            targets.discard(OrderStatus.SHOPPING)
        else:
            targets -= _SKIP_SHOPPING_TARGETS
    return frozenset(targets)


def assert_can_transition(current: OrderStatus, target: OrderStatus, skips_shopping: bool = False) -> None:
    if current == OrderStatus.DELIVERED:
        raise TerminalStateError(
            f"Order is already {current.value}; cannot move to {target.value}",
            from_status=current.value,
            to_status=target.value,
        )
    if target not in allowed_targets(current, skips_shopping):
        raise TransitionError(
            f"Cannot transition from {current.value} to {target.value}",
            from_status=current.value,
            to_status=target.value,
        )
