"""Batching domain events: immutable facts about order fulfillment changes.

Events are past tense and versioned. ``WalletCreditRequested`` is the credit
contract consumed by the wallet collaborator: one event per fee kind, raised
at most once per order.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from batching.domain import batching


@batching.event(part_of="Order")
class OrderAccepted:
    """A shopper accepted an order and it entered the batch engine."""

    __version__ = 1

    order_id = Identifier(required=True)
    shopper_id = Identifier()
    shop_id = Identifier()
    order_type = String(required=True)
    status = String(required=True)
    item_count = Integer(required=True)
    accepted_at = DateTime(required=True)


@batching.event(part_of="Order")
class OrderCombined:
    """An order was attached to another order's batch."""

    __version__ = 1

    order_id = Identifier(required=True)
    primary_order_id = Identifier(required=True)
    combined_at = DateTime(required=True)


@batching.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new fulfillment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)


@batching.event(part_of="Order")
class ItemFoundStatusUpdated:
    """The shopper marked an item as found or unavailable."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    found = Boolean(required=True)
    found_quantity = Integer(required=True)
    updated_at = DateTime(required=True)


@batching.event(part_of="Order")
class ShoppingCompleted:
    """Shopping finished; carries the reconciled charge for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    items_total = Float(required=True)
    refund = Float(required=True)
    final_total = Float(required=True)
    completed_at = DateTime(required=True)


@batching.event(part_of="Order")
class WalletCreditRequested:
    """A fee became payable to the shopper's wallet."""

    __version__ = 1

    order_id = Identifier(required=True)
    shopper_id = Identifier()
    amount = Float(required=True)
    kind = String(required=True)
    requested_at = DateTime(required=True)


@batching.event(part_of="Order")
class DeliveryProofAttached:
    """A proof-of-delivery reference was recorded for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    attached_at = DateTime(required=True)


@batching.event(part_of="Order")
class OrderDelivered:
    """The order reached its terminal delivered state."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_key = String(required=True)
    delivered_at = DateTime(required=True)
