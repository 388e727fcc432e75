"""Order grouping: customer and shop partitions of a batch.

All functions are pure and rebuild their groups on every call: item found
state and order status change which groups are visible, so nothing here is
cached across mutations. Dicts keep first-seen insertion order.

Customer identity is the coarse ``{customer_id}_{customer_phone}`` key with
``"unknown"`` standing in for a missing part. Two orders missing both parts
land in the same ``unknown_unknown`` group.
"""

from batching.order.status import PICKING_STATUSES, OrderStatus

UNKNOWN = "unknown"


def customer_key(order) -> str:
    customer_id = order.customer_id or UNKNOWN
    customer_phone = order.customer_phone or UNKNOWN
    return f"{customer_id}_{customer_phone}"


def group_by_customer(orders) -> dict[str, list]:
    groups: dict[str, list] = {}
    for order in orders:
        groups.setdefault(customer_key(order), []).append(order)
    return groups


def group_by_shop(items, fallback_shop_id: str | None = None) -> dict[str, list]:
    groups: dict[str, list] = {}
    for item in items:
        shop_id = item.shop_id or fallback_shop_id or UNKNOWN
        groups.setdefault(str(shop_id), []).append(item)
    return groups


def _in_picking_phase(order) -> bool:
    return OrderStatus(order.status) in PICKING_STATUSES


def batch_shop_groups(batch) -> dict[str, list]:
    """Items of every order in the batch, grouped by shop."""
    groups: dict[str, list] = {}
    for order in batch.orders:
        for shop_id, items in group_by_shop(order.items or [], order.shop_id).items():
            groups.setdefault(shop_id, []).extend(items)
    return groups


def visible_shop_groups(batch) -> dict[str, list]:
    """Shop groups still being picked.

    A shop disappears from active work views once no order with that shop id
    is in ``accepted`` or ``shopping``.
    """
    active_shops = {str(order.shop_id or UNKNOWN) for order in batch.orders if _in_picking_phase(order)}
    return {shop_id: items for shop_id, items in batch_shop_groups(batch).items() if shop_id in active_shops}


def same_shop_order_groups(batch) -> list[dict]:
    """Per-order item groups for combined orders sharing the primary's shop.

    Empty unless the batch has at least one same-shop combined order; orders
    that left the picking phase are dropped. The primary order comes first.
    """
    if not batch.has_same_shop_combined:
        return []
    return [
        {"order_id": str(order.id), "customer_key": customer_key(order), "items": list(order.items or [])}
        for order in batch.same_shop_orders
        if _in_picking_phase(order)
    ]
