"""Pricing: reconciled charge for an order or a batch.

Displayed prices are tax-inclusive, so VAT is extracted from the final total
rather than added on top::

    vat = final_total * rate / (1 + rate)
    subtotal = final_total - vat

Service and delivery fees are credited to the shopper separately and never
enter these totals.
"""

from protean.exceptions import ValidationError
from protean.fields import Float

from batching import config
from batching.domain import batching
from batching.order import ledger
from batching.order.status import OrderStatus, OrderType


@batching.value_object
class PriceSummary:
    """Charge breakdown for one order or an aggregate of same-shop orders."""

    items_total = Float(default=0.0)
    subtotal = Float(default=0.0)
    vat = Float(default=0.0)
    discount = Float(default=0.0)
    refund = Float(default=0.0)
    total = Float(default=0.0)


_MONEY_FIELDS = ("items_total", "subtotal", "vat", "discount", "refund", "total")


def _round(amount: float) -> float:
    return round(amount, 2)


def _is_regular(order) -> bool:
    return OrderType(order.order_type) == OrderType.REGULAR


def items_total(order) -> float:
    """Value the customer is charged for, before discount.

    While shopping only found units count; outside shopping the original
    subtotal applies. Reel and restaurant orders are always charged their
    listed price times quantity.
    """
    items = order.items or []
    if _is_regular(order) and OrderStatus(order.status) == OrderStatus.SHOPPING:
        return ledger.found_value(items)
    return ledger.requested_value(items)


def refund(order) -> float:
    """Value of units not found; zero before shopping starts and for prepared orders."""
    if not _is_regular(order) or OrderStatus(order.status) == OrderStatus.ACCEPTED:
        return 0.0
    return ledger.refund_value(order.items or [])


def summarize(total_before_discount: float, discount: float, refund_amount: float = 0.0, rate: float | None = None):
    if discount is not None and discount < 0:
        raise ValidationError({"discount": ["Discount cannot be negative"]})
    discount = discount or 0.0
    rate = config.vat_rate() if rate is None else rate

    final_total = max(total_before_discount - discount, 0.0)
    vat = final_total * rate / (1 + rate)
    return PriceSummary(
        items_total=_round(total_before_discount),
        subtotal=_round(final_total - vat),
        vat=_round(vat),
        discount=_round(discount),
        refund=_round(refund_amount),
        total=_round(final_total),
    )


def order_summary(order, rate: float | None = None):
    return summarize(items_total(order), order.discount, refund(order), rate=rate)


def combine_summaries(summaries):
    """Sum independently priced summaries field by field."""
    totals = dict.fromkeys(_MONEY_FIELDS, 0.0)
    for summary in summaries:
        for name in _MONEY_FIELDS:
            totals[name] += getattr(summary, name)
    return PriceSummary(**{name: _round(value) for name, value in totals.items()})


def batch_summary(batch, rate: float | None = None):
    """Charge for the primary order plus combined orders from the same shop.

    Each order is priced on its own before summing. Orders from other shops
    are excluded; see ``shop_summaries``.
    """
    return combine_summaries(order_summary(order, rate=rate) for order in batch.same_shop_orders)


def shop_summaries(batch, rate: float | None = None) -> dict:
    """Per-shop charges for a batch spanning several shops."""
    per_shop: dict[str, list] = {}
    for order in batch.orders:
        per_shop.setdefault(str(order.shop_id), []).append(order_summary(order, rate=rate))
    return {shop_id: combine_summaries(summaries) for shop_id, summaries in per_shop.items()}
