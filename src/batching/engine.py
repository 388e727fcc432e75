"""Batch engine: the operations a shopper's app drives.

Every mutation runs under the order's lock, loads the aggregate fresh,
applies one aggregate method and persists it. Failures the shopper can act
on come back as ``Result`` failures carrying a typed ``BatchError``; unknown
order ids raise ``ObjectNotFoundError``.

Fee credits are sent to the wallet only after the state change has been
persisted. A wallet failure becomes a warning on the result: the transition
stands and the wallet service owns the retry.
"""

from datetime import datetime

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.utils.globals import current_domain

from batching.batch import Batch
from batching.errors import BatchCompositionError, BatchError, GroupNotReadyError
from batching.geo import order_distance_km
from batching.grouping import group_by_customer, same_shop_order_groups, visible_shop_groups
from batching.locks import order_locks
from batching.order import ledger, pricing
from batching.order.order import Order
from batching.order.status import OrderStatus
from batching.order.urgency import classify_urgency, prioritize
from batching.result import Result
from batching.wallet import get_wallet

logger = structlog.get_logger(__name__)


def _repo():
    return current_domain.repository_for(Order)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
def load_batch(primary_order_id: str) -> Batch:
    """Rebuild a batch from its primary order and every order combined into it."""
    repo = _repo()
    primary = repo.get(primary_order_id)
    return Batch(primary=primary, combined=[repo.get(order_id) for order_id in _combined_ids(repo, primary.id)])


def _combined_ids(repo, primary_order_id) -> list[str]:
    return [
        str(record.id) for record in repo._dao.query.filter(combined_with=str(primary_order_id)).all().items
    ]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def request_transition(order_id: str, target_status) -> Result:
    with order_locks.hold(order_id):
        repo = _repo()
        order = repo.get(order_id)
        from_status = order.status
        try:
            credits = order.transition_to(target_status)
        except BatchError as exc:
            logger.warning(
                "Transition rejected",
                order_id=str(order_id),
                from_status=from_status,
                to_status=str(getattr(target_status, "value", target_status)),
                reason=exc.message,
            )
            return Result.failure(exc)
        repo.add(order)

    if order.status == OrderStatus.DELIVERED.value:
        order_locks.discard(order_id)
    logger.info("Transition committed", order_id=str(order_id), from_status=from_status, to_status=order.status)
    warnings = _dispatch_credits(credits)
    return Result.success(order, warnings)


def confirm_group_delivery(batch_id: str, customer_key: str) -> Result:
    """Deliver every order of one customer in the batch, or none of them."""
    batch = load_batch(batch_id)
    group = group_by_customer(batch.orders).get(customer_key)
    if not group:
        return Result.failure(
            GroupNotReadyError(f"No orders for customer {customer_key} in batch {batch_id}", customer_key=customer_key)
        )

    order_ids = [str(order.id) for order in group]
    with order_locks.hold_all(order_ids):
        repo = _repo()
        orders = [repo.get(order_id) for order_id in order_ids]

        not_ready = [str(order.id) for order in orders if not order.ready_for_handover]
        if not_ready:
            error = GroupNotReadyError(
                f"{len(not_ready)} order(s) are not ready for delivery: {', '.join(not_ready)}",
                customer_key=customer_key,
                not_ready=not_ready,
            )
            logger.warning("Group delivery rejected", batch_id=batch_id, customer_key=customer_key, not_ready=not_ready)
            return Result.failure(error)

        try:
            for order in orders:
                order.transition_to(OrderStatus.DELIVERED)
        except BatchError as exc:
            return Result.failure(exc)

        with UnitOfWork():
            for order in orders:
                repo.add(order)

    order_locks.discard_all(order_ids)
    logger.info("Group delivered", batch_id=batch_id, customer_key=customer_key, order_ids=order_ids)
    return Result.success(orders)


def set_item_found(order_id: str, item_id: str, found: bool, found_quantity: int | None = None) -> Result:
    with order_locks.hold(order_id):
        repo = _repo()
        order = repo.get(order_id)
        try:
            item = order.mark_item_found(item_id, found, found_quantity)
        except BatchError as exc:
            logger.warning("Item update rejected", order_id=str(order_id), item_id=str(item_id), reason=exc.message)
            return Result.failure(exc)
        repo.add(order)
    return Result.success(item)


def attach_delivery_proof(order_id: str, reference: str) -> Result:
    with order_locks.hold(order_id):
        repo = _repo()
        order = repo.get(order_id)
        try:
            order.attach_delivery_proof(reference)
        except BatchError as exc:
            return Result.failure(exc)
        repo.add(order)
    return Result.success(order)


def combine_orders(primary_order_id: str, order_ids: list[str]) -> Result:
    """Attach orders to a primary order's batch; all must share its shopper."""
    order_ids = [str(order_id) for order_id in order_ids]
    with order_locks.hold_all([primary_order_id, *order_ids]):
        repo = _repo()
        primary = repo.get(primary_order_id)
        if primary.combined_with:
            return Result.failure(
                BatchCompositionError(f"Order {primary_order_id} is itself combined into {primary.combined_with}")
            )

        orders = [repo.get(order_id) for order_id in order_ids]
        for order in orders:
            problem = _combination_problem(primary, order) or _leads_other_orders(repo, order)
            if problem:
                return Result.failure(BatchCompositionError(problem, order_id=str(order.id)))

        with UnitOfWork():
            for order in orders:
                order.combine_into(str(primary.id))
                repo.add(order)

    return Result.success(load_batch(primary_order_id))


def _combination_problem(primary, order) -> str | None:
    if str(order.id) == str(primary.id):
        return "An order cannot be combined with itself"
    if order.shopper_id != primary.shopper_id:
        return f"Order {order.id} is assigned to a different shopper"
    if OrderStatus(order.status) == OrderStatus.DELIVERED:
        return f"Order {order.id} is already delivered"
    if order.combined_with and str(order.combined_with) != str(primary.id):
        return f"Order {order.id} already belongs to batch {order.combined_with}"
    return None


def _leads_other_orders(repo, order) -> str | None:
    # Batches are one level deep: a primary with combined orders cannot join another batch.
    led = _combined_ids(repo, order.id)
    if led:
        return f"Order {order.id} already leads a batch of {len(led)} combined order(s)"
    return None


def _dispatch_credits(credits: list[dict]) -> list[str]:
    wallet = get_wallet()
    warnings = []
    for credit in credits:
        try:
            outcome = wallet.credit(**credit)
        except Exception as exc:
            logger.exception("Wallet credit raised", **credit)
            outcome = {"credited": False, "error": str(exc)}
        if not outcome.get("credited"):
            logger.warning("Wallet credit failed", error=outcome.get("error"), **credit)
            warnings.append(f"{credit['kind']} credit for order {credit['order_id']} failed: {outcome.get('error')}")
    return warnings


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
def compute_batch_summary(batch: Batch):
    return pricing.batch_summary(batch)


def describe_batch(batch: Batch, now: datetime | None = None, latitude: float | None = None, longitude: float | None = None) -> dict:
    """Read model of a batch for the shopper's active-batch screen."""
    orders = []
    for order in prioritize(batch.orders, now):
        items = order.items or []
        distance = None
        if latitude is not None and longitude is not None:
            distance = order_distance_km(order, latitude, longitude)
        orders.append(
            {
                "order_id": str(order.id),
                "public_order_number": order.public_order_number,
                "shop_id": order.shop_id,
                "customer_key": order.customer_key,
                "status": order.status,
                "urgency": classify_urgency(order, now).value,
                "allowed_transitions": sorted(status.value for status in order.allowed_transitions()),
                "distance_km": distance,
                "items_found": ledger.items_found(items),
                "item_count": len(items),
                "units_found": ledger.units_found(items),
                "units_requested": ledger.units_requested(items),
                "units_short": ledger.units_short(items),
                "summary": pricing.order_summary(order).to_dict(),
            }
        )

    return {
        "batch_id": batch.id,
        "shopper_id": batch.shopper_id,
        "orders": orders,
        "customer_groups": {key: [str(o.id) for o in group] for key, group in group_by_customer(batch.orders).items()},
        "visible_shops": {shop_id: [str(i.id) for i in items] for shop_id, items in visible_shop_groups(batch).items()},
        "same_shop_orders": [
            {"order_id": group["order_id"], "item_ids": [str(i.id) for i in group["items"]]}
            for group in same_shop_order_groups(batch)
        ],
        "summary": compute_batch_summary(batch).to_dict(),
        "shop_summaries": {shop_id: s.to_dict() for shop_id, s in pricing.shop_summaries(batch).items()},
    }
